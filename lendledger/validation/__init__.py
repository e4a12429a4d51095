"""Input validation package."""

from lendledger.validation.validator import (
    build_record,
    require_distinct_parties,
    require_positive_amount,
    require_text,
)

__all__ = [
    "build_record",
    "require_distinct_parties",
    "require_positive_amount",
    "require_text",
]
