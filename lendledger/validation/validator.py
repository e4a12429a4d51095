"""
Input Validation

DESIGN DECISION: Caller input is checked BEFORE any record is built or
any store call is made. A self-loan or a zero amount never reaches
the store, not even as a rejected row.

Two layers:
1. Explicit checks here, raising InvalidArgument with a clear message
2. The pydantic models themselves; build_record() converts their
   ValidationError into InvalidArgument so callers see one error kind

IMPORTANT: Validation NEVER silently fixes issues. 100.005 is rejected,
not rounded.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar, Union

from pydantic import BaseModel, ValidationError

from lendledger.errors import InvalidArgument

ModelT = TypeVar("ModelT", bound=BaseModel)

AmountLike = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def require_positive_amount(amount: AmountLike) -> Decimal:
    """
    Parse an amount and check it is a finite number > 0 with at most two decimals.

    Floats go through str() first so 0.1 stays 0.1.
    """
    if amount is None or isinstance(amount, bool):
        raise InvalidArgument("Amount is required")

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidArgument(f"Amount is not a number: {amount!r}")

    if not value.is_finite():
        raise InvalidArgument(f"Amount must be a finite number: {amount!r}")
    if value <= 0:
        raise InvalidArgument("Amount must be greater than 0")
    try:
        cents = value.quantize(CENT)
    except InvalidOperation:
        raise InvalidArgument(f"Amount is too large: {amount!r}")
    # Trailing zeros are fine, 1.500 is 1.50
    if cents != value:
        raise InvalidArgument("Amount cannot have more than two decimal places")

    return cents


def require_text(value: Any, field: str) -> str:
    """Return the stripped string, or raise if it is missing or blank."""
    if value is None or not str(value).strip():
        raise InvalidArgument(f"{field} is required")
    return str(value).strip()


def require_distinct_parties(borrower_id: str, lender_id: str) -> None:
    """Borrowing from yourself is not a loan."""
    if borrower_id == lender_id:
        raise InvalidArgument("Cannot borrow from yourself")


def build_record(model: type[ModelT], **data: Any) -> ModelT:
    """Construct a model, reporting schema failures as InvalidArgument."""
    try:
        return model(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidArgument(f"Invalid {model.__name__}: {problems}") from e
