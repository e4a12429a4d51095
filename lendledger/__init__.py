"""
Lend Ledger - Source Package

A peer-to-peer money-lending ledger: friends record informal loans,
ask each other for money, and reconcile repayments.

DESIGN PRINCIPLES:
1. Borrower asks → Lender decides → Ledger records both sides
2. Every transition goes through a lifecycle manager
3. Fail early, fail visibly (typed errors, nothing swallowed)
4. Both rows of a loan are written together or not at all
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Lend Ledger Team"
