"""Error classes raised by the amortization engine.

Every error carries a machine readable ``kind`` next to its message so that
callers (CLI, web handler) can map it without inspecting the text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INPUT_VALIDATION = "INPUT_VALIDATION"
    ARITHMETIC_INFEASIBLE = "ARITHMETIC_INFEASIBLE"


class LoanAmortizationError(Exception):
    """Base class for all calculation failures."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(f"[{kind.value}] {message}")


class LoanValidationError(LoanAmortizationError):
    """The loan input is invalid; fix the input and retry."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.INPUT_VALIDATION, message)


class LoanArithmeticError(LoanAmortizationError):
    """The loan cannot be scheduled, e.g. an early payment exceeds the debt."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.ARITHMETIC_INFEASIBLE, message)


# Messages shared by the validators
MISSING_VALUE = "Loan amount, rate and term must be provided"
NON_POSITIVE_NUMBER = "Loan amount, rate and term must be positive"
EARLY_PAYMENT_NUMBER_NEGATIVE = "Early payment month number must not be negative"
EARLY_PAYMENT_AMOUNT_NEGATIVE = "Early payment amount must not be negative"
EARLY_PAYMENT_MISSING = "Early payment month and value must be provided"
EARLY_PAYMENT_STRATEGY_MISSING = "Early payment strategy must be provided"
REPEAT_TO_MONTH_INVALID = "Repeating early payment requires a valid REPEAT_TO_MONTH_NUMBER parameter"
