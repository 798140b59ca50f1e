"""Loan amortization schedules with early payments, products and tax."""

from .data_models import (
    EarlyPayment,
    EarlyPaymentParameter,
    EarlyPaymentRepeatingStrategy,
    EarlyPaymentStrategy,
    Item,
    ItemPayment,
    Loan,
    LoanAmortization,
    LoanTaxType,
    LoanType,
    MonthlyPayment,
)
from .engine import calculate
from .errors import ErrorKind, LoanAmortizationError, LoanArithmeticError, LoanValidationError

__all__ = [
    "EarlyPayment",
    "EarlyPaymentParameter",
    "EarlyPaymentRepeatingStrategy",
    "EarlyPaymentStrategy",
    "ErrorKind",
    "Item",
    "ItemPayment",
    "Loan",
    "LoanAmortization",
    "LoanAmortizationError",
    "LoanArithmeticError",
    "LoanTaxType",
    "LoanType",
    "LoanValidationError",
    "MonthlyPayment",
    "calculate",
]
