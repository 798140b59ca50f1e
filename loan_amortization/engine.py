"""Entry point of the amortization engine.

``calculate`` validates a loan, flattens its repeating early payments into
concrete monthly entries and hands the resolved loan to the schedule that
matches its loan type. Results are returned as an immutable
``LoanAmortization``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict

from . import errors
from .annual import calculate_annual_balanced
from .data_models import Loan, LoanAmortization, LoanType
from .errors import LoanValidationError
from .fixed import calculate_fixed_interest
from .products import validate_product_amounts
from .repeating import resolve_early_payments

logger = logging.getLogger(__name__)

CALCULATORS: Dict[LoanType, Callable[[Loan], LoanAmortization]] = {
    LoanType.ANNUAL_BALANCED: calculate_annual_balanced,
    LoanType.FIXED_INTEREST: calculate_fixed_interest,
}


def validate_loan(loan: Loan) -> None:
    """Check the loan input before any scheduling.

    Raises
    ------
    LoanValidationError
        If amount, rate or term are missing or not positive, an early payment
        has a negative month, a negative amount or no strategy, or the product
        amounts do not add up to the loan amount.
    """
    logger.debug("Validating input. Loan: %s", loan)
    if loan is None or loan.amount is None or loan.rate is None or loan.term is None:
        raise LoanValidationError(errors.MISSING_VALUE)
    if loan.amount <= 0 or loan.rate <= 0 or loan.term <= 0:
        raise LoanValidationError(errors.NON_POSITIVE_NUMBER)

    for month, payment in (loan.early_payments or {}).items():
        if month is None or payment is None or payment.amount is None:
            raise LoanValidationError(errors.EARLY_PAYMENT_MISSING)
        if month < 0:
            raise LoanValidationError(errors.EARLY_PAYMENT_NUMBER_NEGATIVE)
        if payment.amount < 0:
            raise LoanValidationError(errors.EARLY_PAYMENT_AMOUNT_NEGATIVE)
        if payment.strategy is None:
            raise LoanValidationError(errors.EARLY_PAYMENT_STRATEGY_MISSING)

    validate_product_amounts(loan.products, loan.amount)


def calculate(loan: Loan) -> LoanAmortization:
    """Calculate the amortization schedule of ``loan``.

    Parameters
    ----------
    loan: Loan
        The loan attributes.

    Returns
    -------
    LoanAmortization
        The schedule, the nominal monthly payment, the total interest and the
        resolved early payments.
    """
    validate_loan(loan)
    resolved = replace(
        loan,
        early_payments=resolve_early_payments(loan.early_payments or {}, loan.term),
        loan_type=loan.loan_type or LoanType.ANNUAL_BALANCED,
    )
    calculator = CALCULATORS[resolved.loan_type]
    return calculator(resolved)
