"""Fixed interest (flat rate) amortization schedule.

Interest is charged every month on the *original* principal, not on the
declining balance, and the principal is repaid in equal parts of
``principal / term``. Early payments either shorten the loan
(``DECREASE_TERM``) or spread the remaining balance over the remaining months
(``DECREASE_MONTHLY_PAYMENT``). Each ``DECREASE_TERM`` payment removes one
month from the term, and the last month of the shortened term pays off
whatever balance is left, so that payment can be larger than the regular
one. Products are not supported by this schedule.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List

from .data_models import EarlyPaymentStrategy, Loan, LoanAmortization, MonthlyPayment
from .errors import LoanArithmeticError
from .tax import adjust_early_payment, calculate_tax
from .utils import monthly_interest_rate, payment_date_for, round_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def calculate_fixed_interest(loan: Loan) -> LoanAmortization:
    """Compute the flat interest schedule for ``loan``.

    Raises
    ------
    LoanArithmeticError
        If an early payment is larger than the balance still owed.
    """
    early_payments = loan.early_payments or {}
    if loan.products:
        logger.debug("Products are ignored by the fixed interest schedule")

    principal = loan.amount
    monthly_interest = round_money(principal * monthly_interest_rate(loan.rate))
    term = loan.term
    monthly_principal = round_money(principal / Decimal(term))
    nominal_payment = monthly_interest + monthly_principal

    balance = principal
    payments: List[MonthlyPayment] = []
    total_interest = ZERO
    month = 0
    while month < term and balance > 0:
        additional_payment = ZERO
        early_payment = early_payments.get(month)
        if early_payment is not None:
            additional_payment = adjust_early_payment(
                loan.tax_deductible, loan.loan_tax_type, loan.tax_percentage, early_payment.amount
            )
            if additional_payment > balance:
                raise LoanArithmeticError(
                    f"Too much money: early payment {additional_payment} at month {month} "
                    f"exceeds the remaining balance {balance}"
                )
            if early_payment.strategy is EarlyPaymentStrategy.DECREASE_TERM:
                term -= 1

        principal_amount = monthly_principal
        # last month of the (possibly shortened) term settles the balance;
        # earlier months are capped so they never overshoot it
        if month + 1 >= term or principal_amount + additional_payment > balance:
            principal_amount = balance - additional_payment
        debt_payment = principal_amount + additional_payment

        tax_result = calculate_tax(
            loan.tax_deductible, loan.loan_tax_type, loan.tax_percentage, monthly_interest, debt_payment
        )
        payments.append(
            MonthlyPayment(
                month_number=month,
                loan_balance_amount=balance,
                debt_payment_amount=tax_result.adjusted_principal_amount,
                interest_payment_amount=tax_result.adjusted_interest_amount,
                payment_amount=tax_result.payment_amount,
                additional_payment_amount=additional_payment,
                payment_date=payment_date_for(loan.first_payment_date, month),
                tax_amount=tax_result.total_tax_amount,
                interest_tax_amount=tax_result.interest_tax_amount,
                principal_tax_amount=tax_result.principal_tax_amount,
            )
        )
        total_interest += monthly_interest
        balance -= debt_payment

        if early_payment is not None and early_payment.strategy is EarlyPaymentStrategy.DECREASE_MONTHLY_PAYMENT:
            remaining_months = term - month - 1
            if remaining_months > 0 and balance > 0:
                monthly_principal = round_money(balance / Decimal(remaining_months))
                logger.info("Monthly principal recalculated after payment %s: %s", month, monthly_principal)
        month += 1

    result = LoanAmortization(
        monthly_payment_amount=nominal_payment,
        monthly_payments=tuple(payments),
        over_payment_amount=total_interest,
        early_payments=dict(early_payments),
    )
    logger.debug("Calculation result: %s payments, interest %s", len(payments), total_interest)
    return result
