"""Annual balanced (annuity) amortization schedule.

The monthly payment is level and computed with the standard annuity formula:

    payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

where ``P`` is the principal, ``i`` is the monthly interest rate and ``n`` is
the number of payments. Early payments are added to the principal of their
month; a ``DECREASE_MONTHLY_PAYMENT`` early payment re-amortizes the rest of
the schedule, a ``DECREASE_TERM`` one keeps the payment level so the balance
simply runs out sooner.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple

from . import products as product_allocation
from .data_models import (
    EarlyPayment,
    EarlyPaymentRepeatingStrategy,
    EarlyPaymentStrategy,
    ItemPayment,
    Loan,
    LoanAmortization,
    MonthlyPayment,
)
from .tax import TaxResult, adjust_early_payment, calculate_tax
from .utils import monthly_interest_rate, payment_date_for, round_money, round_rate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def calculate_annuity_payment(balance: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the level monthly payment for ``balance`` over ``term`` months.

    The annuity factor is carried to 15 decimal places and the payment is
    rounded half-up to cents. A rate that rounds to zero repays the balance
    in equal parts.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return round_money(balance / Decimal(term))
    factor = (1 + rate_per_month) ** term
    annuity_factor = round_rate((rate_per_month * factor) / (factor - 1))
    payment = round_money(balance * annuity_factor)
    logger.debug("Monthly payment for %s over %s months at %s: %s", balance, term, rate_per_month, payment)
    return payment


def early_payment_for_month(early_payments: Mapping[int, EarlyPayment], month: int) -> Optional[EarlyPayment]:
    """Return the early payment that applies to ``month``.

    A payment declared for the month wins; otherwise a ``TO_END`` payment
    declared for an earlier month applies.
    """
    direct = early_payments.get(month)
    if direct is not None:
        return direct
    for payment_month, payment in early_payments.items():
        if payment_month < month and payment.repeating_strategy is EarlyPaymentRepeatingStrategy.TO_END:
            return payment
    return None


def _balance_with_decrease_term_payments(
    early_payments: Mapping[int, EarlyPayment], balance: Decimal, until_month: int
) -> Decimal:
    """Remaining balance plus the DECREASE_TERM early payments made before ``until_month``."""
    total = sum(
        (
            payment.amount
            for month, payment in early_payments.items()
            if month < until_month and payment.strategy is EarlyPaymentStrategy.DECREASE_TERM
        ),
        ZERO,
    )
    logger.info(
        "Early payments (decrease term) until payment %s with remaining balance %s: %s",
        until_month,
        balance,
        balance + total,
    )
    return balance + total


def _apply_products(
    loan: Loan,
    balances: Dict[str, Decimal],
    tax_result: TaxResult,
    additional_payment: Decimal,
) -> Tuple[TaxResult, Tuple[ItemPayment, ...]]:
    allocations = product_allocation.allocate_payment(
        loan.products, balances, tax_result.adjusted_principal_amount, additional_payment
    )
    if allocations and product_allocation.has_product_tax(loan.products):
        tax_result = tax_result.with_principal_tax(product_allocation.total_product_tax(allocations))
    return tax_result, tuple(allocations)


def _build_payment(
    month: int,
    balance: Decimal,
    tax_result: TaxResult,
    additional_payment: Decimal,
    payment_date,
    allocations: Tuple[ItemPayment, ...],
) -> MonthlyPayment:
    return MonthlyPayment(
        month_number=month,
        loan_balance_amount=balance,
        debt_payment_amount=tax_result.adjusted_principal_amount,
        interest_payment_amount=tax_result.adjusted_interest_amount,
        payment_amount=tax_result.payment_amount,
        additional_payment_amount=additional_payment,
        payment_date=payment_date,
        tax_amount=tax_result.total_tax_amount,
        interest_tax_amount=tax_result.interest_tax_amount,
        principal_tax_amount=tax_result.principal_tax_amount,
        product_payments=allocations,
    )


def calculate_annual_balanced(loan: Loan) -> LoanAmortization:
    """Compute the annuity schedule for ``loan``.

    ``loan.early_payments`` is expected to be resolved already (see
    ``repeating.resolve_early_payments``).
    """
    early_payments = loan.early_payments or {}
    term = loan.term
    rate_per_month = monthly_interest_rate(loan.rate)
    logger.debug("Calculated monthly interest rate: %s", rate_per_month)

    balance = loan.amount
    monthly_payment = calculate_annuity_payment(balance, rate_per_month, term)
    nominal_payment = monthly_payment
    product_balances = product_allocation.initial_balances(loan.products)

    payments: List[MonthlyPayment] = []
    total_interest = ZERO
    # untaxed interest and product balances of the last recorded payment
    last_interest = ZERO
    last_product_balances: Dict[str, Decimal] = dict(product_balances)

    for month in range(term):
        interest = round_money(balance * rate_per_month)

        # An early payment overshot the balance: the previous payment settles the loan.
        if interest < 0 or balance < 0:
            if payments:
                previous = payments[-1]
                tax_result = calculate_tax(
                    loan.tax_deductible,
                    loan.loan_tax_type,
                    loan.tax_percentage,
                    last_interest,
                    previous.loan_balance_amount,
                )
                balances = dict(last_product_balances)
                tax_result, allocations = _apply_products(loan, balances, tax_result, ZERO)
                payments[-1] = _build_payment(
                    previous.month_number,
                    previous.loan_balance_amount,
                    tax_result,
                    previous.additional_payment_amount,
                    previous.payment_date,
                    allocations,
                )
                logger.info("Loan paid off at payment %s, last payment corrected", previous.month_number)
            break
        if balance == 0:
            break

        additional_payment = ZERO
        early_payment = early_payment_for_month(early_payments, month)
        if early_payment is not None:
            additional_payment = adjust_early_payment(
                loan.tax_deductible, loan.loan_tax_type, loan.tax_percentage, early_payment.amount
            )

        if month + 1 == term:
            principal = balance
        else:
            principal = round_money(monthly_payment - interest + additional_payment)

        tax_result = calculate_tax(
            loan.tax_deductible, loan.loan_tax_type, loan.tax_percentage, interest, principal
        )
        last_product_balances = dict(product_balances)
        tax_result, allocations = _apply_products(loan, product_balances, tax_result, additional_payment)

        payment_date = payment_date_for(loan.first_payment_date, month)

        payments.append(
            _build_payment(month, balance, tax_result, additional_payment, payment_date, allocations)
        )
        total_interest += interest
        last_interest = interest
        balance = balance - principal

        if early_payment is not None and early_payment.strategy is EarlyPaymentStrategy.DECREASE_MONTHLY_PAYMENT:
            remaining_months = term - 1 - month
            if remaining_months > 0:
                new_balance = _balance_with_decrease_term_payments(early_payments, balance, month)
                monthly_payment = calculate_annuity_payment(new_balance, rate_per_month, remaining_months)
                logger.info("Monthly payment recalculated after payment %s: %s", month, monthly_payment)

    result = LoanAmortization(
        monthly_payment_amount=nominal_payment,
        monthly_payments=tuple(payments),
        over_payment_amount=total_interest,
        early_payments=dict(early_payments),
    )
    logger.debug("Calculation result: %s payments, interest %s", len(payments), total_interest)
    return result
