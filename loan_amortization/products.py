"""Allocation of loan payments across product components.

A loan may finance several products. Every month the principal paid (and
any early payment) is split across the products in proportion to their
remaining balances. Products can declare their own tax percentage, which is
charged on their share of the payment.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Sequence

from .data_models import Item, ItemPayment
from .errors import LoanValidationError
from .utils import HUNDRED, round_money, round_rate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def validate_product_amounts(products: Sequence[Item], loan_amount: Decimal) -> None:
    """Raise ``LoanValidationError`` unless product amounts add up to the loan."""
    if not products:
        logger.debug("No products defined for loan, skipping validation")
        return
    product_sum = sum((item.amount for item in products), ZERO)
    if product_sum != loan_amount:
        raise LoanValidationError(
            f"Sum of product amounts ({product_sum}) does not match loan amount ({loan_amount})"
        )


def initial_balances(products: Sequence[Item]) -> Dict[str, Decimal]:
    return {item.id: item.amount for item in products}


def has_product_tax(products: Sequence[Item]) -> bool:
    return any(item.tax is not None for item in products)


def allocate_payment(
    products: Sequence[Item],
    balances: Dict[str, Decimal],
    principal_amount: Decimal,
    additional_payment_amount: Decimal,
) -> List[ItemPayment]:
    """Split one month's payment across products.

    Parameters
    ----------
    products: Sequence[Item]
        The loan products, in declaration order.
    balances: Dict[str, Decimal]
        Remaining balance per product id. Updated in place: each product is
        reduced by its allocated principal and additional payment.
    principal_amount: Decimal
        Principal paid this month.
    additional_payment_amount: Decimal
        Early payment made this month.

    Returns
    -------
    List[ItemPayment]
        One record per product. Products already paid off get a zero filled
        record. Empty when there are no products or nothing is left to pay.
    """
    if not products:
        return []

    total_balance = sum(balances.values(), ZERO)
    if total_balance <= 0:
        return []

    allocations: List[ItemPayment] = []
    for item in products:
        balance = balances.get(item.id, ZERO)
        if balance <= 0:
            allocations.append(
                ItemPayment(
                    product_id=item.id,
                    product_name=item.name,
                    original_amount=item.amount,
                    principal_amount=ZERO,
                    remaining_balance=ZERO,
                    additional_payment_amount=ZERO,
                )
            )
            continue

        proportion = round_rate(balance / total_balance)
        product_principal = round_money(principal_amount * proportion)
        product_additional = round_money(additional_payment_amount * proportion)
        tax = ZERO
        if item.tax is not None:
            tax = round_money((product_principal + product_additional) * item.tax / HUNDRED)

        allocations.append(
            ItemPayment(
                product_id=item.id,
                product_name=item.name,
                original_amount=item.amount,
                principal_amount=product_principal,
                remaining_balance=balance,
                additional_payment_amount=product_additional,
                tax=tax,
            )
        )
        balances[item.id] = balance - product_principal - product_additional

    return allocations


def total_product_tax(allocations: Sequence[ItemPayment]) -> Decimal:
    return sum((p.tax for p in allocations if p.tax is not None), ZERO)
