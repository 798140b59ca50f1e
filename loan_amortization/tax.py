"""Tax adjustment of loan payments.

A loan can carry a tax (VAT like) that applies to the interest component, the
principal component or both. The tax is either already included in the
amounts (it has to be extracted) or excluded (it is computed and paid on top).
The functions here are pure and know nothing about schedules.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .data_models import LoanTaxType
from .utils import HUNDRED, round_money

ZERO = Decimal("0")


def extract_included_tax(tax_rate: Decimal, amount_with_tax: Decimal) -> Decimal:
    """Return the tax contained in ``amount_with_tax``.

    The base amount is ``amount / (1 + rate/100)`` rounded half-up to cents,
    the tax is the difference. ``extract_included_tax(21, 1000)`` is
    ``173.55``.
    """
    base_amount = round_money(amount_with_tax / (1 + tax_rate / HUNDRED))
    return amount_with_tax - base_amount


def calculate_excluded_tax(tax_rate: Decimal, base_amount: Decimal) -> Decimal:
    """Return the tax to add on top of ``base_amount``.

    ``calculate_excluded_tax(21, 1000)`` is ``210.00``.
    """
    return round_money(base_amount * tax_rate / HUNDRED)


@dataclass(frozen=True)
class TaxResult:
    """Interest and principal of one payment before and after tax.

    ``active`` is False when the loan has no complete tax configuration; in
    that case the adjusted amounts equal the originals and every tax figure
    is zero.
    """

    original_interest_amount: Decimal
    original_principal_amount: Decimal
    adjusted_interest_amount: Decimal
    adjusted_principal_amount: Decimal
    interest_tax_amount: Decimal = ZERO
    principal_tax_amount: Decimal = ZERO
    tax_included: bool = False
    active: bool = False

    @property
    def total_tax_amount(self) -> Decimal:
        return self.interest_tax_amount + self.principal_tax_amount

    @property
    def total_adjusted_amount(self) -> Decimal:
        if not self.active:
            return ZERO
        return self.adjusted_interest_amount + self.adjusted_principal_amount

    @property
    def payment_amount(self) -> Decimal:
        """Cash flow of the payment: tax excluded from the amounts is added."""
        base = self.adjusted_interest_amount + self.adjusted_principal_amount
        if self.tax_included:
            return base
        return base + self.total_tax_amount

    def with_principal_tax(self, principal_tax: Decimal) -> "TaxResult":
        """Return a copy whose principal tax is replaced by ``principal_tax``.

        Used when product level taxes take precedence over the loan level
        principal tax. The adjusted principal is kept, so it still equals the
        principal the products were allocated from.
        """
        return TaxResult(
            original_interest_amount=self.original_interest_amount,
            original_principal_amount=self.original_principal_amount,
            adjusted_interest_amount=self.adjusted_interest_amount,
            adjusted_principal_amount=self.adjusted_principal_amount,
            interest_tax_amount=self.interest_tax_amount,
            principal_tax_amount=principal_tax,
            tax_included=self.tax_included,
            active=self.active,
        )


def _is_active(
    tax_included: Optional[bool],
    tax_type: Optional[LoanTaxType],
    tax_rate: Optional[Decimal],
) -> bool:
    return tax_included is not None and tax_type is not None and tax_rate is not None


def _component_tax(tax_included: bool, tax_rate: Decimal, amount: Decimal) -> Decimal:
    if tax_included:
        return extract_included_tax(tax_rate, amount)
    return calculate_excluded_tax(tax_rate, amount)


def calculate_tax(
    tax_included: Optional[bool],
    tax_type: Optional[LoanTaxType],
    tax_rate: Optional[Decimal],
    interest_amount: Decimal,
    principal_amount: Decimal,
) -> TaxResult:
    """Apply the loan level tax to one payment.

    Parameters
    ----------
    tax_included: Optional[bool]
        ``True`` when the amounts already contain the tax, ``False`` when
        the tax is added on top, ``None`` for no tax.
    tax_type: Optional[LoanTaxType]
        Components the tax applies to.
    tax_rate: Optional[Decimal]
        Tax percentage.
    interest_amount, principal_amount: Decimal
        The untaxed payment components.

    Returns
    -------
    TaxResult
        Included tax is subtracted from the adjusted component, excluded tax
        leaves the component unchanged.
    """
    if not _is_active(tax_included, tax_type, tax_rate):
        return TaxResult(
            original_interest_amount=interest_amount,
            original_principal_amount=principal_amount,
            adjusted_interest_amount=interest_amount,
            adjusted_principal_amount=principal_amount,
        )

    interest_tax = ZERO
    principal_tax = ZERO
    if tax_type.applies_to_interest:
        interest_tax = _component_tax(tax_included, tax_rate, interest_amount)
    if tax_type.applies_to_principal:
        principal_tax = _component_tax(tax_included, tax_rate, principal_amount)

    adjusted_interest = interest_amount
    adjusted_principal = principal_amount
    if tax_included:
        adjusted_interest = interest_amount - interest_tax
        adjusted_principal = principal_amount - principal_tax

    return TaxResult(
        original_interest_amount=interest_amount,
        original_principal_amount=principal_amount,
        adjusted_interest_amount=adjusted_interest,
        adjusted_principal_amount=adjusted_principal,
        interest_tax_amount=interest_tax,
        principal_tax_amount=principal_tax,
        tax_included=tax_included,
        active=True,
    )


def adjust_early_payment(
    tax_included: Optional[bool],
    tax_type: Optional[LoanTaxType],
    tax_rate: Optional[Decimal],
    additional_payment: Decimal,
) -> Decimal:
    """Return the part of an early payment that reduces the principal.

    When the tax is included and applies to the principal, the early payment
    contains tax which is extracted first; otherwise the amount is returned
    unchanged.
    """
    if not _is_active(tax_included, tax_type, tax_rate):
        return additional_payment
    if tax_included and tax_type.applies_to_principal:
        return additional_payment - extract_included_tax(tax_rate, additional_payment)
    return additional_payment
