"""Data models for the amortization engine.

This module defines the enums and dataclasses used by the calculators: the
loan input with its early payments and product components, and the schedule
produced for it. All dataclasses are frozen; a calculation never mutates its
input and the result is built once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class LoanType(str, Enum):
    """How the monthly payment is structured."""

    ANNUAL_BALANCED = "ANNUAL_BALANCED"  # level (annuity) payment
    FIXED_INTEREST = "FIXED_INTEREST"  # flat interest on the original principal


class EarlyPaymentStrategy(str, Enum):
    """How an early payment is absorbed by the remaining schedule."""

    DECREASE_TERM = "DECREASE_TERM"
    DECREASE_MONTHLY_PAYMENT = "DECREASE_MONTHLY_PAYMENT"


class EarlyPaymentRepeatingStrategy(str, Enum):
    """How a declared early payment repeats over the following months."""

    SINGLE = "SINGLE"
    TO_END = "TO_END"
    TO_CERTAIN_MONTH = "TO_CERTAIN_MONTH"


class EarlyPaymentParameter(str, Enum):
    REPEAT_TO_MONTH_NUMBER = "REPEAT_TO_MONTH_NUMBER"


class LoanTaxType(str, Enum):
    """Which payment components the loan level tax applies to."""

    INTEREST_ONLY = "INTEREST_ONLY"
    PRINCIPAL_ONLY = "PRINCIPAL_ONLY"
    BOTH = "BOTH"

    @property
    def applies_to_interest(self) -> bool:
        return self in (LoanTaxType.INTEREST_ONLY, LoanTaxType.BOTH)

    @property
    def applies_to_principal(self) -> bool:
        return self in (LoanTaxType.PRINCIPAL_ONLY, LoanTaxType.BOTH)


def _frozen_mapping(value) -> Mapping:
    """Return a read-only copy of ``value`` (``None`` becomes empty)."""
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class Item:
    """A product component of the loan principal.

    Attributes
    ----------
    id: str
        Unique product identifier.
    name: str
        Display name.
    amount: Decimal
        The share of the loan principal financed by this product. The amounts
        of all products must add up to the loan amount.
    tax: Optional[Decimal]
        Product specific tax percentage, independent of the loan level tax.
    """

    id: str
    name: str
    amount: Decimal
    tax: Optional[Decimal] = None


@dataclass(frozen=True)
class EarlyPayment:
    """An extra principal payment.

    Attributes
    ----------
    amount: Decimal
        The additional money applied to the principal.
    strategy: EarlyPaymentStrategy
        ``DECREASE_TERM`` keeps the monthly payment and shortens the loan.
        ``DECREASE_MONTHLY_PAYMENT`` re-amortizes the remaining balance.
    repeating_strategy: EarlyPaymentRepeatingStrategy
        Whether the payment happens once, every month until the end of the
        term, or every month until ``REPEAT_TO_MONTH_NUMBER``.
    parameters: Mapping[EarlyPaymentParameter, str]
        Named parameters of the repeating strategy.
    """

    amount: Decimal
    strategy: EarlyPaymentStrategy
    repeating_strategy: EarlyPaymentRepeatingStrategy = EarlyPaymentRepeatingStrategy.SINGLE
    parameters: Mapping[EarlyPaymentParameter, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _frozen_mapping(self.parameters))


@dataclass(frozen=True)
class Loan:
    """Loan attributes.

    ``early_payments`` is keyed by zero based month number. The three tax
    fields work together: when any of them is ``None`` no loan level tax is
    applied. ``tax_deductible`` set to ``True`` means the tax is already
    included in the amounts, ``False`` means it is added on top.
    """

    amount: Decimal
    rate: Decimal  # annual nominal interest rate in percent
    term: int  # term in months
    loan_type: LoanType = LoanType.ANNUAL_BALANCED
    first_payment_date: Optional[date] = None
    early_payments: Mapping[int, EarlyPayment] = field(default_factory=dict, hash=False)
    tax_percentage: Optional[Decimal] = None
    loan_tax_type: Optional[LoanTaxType] = None
    tax_deductible: Optional[bool] = None
    products: Tuple[Item, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "early_payments", _frozen_mapping(self.early_payments))
        object.__setattr__(self, "products", tuple(self.products or ()))


@dataclass(frozen=True)
class ItemPayment:
    """The share of one monthly payment allocated to a product.

    ``remaining_balance`` is the product balance before this payment. ``tax``
    stays ``None`` for products that were already paid off.
    """

    product_id: str
    product_name: str
    original_amount: Decimal
    principal_amount: Decimal
    remaining_balance: Decimal
    additional_payment_amount: Decimal
    tax: Optional[Decimal] = None


@dataclass(frozen=True)
class MonthlyPayment:
    """An entry in the amortization schedule.

    ``loan_balance_amount`` is the balance before the payment,
    ``debt_payment_amount`` and ``interest_payment_amount`` are the tax
    adjusted principal and interest components, and ``payment_amount`` is the
    total cash flow of the month, including any early payment and any tax
    added on top.
    """

    month_number: int
    loan_balance_amount: Decimal
    debt_payment_amount: Decimal
    interest_payment_amount: Decimal
    payment_amount: Decimal
    additional_payment_amount: Decimal = Decimal("0")
    payment_date: Optional[date] = None
    tax_amount: Decimal = Decimal("0")
    interest_tax_amount: Decimal = Decimal("0")
    principal_tax_amount: Decimal = Decimal("0")
    product_payments: Tuple[ItemPayment, ...] = ()


@dataclass(frozen=True)
class LoanAmortization:
    """The calculated schedule.

    Attributes
    ----------
    monthly_payment_amount: Decimal
        The nominal recurring payment before any early payment recalculation.
    monthly_payments: Tuple[MonthlyPayment, ...]
        Chronological schedule; shorter than the term when the loan is paid
        off early.
    over_payment_amount: Decimal
        Total interest paid.
    early_payments: Mapping[int, EarlyPayment]
        The resolved early payments the schedule was built with.
    """

    monthly_payment_amount: Decimal
    monthly_payments: Tuple[MonthlyPayment, ...]
    over_payment_amount: Decimal
    early_payments: Mapping[int, EarlyPayment] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "early_payments", _frozen_mapping(self.early_payments))
        object.__setattr__(self, "monthly_payments", tuple(self.monthly_payments))
