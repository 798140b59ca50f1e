from dataclasses import replace
from decimal import Decimal

import pytest

from loan_amortization import errors
from loan_amortization.data_models import (
    EarlyPayment,
    EarlyPaymentRepeatingStrategy,
    Item,
    Loan,
    LoanType,
)
from loan_amortization.engine import calculate, validate_loan
from loan_amortization.errors import ErrorKind, LoanValidationError


@pytest.mark.parametrize(
    "amount, rate, term, message",
    [
        (None, Decimal("4.56"), 32, errors.MISSING_VALUE),
        (Decimal("1000"), None, 32, errors.MISSING_VALUE),
        (Decimal("1000"), Decimal("4.56"), None, errors.MISSING_VALUE),
        (Decimal("0"), Decimal("4.56"), 32, errors.NON_POSITIVE_NUMBER),
        (Decimal("1000"), Decimal("-1"), 32, errors.NON_POSITIVE_NUMBER),
        (Decimal("1000"), Decimal("4.56"), 0, errors.NON_POSITIVE_NUMBER),
    ],
)
def test_invalid_loan_terms(amount, rate, term, message):
    with pytest.raises(LoanValidationError) as excinfo:
        calculate(Loan(amount=amount, rate=rate, term=term))
    assert excinfo.value.message == message
    assert excinfo.value.kind is ErrorKind.INPUT_VALIDATION


def test_missing_loan():
    with pytest.raises(LoanValidationError, match=errors.MISSING_VALUE):
        validate_loan(None)


def test_negative_early_payment_month(base_loan, early_payment):
    with pytest.raises(LoanValidationError) as excinfo:
        calculate(replace(base_loan, early_payments={-1: early_payment("100")}))
    assert excinfo.value.message == errors.EARLY_PAYMENT_NUMBER_NEGATIVE


def test_negative_early_payment_amount(base_loan, early_payment):
    with pytest.raises(LoanValidationError) as excinfo:
        calculate(replace(base_loan, early_payments={3: early_payment("-100")}))
    assert excinfo.value.message == errors.EARLY_PAYMENT_AMOUNT_NEGATIVE


def test_early_payment_without_strategy(base_loan):
    payment = EarlyPayment(amount=Decimal("100"), strategy=None)
    with pytest.raises(LoanValidationError) as excinfo:
        calculate(replace(base_loan, early_payments={3: payment}))
    assert excinfo.value.message == errors.EARLY_PAYMENT_STRATEGY_MISSING


def test_missing_early_payment(base_loan):
    with pytest.raises(LoanValidationError) as excinfo:
        calculate(replace(base_loan, early_payments={3: None}))
    assert excinfo.value.message == errors.EARLY_PAYMENT_MISSING


def test_product_amounts_must_match_loan(base_loan):
    products = (Item(id="1", name="Only", amount=Decimal("1000")),)
    with pytest.raises(LoanValidationError):
        calculate(replace(base_loan, products=products))


def test_error_string_carries_kind():
    error = LoanValidationError("bad input")
    assert str(error) == "[INPUT_VALIDATION] bad input"


def test_dispatch_by_loan_type(base_loan):
    annual = calculate(base_loan)
    fixed = calculate(replace(base_loan, loan_type=LoanType.FIXED_INTEREST))

    assert annual.monthly_payment_amount != fixed.monthly_payment_amount
    assert fixed.monthly_payment_amount == Decimal("15625.01") + Decimal("1900.00")


def test_missing_loan_type_defaults_to_annual(base_loan):
    assert calculate(replace(base_loan, loan_type=None)) == calculate(base_loan)


def test_input_loan_is_not_changed(base_loan, early_payment):
    payment = early_payment("1000", repeating=EarlyPaymentRepeatingStrategy.TO_END)
    loan = replace(base_loan, early_payments={30: payment})

    result = calculate(loan)

    assert loan.early_payments == {30: payment}
    assert list(result.early_payments) == [30, 31]
    assert all(
        p.repeating_strategy is EarlyPaymentRepeatingStrategy.SINGLE for p in result.early_payments.values()
    )
