from dataclasses import replace
from decimal import Decimal

import pytest

from loan_amortization.data_models import (
    EarlyPaymentRepeatingStrategy,
    EarlyPaymentStrategy,
    Item,
    Loan,
    LoanTaxType,
    LoanType,
)
from loan_amortization.engine import calculate
from loan_amortization.errors import ErrorKind, LoanArithmeticError


@pytest.fixture
def fixed_loan():
    return Loan(amount=Decimal("12000"), rate=Decimal("12"), term=12, loan_type=LoanType.FIXED_INTEREST)


def test_flat_schedule(fixed_loan):
    result = calculate(fixed_loan)

    assert result.monthly_payment_amount == Decimal("1120.00")
    assert len(result.monthly_payments) == 12
    for payment in result.monthly_payments:
        assert payment.interest_payment_amount == Decimal("120.00")
        assert payment.debt_payment_amount == Decimal("1000.00")
        assert payment.payment_amount == Decimal("1120.00")
    assert sum(p.debt_payment_amount for p in result.monthly_payments) == Decimal("12000")
    assert result.over_payment_amount == Decimal("1440.00")


def test_balance_runs_down(fixed_loan):
    balances = [p.loan_balance_amount for p in calculate(fixed_loan).monthly_payments]
    assert balances[0] == Decimal("12000")
    assert balances[-1] == Decimal("1000.00")


def test_decrease_term(fixed_loan, early_payment):
    result = calculate(replace(fixed_loan, early_payments={3: early_payment("2000")}))

    assert len(result.monthly_payments) == 10
    assert result.monthly_payments[3].debt_payment_amount == Decimal("3000.00")
    assert result.monthly_payments[3].additional_payment_amount == Decimal("2000")
    assert sum(p.debt_payment_amount for p in result.monthly_payments) == Decimal("12000")


def test_decrease_monthly_payment(fixed_loan, early_payment):
    early = {3: early_payment("2000", EarlyPaymentStrategy.DECREASE_MONTHLY_PAYMENT)}
    result = calculate(replace(fixed_loan, early_payments=early))

    assert len(result.monthly_payments) == 12
    for payment in result.monthly_payments[4:]:
        assert payment.debt_payment_amount == Decimal("750.00")
        assert payment.payment_amount == Decimal("870.00")
    assert sum(p.debt_payment_amount for p in result.monthly_payments) == Decimal("12000")


def test_early_payment_larger_than_balance(fixed_loan, early_payment):
    loan = replace(fixed_loan, early_payments={0: early_payment("13000")})
    with pytest.raises(LoanArithmeticError) as excinfo:
        calculate(loan)
    assert excinfo.value.kind is ErrorKind.ARITHMETIC_INFEASIBLE
    assert "Too much money" in excinfo.value.message


def test_excluded_interest_tax(fixed_loan):
    loan = replace(
        fixed_loan,
        tax_percentage=Decimal("10"),
        loan_tax_type=LoanTaxType.INTEREST_ONLY,
        tax_deductible=False,
    )
    first = calculate(loan).monthly_payments[0]

    assert first.interest_tax_amount == Decimal("12.00")
    assert first.payment_amount == Decimal("1132.00")


def test_products_are_ignored(fixed_loan):
    products = (Item(id="A", name="Car", amount=Decimal("12000"), tax=Decimal("10")),)
    result = calculate(replace(fixed_loan, products=products))

    assert all(p.product_payments == () for p in result.monthly_payments)
    assert result.monthly_payment_amount == Decimal("1120.00")


def test_shortened_term_settles_balance_in_last_month(fixed_loan, early_payment):
    repeating = early_payment("100", repeating=EarlyPaymentRepeatingStrategy.TO_END)
    result = calculate(replace(fixed_loan, early_payments={0: repeating}))

    debts = [p.debt_payment_amount for p in result.monthly_payments]
    # every early payment removes a month, so month 5 is the last one
    assert debts == [Decimal("1100.00")] * 5 + [Decimal("6500.00")]
    assert sum(debts) == Decimal("12000")
