from decimal import Decimal

import pytest

from loan_amortization.data_models import (
    EarlyPayment,
    EarlyPaymentParameter,
    EarlyPaymentRepeatingStrategy,
    EarlyPaymentStrategy,
    Loan,
)
from loan_amortization.engine import calculate


def _early_payment():
    return EarlyPayment(
        amount=Decimal("100"),
        strategy=EarlyPaymentStrategy.DECREASE_TERM,
        repeating_strategy=EarlyPaymentRepeatingStrategy.TO_CERTAIN_MONTH,
        parameters={EarlyPaymentParameter.REPEAT_TO_MONTH_NUMBER: "4"},
    )


def test_loan_keeps_a_copy_of_early_payments():
    early_payments = {2: _early_payment()}
    loan = Loan(amount=Decimal("1200"), rate=Decimal("12"), term=6, early_payments=early_payments)

    early_payments[3] = _early_payment()

    assert list(loan.early_payments) == [2]
    with pytest.raises(TypeError):
        loan.early_payments[4] = _early_payment()


def test_early_payment_parameters_are_read_only():
    payment = _early_payment()
    with pytest.raises(TypeError):
        payment.parameters[EarlyPaymentParameter.REPEAT_TO_MONTH_NUMBER] = "5"


def test_models_are_hashable():
    loan = Loan(amount=Decimal("1200"), rate=Decimal("12"), term=6, early_payments={2: _early_payment()})
    result = calculate(loan)

    assert hash(loan) == hash(Loan(amount=Decimal("1200"), rate=Decimal("12"), term=6))
    assert hash(_early_payment()) == hash(_early_payment())
    assert isinstance(hash(result), int)


def test_result_early_payments_are_read_only():
    result = calculate(Loan(amount=Decimal("1200"), rate=Decimal("12"), term=6, early_payments={2: _early_payment()}))

    assert list(result.early_payments) == [2, 3, 4]
    with pytest.raises(TypeError):
        result.early_payments[5] = _early_payment()
