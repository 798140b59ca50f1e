from decimal import Decimal

import pytest

from loan_amortization.data_models import (
    EarlyPayment,
    EarlyPaymentParameter,
    EarlyPaymentRepeatingStrategy,
    EarlyPaymentStrategy,
    Loan,
)


@pytest.fixture
def base_loan():
    """The reference loan used across the schedule tests."""
    return Loan(amount=Decimal("500000.32"), rate=Decimal("4.56"), term=32)


@pytest.fixture
def early_payment():
    def make(amount, strategy=EarlyPaymentStrategy.DECREASE_TERM, repeating=None, to_month=None):
        parameters = {}
        if to_month is not None:
            parameters[EarlyPaymentParameter.REPEAT_TO_MONTH_NUMBER] = str(to_month)
        return EarlyPayment(
            amount=Decimal(amount),
            strategy=strategy,
            repeating_strategy=repeating or EarlyPaymentRepeatingStrategy.SINGLE,
            parameters=parameters,
        )

    return make
