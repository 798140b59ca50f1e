import logging
from decimal import Decimal

import pytest

from loan_amortization.data_models import (
    EarlyPayment,
    EarlyPaymentParameter,
    EarlyPaymentRepeatingStrategy,
    EarlyPaymentStrategy,
)
from loan_amortization.errors import LoanValidationError
from loan_amortization.repeating import expand_repeating_payment, resolve_early_payments


def _payment(amount="50000", strategy=EarlyPaymentStrategy.DECREASE_TERM, repeating=None, to_month=None):
    parameters = {}
    if to_month is not None:
        parameters[EarlyPaymentParameter.REPEAT_TO_MONTH_NUMBER] = to_month
    return EarlyPayment(
        amount=Decimal(amount),
        strategy=strategy,
        repeating_strategy=repeating or EarlyPaymentRepeatingStrategy.SINGLE,
        parameters=parameters,
    )


def test_single_payment_is_passed_through():
    payment = _payment()
    assert resolve_early_payments({3: payment}, 32) == {3: payment}


def test_to_certain_month_expands_inclusive_range():
    payment = _payment(repeating=EarlyPaymentRepeatingStrategy.TO_CERTAIN_MONTH, to_month="10")
    resolved = resolve_early_payments({5: payment}, 32)

    assert list(resolved) == [5, 6, 7, 8, 9, 10]
    for entry in resolved.values():
        assert entry.amount == Decimal("50000")
        assert entry.strategy is EarlyPaymentStrategy.DECREASE_TERM
        assert entry.repeating_strategy is EarlyPaymentRepeatingStrategy.SINGLE


def test_to_end_expands_until_last_month():
    payment = _payment(
        amount="100", strategy=EarlyPaymentStrategy.DECREASE_MONTHLY_PAYMENT, repeating=EarlyPaymentRepeatingStrategy.TO_END
    )
    resolved = resolve_early_payments({28: payment}, 32)

    assert list(resolved) == [28, 29, 30, 31]
    assert all(p.strategy is EarlyPaymentStrategy.DECREASE_MONTHLY_PAYMENT for p in resolved.values())


def test_to_certain_month_beyond_term_stops_at_last_month():
    payment = _payment(repeating=EarlyPaymentRepeatingStrategy.TO_CERTAIN_MONTH, to_month="100")
    assert list(expand_repeating_payment(10, payment, 12)) == [10, 11]


def test_to_certain_month_ending_before_declared_month_keeps_declared_month(caplog, monkeypatch):
    monkeypatch.setattr(logging.getLogger("loan_amortization"), "propagate", True)
    payment = _payment(repeating=EarlyPaymentRepeatingStrategy.TO_CERTAIN_MONTH, to_month="3")

    with caplog.at_level("WARNING", logger="loan_amortization.repeating"):
        resolved = resolve_early_payments({5: payment}, 32)

    assert list(resolved) == [5]
    assert resolved[5].amount == Decimal("50000")
    assert resolved[5].repeating_strategy is EarlyPaymentRepeatingStrategy.SINGLE
    assert "applying it once" in caplog.text


def test_only_first_repeating_payment_is_expanded():
    first = _payment(amount="100", repeating=EarlyPaymentRepeatingStrategy.TO_CERTAIN_MONTH, to_month="3")
    second = _payment(amount="200", repeating=EarlyPaymentRepeatingStrategy.TO_END)
    single = _payment(amount="300")

    resolved = resolve_early_payments({1: first, 6: second, 8: single}, 10)

    assert list(resolved) == [1, 2, 3, 8]
    assert resolved[8] == single
    assert all(resolved[m].amount == Decimal("100") for m in (1, 2, 3))


def test_expanded_payment_replaces_single_in_same_month():
    repeating = _payment(amount="100", repeating=EarlyPaymentRepeatingStrategy.TO_END)
    single = _payment(amount="999")

    resolved = resolve_early_payments({2: repeating, 3: single}, 5)

    assert list(resolved) == [2, 3, 4]
    assert resolved[3].amount == Decimal("100")


@pytest.mark.parametrize("to_month", [None, "ten", ""])
def test_to_certain_month_requires_month_parameter(to_month):
    payment = _payment(repeating=EarlyPaymentRepeatingStrategy.TO_CERTAIN_MONTH, to_month=to_month)
    with pytest.raises(LoanValidationError):
        resolve_early_payments({5: payment}, 32)


def test_no_early_payments():
    assert resolve_early_payments({}, 12) == {}
