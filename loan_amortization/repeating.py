"""Expansion of repeating early payments.

A caller declares early payments keyed by month. Payments with a repeating
strategy other than ``SINGLE`` are expanded into one concrete ``SINGLE``
entry per month they cover.

At most one repeating early payment per loan is honored: the first one in
the iteration order of the input mapping is expanded and any further
repeating entries are dropped, because the overlap of two repeating payments
has no defined meaning. Expanded entries replace ``SINGLE`` entries declared
for the same month.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping

from .data_models import EarlyPayment, EarlyPaymentParameter, EarlyPaymentRepeatingStrategy
from .errors import REPEAT_TO_MONTH_INVALID, LoanValidationError

logger = logging.getLogger(__name__)


def _single(payment: EarlyPayment) -> EarlyPayment:
    return EarlyPayment(amount=payment.amount, strategy=payment.strategy)


def _last_repeated_month(payment: EarlyPayment, term: int) -> int:
    if payment.repeating_strategy is EarlyPaymentRepeatingStrategy.TO_END:
        return term - 1
    raw = payment.parameters.get(EarlyPaymentParameter.REPEAT_TO_MONTH_NUMBER)
    if raw is None:
        raise LoanValidationError(REPEAT_TO_MONTH_INVALID)
    try:
        last_month = int(str(raw).strip())
    except ValueError as exc:
        raise LoanValidationError(f"{REPEAT_TO_MONTH_INVALID}: {raw!r}") from exc
    return min(last_month, term - 1)


def expand_repeating_payment(month: int, payment: EarlyPayment, term: int) -> Dict[int, EarlyPayment]:
    """Return the concrete ``{month: payment}`` entries of one early payment.

    ``SINGLE`` occurs only at ``month``; ``TO_END`` at ``month`` and every
    following month of the term; ``TO_CERTAIN_MONTH`` at ``month`` up to and
    including the ``REPEAT_TO_MONTH_NUMBER`` parameter. The declared month
    is always kept, even when the end month lies before it.
    """
    if payment.repeating_strategy is EarlyPaymentRepeatingStrategy.SINGLE:
        return {month: payment}
    last_month = _last_repeated_month(payment, term)
    if last_month < month:
        logger.warning(
            "Repeating early payment at month %s ends at month %s; applying it once", month, last_month
        )
        last_month = month
    concrete = _single(payment)
    return {m: concrete for m in range(month, last_month + 1)}


def resolve_early_payments(early_payments: Mapping[int, EarlyPayment], term: int) -> Dict[int, EarlyPayment]:
    """Flatten declared early payments into a map of ``SINGLE`` entries."""
    resolved: Dict[int, EarlyPayment] = {
        month: payment
        for month, payment in early_payments.items()
        if payment.repeating_strategy is EarlyPaymentRepeatingStrategy.SINGLE
    }

    repeating = [
        (month, payment)
        for month, payment in early_payments.items()
        if payment.repeating_strategy is not EarlyPaymentRepeatingStrategy.SINGLE
    ]
    if repeating:
        month, payment = repeating[0]
        if len(repeating) > 1:
            logger.warning(
                "Only one repeating early payment is supported; ignoring months %s",
                [m for m, _ in repeating[1:]],
            )
        resolved.update(expand_repeating_payment(month, payment, term))

    resolved = dict(sorted(resolved.items()))
    logger.debug("After applying repeating strategy: %s", resolved)
    return resolved
