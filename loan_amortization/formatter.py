"""Output helpers for the amortization engine.

This module renders schedules and summaries in a tabular text format and maps
results to JSON-serialisable dictionaries. The dictionaries use the camelCase
field names of the public schema; ``None`` values are omitted rather than
written as zero.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .data_models import EarlyPayment, ItemPayment, LoanAmortization, MonthlyPayment


def _without_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _number(value):
    return None if value is None else float(value)


def item_payment_to_dict(payment: ItemPayment) -> Dict[str, Any]:
    return _without_none(
        {
            "productId": payment.product_id,
            "productName": payment.product_name,
            "originalAmount": _number(payment.original_amount),
            "principalAmount": _number(payment.principal_amount),
            "remainingBalance": _number(payment.remaining_balance),
            "additionalPaymentAmount": _number(payment.additional_payment_amount),
            "tax": _number(payment.tax),
        }
    )


def monthly_payment_to_dict(payment: MonthlyPayment) -> Dict[str, Any]:
    return _without_none(
        {
            "monthNumber": payment.month_number,
            "loanBalanceAmount": _number(payment.loan_balance_amount),
            "debtPaymentAmount": _number(payment.debt_payment_amount),
            "interestPaymentAmount": _number(payment.interest_payment_amount),
            "paymentAmount": _number(payment.payment_amount),
            "additionalPaymentAmount": _number(payment.additional_payment_amount),
            "paymentDate": payment.payment_date.isoformat() if payment.payment_date else None,
            "taxAmount": _number(payment.tax_amount),
            "interestTaxAmount": _number(payment.interest_tax_amount),
            "principalTaxAmount": _number(payment.principal_tax_amount),
            "productPayments": [item_payment_to_dict(p) for p in payment.product_payments],
        }
    )


def early_payment_to_dict(payment: EarlyPayment) -> Dict[str, Any]:
    return {
        "amount": _number(payment.amount),
        "strategy": payment.strategy.value,
        "repeatingStrategy": payment.repeating_strategy.value,
        "additionalParameters": {k.value: v for k, v in payment.parameters.items()},
    }


def amortization_to_dict(amortization: LoanAmortization) -> Dict[str, Any]:
    """Convert a result into the JSON structure returned to callers."""
    return {
        "monthlyPaymentAmount": _number(amortization.monthly_payment_amount),
        "monthlyPayments": [monthly_payment_to_dict(p) for p in amortization.monthly_payments],
        "overPaymentAmount": _number(amortization.over_payment_amount),
        "earlyPayments": {
            str(month): early_payment_to_dict(p) for month, p in amortization.early_payments.items()
        },
    }


def print_summary(amortization: LoanAmortization) -> None:
    """Print the headline figures of a schedule in a human‑readable format."""
    payments = amortization.monthly_payments
    total_paid = sum(p.payment_amount for p in payments)
    total_tax = sum(p.tax_amount for p in payments)
    total_additional = sum(p.additional_payment_amount for p in payments)
    print("Summary")
    print("-" * 72)
    print(f"Monthly payment    : {amortization.monthly_payment_amount:.2f}")
    print(f"Total interest     : {amortization.over_payment_amount:.2f}")
    if total_additional:
        print(f"Early payments     : {total_additional:.2f}")
    if total_tax:
        print(f"Total tax          : {total_tax:.2f}")
    print(f"Total paid         : {total_paid:.2f}")
    print(f"Payments made      : {len(payments)}")
    if payments and payments[-1].payment_date:
        print(f"Last payment date  : {payments[-1].payment_date.isoformat()}")
    print("-" * 72)


def print_schedule(schedule: Iterable[MonthlyPayment], show_tax: bool = False) -> None:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[MonthlyPayment]
        The schedule entries to print.
    show_tax: bool
        Whether to include the interest and principal tax columns.
    """
    headers: List[str] = ["Month", "Date", "Balance", "Payment", "Principal", "Interest", "Extra"]
    if show_tax:
        headers.extend(["IntTax", "PrinTax"])
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.month_number),
            entry.payment_date.isoformat() if entry.payment_date else "-",
            f"{entry.loan_balance_amount:.2f}",
            f"{entry.payment_amount:.2f}",
            f"{entry.debt_payment_amount:.2f}",
            f"{entry.interest_payment_amount:.2f}",
            f"{entry.additional_payment_amount:.2f}",
        ]
        if show_tax:
            row.append(f"{entry.interest_tax_amount:.2f}")
            row.append(f"{entry.principal_tax_amount:.2f}")
        print("\t".join(row))
