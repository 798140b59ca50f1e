"""Command‑line interface for the amortization engine.

This module uses the ``click`` library to implement a multi‑command
interface. Users can compute full amortization schedules or view summaries.
Results can be printed to the terminal or exported to JSON/CSV files. The
option parsers are shared with the web front end, which also builds loans
from JSON payloads through ``loan_from_dict``.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import click

from .data_models import (
    EarlyPayment,
    EarlyPaymentParameter,
    EarlyPaymentRepeatingStrategy,
    EarlyPaymentStrategy,
    Item,
    Loan,
    LoanAmortization,
    LoanTaxType,
    LoanType,
)
from .engine import calculate
from .errors import LoanAmortizationError
from .formatter import amortization_to_dict, print_schedule, print_summary
from .utils import decimal_from_str, parse_date

STRATEGY_ALIASES = {
    "term": EarlyPaymentStrategy.DECREASE_TERM,
    "installment": EarlyPaymentStrategy.DECREASE_MONTHLY_PAYMENT,
    "payment": EarlyPaymentStrategy.DECREASE_MONTHLY_PAYMENT,
}


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a single stream handler to the package logger."""
    logger = logging.getLogger("loan_amortization")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False
    return logger


def parse_strategy(value: str) -> EarlyPaymentStrategy:
    key = value.strip().lower()
    if key in STRATEGY_ALIASES:
        return STRATEGY_ALIASES[key]
    try:
        return EarlyPaymentStrategy(value.strip().upper())
    except ValueError:
        raise ValueError(f"Unknown early payment strategy: {value}")


def parse_repeating_strategy(value: str) -> EarlyPaymentRepeatingStrategy:
    try:
        return EarlyPaymentRepeatingStrategy(value.strip().upper())
    except ValueError:
        raise ValueError(f"Unknown repeating strategy: {value}")


def parse_early_payment_strings(values: Tuple[str, ...]) -> Dict[int, EarlyPayment]:
    """Parse ``MONTH:AMOUNT:STRATEGY[:REPEATING[:TO_MONTH]]`` entries."""
    early_payments: Dict[int, EarlyPayment] = {}
    for item in values:
        parts = item.split(":")
        if not 3 <= len(parts) <= 5:
            raise click.BadParameter(
                f"Early payment must be in MONTH:AMOUNT:STRATEGY[:REPEATING[:TO_MONTH]] format; got {item}"
            )
        try:
            month = int(parts[0])
            amount = decimal_from_str(parts[1])
            strategy = parse_strategy(parts[2])
            repeating = (
                parse_repeating_strategy(parts[3]) if len(parts) > 3 else EarlyPaymentRepeatingStrategy.SINGLE
            )
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        parameters = {}
        if len(parts) == 5:
            parameters[EarlyPaymentParameter.REPEAT_TO_MONTH_NUMBER] = parts[4]
        early_payments[month] = EarlyPayment(
            amount=amount, strategy=strategy, repeating_strategy=repeating, parameters=parameters
        )
    return early_payments


def parse_product_strings(values: Tuple[str, ...]) -> List[Item]:
    """Parse ``ID:NAME:AMOUNT[:TAX]`` entries."""
    products: List[Item] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (3, 4):
            raise click.BadParameter(f"Product must be in ID:NAME:AMOUNT[:TAX] format; got {item}")
        try:
            amount = decimal_from_str(parts[2])
            tax = decimal_from_str(parts[3]) if len(parts) == 4 else None
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        products.append(Item(id=parts[0], name=parts[1], amount=amount, tax=tax))
    return products


def build_loan_from_options(
    amount: str,
    rate: str,
    term: int,
    loan_type: str,
    first_payment_date: Optional[str],
    early_payment: Tuple[str, ...],
    tax_percentage: Optional[str],
    tax_type: Optional[str],
    tax_included: Optional[bool],
    product: Tuple[str, ...],
) -> Loan:
    try:
        amount_value = decimal_from_str(amount)
        rate_value = decimal_from_str(rate)
        tax_value = decimal_from_str(tax_percentage) if tax_percentage else None
        first_date = parse_date(first_payment_date) if first_payment_date else None
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    return Loan(
        amount=amount_value,
        rate=rate_value,
        term=term,
        loan_type=LoanType(loan_type.upper()),
        first_payment_date=first_date,
        early_payments=parse_early_payment_strings(early_payment) if early_payment else {},
        tax_percentage=tax_value,
        loan_tax_type=LoanTaxType(tax_type.upper()) if tax_type else None,
        tax_deductible=tax_included,
        products=tuple(parse_product_strings(product)) if product else (),
    )


def _optional_decimal(data: Mapping[str, Any], key: str):
    value = data.get(key)
    return None if value is None else decimal_from_str(str(value))


def loan_from_dict(data: Mapping[str, Any]) -> Loan:
    """Build a ``Loan`` from a JSON payload using the camelCase field names.

    Raises ``ValueError`` (or ``KeyError`` for missing required fields) when
    the payload cannot be converted.
    """
    early_payments: Dict[int, EarlyPayment] = {}
    for month, payment in (data.get("earlyPayments") or {}).items():
        parameters = {
            EarlyPaymentParameter(k): str(v) for k, v in (payment.get("additionalParameters") or {}).items()
        }
        early_payments[int(month)] = EarlyPayment(
            amount=decimal_from_str(str(payment["amount"])),
            strategy=parse_strategy(payment["strategy"]),
            repeating_strategy=parse_repeating_strategy(payment.get("repeatingStrategy") or "SINGLE"),
            parameters=parameters,
        )
    products = tuple(
        Item(
            id=str(p["id"]),
            name=p.get("name", ""),
            amount=decimal_from_str(str(p["amount"])),
            tax=_optional_decimal(p, "tax"),
        )
        for p in data.get("products") or []
    )
    first_payment_date = data.get("firstPaymentDate")
    tax_type = data.get("loanTaxType")
    tax_deductible = data.get("taxDeductible")
    if tax_deductible is not None and not isinstance(tax_deductible, bool):
        raise ValueError(f"taxDeductible must be true, false or null; got {tax_deductible!r}")
    return Loan(
        amount=decimal_from_str(str(data["amount"])),
        rate=decimal_from_str(str(data["rate"])),
        term=int(data["term"]),
        loan_type=LoanType(str(data.get("loanType") or "ANNUAL_BALANCED").upper()),
        first_payment_date=parse_date(first_payment_date) if first_payment_date else None,
        early_payments=early_payments,
        tax_percentage=_optional_decimal(data, "taxPercentage"),
        loan_tax_type=LoanTaxType(str(tax_type).upper()) if tax_type else None,
        tax_deductible=tax_deductible,
        products=products,
    )


def export_to_json(path: Path, amortization: LoanAmortization) -> None:
    """Export the result to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(amortization_to_dict(amortization), f, indent=2)


def export_to_csv(path: Path, amortization: LoanAmortization) -> None:
    """Export the schedule to a CSV file."""
    header = [
        "Month",
        "Date",
        "Loan_Balance",
        "Payment",
        "Principal",
        "Interest",
        "Additional_Payment",
        "Tax",
        "Interest_Tax",
        "Principal_Tax",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in amortization.monthly_payments:
            writer.writerow(
                [
                    e.month_number,
                    e.payment_date.isoformat() if e.payment_date else "",
                    e.loan_balance_amount,
                    e.payment_amount,
                    e.debt_payment_amount,
                    e.interest_payment_amount,
                    e.additional_payment_amount,
                    e.tax_amount,
                    e.interest_tax_amount,
                    e.principal_tax_amount,
                ]
            )


def loan_options(func):
    """Attach the loan options shared by every command."""
    options = [
        click.option("--amount", "-a", "amount", required=True, help="Loan amount (500000, 500k)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
        click.option(
            "--type",
            "loan_type",
            type=click.Choice([t.value for t in LoanType], case_sensitive=False),
            default=LoanType.ANNUAL_BALANCED.value,
            help="Loan type",
        ),
        click.option("--first-payment-date", "-d", "first_payment_date", help="First payment date (YYYY-MM-DD)"),
        click.option(
            "--early-payment",
            "early_payment",
            multiple=True,
            help="Early payment in MONTH:AMOUNT:STRATEGY[:REPEATING[:TO_MONTH]] format, e.g. 5:50000:term",
        ),
        click.option("--tax-percentage", "tax_percentage", help="Loan tax percentage"),
        click.option(
            "--tax-type",
            "tax_type",
            type=click.Choice([t.value for t in LoanTaxType], case_sensitive=False),
            help="Payment components the tax applies to",
        ),
        click.option(
            "--tax-included/--tax-excluded",
            "tax_included",
            default=None,
            help="Whether the tax is already included in the amounts",
        ),
        click.option("--product", "product", multiple=True, help="Product in ID:NAME:AMOUNT[:TAX] format"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _calculate_or_fail(loan: Loan) -> LoanAmortization:
    try:
        return calculate(loan)
    except LoanAmortizationError as exc:
        raise click.ClickException(exc.message)


@click.group()
@click.option(
    "--log-level",
    "log_level",
    envvar="LOAN_AMORTIZATION_LOG_LEVEL",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
def cli(log_level: str) -> None:
    """A command‑line loan amortization calculator."""
    setup_logging(log_level)


@cli.command()
@loan_options
@click.option("--show-tax", "show_tax", is_flag=True, help="Show interest and principal tax columns")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    amount: str,
    rate: str,
    term: int,
    loan_type: str,
    first_payment_date: Optional[str],
    early_payment: Tuple[str, ...],
    tax_percentage: Optional[str],
    tax_type: Optional[str],
    tax_included: Optional[bool],
    product: Tuple[str, ...],
    show_tax: bool,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    loan = build_loan_from_options(
        amount,
        rate,
        term,
        loan_type,
        first_payment_date,
        early_payment,
        tax_percentage,
        tax_type,
        tax_included,
        product,
    )
    amortization = _calculate_or_fail(loan)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, amortization)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, amortization)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(amortization)
        print_schedule(amortization.monthly_payments, show_tax=show_tax)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    amount: str,
    rate: str,
    term: int,
    loan_type: str,
    first_payment_date: Optional[str],
    early_payment: Tuple[str, ...],
    tax_percentage: Optional[str],
    tax_type: Optional[str],
    tax_included: Optional[bool],
    product: Tuple[str, ...],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    loan = build_loan_from_options(
        amount,
        rate,
        term,
        loan_type,
        first_payment_date,
        early_payment,
        tax_percentage,
        tax_type,
        tax_included,
        product,
    )
    amortization = _calculate_or_fail(loan)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        data = amortization_to_dict(amortization)
        data.pop("monthlyPayments")
        data["paymentsMade"] = len(amortization.monthly_payments)
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(amortization)


if __name__ == "__main__":
    cli()
