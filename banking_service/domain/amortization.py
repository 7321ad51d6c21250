"""Loan simulation engine - fixed-installment (French) amortization"""

from decimal import Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext
from typing import List

from banking_service.domain.exceptions import (
    InvalidAmount,
    InvalidRate,
    InvalidTerm,
    LoanOutOfRange,
)
from banking_service.domain.models import LoanTerms, ScheduleRow
from banking_service.utils.money import Numeric, round_money, to_decimal

MONTHS_PER_YEAR = 12

# Working precision for intermediate results; only the reported figures are rounded
PRECISION = 34

ZERO = Decimal("0.00")


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Nominal annual percentage -> monthly decimal rate (12% -> 0.01)"""
    return annual_rate_percent / MONTHS_PER_YEAR / 100


def simulate_loan(amount: Numeric, annual_rate_percent: Numeric, term_months: int) -> LoanTerms:
    """
    Compute the fixed monthly installment and derived totals for a loan.

    Formula (French system):
        payment = P * r(1+r)^n / ((1+r)^n - 1),  r = annual% / 12 / 100

    total = payment * n and interest = total - P are computed on the
    unrounded installment; all four outputs are rounded to cents last.
    A 0% rate is its own branch: payment = P / n and the total is exactly P.

    Example:
        simulate_loan(10000, 12, 12) -> payment 888.49, total 10661.85,
        interest 661.85, effective annual rate 12.68

    Raises:
        InvalidAmount: amount <= 0
        InvalidRate: annual_rate_percent < 0
        InvalidTerm: term_months <= 0
        LoanOutOfRange: inputs exceed what decimal arithmetic can represent
    """
    try:
        with localcontext() as ctx:
            ctx.prec = PRECISION
            return _simulate(to_decimal(amount), to_decimal(annual_rate_percent), term_months)
    except (Overflow, InvalidOperation, DivisionByZero) as e:
        raise LoanOutOfRange("Loan amount, rate or term is out of range") from e


def _simulate(principal: Decimal, rate: Decimal, term_months: int) -> LoanTerms:
    if principal <= 0:
        raise InvalidAmount("Loan amount must be greater than 0")
    if rate < 0:
        raise InvalidRate("Interest rate cannot be negative")
    if term_months <= 0:
        raise InvalidTerm("Loan term must be greater than 0 months")

    if rate == 0:
        return LoanTerms(
            monthly_payment=round_money(principal / term_months),
            total_to_pay=round_money(principal),
            total_interest=ZERO,
            effective_annual_rate=ZERO,
        )

    r = monthly_rate(rate)
    growth = (1 + r) ** term_months
    monthly_payment = principal * (r * growth) / (growth - 1)

    total_to_pay = monthly_payment * term_months
    total_interest = total_to_pay - principal
    effective_annual_rate = ((1 + r) ** MONTHS_PER_YEAR - 1) * 100

    return LoanTerms(
        monthly_payment=round_money(monthly_payment),
        total_to_pay=round_money(total_to_pay),
        total_interest=round_money(total_interest),
        effective_annual_rate=round_money(effective_annual_rate),
    )


def build_amortization_schedule(
    amount: Numeric,
    annual_rate_percent: Numeric,
    term_months: int,
) -> List[ScheduleRow]:
    """
    Month-by-month split of each installment into interest and principal.

    Interest for a month is the outstanding balance times the monthly rate,
    rounded to cents. The last row absorbs rounding drift so the balance ends
    at exactly zero and the payments add up to total_to_pay.
    """
    terms = simulate_loan(amount, annual_rate_percent, term_months)
    rate = to_decimal(annual_rate_percent)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        r = monthly_rate(rate)
        balance = round_money(to_decimal(amount))

        rows = []
        for month in range(1, term_months + 1):
            if month == term_months:
                principal = balance
                payment = terms.total_to_pay - terms.monthly_payment * (term_months - 1)
                interest = payment - principal
            else:
                interest = round_money(balance * r)
                payment = terms.monthly_payment
                principal = payment - interest

            balance -= principal
            rows.append(
                ScheduleRow(
                    month=month,
                    payment=payment,
                    interest=interest,
                    principal=principal,
                    remaining_balance=balance,
                )
            )

    return rows
