"""
Journal entry validator.

Pure checks over a proposed set of journal lines. Nothing here
touches the database; the lifecycle manager adds the checks
that need it (account exists and is active).

Rules, checked in order, every violation collected:
1. At least one line.
2. Every line references an account.
3. Exactly one of debit/credit is positive; the other is zero.
   Amounts must fit the ledger columns (below MAX_AMOUNT).
4. No account appears on more than one line.
5. Total debits equal total credits to the cent.

Amounts are compared as integer cents so binary floating point
never produces a spurious imbalance (0.1 + 0.2 vs 0.3).
"""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

# Amount columns are Numeric(14, 2)
MAX_AMOUNT = Decimal("1000000000000.00")
MAX_CENTS = int(MAX_AMOUNT * 100)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    errors: list[str] = field(default_factory=list)
    total_debit: Decimal = Decimal("0.00")
    total_credit: Decimal = Decimal("0.00")


def line_value(line, name):
    """Read a field from a line given as a dict or an object."""
    if isinstance(line, dict):
        return line.get(name)
    return getattr(line, name, None)


def to_amount(value) -> Decimal | None:
    """Parse an amount. Blank is zero; None means not a finite number."""
    if value is None or value == "":
        return Decimal(0)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not amount.is_finite():
        return None
    return amount


def to_cents(value) -> int | None:
    """
    Convert an amount to integer cents, rounding half-up.

    Blank values count as zero. Returns None for anything that
    is not a finite number.
    """
    amount = to_amount(value)
    if amount is None:
        return None
    try:
        cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold
        return None
    return int(cents)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def validate_lines(lines) -> ValidationResult:
    """Check a proposed entry; see the module docstring for the rules."""
    lines = list(lines or [])
    if not lines:
        return ValidationResult(
            ok=False, errors=["At least one journal line is required"]
        )

    errors: list[str] = []

    # Rule 2
    for line_no, line in enumerate(lines, start=1):
        if line_value(line, "account_id") in (None, ""):
            errors.append(f"Line {line_no}: an account must be selected")

    # Rule 3
    debit_cents = 0
    credit_cents = 0
    for line_no, line in enumerate(lines, start=1):
        debit = to_amount(line_value(line, "debit"))
        credit = to_amount(line_value(line, "credit"))

        if debit is None:
            errors.append(f"Line {line_no}: debit is not a valid amount")
        if credit is None:
            errors.append(f"Line {line_no}: credit is not a valid amount")
        if debit is None or credit is None:
            continue

        too_large = abs(debit) >= MAX_AMOUNT or abs(credit) >= MAX_AMOUNT
        if not too_large:
            debit = to_cents(debit)
            credit = to_cents(credit)
            # 999999999999.995 rounds up past the limit
            too_large = max(abs(debit), abs(credit)) >= MAX_CENTS
        if too_large:
            errors.append(
                f"Line {line_no}: amounts must be less than {MAX_AMOUNT}"
            )
            continue

        if debit < 0 or credit < 0:
            errors.append(f"Line {line_no}: amounts cannot be negative")
        elif debit > 0 and credit > 0:
            errors.append(
                f"Line {line_no}: enter either a debit or a credit, not both"
            )
        elif debit == 0 and credit == 0:
            errors.append(
                f"Line {line_no}: a debit or credit amount is required"
            )

        debit_cents += max(debit, 0)
        credit_cents += max(credit, 0)

    # Rule 4
    lines_by_account: dict = defaultdict(list)
    for line_no, line in enumerate(lines, start=1):
        account_id = line_value(line, "account_id")
        if account_id not in (None, ""):
            lines_by_account[account_id].append(line_no)
    for account_id, line_nos in lines_by_account.items():
        if len(line_nos) > 1:
            listed = ", ".join(str(n) for n in line_nos)
            errors.append(
                f"Account {account_id} appears on more than one line "
                f"(lines {listed})"
            )

    # Rule 5
    total_debit = from_cents(debit_cents)
    total_credit = from_cents(credit_cents)
    if debit_cents != credit_cents:
        errors.append(
            f"Total debits ({total_debit}) must equal "
            f"total credits ({total_credit})"
        )

    return ValidationResult(
        ok=not errors,
        errors=errors,
        total_debit=total_debit,
        total_credit=total_credit,
    )
