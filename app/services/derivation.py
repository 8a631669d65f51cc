"""Derived financial fields for schedule of values line items.

Every function here is pure: given the stored inputs of a line item it
returns the denormalized values that are written back next to them.

    revised_value     = scheduled_value + approved_changes
    total_billed      = previous_billed + current_billed
    percent_complete  = total_billed / revised_value * 100   (0 when revised_value <= 0)
    balance_to_finish = revised_value - total_billed
    retainage_held    = total_billed * retainage_percent / 100

Money is quantized to cents before storage; percent complete keeps full
precision so it stays equal to total_billed / revised_value * 100.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from app.errors import ValidationError

DEFAULT_RETAINAGE_PERCENT = Decimal("10")

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")

INPUT_FIELDS = (
    "scheduled_value",
    "approved_changes",
    "previous_billed",
    "current_billed",
    "retainage_percent",
)
DERIVED_FIELDS = (
    "revised_value",
    "total_billed",
    "percent_complete",
    "balance_to_finish",
    "retainage_held",
)


def to_decimal(value, default: Decimal = Decimal("0")) -> Decimal:
    """Coerce a stored or submitted number to Decimal. None and "" use the default."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats keep their shortest repr instead of binary noise
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid numeric value: {value!r}")


def money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineValues:
    revised_value: Decimal
    total_billed: Decimal
    percent_complete: Decimal
    balance_to_finish: Decimal
    retainage_held: Decimal

    def as_row(self) -> dict:
        """Column values ready for a Supabase update (JSON numbers)."""
        return {name: float(getattr(self, name)) for name in DERIVED_FIELDS}


def derive_line_values(
    scheduled_value,
    approved_changes=0,
    previous_billed=0,
    current_billed=0,
    retainage_percent=DEFAULT_RETAINAGE_PERCENT,
) -> LineValues:
    scheduled = to_decimal(scheduled_value)
    changes = to_decimal(approved_changes)
    previous = to_decimal(previous_billed)
    current = to_decimal(current_billed)
    retainage = to_decimal(retainage_percent, DEFAULT_RETAINAGE_PERCENT)

    revised = money(scheduled + changes)
    billed = money(previous + current)
    if revised > 0:
        percent = billed / revised * HUNDRED
    else:
        percent = Decimal("0")

    return LineValues(
        revised_value=revised,
        total_billed=billed,
        percent_complete=percent,
        balance_to_finish=money(revised - billed),
        retainage_held=money(billed * retainage / HUNDRED),
    )


def derive_from_row(row: dict) -> LineValues:
    """Recompute derived values from a stored sov_line_items row."""
    return derive_line_values(
        row.get("scheduled_value"),
        row.get("approved_changes"),
        row.get("previous_billed"),
        row.get("current_billed"),
        row.get("retainage_percent"),
    )


def opening_values(scheduled_value) -> dict:
    """Derived columns for a freshly created line with no billing history."""
    value = float(money(to_decimal(scheduled_value)))
    return {
        "scheduled_value": value,
        "revised_value": value,
        "balance_to_finish": value,
    }


def contract_total(rows: list[dict]) -> Decimal:
    """Headline contract total: the sum of scheduled (not revised) values."""
    return money(sum((to_decimal(r.get("scheduled_value")) for r in rows), Decimal("0")))


def schedule_summary(rows: list[dict]) -> dict:
    """Roll up line items so callers can show original and revised totals side by side."""
    def total(field: str) -> Decimal:
        return money(sum((to_decimal(r.get(field)) for r in rows), Decimal("0")))

    revised = total("revised_value")
    billed = total("total_billed")
    percent = billed / revised * HUNDRED if revised > 0 else Decimal("0")
    return {
        "scheduled_value": float(contract_total(rows)),
        "approved_changes": float(total("approved_changes")),
        "revised_value": float(revised),
        "total_billed": float(billed),
        "percent_complete": float(percent),
        "balance_to_finish": float(total("balance_to_finish")),
        "retainage_held": float(total("retainage_held")),
    }
