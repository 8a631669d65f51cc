"""Read-only access to the estimate tables that seed a schedule of values."""
from dataclasses import dataclass, field
from decimal import Decimal

from app.database import get_supabase, execute
from app.services.derivation import to_decimal, money, opening_values


@dataclass
class EstimateSource:
    estimate_id: str
    line_items: list[dict] = field(default_factory=list)
    alternates: list[dict] = field(default_factory=list)
    overhead_profit: Decimal = Decimal("0")
    contingency: Decimal = Decimal("0")

    def opening_total(self) -> Decimal:
        """Included lines, +add / -deduct alternates, overhead/profit and contingency."""
        total = sum((to_decimal(item.get("total")) for item in self.line_items), Decimal("0"))
        for alt in self.alternates:
            amount = to_decimal(alt.get("amount"))
            total += amount if alt.get("type") == "add" else -amount
        return money(total + self.overhead_profit + self.contingency)


def load_estimate(estimate_id: str) -> EstimateSource:
    db = get_supabase()

    items = execute(
        db.table("estimate_line_items")
        .select("*")
        .eq("estimate_id", estimate_id)
        .eq("include_in_sov", True)
        .eq("is_optional", False)
        .order("sort_order")
    )
    alternates = execute(
        db.table("estimate_alternates")
        .select("*")
        .eq("estimate_id", estimate_id)
        .eq("status", "accepted")
    )
    ohp = execute(
        db.table("estimate_overhead_profit")
        .select("total")
        .eq("estimate_id", estimate_id)
        .limit(1)
    )
    contingency = execute(
        db.table("estimate_contingency")
        .select("calculated_amount")
        .eq("estimate_id", estimate_id)
        .limit(1)
    )

    return EstimateSource(
        estimate_id=estimate_id,
        line_items=items.data or [],
        alternates=alternates.data or [],
        overhead_profit=to_decimal(ohp.data[0].get("total")) if ohp.data else Decimal("0"),
        contingency=(
            to_decimal(contingency.data[0].get("calculated_amount"))
            if contingency.data
            else Decimal("0")
        ),
    )


def _line(sov_id: str, line_number: str, sort_order: int, description: str, amount,
          cost_code_id=None, estimate_line_item_id=None) -> dict:
    # Bulk inserts need every row to carry the same columns
    return {
        "sov_id": sov_id,
        "line_number": line_number,
        "cost_code_id": cost_code_id,
        "description": description,
        "estimate_line_item_id": estimate_line_item_id,
        "sort_order": sort_order,
        **opening_values(amount),
    }


def build_line_items(sov_id: str, source: EstimateSource) -> list[dict]:
    """Line item rows for a schedule generated from an estimate, in billing order."""
    rows: list[dict] = []
    line_number = 1

    for item in source.line_items:
        rows.append(_line(
            sov_id,
            str(line_number),
            line_number,
            item.get("sov_description") or item.get("description") or "",
            item.get("total"),
            cost_code_id=item.get("cost_code_id"),
            estimate_line_item_id=item.get("id"),
        ))
        line_number += 1

    for alt in source.alternates:
        amount = to_decimal(alt.get("amount"))
        if alt.get("type") == "deduct":
            amount = -amount
        rows.append(_line(
            sov_id,
            f"ALT-{alt.get('alternate_number') or line_number}",
            line_number,
            f"Alternate: {alt.get('name', '')}",
            amount,
            cost_code_id=alt.get("cost_code_id"),
        ))
        line_number += 1

    if source.overhead_profit > 0:
        rows.append(_line(sov_id, str(line_number), line_number, "Overhead & Profit",
                          source.overhead_profit))
        line_number += 1

    if source.contingency > 0:
        rows.append(_line(sov_id, str(line_number), line_number, "Contingency",
                          source.contingency))

    return rows
