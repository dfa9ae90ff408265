"""
metrics.py – Row selection state and derived credit metrics
===========================================================
The report lets the student tick which credits to count. Transfer credits
start fully selected; summer recommendations are proposals and start
unselected, so they only count once opted in.

  init_selection(result)            → SelectionState for a newly displayed result
  toggle_transfer / toggle_summer   → new SelectionState with one row flipped
  compute_metrics(result, sel)      → CreditMetrics (recomputed on every change)

Formulae
--------
  total_earned  = Σ credit_value(selected transfer) + Σ credit_value(selected summer)
  degree_total  = result.degree_total_credits, or 120 when absent / not positive
  remaining     = max(0, degree_total − total_earned)
  progress_pct  = min(100, 100 × total_earned / degree_total)
  money_saved   = total_earned × (result.estimated_cost_per_credit or 0)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from credit_compiler.models import DEFAULT_DEGREE_CREDITS, AnalysisResult, ComparisonEntry


_CREDIT_RE = re.compile(r"(\d+(\.\d+)?)")


def credit_value(value: Union[str, int, float, None]) -> float:
    """Leading number in a credit-hours field ("approx 20" → 20.0); 0 when absent."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _CREDIT_RE.search(str(value))
    return float(match.group(0)) if match else 0.0


@dataclass(frozen=True)
class SelectionState:
    """Included row indices for the currently displayed result."""
    transfer: frozenset[int] = field(default_factory=frozenset)
    summer:   frozenset[int] = field(default_factory=frozenset)


def init_selection(result: Optional[AnalysisResult]) -> SelectionState:
    if result is None:
        return SelectionState()
    return SelectionState(transfer=frozenset(range(len(result.credits))))


def toggle_transfer(selection: SelectionState, index: int) -> SelectionState:
    return SelectionState(transfer=selection.transfer ^ {index}, summer=selection.summer)


def toggle_summer(selection: SelectionState, index: int) -> SelectionState:
    return SelectionState(transfer=selection.transfer, summer=selection.summer ^ {index})


@dataclass(frozen=True)
class CreditMetrics:
    earned_transfer: float
    earned_summer:   float
    total_earned:    float
    degree_total:    float
    remaining:       float
    progress_pct:    float   # 0–100
    cost_per_credit: float
    money_saved:     float
    currency_symbol: str = "$"


def compute_metrics(result: AnalysisResult, selection: SelectionState) -> CreditMetrics:
    earned_transfer = sum(
        credit_value(item.credit_hours)
        for i, item in enumerate(result.credits)
        if i in selection.transfer
    )
    earned_summer = sum(
        credit_value(item.credit_hours)
        for i, item in enumerate(result.summer_recommendations)
        if i in selection.summer
    )
    total_earned = earned_transfer + earned_summer

    stated = result.degree_total_credits
    degree_total = float(stated) if stated and stated > 0 else float(DEFAULT_DEGREE_CREDITS)
    cost_per_credit = result.estimated_cost_per_credit or 0.0

    return CreditMetrics(
        earned_transfer = earned_transfer,
        earned_summer   = earned_summer,
        total_earned    = total_earned,
        degree_total    = degree_total,
        remaining       = max(0.0, degree_total - total_earned),
        progress_pct    = min(100.0, total_earned / degree_total * 100),
        cost_per_credit = cost_per_credit,
        money_saved     = total_earned * cost_per_credit,
        currency_symbol = result.currency_symbol,
    )


def format_currency(amount: float, symbol: str = "$") -> str:
    """Whole-unit currency string, e.g. 14250.4 → "$14,250"."""
    return f"{symbol}{amount:,.0f}"


def format_credits(value: float) -> str:
    return f"{value:g}"


def comparison_bar_pct(entries: Iterable[ComparisonEntry]) -> dict[str, float]:
    """Each entry's total credits as a % of the largest (floor of 1 credit), keyed by id."""
    values = {e.id: credit_value(e.total_credits) for e in entries}
    top = max([*values.values(), 1.0])
    return {entry_id: min(v / top * 100, 100.0) for entry_id, v in values.items()}
