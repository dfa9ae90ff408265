"""
Tests for metrics.py: credit parsing, row selection and derived metrics.
"""
import pytest

from factories import make_result

from credit_compiler.comparison import AppState
from credit_compiler.metrics import (
    SelectionState,
    comparison_bar_pct,
    compute_metrics,
    credit_value,
    format_credits,
    format_currency,
    init_selection,
    toggle_summer,
    toggle_transfer,
)
from credit_compiler.models import ComparisonEntry, Residency


class TestCreditValue:
    @pytest.mark.parametrize("raw, expected", [
        ("3", 3.0),
        ("3.5", 3.5),
        ("approx 20", 20.0),
        ("6-8", 6.0),
        ("N/A", 0.0),
        ("", 0.0),
        (None, 0.0),
        (4, 4.0),
    ])
    def test_parses_leading_number(self, raw, expected):
        assert credit_value(raw) == expected


class TestSelection:
    def test_initial_selection_all_transfer_no_summer(self):
        r = make_result(hours=("3", "4", "2"), summer_hours=("3",))
        sel = init_selection(r)
        assert sel.transfer == frozenset({0, 1, 2})
        assert sel.summer == frozenset()

    def test_no_result_empty_selection(self):
        assert init_selection(None) == SelectionState()

    def test_toggle_twice_restores(self):
        sel = init_selection(make_result())
        assert toggle_transfer(toggle_transfer(sel, 0), 0) == sel
        assert toggle_summer(toggle_summer(sel, 1), 1) == sel

    def test_toggle_does_not_mutate(self):
        sel = init_selection(make_result())
        toggle_transfer(sel, 0)
        assert 0 in sel.transfer


class TestComputeMetrics:
    def test_initial_total_is_sum_of_transfer_rows(self):
        r = make_result(hours=("3", "4"))
        m = compute_metrics(r, init_selection(r))
        assert m.total_earned == 7
        assert m.remaining == 113

    def test_deselect_row_drops_its_credits(self):
        r = make_result(hours=("3", "4"))
        m = compute_metrics(r, toggle_transfer(init_selection(r), 0))
        assert m.total_earned == 4

    def test_summer_counts_only_when_opted_in(self):
        r = make_result(hours=("3",), summer_hours=("4",))
        sel = init_selection(r)
        assert compute_metrics(r, sel).earned_summer == 0
        m = compute_metrics(r, toggle_summer(sel, 0))
        assert m.earned_summer == 4
        assert m.total_earned == 7

    @pytest.mark.parametrize("transfer, summer, expected", [
        (set(), set(), 0),
        (set(), {1}, 2),
        ({0, 2}, set(), 4),
        ({1}, {0}, 7),
        ({0, 1, 2}, {0, 1}, 13),
    ])
    def test_total_is_sum_over_selected_subset(self, transfer, summer, expected):
        r = make_result(hours=("3", "4", "1"), summer_hours=("3", "2"))
        sel = SelectionState(transfer=frozenset(transfer), summer=frozenset(summer))
        m = compute_metrics(r, sel)
        assert m.total_earned == expected
        assert m.earned_transfer + m.earned_summer == expected

    def test_absent_degree_total_assumes_120(self):
        r = make_result(hours=("30",), degree_total=None)
        m = compute_metrics(r, init_selection(r))
        assert m.degree_total == 120
        assert m.progress_pct == pytest.approx(25.0)

    def test_zero_degree_total_assumes_120(self):
        r = make_result(degree_total=0)
        assert compute_metrics(r, init_selection(r)).degree_total == 120

    def test_progress_and_remaining_are_clamped(self):
        r = make_result(hours=("100", "50"), degree_total=120)
        m = compute_metrics(r, init_selection(r))
        assert m.progress_pct == 100
        assert m.remaining == 0

    def test_money_saved(self):
        r = make_result(hours=("3", "4"), cost=500)
        assert compute_metrics(r, init_selection(r)).money_saved == 3500

    def test_missing_cost_saves_nothing(self):
        r = make_result(cost=None)
        m = compute_metrics(r, init_selection(r))
        assert m.cost_per_credit == 0
        assert m.money_saved == 0

    def test_unparseable_hours_count_as_zero(self):
        r = make_result(hours=("3", "varies"))
        assert compute_metrics(r, init_selection(r)).total_earned == 3


class TestFormatting:
    def test_currency_rounds_to_whole_units(self):
        assert format_currency(14250.4) == "$14,250"
        assert format_currency(1000, "£") == "£1,000"

    def test_credits_drop_trailing_zero(self):
        assert format_credits(7.0) == "7"
        assert format_credits(7.5) == "7.5"


class TestComparisonBars:
    def test_relative_to_largest(self):
        a = ComparisonEntry.create("A", Residency.IN_STATE, "BS", make_result(total_credits="30"))
        b = ComparisonEntry.create("B", Residency.IN_STATE, "BS", make_result(total_credits="15"))
        pct = comparison_bar_pct(AppState(comparisons=(a, b)).comparisons)
        assert pct[a.id] == 100
        assert pct[b.id] == 50

    def test_all_zero_does_not_divide_by_zero(self):
        a = ComparisonEntry.create("A", Residency.IN_STATE, "BS", make_result(total_credits="unknown"))
        assert comparison_bar_pct([a]) == {a.id: 0.0}
