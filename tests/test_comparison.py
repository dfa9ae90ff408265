"""
Tests for comparison.py: AppState updates and the comparison registry.
"""
from dataclasses import replace

from factories import make_profile, make_result, make_source

from credit_compiler.comparison import (
    AppState,
    clear_error,
    current_university_name,
    find_by_name,
    is_current_saved,
    remove,
    save_current,
    select_active,
    show_result,
    upsert,
)
from credit_compiler.metrics import toggle_transfer
from credit_compiler.models import ComparisonEntry, Residency


def _entry(name: str, total: str = "7", residency: Residency = Residency.IN_STATE) -> ComparisonEntry:
    return ComparisonEntry.create(name, residency, "BS", make_result(name=name, total_credits=total))


class TestUpsert:
    def test_appends_new_name(self):
        state = upsert(upsert(AppState(), _entry("A")), _entry("B"))
        assert [c.university for c in state.comparisons] == ["A", "B"]

    def test_same_name_replaces_in_place(self):
        state = AppState()
        for e in (_entry("A"), _entry("B"), _entry("C")):
            state = upsert(state, e)
        newer = _entry("B", total="30")
        state = upsert(state, newer)
        assert [c.university for c in state.comparisons] == ["A", "B", "C"]
        assert state.comparisons[1].total_credits == "30"
        assert state.comparisons[1].id == newer.id

    def test_names_are_unique_after_many_upserts(self):
        state = AppState()
        for name in ["A", "B", "A", "C", "B", "A"]:
            state = upsert(state, _entry(name))
        names = [c.university for c in state.comparisons]
        assert len(names) == len(set(names)) == 3


class TestRemove:
    def test_removing_active_clears_display(self):
        a, b = _entry("A"), _entry("B")
        state = select_active(upsert(upsert(AppState(), a), b), a.id)
        state = remove(state, a.id)
        assert state.result is None
        assert state.active_id is None
        assert [c.university for c in state.comparisons] == ["B"]

    def test_removing_other_keeps_display(self):
        a, b = _entry("A"), _entry("B")
        state = select_active(upsert(upsert(AppState(), a), b), a.id)
        state = remove(state, b.id)
        assert state.active_id == a.id
        assert state.result is a.result

    def test_unknown_id_is_noop(self):
        state = upsert(AppState(), _entry("A"))
        assert remove(state, "missing").comparisons == state.comparisons


class TestSelectActive:
    def test_displays_entry_and_mirrors_profile(self):
        src = make_source()
        e = ComparisonEntry.create("Rice University", Residency.OUT_OF_STATE, "BS",
                                   make_result(name="Rice University"), (src,))
        state = upsert(AppState(profile=make_profile()), e)
        state = select_active(state, e.id)
        assert state.result is e.result
        assert state.sources == (src,)
        assert state.profile.university == "Rice University"
        assert state.profile.residency == Residency.OUT_OF_STATE

    def test_resets_row_selection(self):
        a, b = _entry("A"), _entry("B")
        state = select_active(upsert(upsert(AppState(), a), b), a.id)
        state = replace(state, selection=toggle_transfer(state.selection, 0))
        state = select_active(state, b.id)
        assert state.selection.transfer == frozenset({0, 1})

    def test_unknown_id_is_noop(self):
        state = AppState()
        assert select_active(state, "nope") is state


class TestSaveCurrent:
    def test_saves_displayed_result_under_resolved_name(self):
        state = show_result(AppState(profile=make_profile()), make_result(name="UT Austin"))
        state = save_current(state)
        assert [c.university for c in state.comparisons] == ["UT Austin"]
        assert state.active_id == state.comparisons[0].id
        assert is_current_saved(state)

    def test_already_saved_is_noop(self):
        state = show_result(AppState(profile=make_profile()), make_result(name="UT Austin"))
        once = save_current(state)
        assert save_current(once) is once

    def test_nothing_displayed_is_noop(self):
        state = AppState(profile=make_profile())
        assert save_current(state) is state

    def test_falls_back_to_entered_name(self):
        state = show_result(AppState(profile=make_profile()), make_result(name=""))
        assert current_university_name(state) == "ut austin"
        assert find_by_name(save_current(state), "ut austin") is not None


class TestErrors:
    def test_clear_error(self):
        assert clear_error(AppState(error="boom")).error is None
