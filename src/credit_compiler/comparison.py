"""
comparison.py – Application state and the comparison registry
==============================================================
AppState is an immutable snapshot of everything the UI shows: the submitted
profile, saved comparison entries, the active (displayed) result with its
citations and row selection, plus loading / error flags. Every update is a
pure function returning a new AppState.

Registry rules
--------------
  • The resolved university name is the identity key: upserting an entry
    whose name is already saved replaces it in place (same position).
  • Removing the active entry clears the display; it never falls back to
    another entry.
  • Selecting an entry displays its stored result and citations and mirrors
    its university / residency into the profile context.
  • Whenever the displayed result changes, row selection is reset.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from credit_compiler.metrics import SelectionState, init_selection
from credit_compiler.models import (
    AcademicProfile,
    AnalysisResult,
    ComparisonEntry,
    Source,
)


@dataclass(frozen=True)
class AppState:
    profile:     Optional[AcademicProfile] = None
    comparisons: tuple[ComparisonEntry, ...] = ()
    active_id:   Optional[str] = None
    result:      Optional[AnalysisResult] = None
    sources:     tuple[Source, ...] = ()
    selection:   SelectionState = field(default_factory=SelectionState)
    loading:     bool = False
    error:       Optional[str] = None


# ─── Lookups ──────────────────────────────────────────────────────────────────

def find_by_name(state: AppState, university: str) -> Optional[ComparisonEntry]:
    return next((c for c in state.comparisons if c.university == university), None)


def get_entry(state: AppState, entry_id: str) -> Optional[ComparisonEntry]:
    return next((c for c in state.comparisons if c.id == entry_id), None)


def current_university_name(state: AppState) -> str:
    """Resolved name of the displayed result, else the profile's entered name."""
    if state.result is not None and state.result.canonical_university_name:
        return state.result.canonical_university_name
    return state.profile.university if state.profile is not None else ""


def is_current_saved(state: AppState) -> bool:
    if state.result is None:
        return False
    return find_by_name(state, current_university_name(state)) is not None


# ─── Updates ──────────────────────────────────────────────────────────────────

def show_result(
    state: AppState,
    result: Optional[AnalysisResult],
    sources: tuple[Source, ...] = (),
    active_id: Optional[str] = None,
) -> AppState:
    """Display *result* (or nothing) and reset row selection for it."""
    return replace(
        state,
        result=result,
        sources=tuple(sources),
        active_id=active_id,
        selection=init_selection(result),
    )


def upsert(state: AppState, entry: ComparisonEntry) -> AppState:
    comparisons = list(state.comparisons)
    for i, existing in enumerate(comparisons):
        if existing.university == entry.university:
            comparisons[i] = entry
            break
    else:
        comparisons.append(entry)
    return replace(state, comparisons=tuple(comparisons))


def remove(state: AppState, entry_id: str) -> AppState:
    state = replace(state, comparisons=tuple(c for c in state.comparisons if c.id != entry_id))
    if state.active_id == entry_id:
        state = show_result(state, None)
    return state


def select_active(state: AppState, entry_id: str) -> AppState:
    entry = get_entry(state, entry_id)
    if entry is None:
        return state
    state = show_result(state, entry.result, entry.sources, entry.id)
    if state.profile is not None:
        state = replace(
            state,
            profile=replace(state.profile, university=entry.university, residency=entry.residency),
        )
    return state


def save_current(state: AppState) -> AppState:
    """Manual "add to comparison" for the displayed result; no-op if already saved."""
    if state.result is None or state.profile is None or not state.profile.university:
        return state
    name = current_university_name(state)
    if find_by_name(state, name) is not None:
        return state
    entry = ComparisonEntry.create(
        university = name,
        residency  = state.profile.residency,
        program    = state.profile.program,
        result     = state.result,
        sources    = state.sources,
    )
    return replace(state, comparisons=state.comparisons + (entry,), active_id=entry.id)


def clear_error(state: AppState) -> AppState:
    return replace(state, error=None)
