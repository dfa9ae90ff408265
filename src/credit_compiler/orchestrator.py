"""
orchestrator.py – Multi-university analysis run
================================================
analyze_all() walks the profile's target universities one at a time (never
concurrently) so progress reads "school N of M" and the model's rate limits
are respected. Each completed analysis is upserted into the comparison
registry under its resolved name and becomes the displayed result.

The first failure stops the run. Entries saved before it stay in the
registry; the display is cleared and the error message is stored on the
returned state.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from credit_compiler.comparison import AppState, show_result, upsert
from credit_compiler.credit_analyzer import CreditAnalysisAgent
from credit_compiler.errors import CreditCompilerError, ExtractionError
from credit_compiler.models import MAX_AP_COURSES, AcademicProfile, ComparisonEntry, UniversityEntry

logger = logging.getLogger(__name__)

NO_UNIVERSITY_MESSAGE = "Please enter at least one university."
GENERIC_FAILURE_MESSAGE = "An unexpected error occurred while analyzing credits."

ProgressCallback = Callable[[int, int, UniversityEntry], None]


def analyze_all(
    state: AppState,
    profile: AcademicProfile,
    agent: CreditAnalysisAgent,
    on_progress: Optional[ProgressCallback] = None,
) -> AppState:
    """Run one analysis per target university, in input order."""
    targets = profile.targets()
    if targets:
        profile = replace(profile, universities=tuple(targets),
                          university=targets[0].name, residency=targets[0].residency)
    state = show_result(replace(state, profile=profile, loading=True, error=None), None)

    if not targets:
        return replace(state, loading=False, error=NO_UNIVERSITY_MESSAGE)

    total = len(targets)
    try:
        for n, target in enumerate(targets, start=1):
            if on_progress is not None:
                on_progress(n, total, target)
            logger.info("Analyzing school %d of %d: %s", n, total, target.name)

            response = agent.analyze(profile.for_university(target))
            name = response.result.canonical_university_name or target.name
            entry = ComparisonEntry.create(
                university = name,
                residency  = target.residency,
                program    = profile.program,
                result     = response.result,
                sources    = response.sources,
            )
            state = upsert(state, entry)
            state = show_result(state, response.result, response.sources, entry.id)
    except CreditCompilerError as exc:
        logger.error("Batch stopped at school %d of %d: %s", n, total, exc)
        state = show_result(state, None)
        return replace(state, loading=False, error=str(exc) or GENERIC_FAILURE_MESSAGE)

    return replace(state, loading=False)


def apply_extracted_courses(
    profile: AcademicProfile,
    agent: CreditAnalysisAgent,
    image_bytes: bytes,
    mime_type: str,
    limit: int = MAX_AP_COURSES,
) -> tuple[AcademicProfile, Optional[str]]:
    """
    Best-effort score-report import: on failure the profile comes back
    unchanged together with a message for the user.
    """
    profile = replace(profile, score_report_image=image_bytes, score_report_mime_type=mime_type)
    try:
        courses = agent.extract_courses(image_bytes, mime_type)
    except ExtractionError as exc:
        logger.warning("Score report import failed: %s", exc)
        return profile, str(exc)

    updated = profile.with_courses(courses, limit)
    added = len(updated.ap_courses) - len(profile.ap_courses)
    if added < len(courses):
        logger.info("Dropped %d extracted course(s) over the %d-course limit",
                    len(courses) - added, limit)
    return updated, None
