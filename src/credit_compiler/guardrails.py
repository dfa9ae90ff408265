"""
guardrails.py – Input validation and output verification
========================================================
Checks run on each side of the model call.

Guardrail levels
----------------
BLOCK   – Hard-stop: the analysis does not run.
WARN    – Soft-stop: the analysis proceeds with a visible warning.
INFO    – Advisory: shown next to the report.

Guards implemented
------------------
Profile guards (before analysis):
  G-01  At least one university entered
  G-02  Intended program is non-empty
  G-03  No more than MAX_AP_COURSES AP courses
  G-04  AP scores, when given, contain a 1–5 score
  G-05  AP rows without a course name are ignored
  G-06  Duplicate university entries

Result guards (after analysis):
  G-07  Credit hours with no numeric value count as 0
  G-08  Degree total missing → 120 assumed
  G-09  Cost per credit missing → savings shown as 0
  G-10  Citations must be http(s) URLs
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from credit_compiler.models import (
    DEFAULT_DEGREE_CREDITS,
    MAX_AP_COURSES,
    AcademicProfile,
    AnalysisResult,
    Source,
)


# ─── Enums & data models ─────────────────────────────────────────────────────

class GuardrailLevel(str, Enum):
    BLOCK = "BLOCK"
    WARN  = "WARN"
    INFO  = "INFO"


@dataclass
class GuardrailViolation:
    code:    str
    level:   GuardrailLevel
    message: str
    field:   str = ""   # which field triggered the violation


@dataclass
class GuardrailResult:
    passed:     bool
    violations: list[GuardrailViolation] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return any(v.level == GuardrailLevel.BLOCK for v in self.violations)

    @property
    def warnings(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.WARN]

    @property
    def infos(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.INFO]

    def summary(self) -> str:
        if not self.violations:
            return "✅ All guardrails passed."
        icon = {GuardrailLevel.BLOCK: "🚫", GuardrailLevel.WARN: "⚠️", GuardrailLevel.INFO: "ℹ️"}
        return "\n".join(f"{icon[v.level]} [{v.code}] {v.message}" for v in self.violations)


def _result(violations: list[GuardrailViolation]) -> GuardrailResult:
    return GuardrailResult(
        passed=not any(v.level == GuardrailLevel.BLOCK for v in violations),
        violations=violations,
    )


_AP_SCORE = re.compile(r"^\s*[1-5]\s*\+?\s*$")
_NUMBER = re.compile(r"\d")


# ─── Guardrail checks ─────────────────────────────────────────────────────────

class ProfileGuardrails:
    """G-01 – G-06: Validates an AcademicProfile before any request is made."""

    def __init__(self, max_ap_courses: int = MAX_AP_COURSES) -> None:
        self.max_ap_courses = max_ap_courses

    def check(self, profile: AcademicProfile) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        # G-01 At least one university
        targets = profile.targets()
        if not targets:
            violations.append(GuardrailViolation(
                code="G-01", level=GuardrailLevel.BLOCK, field="universities",
                message="Please enter at least one university.",
            ))

        # G-02 Intended program
        if not profile.program.strip():
            violations.append(GuardrailViolation(
                code="G-02", level=GuardrailLevel.BLOCK, field="program",
                message="Intended degree program must not be empty.",
            ))

        # G-03 Course cap
        if len(profile.ap_courses) > self.max_ap_courses:
            violations.append(GuardrailViolation(
                code="G-03", level=GuardrailLevel.BLOCK, field="ap_courses",
                message=f"At most {self.max_ap_courses} AP courses can be analysed "
                        f"({len(profile.ap_courses)} entered).",
            ))

        for course in profile.ap_courses:
            # G-04 Score shape
            if course.score and not _AP_SCORE.match(course.score):
                violations.append(GuardrailViolation(
                    code="G-04", level=GuardrailLevel.WARN, field="ap_courses",
                    message=f"Score '{course.score}' for {course.course_name or 'an AP course'} "
                            "is not an AP score (1–5).",
                ))
            # G-05 Blank course name
            if not course.course_name.strip():
                violations.append(GuardrailViolation(
                    code="G-05", level=GuardrailLevel.WARN, field="ap_courses",
                    message="An AP course row has no course name and will be ignored.",
                ))

        # G-06 Duplicate universities
        seen: set[str] = set()
        for entry in targets:
            key = entry.name.strip().lower()
            if key in seen:
                violations.append(GuardrailViolation(
                    code="G-06", level=GuardrailLevel.WARN, field="universities",
                    message=f"'{entry.name}' is listed more than once; the later analysis "
                            "replaces the earlier one.",
                ))
            seen.add(key)

        return _result(violations)


class ResultGuardrails:
    """G-07 – G-10: Verifies an AnalysisResult and its citations."""

    def check(self, result: AnalysisResult, sources: Sequence[Source] = ()) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        # G-07 Non-numeric credit hours
        rows = [(c.activity, c.credit_hours) for c in result.credits]
        rows += [(r.cc_course, r.credit_hours) for r in result.summer_recommendations]
        for label, hours in rows:
            if not _NUMBER.search(hours):
                violations.append(GuardrailViolation(
                    code="G-07", level=GuardrailLevel.WARN, field="credit_hours",
                    message=f"Credit hours for '{label}' ('{hours}') have no number and count as 0.",
                ))

        # G-08 Degree total
        if not result.degree_total_credits or result.degree_total_credits <= 0:
            violations.append(GuardrailViolation(
                code="G-08", level=GuardrailLevel.INFO, field="degree_total_credits",
                message=f"Degree credit requirement not found; assuming {DEFAULT_DEGREE_CREDITS}.",
            ))

        # G-09 Cost per credit
        if not result.estimated_cost_per_credit:
            violations.append(GuardrailViolation(
                code="G-09", level=GuardrailLevel.INFO, field="estimated_cost_per_credit",
                message="Tuition per credit not found; savings are shown as 0.",
            ))

        # G-10 Citation URLs
        for s in sources:
            if not s.uri.lower().startswith(("https://", "http://")):
                violations.append(GuardrailViolation(
                    code="G-10", level=GuardrailLevel.WARN, field="sources",
                    message=f"Citation '{s.title}' has a non-web address and was not verified.",
                ))

        return _result(violations)


# ─── Convenience façade ───────────────────────────────────────────────────────

class GuardrailsPipeline:
    """
    Single entry-point for both sides of the model call.

    Usage::

        gp = GuardrailsPipeline()
        result = gp.check_profile(profile)           # before analysis
        result = gp.check_result(analysis, sources)  # after analysis
    """

    def __init__(self, max_ap_courses: int = MAX_AP_COURSES):
        self.profile_guard = ProfileGuardrails(max_ap_courses)
        self.result_guard  = ResultGuardrails()

    def check_profile(self, profile: AcademicProfile) -> GuardrailResult:
        return self.profile_guard.check(profile)

    def check_result(self, result: AnalysisResult, sources: Sequence[Source] = ()) -> GuardrailResult:
        return self.result_guard.check(result, sources)

    def merge(self, *results: GuardrailResult) -> GuardrailResult:
        """Merge multiple GuardrailResult objects into one."""
        all_v = []
        for r in results:
            all_v.extend(r.violations)
        return _result(all_v)
