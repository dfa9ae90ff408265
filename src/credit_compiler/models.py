"""
Data models for the College Credit Compiler.

Form input (AcademicProfile and friends) is held in frozen dataclasses so a
submit-time snapshot cannot drift while a batch is running. Everything the
model sends back is validated at the boundary with Pydantic and normalised
into typed records before the rest of the app touches it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


MAX_AP_COURSES = 15
DEFAULT_DEGREE_CREDITS = 120


# ─── Enumerations ────────────────────────────────────────────────────────────

class Residency(str, Enum):
    """Tuition residency status for a target university."""
    IN_STATE     = "In-State"
    OUT_OF_STATE = "Out-of-State"


class DegreeLevel(str, Enum):
    UNDERGRADUATE = "Undergraduate"
    POSTGRADUATE  = "Postgraduate"


# ─── College Board AP catalogue (form picker) ────────────────────────────────

AP_SUBJECTS: list[str] = [
    "AP 2-D Art and Design",
    "AP 3-D Art and Design",
    "AP African American Studies",
    "AP Art History",
    "AP Biology",
    "AP Calculus AB",
    "AP Calculus BC",
    "AP Chemistry",
    "AP Chinese Language and Culture",
    "AP Comparative Government and Politics",
    "AP Computer Science A",
    "AP Computer Science Principles",
    "AP Drawing",
    "AP English Language and Composition",
    "AP English Literature and Composition",
    "AP Environmental Science",
    "AP European History",
    "AP French Language and Culture",
    "AP German Language and Culture",
    "AP Human Geography",
    "AP Italian Language and Culture",
    "AP Japanese Language and Culture",
    "AP Latin",
    "AP Macroeconomics",
    "AP Microeconomics",
    "AP Music Theory",
    "AP Physics 1: Algebra-Based",
    "AP Physics 2: Algebra-Based",
    "AP Physics C: Electricity and Magnetism",
    "AP Physics C: Mechanics",
    "AP Precalculus",
    "AP Psychology",
    "AP Research",
    "AP Seminar",
    "AP Spanish Language and Culture",
    "AP Spanish Literature and Culture",
    "AP Statistics",
    "AP United States Government and Politics",
    "AP United States History",
    "AP World History: Modern",
]


def ap_course_options(names: Iterable[str] = ()) -> list[str]:
    """Picker choices: the catalogue, then any entered or extracted name it lacks."""
    extra = [n for n in dict.fromkeys(names) if n and n not in AP_SUBJECTS]
    return AP_SUBJECTS + extra


# ─── Form input ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class UniversityEntry:
    name:      str
    residency: Residency = Residency.IN_STATE


@dataclass(frozen=True)
class APCourse:
    course_name: str
    score:       str = ""   # "" when unknown; may be "3+" style strings


@dataclass(frozen=True)
class AcademicProfile:
    """
    Snapshot of everything the student entered, taken at submit time.

    ``university`` / ``residency`` hold the institution the prompt is about;
    ``universities`` is the full list the batch iterates over.
    """
    program:                  str
    degree_level:             DegreeLevel = DegreeLevel.UNDERGRADUATE
    university:               str = ""
    residency:                Residency = Residency.IN_STATE
    universities:             tuple[UniversityEntry, ...] = ()
    major:                    str = ""
    minor:                    str = ""
    ap_courses:               tuple[APCourse, ...] = ()
    languages:                str = ""
    community_college:        str = ""           # credits already taken
    target_community_college: str = ""           # future summer classes
    interests:                str = ""
    score_report_image:       Optional[bytes] = field(default=None, repr=False)
    score_report_mime_type:   str = ""

    def targets(self) -> list[UniversityEntry]:
        """Universities to analyse, in input order; blank names are dropped."""
        entries = [u for u in self.universities if u.name.strip()]
        if entries:
            return entries
        if self.university.strip():
            return [UniversityEntry(self.university, self.residency)]
        return []

    def for_university(self, entry: UniversityEntry) -> AcademicProfile:
        return replace(self, university=entry.name, residency=entry.residency)

    def with_courses(
        self, courses: list[APCourse], limit: int = MAX_AP_COURSES
    ) -> AcademicProfile:
        """Append courses, silently dropping whatever does not fit under *limit*."""
        available = max(0, limit - len(self.ap_courses))
        return replace(self, ap_courses=self.ap_courses + tuple(courses[:available]))


# ─── Model output ────────────────────────────────────────────────────────────

def _as_text(value: Any) -> Any:
    """Numbers-as-strings coercion for loosely typed JSON fields."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return value


class CreditItem(BaseModel):
    """One credit the student has already earned (AP, language, prior coursework)."""
    model_config = ConfigDict(frozen=True)

    activity:          str
    university_course: str
    credit_hours:      str = Field(description="Numeric-bearing string, e.g. '3' or 'approx 6'")
    notes:             str

    @field_validator("credit_hours", mode="before")
    @classmethod
    def _coerce_hours(cls, value: Any) -> Any:
        return _as_text(value)


class RecommendedCourse(BaseModel):
    """A proposed future community-college course; counts only when opted in."""
    model_config = ConfigDict(frozen=True)

    cc_course:             str
    university_equivalent: str
    credit_hours:          str
    reason:                str

    @field_validator("credit_hours", mode="before")
    @classmethod
    def _coerce_hours(cls, value: Any) -> Any:
        return _as_text(value)


class AnalysisResult(BaseModel):
    """Validated credit report for one institution; immutable once received."""
    model_config = ConfigDict(frozen=True)

    canonical_university_name: str
    summary:                   str
    credits:                   list[CreditItem]
    summer_recommendations:    list[RecommendedCourse] = Field(default_factory=list)
    total_credits:             str
    degree_total_credits:      Optional[float] = None
    estimated_cost_per_credit: Optional[float] = None
    currency_symbol:           str = "$"

    @field_validator("canonical_university_name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        # The resolved name is the comparison key; compare it without padding.
        return value.strip() if isinstance(value, str) else value

    @field_validator("total_credits", mode="before")
    @classmethod
    def _coerce_total(cls, value: Any) -> Any:
        return _as_text(value)

    @field_validator("summer_recommendations", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("currency_symbol", mode="before")
    @classmethod
    def _default_currency(cls, value: Any) -> Any:
        return value or "$"


class Source(BaseModel):
    """A grounding citation returned alongside a search-augmented answer."""
    model_config = ConfigDict(frozen=True)

    uri:   str
    title: str = ""

    @model_validator(mode="before")
    @classmethod
    def _title_falls_back_to_uri(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("title"):
            data = {**data, "title": data.get("uri", "")}
        return data


@dataclass(frozen=True)
class AnalysisResponse:
    result:  AnalysisResult
    sources: tuple[Source, ...] = ()


# ─── Comparison dashboard ────────────────────────────────────────────────────

@dataclass(frozen=True)
class ComparisonEntry:
    """
    A saved per-institution result. ``university`` (the resolved name) is the
    identity used for de-duplication; ``id`` only addresses UI actions.
    """
    id:            str
    university:    str
    residency:     Residency
    total_credits: str
    program:       str
    created_at:    datetime
    result:        AnalysisResult
    sources:       tuple[Source, ...] = ()

    @classmethod
    def create(
        cls,
        university: str,
        residency: Residency,
        program: str,
        result: AnalysisResult,
        sources: tuple[Source, ...] = (),
    ) -> ComparisonEntry:
        return cls(
            id            = uuid.uuid4().hex,
            university    = university,
            residency     = residency,
            total_credits = result.total_credits,
            program       = program or "General",
            created_at    = datetime.now(),
            result        = result,
            sources       = tuple(sources),
        )


# ─── Response schemas sent to the model ──────────────────────────────────────

ANALYSIS_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "canonical_university_name": {
            "type": "STRING",
            "description": (
                "The official, correctly spelled, full name of the university "
                "(e.g. convert 'ut austin' to 'The University of Texas at Austin')."
            ),
        },
        "summary": {
            "type": "STRING",
            "description": "A friendly, encouraging summary paragraph explaining the overall credit outlook.",
        },
        "credits": {
            "type": "ARRAY",
            "description": "List of individual credit transfer details.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "activity":          {"type": "STRING", "description": "The high school activity, AP course, or interest."},
                    "university_course": {"type": "STRING", "description": "The specific university course code equivalent."},
                    "credit_hours":      {"type": "STRING", "description": "Number of credit hours granted."},
                    "notes":             {"type": "STRING", "description": "Conditions or notes (e.g. 'Requires score of 4')."},
                },
                "required": ["activity", "university_course", "credit_hours", "notes"],
            },
        },
        "summer_recommendations": {
            "type": "ARRAY",
            "description": "Courses to take at the named community college to shorten time to degree.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "cc_course":             {"type": "STRING", "description": "Course code at the community college (e.g. MATH 201)."},
                    "university_equivalent": {"type": "STRING", "description": "The equivalent course it fulfils at the target university."},
                    "credit_hours":          {"type": "STRING", "description": "Estimated credit hours (usually 3 or 4)."},
                    "reason":                {"type": "STRING", "description": "Why this is strategic (e.g. 'Fulfills Core Math Requirement')."},
                },
                "required": ["cc_course", "university_equivalent", "reason", "credit_hours"],
            },
        },
        "total_credits": {
            "type": "STRING",
            "description": "Total estimated credits.",
        },
        "degree_total_credits": {
            "type": "NUMBER",
            "description": "Total credits required to graduate with this degree (e.g. 120 for most Bachelor's).",
        },
        "estimated_cost_per_credit": {
            "type": "NUMBER",
            "description": "Estimated tuition cost per credit hour for the stated residency status.",
        },
        "currency_symbol": {
            "type": "STRING",
            "description": "Currency symbol, usually $.",
        },
    },
    "required": [
        "canonical_university_name",
        "summary",
        "credits",
        "total_credits",
        "degree_total_credits",
        "estimated_cost_per_credit",
    ],
}

EXTRACTION_SCHEMA: dict = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "course_name": {"type": "STRING", "description": "The name of the AP course found."},
            "score":       {"type": "STRING", "description": "The score received (1-5)."},
        },
        "required": ["course_name"],
    },
}
