"""
Smoke tests for guardrails pipeline.
Run: python -m pytest tests/ -v
"""
import sys
import os

# Ensure src is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from credit_compiler.guardrails import (
    GuardrailLevel,
    GuardrailsPipeline,
    ProfileGuardrails,
    ResultGuardrails,
)
from credit_compiler.models import APCourse, Source
from factories import make_profile, make_result


def _codes(result):
    return [v.code for v in result.violations]


class TestProfileGuardrails:
    def setup_method(self):
        self.guard = ProfileGuardrails(max_ap_courses=15)

    def test_clean_profile_passes(self):
        result = self.guard.check(make_profile())
        assert result.passed
        assert result.violations == []

    def test_g01_no_university_blocks(self):
        result = self.guard.check(make_profile(universities=["  "]))
        assert result.blocked
        assert "G-01" in _codes(result)

    def test_g02_empty_program_blocks(self):
        result = self.guard.check(make_profile(program=" "))
        assert result.blocked
        assert "G-02" in _codes(result)

    def test_g03_too_many_courses_blocks(self):
        courses = [APCourse(f"AP {i}", "4") for i in range(16)]
        result = self.guard.check(make_profile(ap_courses=courses))
        assert "G-03" in _codes(result)
        assert result.blocked

    def test_g03_exactly_at_limit_passes(self):
        courses = [APCourse(f"AP {i}", "4") for i in range(15)]
        assert "G-03" not in _codes(self.guard.check(make_profile(ap_courses=courses)))

    def test_g04_bad_score_warns(self):
        result = self.guard.check(make_profile(ap_courses=[APCourse("AP Biology", "seven")]))
        assert result.warnings[0].code == "G-04"
        assert result.passed

    def test_g04_accepts_plus_scores(self):
        result = self.guard.check(make_profile(ap_courses=[APCourse("AP Biology", "3+")]))
        assert "G-04" not in _codes(result)

    def test_g05_blank_course_name_warns(self):
        result = self.guard.check(make_profile(ap_courses=[APCourse("", "5")]))
        assert "G-05" in _codes(result)

    def test_g06_duplicate_university_warns(self):
        result = self.guard.check(make_profile(universities=["UVA", "uva "]))
        dup = [v for v in result.violations if v.code == "G-06"]
        assert dup and dup[0].level == GuardrailLevel.WARN


class TestResultGuardrails:
    def setup_method(self):
        self.guard = ResultGuardrails()

    def test_complete_result_passes_clean(self):
        assert self.guard.check(make_result(), [Source(uri="https://a.edu", title="A")]).violations == []

    def test_g07_non_numeric_hours(self):
        assert "G-07" in _codes(self.guard.check(make_result(hours=("varies",))))

    def test_g08_missing_degree_total_is_info(self):
        result = self.guard.check(make_result(degree_total=None))
        assert result.infos[0].code == "G-08"
        assert result.passed

    def test_g09_missing_cost_is_info(self):
        assert "G-09" in _codes(self.guard.check(make_result(cost=None)))

    def test_g10_non_web_citation(self):
        result = self.guard.check(make_result(), [Source(uri="vertexaisearch:abc", title="x")])
        assert "G-10" in _codes(result)


class TestPipeline:
    def test_merge_keeps_all_violations(self):
        gp = GuardrailsPipeline()
        merged = gp.merge(
            gp.check_profile(make_profile(universities=[])),
            gp.check_result(make_result(cost=None)),
        )
        assert set(_codes(merged)) == {"G-01", "G-09"}
        assert merged.blocked

    def test_summary_lists_codes(self):
        gp = GuardrailsPipeline()
        assert "[G-02]" in gp.check_profile(make_profile(program="")).summary()
        assert gp.check_profile(make_profile()).summary().endswith("All guardrails passed.")
