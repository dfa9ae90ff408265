"""
End-to-end tests for the multi-university run and the score-report import,
driven through a real CreditAnalysisAgent with a scripted Gemini client.
"""
from types import SimpleNamespace

from factories import FakeOpenAIClient, make_profile, make_settings, result_dict

from credit_compiler.comparison import AppState, is_current_saved, save_current
from credit_compiler.credit_analyzer import (
    EMPTY_RESPONSE_MESSAGE,
    MISSING_CREDENTIAL_MESSAGE,
    CreditAnalysisAgent,
)
from credit_compiler.models import APCourse, Residency, UniversityEntry
from credit_compiler.orchestrator import (
    NO_UNIVERSITY_MESSAGE,
    analyze_all,
    apply_extracted_courses,
)


class TestAnalyzeAll:
    def test_resolved_name_becomes_entry(self, gemini_agent_factory):
        agent, _ = gemini_agent_factory(result_dict(name="The University of Texas at Austin"))
        state = analyze_all(AppState(), make_profile(universities=["ut austin"]), agent)

        assert [c.university for c in state.comparisons] == ["The University of Texas at Austin"]
        assert state.active_id == state.comparisons[0].id
        assert state.result.canonical_university_name == "The University of Texas at Austin"
        assert state.selection.transfer == frozenset({0, 1})
        assert not state.loading
        assert state.error is None
        assert is_current_saved(state)

    def test_runs_in_input_order_with_progress(self, gemini_agent_factory):
        agent, client = gemini_agent_factory(result_dict(name="A"), result_dict(name="B"))
        seen = []
        state = analyze_all(
            AppState(),
            make_profile(universities=["a", UniversityEntry("b", Residency.OUT_OF_STATE)]),
            agent,
            on_progress=lambda n, total, target: seen.append((n, total, target.name)),
        )
        assert seen == [(1, 2, "a"), (2, 2, "b")]
        assert [c.university for c in state.comparisons] == ["A", "B"]
        assert state.comparisons[1].residency == Residency.OUT_OF_STATE
        assert "Out-of-State" in client.calls[1]["contents"]
        assert state.result.canonical_university_name == "B"

    def test_blank_canonical_name_falls_back_to_input(self, gemini_agent_factory):
        agent, _ = gemini_agent_factory(result_dict(name="  "))
        state = analyze_all(AppState(), make_profile(universities=["Rice"]), agent)
        assert state.comparisons[0].university == "Rice"

    def test_rerun_replaces_entry(self, gemini_agent_factory):
        agent, _ = gemini_agent_factory(result_dict(name="A", total_credits="6"),
                                        result_dict(name="A", total_credits="12"))
        state = analyze_all(AppState(), make_profile(universities=["a"]), agent)
        state = analyze_all(state, make_profile(universities=["a"]), agent)
        assert len(state.comparisons) == 1
        assert state.comparisons[0].total_credits == "12"

    def test_failure_stops_batch_and_keeps_earlier_entries(self, gemini_agent_factory):
        agent, client = gemini_agent_factory(
            result_dict(name="First University"),
            RuntimeError("Search quota exceeded"),
            result_dict(name="Never Reached"),
        )
        state = analyze_all(AppState(), make_profile(universities=["first", "second", "third"]), agent)

        assert [c.university for c in state.comparisons] == ["First University"]
        assert state.result is None
        assert state.active_id is None
        assert not state.loading
        assert state.error == "Search quota exceeded"
        assert len(client.calls) == 2

    def test_no_targets_sets_error(self, gemini_agent_factory):
        agent, client = gemini_agent_factory()
        state = analyze_all(AppState(), make_profile(universities=["", "   "]), agent)
        assert state.error == NO_UNIVERSITY_MESSAGE
        assert not state.loading
        assert client.calls == []

    def test_missing_credential_surfaces_as_error(self, unconfigured_agent):
        state = analyze_all(AppState(), make_profile(), unconfigured_agent)
        assert state.error == MISSING_CREDENTIAL_MESSAGE
        assert state.comparisons == ()

    def test_padded_resolved_name_counts_as_saved(self, gemini_agent_factory):
        agent, _ = gemini_agent_factory(result_dict(name="The University of Texas at Austin "))
        state = analyze_all(AppState(), make_profile(), agent)
        assert is_current_saved(state)
        state = save_current(state)
        assert [c.university for c in state.comparisons] == ["The University of Texas at Austin"]

    def test_reply_without_choices_keeps_earlier_entries(self):
        client = FakeOpenAIClient(result_dict(name="First"), SimpleNamespace(choices=[]))
        agent = CreditAnalysisAgent(make_settings(azure=True), openai_client=client)
        state = analyze_all(AppState(), make_profile(universities=["a", "b"]), agent)
        assert [c.university for c in state.comparisons] == ["First"]
        assert state.error == EMPTY_RESPONSE_MESSAGE
        assert state.result is None
        assert not state.loading

    def test_previous_error_cleared_on_new_run(self, gemini_agent_factory):
        agent, _ = gemini_agent_factory(result_dict())
        state = analyze_all(AppState(error="old failure"), make_profile(), agent)
        assert state.error is None


class TestApplyExtractedCourses:
    def test_appends_up_to_limit(self, gemini_agent_factory):
        extracted = [{"course_name": f"AP Course {i}", "score": "4"} for i in range(20)]
        agent, _ = gemini_agent_factory(extracted)
        profile, problem = apply_extracted_courses(
            make_profile(ap_courses=[]), agent, b"img", "image/png", limit=15,
        )
        assert problem is None
        assert len(profile.ap_courses) == 15
        assert profile.ap_courses[0] == APCourse("AP Course 0", "4")
        assert profile.score_report_mime_type == "image/png"

    def test_failure_leaves_courses_unchanged(self, gemini_agent_factory):
        agent, _ = gemini_agent_factory("{{not json")
        original = make_profile()
        profile, problem = apply_extracted_courses(original, agent, b"img", "image/png")
        assert problem == "Could not extract data from the file. Please try again or enter manually."
        assert profile.ap_courses == original.ap_courses

    def test_empty_extraction_adds_nothing(self, gemini_agent_factory):
        agent, _ = gemini_agent_factory("")
        original = make_profile()
        profile, problem = apply_extracted_courses(original, agent, b"img", "image/png")
        assert problem is None
        assert profile.ap_courses == original.ap_courses
