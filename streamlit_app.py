# streamlit_app.py – College Credit Compiler
# AI university credit analyzer powered by search-grounded Gemini / Azure OpenAI

import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

# Load .env into os.environ before any SDK or config imports
load_dotenv(override=True)

# make src/ importable without installing the package
sys.path.insert(0, str(Path(__file__).parent / "src"))

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from credit_compiler.comparison import (
    AppState,
    clear_error,
    current_university_name,
    is_current_saved,
    remove,
    save_current,
    select_active,
)
from credit_compiler.config import get_settings
from credit_compiler.credit_analyzer import CreditAnalysisAgent
from credit_compiler.errors import ConfigurationError
from credit_compiler.guardrails import GuardrailLevel, GuardrailsPipeline
from credit_compiler.metrics import (
    comparison_bar_pct,
    compute_metrics,
    format_credits,
    format_currency,
    init_selection,
    toggle_summer,
    toggle_transfer,
)
from credit_compiler.models import (
    AcademicProfile,
    APCourse,
    DegreeLevel,
    Residency,
    UniversityEntry,
    ap_course_options,
)
from credit_compiler.orchestrator import analyze_all, apply_extracted_courses
from credit_compiler.prompt_builder import build_prompt
from credit_compiler.report_export import (
    CSV_FILENAME,
    PDF_FILENAME,
    export_csv,
    generate_report_pdf,
)

# Color constants
INDIGO = "#4F46E5"
INDIGO_DARK = "#312E81"
AMBER = "#F59E0B"
EMERALD = "#10B981"
SLATE = "#CBD5E1"
TEXT_MUTED = "#64748B"

settings = get_settings()
logging.basicConfig(
    level=settings.app.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("credit_compiler.app")


# ─── Page config ─────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="College Credit Compiler",
    page_icon="🎓",
    layout="wide",
)

st.markdown(f"""
<style>
  .cc-banner {{
    background: {INDIGO_DARK}; color: white; padding: 1.2rem 1.5rem;
    border-radius: 12px; display: flex; justify-content: space-between; align-items: center;
  }}
  .cc-banner h2 {{ color: white; margin: 0; }}
  .cc-banner .sub {{ color: #C7D2FE; font-size: 0.85rem; }}
  .cc-banner .total {{ font-size: 2rem; font-weight: 700; text-align: right; }}
  .cc-muted {{ color: {TEXT_MUTED}; font-size: 0.85rem; }}
</style>
""", unsafe_allow_html=True)


# ─── Session state ───────────────────────────────────────────────────────────
if "app_state" not in st.session_state:
    st.session_state["app_state"] = AppState()
    st.session_state["view_version"] = 0       # bumps whenever the displayed report changes
    st.session_state["ap_rows"] = []
    st.session_state["ap_editor_version"] = 0


def _state() -> AppState:
    return st.session_state["app_state"]


def _commit(state: AppState, new_view: bool = False) -> None:
    st.session_state["app_state"] = state
    if new_view:
        st.session_state["view_version"] += 1


@st.cache_resource
def _get_agent() -> CreditAnalysisAgent:
    return CreditAnalysisAgent(settings)


# ─── Callbacks ───────────────────────────────────────────────────────────────

def _on_toggle(kind: str, index: int) -> None:
    state = _state()
    flip = toggle_transfer if kind == "transfer" else toggle_summer
    _commit(replace(state, selection=flip(state.selection, index)))


def _on_select(entry_id: str) -> None:
    _commit(select_active(_state(), entry_id), new_view=True)


def _on_remove(entry_id: str) -> None:
    _commit(remove(_state(), entry_id), new_view=True)


def _on_save() -> None:
    _commit(save_current(_state()))


def _on_dismiss() -> None:
    _commit(clear_error(_state()))


# ─── Form helpers ────────────────────────────────────────────────────────────

def _cell(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def _build_profile(uni_df: pd.DataFrame, ap_df: pd.DataFrame, fields: dict) -> AcademicProfile:
    universities = tuple(
        UniversityEntry(_cell(r.get("University")), Residency(_cell(r.get("Residency")) or Residency.IN_STATE.value))
        for r in uni_df.to_dict("records")
        if _cell(r.get("University"))
    )
    courses = tuple(
        APCourse(_cell(r.get("Course")), _cell(r.get("Score")))
        for r in ap_df.to_dict("records")
        if _cell(r.get("Course")) or _cell(r.get("Score"))
    )
    first = universities[0] if universities else UniversityEntry("")
    return AcademicProfile(
        universities = universities,
        university   = first.name,
        residency    = first.residency,
        ap_courses   = courses,
        **fields,
    )


# ─── Header + sidebar ────────────────────────────────────────────────────────
st.title("🎓 College Credit Compiler")
st.caption("AI University Credit Analyzer — see how your AP scores, languages and "
           "coursework turn into college credit.")

with st.sidebar:
    st.markdown("### ⚙️ Model Services")
    for service, badge in settings.status_summary().items():
        st.markdown(f"**{service}**  \n{badge}")
    if not settings.live_mode:
        st.warning("No model credential found. Set GEMINI_API_KEY (or Azure OpenAI "
                   "variables) in your .env file.")

col_form, col_report = st.columns([5, 7], gap="large")


# ─── Student profile form ────────────────────────────────────────────────────
with col_form:
    st.subheader("Student Profile")
    st.markdown('<span class="cc-muted">Enter your academic details to scout for credits.</span>',
                unsafe_allow_html=True)

    st.markdown("##### 🏫 Target Universities *")
    uni_df = st.data_editor(
        pd.DataFrame([{"University": "", "Residency": Residency.IN_STATE.value}]),
        num_rows="dynamic",
        use_container_width=True,
        key="universities_editor",
        column_config={
            "University": st.column_config.TextColumn("University", help="e.g. UT Austin"),
            "Residency": st.column_config.SelectboxColumn(
                "Residency", options=[r.value for r in Residency], default=Residency.IN_STATE.value,
            ),
        },
    )

    c1, c2 = st.columns(2)
    with c1:
        degree_level = st.selectbox("Degree Level *", [d.value for d in DegreeLevel])
        major = st.text_input("Major", placeholder="e.g. Computer Science")
    with c2:
        program = st.text_input("Intended Degree Program *", placeholder="e.g. B.S. Engineering")
        minor = st.text_input("Minor", placeholder="e.g. Mathematics")

    st.markdown(f"##### 📚 AP Courses (max {settings.app.max_ap_courses})")
    ap_df = st.data_editor(
        pd.DataFrame(st.session_state["ap_rows"] or [{"Course": "", "Score": ""}]),
        num_rows="dynamic",
        use_container_width=True,
        key=f"ap_editor_{st.session_state['ap_editor_version']}",
        column_config={
            "Course": st.column_config.SelectboxColumn(
                "Course", help="College Board AP exam",
                options=ap_course_options(r["Course"] for r in st.session_state["ap_rows"]),
            ),
            "Score": st.column_config.TextColumn("Score", help="1–5; leave blank if unknown"),
        },
    )

    with st.expander("📄 Import AP scores from a score report"):
        upload = st.file_uploader("Score report image", type=["png", "jpg", "jpeg", "webp"])
        if upload is not None and st.button("✨ Extract courses", disabled=_state().loading):
            current = [
                APCourse(_cell(r.get("Course")), _cell(r.get("Score")))
                for r in ap_df.to_dict("records") if _cell(r.get("Course"))
            ]
            base = AcademicProfile(program=program, ap_courses=tuple(current))
            with st.spinner("Reading your score report…"):
                try:
                    updated, problem = apply_extracted_courses(
                        base, _get_agent(), upload.getvalue(), upload.type or "image/png",
                        settings.app.max_ap_courses,
                    )
                except ConfigurationError as exc:
                    updated, problem = base, str(exc)
            if problem:
                st.error(problem)
            else:
                st.session_state["ap_rows"] = [
                    {"Course": c.course_name, "Score": c.score} for c in updated.ap_courses
                ]
                st.session_state["ap_editor_version"] += 1
                st.rerun()

    languages = st.text_area("Languages", placeholder="e.g. Fluent Spanish, 4 years of French")
    community_college = st.text_area("Past Community College Credits",
                                     placeholder="e.g. ENGL 1301 at Austin CC (dual credit)")
    target_cc = st.text_input("Target Community College for Summer Classes",
                              placeholder="e.g. Austin Community College")
    interests = st.text_area("Interests (Sports, Music, etc.)",
                             placeholder="e.g. Varsity soccer, jazz band trumpet")

    form_fields = dict(
        degree_level             = DegreeLevel(degree_level),
        program                  = program.strip(),
        major                    = major.strip(),
        minor                    = minor.strip(),
        languages                = languages.strip(),
        community_college        = community_college.strip(),
        target_community_college = target_cc.strip(),
        interests                = interests.strip(),
    )

    submitted = st.button("🔍 Analyze Credits", type="primary",
                          use_container_width=True, disabled=_state().loading)


# ─── Handle submit ───────────────────────────────────────────────────────────
if submitted:
    profile = _build_profile(uni_df, ap_df, form_fields)
    _check = GuardrailsPipeline(settings.app.max_ap_courses).check_profile(profile)
    with col_form:
        for v in _check.violations:
            if v.level == GuardrailLevel.BLOCK:
                st.error(f"🚫 [{v.code}] {v.message}")
            elif v.level == GuardrailLevel.WARN:
                st.warning(f"⚠️ [{v.code}] {v.message}")

    if not _check.blocked:
        profile = replace(profile, ap_courses=tuple(c for c in profile.ap_courses if c.course_name))
        logger.info("Submitting profile for %d university(ies)", len(profile.targets()))
        with col_report:
            _bar = st.progress(0.0, text="Starting analysis…")

            def _on_progress(n: int, total: int, entry: UniversityEntry) -> None:
                _bar.progress((n - 1) / total, text=f"Analyzing school {n} of {total}: {entry.name}…")

            with st.spinner("Consulting university catalogs…"):
                _commit(analyze_all(_state(), profile, _get_agent(), _on_progress), new_view=True)
            _bar.empty()


state = _state()

# ─── Prompt preview ──────────────────────────────────────────────────────────
with col_form:
    _preview_profile = state.profile or _build_profile(uni_df, ap_df, form_fields)
    with st.expander("🖥️ Agent System Prompt"):
        st.code(build_prompt(_preview_profile).strip(), language="markdown")
        st.caption("Ready to paste into Google AI Studio")


# ─── Report rendering ────────────────────────────────────────────────────────

def _render_tabs(state: AppState) -> None:
    cols = st.columns(min(len(state.comparisons), 4))
    for i, entry in enumerate(state.comparisons):
        with cols[i % len(cols)]:
            st.button(
                f"🏫 {entry.university}\n\n📍 {entry.residency.value}",
                key=f"tab_{entry.id}",
                type="primary" if entry.id == state.active_id else "secondary",
                use_container_width=True,
                on_click=_on_select,
                args=(entry.id,),
            )


def _render_report(state: AppState) -> None:
    result = state.result
    m = compute_metrics(result, state.selection)
    money = lambda v: format_currency(v, m.currency_symbol)
    version = st.session_state["view_version"]

    st.markdown(f"""
    <div class="cc-banner">
      <div><h2>{result.canonical_university_name or "Target University"}</h2>
           <span class="sub">Credit Transfer &amp; Degree Plan Analysis</span></div>
      <div class="total"><span class="sub">TOTAL PROJECTED CREDITS</span><br/>{format_credits(m.total_earned)}</div>
    </div>
    """, unsafe_allow_html=True)
    st.write("")

    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Required for Degree", f"{format_credits(m.degree_total)} cr")
    k2.metric("Transfer / AP", f"-{format_credits(m.earned_transfer)}")
    k3.metric("Summer Courses", f"-{format_credits(m.earned_summer)}")
    k4.metric("Remaining", f"{format_credits(m.remaining)} cr")
    st.progress(m.progress_pct / 100, text=f"{m.progress_pct:.0f}% of degree covered")

    f1, f2 = st.columns([3, 2])
    with f1:
        st.markdown("##### 💰 Estimated Tuition Savings")
        st.markdown(f"<h2 style='color:{EMERALD};margin:0'>{money(m.money_saved)}</h2>",
                    unsafe_allow_html=True)
        st.caption(f"{format_credits(m.total_earned)} credits × {money(m.cost_per_credit)} per credit")
    with f2:
        fig = go.Figure(go.Pie(
            labels=["Transfer / AP", "Summer", "Remaining"],
            values=[m.earned_transfer, m.earned_summer, m.remaining],
            hole=0.6,
            marker=dict(colors=[INDIGO, AMBER, SLATE]),
            sort=False,
        ))
        fig.update_layout(height=180, margin=dict(l=0, r=0, t=0, b=0), showlegend=False)
        st.plotly_chart(fig, use_container_width=True)

    st.markdown("##### 📝 Summary")
    st.write(result.summary)

    if is_current_saved(state):
        st.button("✓ Saved to comparison", disabled=True, key=f"saved_{version}")
    else:
        st.button("➕ Add to comparison", on_click=_on_save, key=f"save_{version}")

    st.markdown("##### ✅ Transfer & AP Credits")
    if not result.credits:
        st.caption("No transferable credits were identified.")
    for i, c in enumerate(result.credits):
        cb, body = st.columns([1, 11])
        with cb:
            st.checkbox("Include", value=i in state.selection.transfer, key=f"transfer_{version}_{i}",
                        on_change=_on_toggle, args=("transfer", i), label_visibility="collapsed")
        with body:
            st.markdown(f"**{c.activity}** → `{c.university_course}` · **{c.credit_hours}** cr  \n"
                        f"<span class='cc-muted'>{c.notes}</span>", unsafe_allow_html=True)

    if result.summer_recommendations:
        st.markdown("##### ☀️ Summer Community College Plan")
        st.caption("Proposed courses — tick the ones you plan to take to count them.")
        for i, r in enumerate(result.summer_recommendations):
            cb, body = st.columns([1, 11])
            with cb:
                st.checkbox("Include", value=i in state.selection.summer, key=f"summer_{version}_{i}",
                            on_change=_on_toggle, args=("summer", i), label_visibility="collapsed")
            with body:
                st.markdown(f"**{r.cc_course}** → `{r.university_equivalent}` · **{r.credit_hours}** cr  \n"
                            f"<span class='cc-muted'>{r.reason}</span>", unsafe_allow_html=True)

    d1, d2 = st.columns(2)
    with d1:
        st.download_button("⬇️ Download CSV", export_csv(result, state.selection),
                           file_name=CSV_FILENAME, mime="text/csv", use_container_width=True)
    with d2:
        st.download_button("⬇️ Download PDF", generate_report_pdf(result, state.selection, state.sources),
                           file_name=PDF_FILENAME, mime="application/pdf", use_container_width=True)

    _checks = GuardrailsPipeline().check_result(result, state.sources)
    if _checks.violations:
        with st.expander(f"ℹ️ Data notes ({len(_checks.violations)})"):
            st.text(_checks.summary())

    if state.sources:
        st.markdown("##### 🔗 Sources")
        for s in state.sources:
            st.markdown(f"- [{s.title}]({s.uri})")


def _render_comparison(state: AppState) -> None:
    st.markdown("---")
    n = len(state.comparisons)
    st.markdown(f"### 📈 College Comparison Tool  \n"
                f"<span class='cc-muted'>{n} {'School' if n == 1 else 'Schools'} Saved</span>",
                unsafe_allow_html=True)

    bar_pct = comparison_bar_pct(state.comparisons)
    for entry in state.comparisons:
        active = entry.id == state.active_id
        name_col, credit_col, act_col = st.columns([6, 2, 2])
        with name_col:
            badge = " · 👁 Viewing" if active else ""
            st.markdown(f"**{entry.university}**{badge}  \n"
                        f"<span class='cc-muted'>{entry.program.upper()} · 📍 {entry.residency.value}</span>",
                        unsafe_allow_html=True)
            st.progress(bar_pct[entry.id] / 100)
        with credit_col:
            st.metric("Est. Credits", entry.total_credits)
        with act_col:
            st.button("View →", key=f"view_{entry.id}", on_click=_on_select, args=(entry.id,))
            st.button("🗑 Remove", key=f"remove_{entry.id}", on_click=_on_remove, args=(entry.id,))

    rows = []
    for entry in state.comparisons:
        em = compute_metrics(entry.result, init_selection(entry.result))
        rows.append({
            "University":      entry.university,
            "Residency":       entry.residency.value,
            "Program":         entry.program,
            "Credits":         em.earned_transfer,
            "Degree Requires": em.degree_total,
            "Progress %":      round(em.progress_pct, 1),
            "Cost / Credit":   format_currency(em.cost_per_credit, em.currency_symbol),
            "Est. Savings":    format_currency(em.money_saved, em.currency_symbol),
        })
    df = pd.DataFrame(rows)

    fig = go.Figure(go.Bar(
        x=df["Credits"], y=df["University"], orientation="h",
        marker_color=[INDIGO if e.id == state.active_id else "#A5B4FC" for e in state.comparisons],
        text=df["Credits"].map(format_credits), textposition="auto",
    ))
    fig.update_layout(height=80 + 40 * n, margin=dict(l=0, r=0, t=10, b=0),
                      xaxis_title="Transfer credits", yaxis=dict(autorange="reversed"))
    st.plotly_chart(fig, use_container_width=True)
    st.dataframe(df, hide_index=True, use_container_width=True)
    st.caption("Tip: Click on a university to view its detailed credit report.")


with col_report:
    st.subheader("Analysis Report")
    st.markdown('<span class="cc-muted">Generated credit estimation and breakdown.</span>',
                unsafe_allow_html=True)

    if state.comparisons:
        _render_tabs(state)

    if state.error:
        st.error(f"**Analysis Failed**\n\n{state.error}")
        st.button("Dismiss", on_click=_on_dismiss)
    elif state.result is None:
        st.info("Fill out the form to generate a report.")

    if state.result is not None:
        _render_report(state)
    elif state.profile is not None and not state.error:
        st.caption(f"Last analysed: {current_university_name(state) or '—'}")

    if state.comparisons:
        _render_comparison(state)
