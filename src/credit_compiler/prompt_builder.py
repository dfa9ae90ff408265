"""
Prompt construction for the credit analysis and score-report extraction
requests. Pure functions: the same profile always yields the same text.
"""

from __future__ import annotations

import textwrap

from credit_compiler.models import AcademicProfile


_NO_SCORE = "No score provided - assume highest credit-earning score"


def _ap_course_lines(profile: AcademicProfile) -> str:
    if not profile.ap_courses:
        return "None"
    return "\n".join(
        f"- {c.course_name} (Score: {c.score or _NO_SCORE})"
        for c in profile.ap_courses
    )


def _summer_instruction(profile: AcademicProfile) -> str:
    cc = profile.target_community_college
    if not cc:
        return (
            "8. The user has not specified a community college for summer classes, "
            "so leave 'summer_recommendations' empty."
        )
    return (
        f'8. The user specifically wants to take summer classes at "{cc}" to graduate faster.\n'
        f'   - Search for the specific articulation agreement or transfer equivalency guide '
        f'between "{cc}" and "{profile.university}".\n'
        "   - Identify 3-5 high-value courses (General Education requirements or lower-division "
        "Major requirements) they could take at the Community College that are GUARANTEED to transfer.\n"
        "   - Populate the 'summer_recommendations' field with these specific courses, ensuring you "
        "estimate the credit hours (typically 3 or 4)."
    )


_TEMPLATE = textwrap.dedent("""
    Role – You are an expert Academic Advisor Agent. Your goal is to help high school students understand how their achievements translate into college credits at specific institutions.

    Inputs –
    * Degree Level: {degree_level}
    * University/College Name Input: {university} (Note: Use Google Search to find the Official Name and correct spelling)
    * In-State/Out-of-state: {residency}
    * Intended Program: {program}
    * Major: {major}
    * Minor: {minor}
    * AP Courses:
    {ap_courses}
    * Languages: {languages}
    * Past Community College credits (Already taken): {community_college}
    * Target Community College for Summer Classes (Future): {target_community_college}
    * Student Interests (Sports/Music/etc): {interests}

    Task –
    1. **Identify the University**: Search for the input university name. Find the full, official name (e.g., "uva" -> "University of Virginia"). Use this official name for all subsequent steps and the output.
    2. Search for the official AP credit policy, transfer credit policy, and catalog for the identified university.
    3. Analyze the user's AP courses and scores against the university's specific standards.
    4. If scores are not provided for an AP test, assume the highest score that grants credit for that class (typically 5), but explicitly note this assumption in the notes.
    5. Search for language placement or retroactive credit policies if languages are listed.
    6. Evaluate community college transferability for 'Past Community College credits' if provided.
    7. Consider the 'Student Interests'. If the student plays a sport or an instrument, check if the university offers elective credits for these activities (e.g., Music Ensemble credits, Kinesiology/PE credits) and include them in the credit list if applicable.
    8. Compile a list of specific course codes and credit hours the student is likely to receive.
    {summer_instruction}
    9. Search for the **current tuition rates** for {residency} students at the university. Estimate the **Cost Per Credit Hour**. If only annual tuition is found, assume 30 credits per year to calculate the per-credit rate.
    10. Determine the standard **Total Credits Required** for this specific degree program (e.g., typically 120-128 for a Bachelor's).

    Output –
    Return a JSON object containing the official university name, summary, detailed list of credits, summer_recommendations, total credits found, degree requirement total, and estimated cost per credit.

    Constraints –
    * **CRITICAL**: Always return the "canonical_university_name" with proper capitalization and spelling (e.g., "The University of Texas at Austin").
    * Only use reputable university websites or official College Board data.
    * Be precise with course codes (e.g., "MATH 101") if available in the search results.
    * If specific data cannot be found, make a reasonable estimate based on general university standards but flag it as an estimate.
    * For cost per credit, prioritize the specific residency status ({residency}).

    Capabilities & Reminders –
    * Use the Google Search tool to find the latest academic catalogs and credit transfer tables.
    * Ensure the tone is helpful and encouraging.
""")


def build_prompt(profile: AcademicProfile) -> str:
    """Render the analysis instruction for ``profile.university``."""
    return _TEMPLATE.format(
        degree_level             = profile.degree_level.value,
        university               = profile.university,
        residency                = profile.residency.value,
        program                  = profile.program,
        major                    = profile.major or "Not specified",
        minor                    = profile.minor or "Not specified",
        ap_courses               = _ap_course_lines(profile),
        languages                = profile.languages or "None",
        community_college        = profile.community_college or "None",
        target_community_college = profile.target_community_college or "None",
        interests                = profile.interests or "None",
        summer_instruction       = _summer_instruction(profile),
    )


def build_extraction_prompt() -> str:
    return (
        "Examine this document. Extract all AP (Advanced Placement) course names and their "
        "corresponding scores. Return a JSON array. If a score is missing, leave it as an empty "
        "string. Map the names to official College Board AP course titles if they differ slightly."
    )
