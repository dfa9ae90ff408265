"""
Credit Analysis Agent
=====================
Sends a student's academic profile to a generative model and returns a
validated AnalysisResult plus the web citations the answer was grounded on.

CreditAnalysisAgent
    Two-tier execution strategy (chooses the highest available tier):
      1. Google Gemini + Google Search tool  — when GEMINI_API_KEY is set.
         Schema-constrained JSON output; citations come from grounding metadata.
      2. Direct Azure OpenAI JSON mode        — when AZURE_OPENAI_ENDPOINT + KEY are set.
         Schema embedded in the system prompt; no web grounding, so no citations.
      3. Raise ConfigurationError             — neither configured.

    analyze(profile)                    → AnalysisResponse
    extract_courses(image, mime_type)   → list[APCourse]

The output contract is identical across tiers.
"""

from __future__ import annotations

import base64
import json
import logging
import textwrap
from typing import Any, Callable

from google import genai
from google.genai import types
from openai import AzureOpenAI
from pydantic import ValidationError

from credit_compiler.config import Settings, get_settings
from credit_compiler.errors import (
    ConfigurationError,
    EmptyResponseError,
    ExtractionError,
    MalformedResponseError,
    TransportError,
)
from credit_compiler.models import (
    ANALYSIS_SCHEMA,
    EXTRACTION_SCHEMA,
    AcademicProfile,
    AnalysisResponse,
    AnalysisResult,
    APCourse,
    Source,
)
from credit_compiler.prompt_builder import build_extraction_prompt, build_prompt

logger = logging.getLogger(__name__)


MISSING_CREDENTIAL_MESSAGE = "API Key is missing. Please check your environment configuration."
EMPTY_RESPONSE_MESSAGE     = "No response generated from AI."
EXTRACTION_FAILED_MESSAGE  = "Could not extract data from the file. Please try again or enter manually."

_OPENAI_SYSTEM_PROMPT = textwrap.dedent("""
    You are an expert academic advisor who maps high school achievements to
    university credit. Respond with ONLY a valid JSON object matching this
    schema exactly:
""") + json.dumps(ANALYSIS_SCHEMA, indent=2) + (
    "\n\nDo NOT include any explanation, markdown, or extra text outside the JSON."
)

_OPENAI_EXTRACTION_SUFFIX = (
    ' Wrap the array in an object: {"courses": [{"course_name": "...", "score": "..."}]}.'
)


def _strip_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def _provider_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or "The model request failed."


def _first_message(response: Any) -> str | None:
    """Content of the first chat choice; None when the reply carries no choices."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    return choices[0].message.content


def _grounding_sources(response: Any) -> tuple[Source, ...]:
    """Collect web citations from a Gemini response's grounding metadata."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ()
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is not None and getattr(web, "uri", None):
            sources.append(Source(uri=web.uri, title=getattr(web, "title", None) or ""))
    return tuple(sources)


def parse_analysis(text: str | None) -> AnalysisResult:
    """
    Validate a raw model body into an AnalysisResult.

    Raises:
        EmptyResponseError      – body missing or blank.
        MalformedResponseError  – not JSON, or required fields missing / mistyped.
    """
    if not text or not text.strip():
        raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)
    try:
        data = json.loads(_strip_fences(text))
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Model response was not valid JSON: {exc}") from exc
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Model response did not match the analysis schema ({exc.error_count()} error(s))."
        ) from exc


class CreditAnalysisAgent:
    """
    Routes analysis and extraction requests to the highest configured tier.

    Clients can be injected (tests, notebooks); otherwise they are built from
    Settings. Building a client does not touch the network.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        gemini_client: Any = None,
        openai_client: Any = None,
    ) -> None:
        self._settings = settings or get_settings()

        # ── Tier 1: Gemini with Google Search grounding ─────────────────────
        self._gemini_client = gemini_client
        if self._gemini_client is None and self._settings.gemini.is_configured:
            self._gemini_client = genai.Client(api_key=self._settings.gemini.api_key)

        # ── Tier 2: Direct Azure OpenAI ─────────────────────────────────────
        self._openai_client = openai_client
        if self._openai_client is None and self._settings.openai.is_configured:
            self._openai_client = AzureOpenAI(
                azure_endpoint=self._settings.openai.endpoint,
                api_key=self._settings.openai.api_key,
                api_version=self._settings.openai.api_version,
            )

    @property
    def active_tier(self) -> str:
        if self._gemini_client is not None:
            return "gemini"
        if self._openai_client is not None:
            return "azure_openai"
        return ""

    def _require_tier(self) -> str:
        tier = self.active_tier
        if not tier:
            raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE)
        return tier

    def _send(self, call: Callable[[], Any]) -> Any:
        """Run one provider call; every provider/network failure becomes TransportError."""
        try:
            return call()
        except Exception as exc:
            logger.error("%s request failed: %s", self.active_tier, exc)
            raise TransportError(_provider_message(exc)) from exc

    # ── Tier 1 implementation ─────────────────────────────────────────────────

    def _analyze_via_gemini(self, prompt: str) -> tuple[str | None, tuple[Source, ...]]:
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
            response_mime_type="application/json",
            response_schema=ANALYSIS_SCHEMA,
        )
        response = self._send(lambda: self._gemini_client.models.generate_content(
            model=self._settings.gemini.model,
            contents=prompt,
            config=config,
        ))
        return response.text, _grounding_sources(response)

    def _extract_via_gemini(self, image_bytes: bytes, mime_type: str) -> str | None:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=EXTRACTION_SCHEMA,
        )
        contents = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            build_extraction_prompt(),
        ]
        response = self._send(lambda: self._gemini_client.models.generate_content(
            model=self._settings.gemini.model,
            contents=contents,
            config=config,
        ))
        return response.text

    # ── Tier 2 implementation ─────────────────────────────────────────────────

    def _analyze_via_openai(self, prompt: str) -> tuple[str | None, tuple[Source, ...]]:
        response = self._send(lambda: self._openai_client.chat.completions.create(
            model=self._settings.openai.deployment,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": _OPENAI_SYSTEM_PROMPT},
                {"role": "user",   "content": prompt},
            ],
            temperature=0.2,
        ))
        return _first_message(response), ()

    def _extract_via_openai(self, image_bytes: bytes, mime_type: str) -> str | None:
        data_url = f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"
        response = self._send(lambda: self._openai_client.chat.completions.create(
            model=self._settings.openai.deployment,
            response_format={"type": "json_object"},
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": build_extraction_prompt() + _OPENAI_EXTRACTION_SUFFIX},
                    {"type": "image_url", "image_url": {"url": data_url}},
                ],
            }],
            temperature=0,
        ))
        return _first_message(response)

    # ── Public interface ──────────────────────────────────────────────────────

    def analyze(self, profile: AcademicProfile) -> AnalysisResponse:
        """
        Analyse ``profile.university`` and return the result with its citations.

        Raises:
            ConfigurationError     – no provider credential (no request is made).
            TransportError         – network / provider failure.
            EmptyResponseError     – provider returned no body.
            MalformedResponseError – body is not schema-conformant JSON.
        """
        tier = self._require_tier()
        prompt = build_prompt(profile)
        logger.info(
            "Analysing credits for %r (%s) via %s",
            profile.university, profile.residency.value, tier,
        )

        if tier == "gemini":
            text, sources = self._analyze_via_gemini(prompt)
        else:
            text, sources = self._analyze_via_openai(prompt)

        result = parse_analysis(text)
        logger.info(
            "Resolved %r to %r: %d credit rows, %d summer rows, %d citations",
            profile.university,
            result.canonical_university_name,
            len(result.credits),
            len(result.summer_recommendations),
            len(sources),
        )
        return AnalysisResponse(result=result, sources=sources)

    def extract_courses(self, image_bytes: bytes, mime_type: str) -> list[APCourse]:
        """
        Read AP course names and scores off an uploaded score report.

        An empty body yields ``[]``. Any other failure raises ExtractionError;
        a missing credential still raises ConfigurationError.
        """
        tier = self._require_tier()
        logger.info("Extracting AP courses from %s upload (%d bytes) via %s",
                    mime_type, len(image_bytes), tier)
        try:
            if tier == "gemini":
                text = self._extract_via_gemini(image_bytes, mime_type)
            else:
                text = self._extract_via_openai(image_bytes, mime_type)
            if not text or not text.strip():
                return []
            raw = json.loads(_strip_fences(text))
            if isinstance(raw, dict):
                raw = raw.get("courses", [])
            courses = [
                APCourse(
                    course_name=str(item["course_name"]).strip(),
                    score=str(item.get("score") or "").strip(),
                )
                for item in raw
                if item.get("course_name")
            ]
        except (TransportError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("Extraction error: %s", exc)
            raise ExtractionError(EXTRACTION_FAILED_MESSAGE) from exc

        logger.info("Extracted %d AP course(s) from score report", len(courses))
        return courses
