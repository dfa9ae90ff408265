"""
config.py — Central settings for the College Credit Compiler
=============================================================
All configuration is loaded from environment variables / .env file.
Copy .env.example → .env and fill in your values.

Provider selection is automatic: Google Gemini (search-grounded) is used
when GEMINI_API_KEY is set, otherwise Azure OpenAI when AZURE_OPENAI_ENDPOINT
and AZURE_OPENAI_API_KEY contain real (non-placeholder) values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env into os.environ (no-op if already set, safe to call multiple times)
load_dotenv(override=False)


# ─── Helpers ────────────────────────────────────────────────────────────────

def _is_placeholder(value: str) -> bool:
    """Return True if the value looks like an unfilled template placeholder."""
    return not value or "<" in value or value.startswith("your-") or value == "PLACEHOLDER"


# ─── Google Gemini ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GeminiConfig:
    api_key: str
    model:   str

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and not _is_placeholder(self.api_key)


# ─── Azure OpenAI ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AzureOpenAIConfig:
    endpoint:    str
    api_key:     str
    deployment:  str
    api_version: str

    @property
    def is_configured(self) -> bool:
        """True when both endpoint and key are real (non-placeholder) values."""
        return (
            bool(self.endpoint)
            and bool(self.api_key)
            and not _is_placeholder(self.endpoint)
            and not _is_placeholder(self.api_key)
        )


# ─── App-level settings ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppConfig:
    max_ap_courses: int
    log_level:      str


# ─── Master settings object ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    gemini: GeminiConfig
    openai: AzureOpenAIConfig
    app:    AppConfig

    @property
    def live_mode(self) -> bool:
        """True when at least one model provider has real credentials."""
        return self.gemini.is_configured or self.openai.is_configured

    @property
    def provider(self) -> str:
        """Name of the provider requests will be routed to ("" when none)."""
        if self.gemini.is_configured:
            return "gemini"
        if self.openai.is_configured:
            return "azure_openai"
        return ""

    def status_summary(self) -> dict[str, str]:
        """Return a dict of service → status badge for the UI."""
        def badge(ok: bool) -> str:
            return "🟢 Live" if ok else "⚪ Not configured"

        return {
            "Google Gemini (Search grounding)": badge(self.gemini.is_configured),
            "Azure OpenAI":                    badge(self.openai.is_configured),
        }


def get_settings() -> Settings:
    """Load all configuration from environment variables."""
    _str = lambda k, d="": os.getenv(k, d).strip()
    _int = lambda k, d=0: int(os.getenv(k, str(d)) or d)

    return Settings(
        gemini=GeminiConfig(
            api_key = _str("GEMINI_API_KEY") or _str("API_KEY"),
            model   = _str("GEMINI_MODEL", "gemini-3-flash-preview"),
        ),
        openai=AzureOpenAIConfig(
            endpoint    = _str("AZURE_OPENAI_ENDPOINT").rstrip("/"),
            api_key     = _str("AZURE_OPENAI_API_KEY"),
            deployment  = _str("AZURE_OPENAI_DEPLOYMENT", "gpt-4o"),
            api_version = _str("AZURE_OPENAI_API_VERSION", "2024-12-01-preview"),
        ),
        app=AppConfig(
            max_ap_courses = _int("MAX_AP_COURSES", 15),
            log_level      = _str("LOG_LEVEL", "INFO").upper(),
        ),
    )
