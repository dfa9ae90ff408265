"""
Shared pytest fixtures for the College Credit Compiler test suite.
All fixtures use fake provider clients — no API keys required.
Factory helpers live in tests/factories.py so they can be imported
directly by test modules as well as being used here.
"""
import sys
import os

_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Never call a real provider during tests
for _k in ("GEMINI_API_KEY", "API_KEY", "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY"):
    os.environ[_k] = "<placeholder>"


import pytest

from factories import FakeGeminiClient, make_profile, make_result, make_settings

from credit_compiler.comparison import AppState
from credit_compiler.credit_analyzer import CreditAnalysisAgent


# ─── pytest fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def profile():
    return make_profile()


@pytest.fixture
def result():
    return make_result()


@pytest.fixture
def empty_state():
    return AppState()


@pytest.fixture
def unconfigured_agent():
    return CreditAnalysisAgent(make_settings())


@pytest.fixture
def gemini_agent_factory():
    """Build a Gemini-tier agent scripted with the given replies."""
    def _build(*replies):
        client = FakeGeminiClient(*replies)
        return CreditAnalysisAgent(make_settings(gemini_key="AIza-test-key"), gemini_client=client), client
    return _build
