"""
credit_compiler — College Credit Compiler
==========================================
Turns a student's AP scores, languages, prior coursework and interests into
a per-university credit-transfer report using a search-grounded generative
model, with degree-progress and tuition-savings metrics and a side-by-side
comparison of several universities.

Module map
----------
  models.py           Dataclasses, Pydantic response models, enums, schemas.
  config.py           Settings loaded from .env; provider detection.
  errors.py           Exception taxonomy raised by the request agent.
  prompt_builder.py   Profile → analysis / extraction prompt text.
  credit_analyzer.py  CreditAnalysisAgent: Gemini (grounded) or Azure OpenAI.
  orchestrator.py     Sequential multi-university run; score-report import.
  comparison.py       AppState + comparison registry update functions.
  metrics.py          Row selection state and derived credit metrics.
  report_export.py    CSV and PDF exports of the current report.
  guardrails.py       Profile / result validation (BLOCK · WARN · INFO).

Flow
----
  AcademicProfile → GuardrailsPipeline.check_profile
  → orchestrator.analyze_all  (one CreditAnalysisAgent.analyze per university)
  → comparison.upsert + show_result  → metrics.compute_metrics
  → report_export.export_csv / generate_report_pdf
"""
__version__ = "0.1.0"
