"""
demo_analysis.py – Terminal demo for the College Credit Compiler

Run:
    python demo_analysis.py                         # built-in sample student
    python demo_analysis.py profile.json            # your own profile
    python demo_analysis.py profile.json --report scores.png --csv plan.csv

Requires:
    .env file with GEMINI_API_KEY (or AZURE_OPENAI_ENDPOINT + AZURE_OPENAI_API_KEY).
    See .env.example for format.
"""

from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path

# ── make src/ importable without installing the package ──────────────────────
sys.path.insert(0, str(Path(__file__).parent / "src"))

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from credit_compiler.comparison import AppState
from credit_compiler.config import get_settings
from credit_compiler.credit_analyzer import CreditAnalysisAgent
from credit_compiler.errors import ConfigurationError
from credit_compiler.guardrails import GuardrailsPipeline
from credit_compiler.metrics import compute_metrics, format_credits, format_currency, init_selection
from credit_compiler.models import (
    AcademicProfile,
    APCourse,
    DegreeLevel,
    Residency,
    UniversityEntry,
)
from credit_compiler.orchestrator import analyze_all, apply_extracted_courses
from credit_compiler.report_export import export_csv

console = Console()

SAMPLE_PROFILE = {
    "degree_level": "Undergraduate",
    "program": "Bachelor of Science",
    "major": "Computer Science",
    "universities": [{"name": "ut austin", "residency": "In-State"}],
    "ap_courses": [
        {"course_name": "AP Calculus BC", "score": "5"},
        {"course_name": "AP Computer Science A", "score": "4"},
        {"course_name": "AP English Language and Composition", "score": ""},
    ],
    "languages": "Spanish (4 years)",
    "target_community_college": "Austin Community College",
    "interests": "Marching band",
}


def load_profile(data: dict) -> AcademicProfile:
    universities = tuple(
        UniversityEntry(u["name"], Residency(u.get("residency", Residency.IN_STATE.value)))
        for u in data.get("universities", [])
    )
    return AcademicProfile(
        degree_level             = DegreeLevel(data.get("degree_level", DegreeLevel.UNDERGRADUATE.value)),
        program                  = data.get("program", ""),
        universities             = universities,
        university               = universities[0].name if universities else "",
        residency                = universities[0].residency if universities else Residency.IN_STATE,
        major                    = data.get("major", ""),
        minor                    = data.get("minor", ""),
        ap_courses               = tuple(APCourse(c["course_name"], str(c.get("score", "")))
                                         for c in data.get("ap_courses", [])),
        languages                = data.get("languages", ""),
        community_college        = data.get("community_college", ""),
        target_community_college = data.get("target_community_college", ""),
        interests                = data.get("interests", ""),
    )


# ─── Display helpers ─────────────────────────────────────────────────────────

def _bar(pct: float, width: int = 24) -> str:
    filled = round(pct / 100 * width)
    return "[" + "█" * filled + "░" * (width - filled) + f"] {pct:.0f}%"


def show_state(state: AppState) -> None:
    """Render every saved university and the comparison summary."""
    for entry in state.comparisons:
        result = entry.result
        m = compute_metrics(result, init_selection(result))
        money = lambda v: format_currency(v, m.currency_symbol)

        console.print()
        console.rule(f"[bold magenta]{entry.university}[/bold magenta] [dim]({entry.residency.value})[/dim]")

        kpi = Table(box=box.ROUNDED, show_header=False, padding=(0, 1))
        kpi.add_column("Key", style="bold cyan", no_wrap=True)
        kpi.add_column("Value", style="white")
        kpi.add_row("Projected credits", f"[bold green]{format_credits(m.total_earned)}[/bold green]")
        kpi.add_row("Degree requires", format_credits(m.degree_total))
        kpi.add_row("Remaining", format_credits(m.remaining))
        kpi.add_row("Progress", _bar(m.progress_pct))
        kpi.add_row("Est. savings", f"{money(m.money_saved)} [dim]@ {money(m.cost_per_credit)}/credit[/dim]")
        console.print(Panel(kpi, title="[bold]Degree Progress[/bold]", border_style="magenta"))
        console.print(Panel(result.summary, title="[bold]Summary[/bold]", border_style="green"))

        credits = Table(box=box.SIMPLE_HEAD, header_style="bold white on dark_violet")
        credits.add_column("Activity", style="white")
        credits.add_column("Course", style="cyan")
        credits.add_column("Credits", justify="right")
        credits.add_column("Notes", style="dim white")
        for c in result.credits:
            credits.add_row(c.activity, c.university_course, c.credit_hours, c.notes)
        console.print(Panel(credits, title="[bold]Transfer & AP Credits[/bold]", border_style="blue"))

        if result.summer_recommendations:
            summer = Table(box=box.SIMPLE_HEAD, header_style="bold black on yellow")
            summer.add_column("CC Course")
            summer.add_column("Equivalent", style="cyan")
            summer.add_column("Credits", justify="right")
            summer.add_column("Why", style="dim white")
            for r in result.summer_recommendations:
                summer.add_row(r.cc_course, r.university_equivalent, r.credit_hours, r.reason)
            console.print(Panel(summer, title="[bold]Summer Plan (opt-in)[/bold]", border_style="yellow"))

        notes = GuardrailsPipeline().check_result(result, entry.sources)
        if notes.violations:
            console.print(f"[dim]{notes.summary()}[/dim]")
        for s in entry.sources:
            console.print(f"  [dim]↳ {s.title}[/dim] [link={s.uri}]{s.uri}[/link]")

    if len(state.comparisons) > 1:
        cmp = Table(box=box.ROUNDED, header_style="bold cyan")
        cmp.add_column("University")
        cmp.add_column("Residency")
        cmp.add_column("Est. Credits", justify="right")
        for entry in state.comparisons:
            cmp.add_row(entry.university, entry.residency.value, entry.total_credits)
        console.print()
        console.print(Panel(cmp, title="[bold]College Comparison[/bold]", border_style="cyan"))


# ─── Main ────────────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Analyse AP / transfer credit for one or more universities.")
    parser.add_argument("profile", nargs="?", type=Path, help="JSON profile (defaults to a sample student)")
    parser.add_argument("--report", type=Path, help="score report image to import AP courses from")
    parser.add_argument("--csv", type=Path, help="write the active report's CSV export here")
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.app.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    console.print()
    console.print(Panel(
        "[bold]College Credit Compiler[/bold]\n"
        "[dim]AI University Credit Analyzer[/dim]",
        style="on dark_violet",
        expand=False,
    ))

    data = json.loads(args.profile.read_text()) if args.profile else SAMPLE_PROFILE
    profile = load_profile(data)
    agent = CreditAnalysisAgent(settings)

    try:
        if args.report:
            mime_type = mimetypes.guess_type(args.report.name)[0] or "image/png"
            profile, problem = apply_extracted_courses(
                profile, agent, args.report.read_bytes(), mime_type, settings.app.max_ap_courses,
            )
            if problem:
                console.print(f"[yellow]⚠ {problem}[/yellow]")

        check = GuardrailsPipeline(settings.app.max_ap_courses).check_profile(profile)
        if check.violations:
            console.print(check.summary())
        if check.blocked:
            sys.exit(1)

        def progress(n: int, total: int, entry: UniversityEntry) -> None:
            console.print(f"[cyan]Analyzing school {n} of {total}:[/cyan] {entry.name}")

        with console.status("[bold blue]Consulting university catalogs…"):
            state = analyze_all(AppState(), profile, agent, progress)

        show_state(state)

        if state.error:
            console.print(f"\n[bold red]Analysis failed:[/bold red] {state.error}")
            sys.exit(1)

        if args.csv and state.result is not None:
            args.csv.write_text(export_csv(state.result, state.selection))
            console.print(f"[green]✓ Wrote {args.csv}[/green]")

    except ConfigurationError as e:
        console.print(f"\n[bold red]Configuration error:[/bold red] {e}")
        console.print("[dim]Create a .env file based on .env.example and retry.[/dim]")
        sys.exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    main()
