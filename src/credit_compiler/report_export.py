"""
report_export.py – Offline copies of the credit report
=======================================================
  export_csv(result, selection)                  → str   (credit_transfer_plan.csv)
  generate_report_pdf(result, selection, sources) → bytes (credit_transfer_plan.pdf)

Both are one-way records of the current selection: every transfer row, then
every summer row, each marked Included / Excluded.
"""

from __future__ import annotations

import io
from datetime import date
from typing import Sequence

from credit_compiler.metrics import (
    SelectionState,
    compute_metrics,
    format_credits,
    format_currency,
)
from credit_compiler.models import AnalysisResult, Source


CSV_FILENAME = "credit_transfer_plan.csv"
PDF_FILENAME = "credit_transfer_plan.pdf"

CSV_HEADERS = ["Activity/Source", "Equivalent University Course", "Credit Hours", "Notes", "Status"]

SUMMER_PREFIX = "SUMMER: "


def _status(included: bool) -> str:
    return "Included" if included else "Excluded"


def export_rows(result: AnalysisResult, selection: SelectionState) -> list[list[str]]:
    """Flat rows (without header) in export order."""
    rows = [
        [c.activity, c.university_course, c.credit_hours, c.notes, _status(i in selection.transfer)]
        for i, c in enumerate(result.credits)
    ]
    rows += [
        [SUMMER_PREFIX + r.cc_course, r.university_equivalent, r.credit_hours, r.reason,
         _status(i in selection.summer)]
        for i, r in enumerate(result.summer_recommendations)
    ]
    return rows


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def export_csv(result: AnalysisResult, selection: SelectionState) -> str:
    """CSV text; label / course / notes are quoted, credit hours and status are not."""
    lines = [",".join(CSV_HEADERS)]
    for label, course, hours, notes, status in export_rows(result, selection):
        lines.append(",".join([_quote(label), _quote(course), hours, _quote(notes), status]))
    return "\n".join(lines)


# ─── PDF ──────────────────────────────────────────────────────────────────────

def _rl_colour(hex_str: str):
    """Convert a CSS hex colour string to a reportlab Color."""
    from reportlab.lib import colors as rl_colors
    h = hex_str.lstrip("#")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    r, g, b = int(h[0:2], 16) / 255, int(h[2:4], 16) / 255, int(h[4:6], 16) / 255
    return rl_colors.Color(r, g, b)


def generate_report_pdf(
    result: AnalysisResult,
    selection: SelectionState,
    sources: Sequence[Source] = (),
) -> bytes:
    """
    Build a printable credit report. Returns raw PDF bytes.

    Parameters
    ----------
    result    : AnalysisResult being displayed
    selection : current row selection (drives totals and the Status column)
    sources   : grounding citations listed at the end (optional)
    """
    from xml.sax.saxutils import escape

    from reportlab.lib import colors as rl_colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import cm
    from reportlab.lib.enums import TA_CENTER
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    metrics = compute_metrics(result, selection)
    money = lambda v: format_currency(v, metrics.currency_symbol)

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        leftMargin=1.8 * cm, rightMargin=1.8 * cm,
        topMargin=1.8 * cm, bottomMargin=1.8 * cm,
    )

    styles = getSampleStyleSheet()
    INDIGO = _rl_colour("#312e81")
    DARK   = _rl_colour("#1f2937")
    MUTED  = _rl_colour("#6b7280")
    GREEN  = _rl_colour("#16a34a")
    LIGHT  = _rl_colour("#eef2ff")
    WHITE  = rl_colors.white

    h1 = ParagraphStyle("H1", parent=styles["Heading1"],
                         textColor=WHITE, fontSize=16, leading=20, spaceAfter=4)
    h2 = ParagraphStyle("H2", parent=styles["Heading2"],
                         textColor=INDIGO, fontSize=12, leading=15, spaceBefore=12, spaceAfter=4)
    body = ParagraphStyle("Body", parent=styles["Normal"],
                           textColor=DARK, fontSize=9, leading=13)
    small = ParagraphStyle("Small", parent=styles["Normal"],
                            textColor=MUTED, fontSize=8, leading=11)
    centre = ParagraphStyle("Centre", parent=styles["Normal"],
                             alignment=TA_CENTER, fontSize=9, leading=13)

    story = []
    today = date.today().strftime("%B %d, %Y")

    # ── Header banner ─────────────────────────────────────────────────────────
    banner = Table([[Paragraph(
        f"<b>{escape(result.canonical_university_name)}</b><br/>"
        f"<font size='10'>Credit Transfer &amp; Degree Plan Analysis · {today}</font>",
        h1,
    )]], colWidths=[doc.width])
    banner.setStyle(TableStyle([
        ("BACKGROUND",    (0, 0), (-1, -1), INDIGO),
        ("TOPPADDING",    (0, 0), (-1, -1), 12),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 12),
        ("LEFTPADDING",   (0, 0), (-1, -1), 10),
    ]))
    story.append(banner)
    story.append(Spacer(1, 0.4 * cm))

    # ── KPI row ───────────────────────────────────────────────────────────────
    story.append(Paragraph("Degree Progress", h2))
    kpi_data = [
        ["Projected Credits", "Degree Requires", "Remaining", "Est. Savings"],
        [
            Paragraph(f"<b>{format_credits(metrics.total_earned)}</b>", centre),
            Paragraph(f"<b>{format_credits(metrics.degree_total)}</b>", centre),
            Paragraph(f"<b>{format_credits(metrics.remaining)}</b>", centre),
            Paragraph(f"<b>{money(metrics.money_saved)}</b>", centre),
        ],
    ]
    kpi_w = doc.width / 4
    kpi_table = Table(kpi_data, colWidths=[kpi_w] * 4)
    kpi_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), INDIGO),
        ("TEXTCOLOR",  (0, 0), (-1, 0), WHITE),
        ("BACKGROUND", (0, 1), (-1, 1), LIGHT),
        ("FONTNAME",   (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE",   (0, 0), (-1, 0), 8),
        ("ALIGN",      (0, 0), (-1, -1), "CENTER"),
        ("VALIGN",     (0, 0), (-1, -1), "MIDDLE"),
    ]))
    story.append(kpi_table)
    story.append(Spacer(1, 0.2 * cm))
    story.append(Paragraph(
        f"{metrics.progress_pct:.0f}% of the degree covered "
        f"(transfer/AP {format_credits(metrics.earned_transfer)}, "
        f"summer {format_credits(metrics.earned_summer)}); "
        f"cost per credit {money(metrics.cost_per_credit)}.",
        small,
    ))

    # ── Summary ───────────────────────────────────────────────────────────────
    story.append(Paragraph("Summary", h2))
    story.append(Paragraph(escape(result.summary), body))

    # ── Credit tables ─────────────────────────────────────────────────────────
    def _table(title: str, headers: list[str], rows: list[list[str]]) -> None:
        story.append(Paragraph(title, h2))
        data = [headers] + [[Paragraph(escape(str(cell)), body) for cell in row] for row in rows]
        widths = [doc.width * w for w in (0.24, 0.22, 0.1, 0.3, 0.14)]
        t = Table(data, colWidths=widths, repeatRows=1)
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), INDIGO),
            ("TEXTCOLOR",  (0, 0), (-1, 0), WHITE),
            ("FONTNAME",   (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE",   (0, 0), (-1, 0), 8),
            ("VALIGN",     (0, 0), (-1, -1), "TOP"),
            ("GRID",       (0, 0), (-1, -1), 0.25, MUTED),
        ]
        for r, row in enumerate(rows, start=1):
            if row[-1] == "Included":
                style.append(("BACKGROUND", (-1, r), (-1, r), _rl_colour("#dcfce7")))
                style.append(("TEXTCOLOR",  (-1, r), (-1, r), GREEN))
        t.setStyle(TableStyle(style))
        story.append(t)

    rows = export_rows(result, selection)
    transfer_rows = rows[:len(result.credits)]
    summer_rows = rows[len(result.credits):]

    _table("Transfer & AP Credits", CSV_HEADERS, transfer_rows)
    if summer_rows:
        _table(
            "Summer Community College Plan",
            ["Community College Course", "University Equivalent", "Credit Hours", "Why", "Status"],
            [[label[len(SUMMER_PREFIX):], *rest] for label, *rest in summer_rows],
        )

    # ── Citations ─────────────────────────────────────────────────────────────
    if sources:
        story.append(Paragraph("Sources", h2))
        for s in sources:
            story.append(Paragraph(f"• {escape(s.title)} <font color='#6b7280'>({escape(s.uri)})</font>", small))

    doc.build(story)
    return buf.getvalue()
