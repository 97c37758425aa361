"""
Report PDF Generator

Renders a metric/value dataset as an A4 PDF: title block, headline KPI cards
for the first few metrics, then the full metric table.
Uses reportlab Platypus for layout.
"""
import re
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.platypus import (
    SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, HRFlowable,
)

from backoffice.config import get_settings

# ── Palette ────────────────────────────────────────
INK    = colors.HexColor("#1b1b1b")
CREAM  = colors.HexColor("#f7f3ed")
GOLD   = colors.HexColor("#c49a4a")
TEAL   = colors.HexColor("#1f6f6b")
MOSS   = colors.HexColor("#2f3d33")
WHITE  = colors.white

PAGE_W, PAGE_H = A4  # 595 x 842 pts

KPI_CARDS = 4
PERCENT_HINTS = ("rate", "margin", "growth")


def _styles():
    """Build custom paragraph styles."""
    ss = getSampleStyleSheet()
    ss.add(ParagraphStyle(
        "CoverTitle", parent=ss["Title"],
        fontName="Helvetica-Bold", fontSize=22, leading=28,
        textColor=INK, alignment=TA_LEFT, spaceAfter=6,
    ))
    ss.add(ParagraphStyle(
        "CoverSub", parent=ss["Normal"],
        fontName="Helvetica", fontSize=11, leading=14,
        textColor=colors.HexColor("#666666"), alignment=TA_LEFT,
        spaceAfter=20,
    ))
    ss.add(ParagraphStyle(
        "SectionHead", parent=ss["Heading2"],
        fontName="Helvetica-Bold", fontSize=13, leading=16,
        textColor=MOSS, spaceAfter=6, spaceBefore=14,
    ))
    ss.add(ParagraphStyle(
        "KpiValue", parent=ss["Normal"],
        fontName="Helvetica-Bold", fontSize=18, leading=22,
        textColor=TEAL, alignment=TA_CENTER,
    ))
    ss.add(ParagraphStyle(
        "KpiLabel", parent=ss["Normal"],
        fontName="Helvetica", fontSize=8, leading=10,
        textColor=colors.HexColor("#666666"), alignment=TA_CENTER,
    ))
    return ss


def _label(metric: str) -> str:
    """camelCase / snake_case metric key -> "Title Case" label."""
    words = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", metric).replace("_", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def _fmt(metric: str, val) -> str:
    """Format a metric value for display."""
    if val is None:
        return "—"
    if isinstance(val, bool):
        return "Yes" if val else "No"
    if isinstance(val, int):
        return f"{val:,}"
    if isinstance(val, float):
        key = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", metric).lower()
        if any(h in key for h in PERCENT_HINTS):
            return f"{val:,.2f}%"
        if "turnover" in key:
            return f"{val:,.2f}x"
        return f"${val:,.2f}"
    return str(val)


def _make_table(headers, rows, col_widths=None):
    """Build a reportlab Table with the house styling."""
    data = [headers] + rows
    t = Table(data, colWidths=col_widths, repeatRows=1)
    style_cmds = [
        # Header row
        ("BACKGROUND", (0, 0), (-1, 0), MOSS),
        ("TEXTCOLOR", (0, 0), (-1, 0), WHITE),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ("TOPPADDING", (0, 0), (-1, 0), 6),
        # Body
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 1), (-1, -1), 9),
        ("BOTTOMPADDING", (0, 1), (-1, -1), 5),
        ("TOPPADDING", (0, 1), (-1, -1), 5),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        # Grid
        ("LINEBELOW", (0, 0), (-1, 0), 0.8, GOLD),
        ("LINEBELOW", (0, 1), (-1, -2), 0.3, colors.HexColor("#e0ddd7")),
        ("LINEBELOW", (0, -1), (-1, -1), 0.5, MOSS),
        # Values right-aligned
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("ALIGN", (0, 0), (0, -1), "LEFT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    # Alternating row colors
    for i in range(1, len(data)):
        if i % 2 == 0:
            style_cmds.append(("BACKGROUND", (0, i), (-1, i), CREAM))
    t.setStyle(TableStyle(style_cmds))
    return t


def _kpi_table(dataset, ss):
    """Headline cards for the first metrics in the dataset."""
    headline = dataset.rows[:KPI_CARDS]
    kpi_data = [
        [Paragraph(_label(r.metric), ss["KpiLabel"]) for r in headline],
        [Paragraph(_fmt(r.metric, r.value), ss["KpiValue"]) for r in headline],
    ]
    kpi_table = Table(kpi_data, colWidths=[(PAGE_W - 40) / len(headline)] * len(headline))
    kpi_table.setStyle(TableStyle([
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, 0), 12),
        ("BOTTOMPADDING", (0, 1), (-1, 1), 12),
        ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#fafaf7")),
        ("BOX", (0, 0), (-1, -1), 0.5, colors.HexColor("#e0ddd7")),
        ("LINEAFTER", (0, 0), (-2, -1), 0.3, colors.HexColor("#e0ddd7")),
    ]))
    return kpi_table


def _header_footer(canvas, doc, title: str):
    """Draw header bar and footer on every page."""
    brand = get_settings().report_brand
    canvas.saveState()
    # Header bar
    canvas.setFillColor(INK)
    canvas.rect(0, PAGE_H - 28, PAGE_W, 28, fill=1, stroke=0)
    # Gold accent line
    canvas.setStrokeColor(GOLD)
    canvas.setLineWidth(1.5)
    canvas.line(0, PAGE_H - 28, PAGE_W, PAGE_H - 28)
    # Header text
    canvas.setFillColor(WHITE)
    canvas.setFont("Helvetica-Bold", 9)
    canvas.drawString(20, PAGE_H - 19, brand)
    canvas.setFont("Helvetica", 8)
    canvas.drawRightString(PAGE_W - 20, PAGE_H - 19, title)
    # Footer
    canvas.setFillColor(colors.HexColor("#999999"))
    canvas.setFont("Helvetica-Oblique", 7)
    canvas.drawCentredString(PAGE_W / 2, 18, f"Confidential · Page {doc.page}")
    canvas.restoreState()


def generate_report_pdf(dataset, target):
    """
    Render a report dataset to PDF.

    Args:
        dataset: ReportDataset (title, optional subtitle, metric/value rows)
        target: File path or writable binary buffer
    """
    doc = SimpleDocTemplate(
        target,
        pagesize=A4,
        topMargin=38,  # below header bar
        bottomMargin=32,
        leftMargin=20,
        rightMargin=20,
        title=dataset.title,
    )

    ss = _styles()
    story = []

    story.append(Spacer(1, 12))
    story.append(Paragraph(dataset.title, ss["CoverTitle"]))
    subtitle = f"Generated {datetime.utcnow().strftime('%d %B %Y %H:%M')} UTC"
    if dataset.subtitle:
        subtitle = f"{dataset.subtitle} · {subtitle}"
    story.append(Paragraph(subtitle, ss["CoverSub"]))

    story.append(HRFlowable(
        width="100%", thickness=1.5, color=GOLD,
        spaceAfter=16, spaceBefore=8,
    ))

    if dataset.rows:
        story.append(_kpi_table(dataset, ss))
        story.append(Spacer(1, 10))

        story.append(Paragraph("Metrics", ss["SectionHead"]))
        rows = [[_label(r.metric), _fmt(r.metric, r.value)] for r in dataset.rows]
        story.append(_make_table(["Metric", "Value"], rows, [PAGE_W - 40 - 160, 160]))
    else:
        story.append(Paragraph("No metrics for this period.", ss["Normal"]))

    def on_page(canvas, doc):
        _header_footer(canvas, doc, dataset.title)

    doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
