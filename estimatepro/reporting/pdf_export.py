"""PDF export for client quotes.

Generates an A4 quote using ReportLab:
- Header (builder, ABN, client, date)
- Job summary
- Itemised quote
- Totals (subtotal, GST, total)
- Terms
"""

from __future__ import annotations

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from estimatepro.models import QuoteDocument
from estimatepro.reporting.formatting import (
    format_currency,
    format_date,
    job_summary,
    quote_table_rows,
)

# Styles
styles = getSampleStyleSheet()
title_style = ParagraphStyle(
    "QuoteTitle",
    parent=styles["Heading1"],
    fontSize=20,
    spaceAfter=12,
    textColor=colors.HexColor("#2d3748"),
)
section_style = ParagraphStyle(
    "QuoteSection",
    parent=styles["Heading2"],
    fontSize=13,
    spaceBefore=10,
    spaceAfter=6,
    textColor=colors.HexColor("#4a5568"),
)
normal_style = ParagraphStyle(
    "QuoteNormal",
    parent=styles["Normal"],
    fontSize=10,
    leading=14,
    textColor=colors.HexColor("#2d3748"),
)


def _para(text: str, style: ParagraphStyle = normal_style) -> Paragraph:
    return Paragraph(escape(text).replace("\n", "<br/>"), style)


def _labelled(label: str, value: str) -> Paragraph:
    return Paragraph(f"<b>{escape(label)}:</b> {escape(value)}", normal_style)


def generate_quote_pdf(document: QuoteDocument, gst_rate: float = 0.10) -> BytesIO:
    """Render a client quote and return the PDF buffer (rewound)."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=f"Quote - {document.survey.client_name}",
    )

    story = []

    # --- Header ---
    story.append(_para("Bathroom Renovation Quote", title_style))
    story.append(_labelled("Prepared by", document.builder.display_name))
    story.append(_labelled("ABN", document.builder.abn or "Not set"))
    story.append(_labelled("Client", document.survey.client_name))
    story.append(_labelled("Date", format_date(document.issued_at)))

    # --- Job summary ---
    story.append(_para("Job Summary", section_style))
    for label, value in job_summary(document.survey, document.areas):
        story.append(_labelled(label, value))

    # --- Itemised quote ---
    story.append(_para("Itemised Quote", section_style))
    data = [["Item", "Type", "Quantity", "Amount"]]
    for item, item_type, quantity, amount in quote_table_rows(
        document.totals.line_items, document.survey
    ):
        data.append([_para(item), item_type, quantity, amount])

    table = Table(data, colWidths=[85 * mm, 25 * mm, 35 * mm, 35 * mm], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#edf2f7")),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (3, 0), (3, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e2e8f0")),
                ("PADDING", (0, 0), (-1, -1), 5),
            ]
        )
    )
    story.append(table)
    story.append(Spacer(1, 6 * mm))

    # --- Totals ---
    totals = Table(
        [
            ["Subtotal", format_currency(document.totals.subtotal)],
            [f"{gst_rate * 100:g}% GST", format_currency(document.totals.gst)],
            ["Total", format_currency(document.totals.total)],
        ],
        colWidths=[40 * mm, 35 * mm],
        hAlign="RIGHT",
    )
    totals.setStyle(
        TableStyle(
            [
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("FONTNAME", (0, 2), (-1, 2), "Helvetica-Bold"),
                ("LINEABOVE", (0, 2), (-1, 2), 1, colors.HexColor("#2d3748")),
                ("PADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    story.append(totals)

    # --- Terms ---
    if document.terms.strip():
        story.append(_para("Terms", section_style))
        story.append(_para(document.terms))

    doc.build(story)
    buffer.seek(0)
    return buffer
