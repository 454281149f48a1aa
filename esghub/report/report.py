from __future__ import annotations
import io
from datetime import datetime
from typing import List
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from xml.sax.saxutils import escape
from esghub.analysis.schema import AnalysisResult
from esghub.utils.types import Document

RISK_COLORS = {"Major": colors.HexColor("#d64545"), "Minor": colors.HexColor("#d89b1f")}


def _p(text, style) -> Paragraph:
    return Paragraph(escape(str(text if text not in (None, "") else "N/A")), style)


def build_report(document: Document, result: AnalysisResult) -> bytes:
    """Render an analysis as a printable PDF and return its bytes."""
    styles = getSampleStyleSheet()
    body = styles["BodyText"]
    buf = io.BytesIO()
    pdf = SimpleDocTemplate(buf, pagesize=A4, leftMargin=2 * cm, rightMargin=2 * cm, title=f"ESG analysis - {document.title}")
    story: List = [
        _p(f"ESG analysis: {document.title}", styles["Title"]),
        _p(f"Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}", styles["Italic"]),
        Spacer(1, 0.4 * cm),
        _p("Report metadata", styles["Heading2"]),
    ]
    meta = result.report_metadata
    meta_rows = [
        [_p("Company", body), _p(meta.company_name, body)],
        [_p("Reporting year", body), _p(meta.reporting_year, body)],
        [_p("Country/Region", body), _p(meta.country_or_region, body)],
        [_p("Report type", body), _p(meta.report_type, body)],
    ]
    summary_rows = [
        [_p("Potential greenwashing", body), _p(f"{result.confidence_score:.0f}% ({result.greenwashing_risk})", body)],
        [_p("Overall classification", body), _p(result.classification, body)],
        [_p("Claimed frameworks", body), _p(", ".join(result.frameworks_claimed) or "None", body)],
        [_p("Other frameworks", body), _p(", ".join(result.other_frameworks) or "None", body)],
    ]
    grid = TableStyle([
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#eef2f8")),
    ])
    story.append(Table(meta_rows, colWidths=[5 * cm, 12 * cm], style=grid))
    story += [Spacer(1, 0.4 * cm), _p("Summary", styles["Heading2"])]
    story.append(Table(summary_rows, colWidths=[5 * cm, 12 * cm], style=grid))
    story += [Spacer(1, 0.4 * cm), _p(f"Flagged statements ({len(result.flagged_statements)})", styles["Heading2"])]
    if not result.flagged_statements:
        story.append(_p("No statements were flagged.", body))
    for idx, item in enumerate(result.flagged_statements, start=1):
        rows = [
            [_p(f'{idx}. "{item.statement}"', styles["Heading4"])],
            [_p(f"Category: {item.esg_category}  |  Risk level: {item.risk_level}", body)],
            [_p(f"Reason: {item.reason}", body)],
        ]
        story.append(Table(rows, colWidths=[17 * cm], style=TableStyle([
            ("LINEBEFORE", (0, 0), (0, -1), 3, RISK_COLORS.get(item.risk_level, colors.grey)),
            ("LEFTPADDING", (0, 0), (-1, -1), 8),
        ])))
        story.append(Spacer(1, 0.25 * cm))
    pdf.build(story)
    return buf.getvalue()


def cached_report(cache: dict, key, document: Document, result: AnalysisResult) -> bytes:
    """Rendered report for `key`; only the latest key is kept in `cache`."""
    if cache.get("key") != key:
        cache.clear()
        cache.update(key=key, pdf=build_report(document, result))
    return cache["pdf"]
