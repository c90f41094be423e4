"""Quote export: reportlab PDF and a plain-text email body."""
from __future__ import annotations

import io
from typing import Any, Dict, List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from btlcalc.presets import DISCLAIMER

_GRID = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("BOX", (0, 0), (-1, -1), 1, colors.black),
        ("INNERGRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
    ]
)


def _override_reason(data: Dict[str, Any]):
    """Return the override reason, insisting on one when a warning is critical."""
    warnings = data.get("warnings", [])
    override_reason = data.get("override_reason")
    if any(w.get("severity") == "critical" for w in warnings) and not override_reason:
        raise ValueError("override_reason required when critical warnings exist")
    return override_reason


def build_quote_pdf(data: Dict[str, Any]) -> bytes:
    """Render a quote to PDF bytes.

    ``data`` keys: ``branding`` (title, broker, contact), ``deal_snapshot``
    (label -> value), ``matrix`` (rows, first row is the header), ``best``
    (label -> value), ``warnings`` (rule dicts) and ``override_reason``.
    """

    override_reason = _override_reason(data)
    styles = getSampleStyleSheet()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4), leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36
    )
    branding = data.get("branding", {})
    story = [Paragraph(f"<b>{branding.get('title', 'Loan Quote')}</b>", styles["Title"]), Spacer(1, 6)]
    if branding.get("broker"):
        story.append(Paragraph(f"Prepared by: {branding['broker']}", styles["Normal"]))
    if branding.get("contact"):
        story.append(Paragraph(f"Contact: {branding['contact']}", styles["Normal"]))
    story.append(Spacer(1, 12))

    snapshot = data.get("deal_snapshot", {})
    if snapshot:
        t = Table([["Deal Snapshot", ""]] + [[k, f"{v}"] for k, v in snapshot.items()], hAlign="LEFT", colWidths=[200, 320])
        t.setStyle(_GRID)
        story += [t, Spacer(1, 12)]

    matrix: List[List[Any]] = data.get("matrix", [])
    if matrix:
        t = Table([[f"{c}" for c in row] for row in matrix], hAlign="LEFT")
        t.setStyle(_GRID)
        story += [Paragraph("<b>Quote Matrix</b>", styles["Heading3"]), Spacer(1, 6), t, Spacer(1, 12)]

    best = data.get("best", {})
    if best:
        t = Table([["Best Option", ""]] + [[k, f"{v}"] for k, v in best.items()], hAlign="LEFT", colWidths=[200, 320])
        t.setStyle(_GRID)
        story += [t, Spacer(1, 12)]

    warnings = data.get("warnings", [])
    if warnings:
        rows = [["Code", "Severity", "Message"]] + [
            [w.get("code", ""), w.get("severity", ""), w.get("message", "")] for w in warnings
        ]
        t = Table(rows, hAlign="LEFT")
        t.setStyle(_GRID)
        story += [Paragraph("<b>Warnings</b>", styles["Heading3"]), Spacer(1, 6), t, Spacer(1, 12)]
    if override_reason:
        story.append(Paragraph(f"Override Reason: {override_reason}", styles["Normal"]))

    story += [Spacer(1, 12), Paragraph(f"<font size=8>{DISCLAIMER}</font>", styles["Normal"])]
    doc.build(story)
    return buf.getvalue()


def build_email_body(data: Dict[str, Any]) -> str:
    """Plain-text summary of a quote, suitable for pasting into an email."""

    override_reason = _override_reason(data)
    title = data.get("branding", {}).get("title", "Loan Quote")
    lines = [title, "=" * len(title), ""]
    for k, v in data.get("deal_snapshot", {}).items():
        lines.append(f"{k}: {v}")

    matrix = data.get("matrix", [])
    if matrix:
        lines += ["", "Quote matrix:"]
        for row in matrix:
            lines.append(" | ".join(f"{c}" for c in row))

    best = data.get("best", {})
    if best:
        lines += ["", "Best option:"]
        lines += [f"  {k}: {v}" for k, v in best.items()]

    warnings = data.get("warnings", [])
    if warnings:
        lines += ["", "Warnings:"]
        for w in warnings:
            lines.append(f"{w.get('severity', '')}: {w.get('message', '')}")

    if override_reason:
        lines.append(f"Override Reason: {override_reason}")

    lines += ["", DISCLAIMER]
    return "\n".join(lines)


def matrix_rows(frame) -> List[List[Any]]:
    """Turn a ``results_frame`` DataFrame into header + rows for export."""
    if frame is None or frame.empty:
        return []
    rows = [[""] + [str(c) for c in frame.columns]]
    for label, row in frame.iterrows():
        rows.append([label] + list(row.values))
    return rows
