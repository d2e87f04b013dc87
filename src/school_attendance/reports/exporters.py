from __future__ import annotations

import csv
import io

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .service import ReportData


def report_filename(data: ReportData, extension: str) -> str:
    if data.start and data.end:
        return f"attendance_report_{data.start.strftime('%Y%m%d')}_{data.end.strftime('%Y%m%d')}.{extension}"
    return f"attendance_report.{extension}"


def to_csv_bytes(data: ReportData) -> bytes:
    """CSV with a BOM so spreadsheet apps pick up UTF-8."""
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(data.headers)
    writer.writerows(data.rows)
    return out.getvalue().encode("utf-8-sig")


def _para(text, styles, style: str = "BodyText") -> Paragraph:
    s = "" if text is None else str(text)
    s = s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return Paragraph(s, styles[style])


def to_pdf_bytes(data: ReportData) -> bytes:
    buf = io.BytesIO()
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(A4),
        leftMargin=18,
        rightMargin=18,
        topMargin=18,
        bottomMargin=18,
        title=data.config.title,
    )

    title = data.config.title
    if data.start and data.end:
        title = f"{title} ({data.start.isoformat()} to {data.end.isoformat()})"
    content = [Paragraph(title, styles["Title"]), Spacer(1, 8)]
    if data.warning:
        content += [_para(data.warning, styles, "Italic"), Spacer(1, 8)]

    header = [_para(h, styles) for h in data.headers]
    body = [[_para(v, styles) for v in row] for row in data.rows]

    tbl = Table([header] + body, repeatRows=1, hAlign="LEFT")
    tbl.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
    ]))
    content.append(tbl)
    if not data.rows:
        content += [Spacer(1, 8), Paragraph("No attendance records in this range.", styles["BodyText"])]

    doc.build(content)
    return buf.getvalue()
