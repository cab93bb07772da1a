"""
Encoders for projected report rows: CSV, Excel (openpyxl) and PDF (reportlab).
Each returns the encoded bytes; the route picks the media type and filename.
"""
import csv
import io
from datetime import date
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from leave_portal.services.report_service import REPORT_COLUMNS

FORMATS = {
    "csv": ("text/csv", "csv"),
    "excel": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "xlsx"),
    "pdf": ("application/pdf", "pdf"),
}

# Columns printed in the PDF table; the full set does not fit a page
PDF_COLUMNS = [
    ("employee_name", "Employee"),
    ("leave_type", "Type"),
    ("from_date", "From"),
    ("to_date", "To"),
    ("total_days", "Days"),
    ("status", "Status"),
    ("priority", "Priority"),
    ("requested_date", "Requested"),
    ("approved_by", "Approved By"),
]

_THIN = Side(style="thin")
_HEADER_STYLE = {
    "font": Font(bold=True, color="FFFFFF"),
    "fill": PatternFill(start_color="366092", end_color="366092", fill_type="solid"),
    "alignment": Alignment(horizontal="center", vertical="center"),
    "border": Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN),
}
_DATA_STYLE = {
    "font": Font(size=10),
    "alignment": Alignment(horizontal="left", vertical="center"),
    "border": Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN),
}


def report_filename(fmt: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"leave-report-{today.isoformat()}.{FORMATS[fmt][1]}"


def _cell(value: Any) -> Any:
    if value is None:
        return "N/A"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return value


def render_csv(rows: List[Dict[str, Any]]) -> bytes:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([heading for _, heading in REPORT_COLUMNS])
    for row in rows:
        writer.writerow([_cell(row.get(key)) for key, _ in REPORT_COLUMNS])
    return output.getvalue().encode("utf-8")


def _apply_style(cell, style: Dict[str, Any]) -> None:
    for attr, value in style.items():
        setattr(cell, attr, value)


def render_excel(rows: List[Dict[str, Any]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Leave Report"

    for col, (_, heading) in enumerate(REPORT_COLUMNS, 1):
        _apply_style(sheet.cell(row=1, column=col, value=heading), _HEADER_STYLE)
    for row_idx, row in enumerate(rows, 2):
        for col, (key, _) in enumerate(REPORT_COLUMNS, 1):
            _apply_style(sheet.cell(row=row_idx, column=col, value=_cell(row.get(key))), _DATA_STYLE)

    for column_cells in sheet.columns:
        length = max(len(str(cell.value or "")) for cell in column_cells)
        sheet.column_dimensions[get_column_letter(column_cells[0].column)].width = min(length + 2, 50)
    sheet.freeze_panes = "A2"

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def render_pdf(rows: List[Dict[str, Any]], generated_on: Optional[date] = None) -> bytes:
    generated_on = generated_on or date.today()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        topMargin=1.5 * cm, bottomMargin=1.5 * cm,
        leftMargin=1.5 * cm, rightMargin=1.5 * cm,
        title="Leave Report",
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph("Leave Requests Report", styles["Title"]),
        Paragraph(f"Generated on: {generated_on.isoformat()}", styles["Normal"]),
        Spacer(1, 12),
    ]
    if not rows:
        story.append(Paragraph("No leave requests match the selected filters.", styles["Normal"]))
    else:
        table_data = [[heading for _, heading in PDF_COLUMNS]]
        for row in rows:
            table_data.append([str(_cell(row.get(key))) for key, _ in PDF_COLUMNS])
        table = Table(table_data, repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#366092")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F2F2")]),
        ]))
        story.append(table)
    doc.build(story)
    return buffer.getvalue()


def render(fmt: str, rows: List[Dict[str, Any]]) -> bytes:
    if fmt == "csv":
        return render_csv(rows)
    if fmt == "excel":
        return render_excel(rows)
    return render_pdf(rows)
