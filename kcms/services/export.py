"""Export of registration lists to XLSX workbooks and DOCX documents."""
from __future__ import annotations

import io
import re
from datetime import date, datetime
from typing import Any, Iterable

import openpyxl
from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from kcms.labels import NOT_SPECIFIED, belt_label

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
DOCX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

EXPORT_FORMATS = {
    'xlsx': XLSX_MIMETYPE,
    'docx': DOCX_MIMETYPE,
}

HEADERS = [
    'م',
    'اسم اللاعب',
    'الحزام',
    'تاريخ الميلاد',
    'رقم الملف',
    'اسم المدرب',
    'المؤسسة',
    'الفترة',
    'تاريخ التسجيل',
    'بداية الفترة',
    'نهاية الفترة',
]

COLUMN_WIDTHS = [5, 25, 12, 15, 10, 25, 25, 25, 15, 15, 15]

SUMMARY_TITLE = 'ملخص'
TOTAL_LABEL = 'إجمالي عدد اللاعبين'


def _index(items: Iterable[Any] | dict | None) -> dict[str, Any]:
    if items is None:
        return {}
    if isinstance(items, dict):
        return items
    return {item.id: item for item in items}


def _format_date(value: date | datetime | None) -> str:
    if value is None:
        return NOT_SPECIFIED
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime('%Y-%m-%d')


def build_export_table(
    registrations: list[Any],
    periods: Iterable[Any] | dict | None = None,
    coaches: Iterable[Any] | dict | None = None,
    players: Iterable[Any] | dict | None = None,
    organizations: Iterable[Any] | dict | None = None,
    generated_at: datetime | None = None,
    summary_extras: list[tuple[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Shape registration rows into a flat table plus a summary block.

    One output row is produced per registration, in input order, so the
    row count and the summary total always equal ``len(registrations)``.
    Period, coach, player and organization details are looked up in the
    collections already loaded by the caller; missing references render
    as "غير محدد". ``summary_extras`` (such as the coach and organization
    names of a coach export) follow the total in the summary block.

    Returns:
        {'headers': [...], 'rows': [[...], ...], 'summary': [(label, value), ...],
         'total': int, 'generated_at': datetime}
    """
    periods_by_id = _index(periods)
    coaches_by_id = _index(coaches)
    players_by_id = _index(players)
    organizations_by_id = _index(organizations)
    generated_at = generated_at or datetime.now()

    rows = []
    for sequence, registration in enumerate(registrations, start=1):
        period = periods_by_id.get(registration.period_id)
        coach = coaches_by_id.get(registration.coach_id)
        player = players_by_id.get(registration.player_id)

        organization_id = getattr(player, 'organization_id', None) or getattr(coach, 'organization_id', None)
        organization = organizations_by_id.get(organization_id) if organization_id else None
        file_number = getattr(player, 'file_number', None)

        rows.append([
            sequence,
            registration.player_name,
            belt_label(registration.last_belt),
            _format_date(registration.birth_date),
            file_number if file_number is not None else NOT_SPECIFIED,
            coach.full_name if coach else NOT_SPECIFIED,
            organization.name if organization else NOT_SPECIFIED,
            period.name if period else NOT_SPECIFIED,
            _format_date(registration.created_at),
            _format_date(period.start_date) if period else NOT_SPECIFIED,
            _format_date(period.end_date) if period else NOT_SPECIFIED,
        ])

    total = len(rows)
    summary = [
        (TOTAL_LABEL, total),
        *(summary_extras or []),
        ('عدد المدربين', len({r.coach_id for r in registrations})),
        ('عدد الفترات', len({r.period_id for r in registrations})),
        ('تاريخ التحميل', generated_at.strftime('%Y-%m-%d')),
        ('وقت التحميل', generated_at.strftime('%H:%M:%S')),
    ]

    return {
        'headers': list(HEADERS),
        'rows': rows,
        'summary': summary,
        'total': total,
        'generated_at': generated_at,
    }


def write_xlsx(table: dict[str, Any], sheet_title: str = 'اللاعبين المسجلين') -> bytes:
    """Render an export table as a single right-to-left worksheet."""
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = sheet_title[:31]
    sheet.sheet_view.rightToLeft = True

    # Header styling
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")

    sheet.append(table['headers'])
    for cell in sheet[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center')

    for row in table['rows']:
        sheet.append(row)

    sheet.append([])
    sheet.append([SUMMARY_TITLE])
    sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True)
    for label, value in table['summary']:
        sheet.append(['', label, value])

    for idx, width in enumerate(COLUMN_WIDTHS, start=1):
        sheet.column_dimensions[get_column_letter(idx)].width = width

    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()


# Schema-order successors of w:bidi in w:pPr and of w:bidiVisual in w:tblPr
PPR_AFTER_BIDI = (
    'w:adjustRightInd', 'w:snapToGrid', 'w:spacing', 'w:ind', 'w:contextualSpacing',
    'w:mirrorIndents', 'w:suppressOverlap', 'w:jc', 'w:textDirection', 'w:textAlignment',
    'w:textboxTightWrap', 'w:outlineLvl', 'w:divId', 'w:cnfStyle', 'w:rPr', 'w:sectPr',
    'w:pPrChange',
)
TBLPR_AFTER_BIDI_VISUAL = (
    'w:tblStyleRowBandSize', 'w:tblStyleColBandSize', 'w:tblW', 'w:jc', 'w:tblCellSpacing',
    'w:tblInd', 'w:tblBorders', 'w:shd', 'w:tblLayout', 'w:tblCellMar', 'w:tblLook',
    'w:tblCaption', 'w:tblDescription', 'w:tblPrChange',
)


def _set_rtl(paragraph) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    bidi = OxmlElement('w:bidi')
    bidi.set(qn('w:val'), '1')
    p_pr.insert_element_before(bidi, *PPR_AFTER_BIDI)


def _set_table_rtl(table) -> None:
    tbl_pr = table._tbl.tblPr
    tbl_pr.insert_element_before(OxmlElement('w:bidiVisual'), *TBLPR_AFTER_BIDI_VISUAL)


def _add_paragraph(document, text: str, size: int = 11, bold: bool = False,
                   alignment=WD_ALIGN_PARAGRAPH.RIGHT):
    paragraph = document.add_paragraph()
    _set_rtl(paragraph)
    paragraph.alignment = alignment
    run = paragraph.add_run(text)
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.rtl = True
    return paragraph


def write_docx(
    table: dict[str, Any],
    title: str,
    metadata: list[tuple[str, Any]] | None = None,
    footer_notes: list[str] | None = None,
) -> bytes:
    """Render an export table as a document: title, metadata, one table, summary and notes."""
    document = Document()
    document.styles['Normal'].font.rtl = True

    _add_paragraph(document, title, size=16, bold=True, alignment=WD_ALIGN_PARAGRAPH.CENTER)
    for label, value in metadata or []:
        _add_paragraph(document, f"{label}: {value}")

    grid = document.add_table(rows=1, cols=len(table['headers']))
    grid.style = 'Table Grid'
    grid.alignment = WD_TABLE_ALIGNMENT.CENTER
    _set_table_rtl(grid)

    for cell, header in zip(grid.rows[0].cells, table['headers']):
        cell.text = str(header)
        for run in cell.paragraphs[0].runs:
            run.font.bold = True

    for row in table['rows']:
        cells = grid.add_row().cells
        for cell, value in zip(cells, row):
            cell.text = str(value)

    _add_paragraph(document, SUMMARY_TITLE, size=12, bold=True)
    for label, value in table['summary']:
        _add_paragraph(document, f"{label}: {value}")

    for note in footer_notes or []:
        _add_paragraph(document, note, size=9)

    output = io.BytesIO()
    document.save(output)
    return output.getvalue()


def export_filename(prefix: str, name: str | None, day: date | None = None, extension: str = 'xlsx') -> str:
    """Build a download name embedding the coach/organization name and the date."""
    day = day or date.today()
    safe_name = re.sub(r'[\\/:*?"<>|]+', '', (name or '').strip())
    safe_name = re.sub(r'\s+', '_', safe_name) or 'كشف'
    return f"{prefix}_{safe_name}_{day.isoformat()}.{extension}"


__all__ = [
    'EXPORT_FORMATS',
    'HEADERS',
    'COLUMN_WIDTHS',
    'build_export_table',
    'write_xlsx',
    'write_docx',
    'export_filename',
]
