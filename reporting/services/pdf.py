"""
PDF rendition of an inspection report.

The layout follows the paper form used on board: a header box with the
organization, file numbers, revision, form number and date, then one
table row per deficiency split into a SHIP STAFF and an OFFICE part.
The office remarks cell carries the entry status and the signature of
the office user who signed it off.
"""
from __future__ import annotations

import io
import logging
import re
from typing import Optional
from xml.sax.saxutils import escape

from django.core.files.storage import default_storage
from django.utils import timezone
from PIL import Image as PILImage
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from reporting.models import InspectionEntry, InspectionReport
from reporting.services.uploads import storage_key

logger = logging.getLogger(__name__)

ACCENT = colors.HexColor('#7340bf')
OFFICE_TINT = colors.HexColor('#efe6ff')

STATUS_LABELS = dict(InspectionEntry.STATUS_CHOICES)

# (header, share of the table width)
COLUMNS = [
    ('SR NO', 0.04),
    ('DEFICIENCY', 0.14),
    ("MASTER'S - CAUSE<br/>ANALYSIS", 0.12),
    ('CORRECTIVE ACTION', 0.12),
    ('PREVENTIVE ACTION', 0.12),
    ('COMPL DATE', 0.08),
    ('COMPANY ANALYSIS', 0.20),
    ('REMARKS*', 0.18),
]
SHIP_STAFF_COLUMNS = 6


def _sanitize(value: str, upper: bool = False) -> str:
    value = re.sub(r'[^a-zA-Z0-9\s-]', '', value)
    value = re.sub(r'\s+', '-', value)
    return value.upper() if upper else value.lower()


def pdf_filename(report: InspectionReport, now=None) -> str:
    """``Inspection-report-<INSPECTEDBY>-<ship-name>-<ddmmyyyyhhmmss>.pdf``"""
    now = timezone.localtime(now or timezone.now())
    inspected_by = _sanitize(report.inspected_by or 'UNKNOWN', upper=True)
    ship = _sanitize(report.vessel.name if report.vessel_id else 'unknown')
    return f"Inspection-report-{inspected_by}-{ship}-{now.strftime('%d%m%Y%H%M%S')}.pdf"


def _image(path: Optional[str], width: float, height: float) -> Optional[Image]:
    """Load an uploaded image from storage, ``None`` when unavailable."""
    if not path:
        return None
    name = storage_key(path)
    if not default_storage.exists(name):
        logger.warning('Image %s referenced by a report is missing from storage', name)
        return None
    with default_storage.open(name, 'rb') as fh:
        data = io.BytesIO(fh.read())
    # reportlab reads images lazily, so decode now to keep bad files out of the build
    try:
        with PILImage.open(data) as img:
            img.verify()
        data.seek(0)
        return Image(data, width=width, height=height, kind='proportional', lazy=0)
    except (OSError, SyntaxError, ValueError) as e:
        logger.warning('Image %s cannot be rendered: %s', name, e)
        return None


def _p(text, style) -> Paragraph:
    return Paragraph(escape(str(text)) if text not in (None, '') else '-', style)


def _header(report: InspectionReport, width: float, styles) -> Table:
    org = report.organization
    cell = styles['cell']
    logo = _image(org.logo, 18 * mm, 18 * mm)
    name = Paragraph(f"<b>{escape(org.name)}</b><br/>FORM MANUAL", styles['org'])
    date = report.inspection_date.strftime('%d/%m/%Y') if report.inspection_date else '-'
    data = [
        [logo or '', name, Paragraph(f"<b>REVISION#</b> {escape(report.revision_no or '1')}", cell),
         Paragraph(f'<b>DATE</b> {date}', cell)],
        ['', '', Paragraph(f"<b>FORM NO:</b> {escape(report.form_no or '-')}", cell), ''],
        [Paragraph("<b>SHIP'S FILE NO:</b> " + escape(report.ship_file_no or report.vessel.ship_file_no or '-'), cell),
         Paragraph('<b>OFFICE FILE NO:</b> ' + escape(report.office_file_no or '-'), cell), '', ''],
    ]
    table = Table(data, colWidths=[width * 0.15, width * 0.45, width * 0.2, width * 0.2])
    table.setStyle(TableStyle([
        ('BOX', (0, 0), (-1, -1), 1, colors.black),
        ('INNERGRID', (0, 0), (-1, -1), 0.5, colors.black),
        ('SPAN', (0, 0), (0, 1)),
        ('SPAN', (1, 0), (1, 1)),
        ('SPAN', (2, 1), (3, 1)),
        ('SPAN', (1, 2), (3, 2)),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    return table


def _remarks(entry: InspectionEntry, styles):
    parts = [Paragraph(f'<b>{escape(STATUS_LABELS.get(entry.status, entry.status))}</b>', styles['cell'])]
    signer = entry.office_sign_user
    if signer is not None:
        sig = _image(signer.signature_image, 30 * mm, 10 * mm)
        if sig is not None:
            parts.append(sig)
        when = timezone.localtime(entry.office_sign_date).strftime('%d/%m/%Y') if entry.office_sign_date else ''
        parts.append(Paragraph(f'{escape(signer.name)} {when}'.strip(), styles['small']))
    return parts


def _entries_table(report: InspectionReport, width: float, styles) -> Table:
    head = styles['head']
    cell = styles['cell']
    group_row = [Paragraph('SHIP STAFF', head)] + [''] * (SHIP_STAFF_COLUMNS - 1) + [Paragraph('OFFICE', head), '']
    header_row = [Paragraph(title, head) for title, _ in COLUMNS]
    rows = [group_row, header_row]
    entries = list(report.entries.all())
    for entry in entries:
        rows.append([
            _p(entry.sr_no, cell),
            _p(entry.deficiency, cell),
            _p(entry.masters_cause_analysis, cell),
            _p(entry.corrective_action, cell),
            _p(entry.preventive_action, cell),
            _p(entry.completion_date.strftime('%d/%m/%Y') if entry.completion_date else None, cell),
            _p(entry.company_analysis, cell),
            _remarks(entry, styles),
        ])
    if not entries:
        rows.append([Paragraph('No deficiencies recorded', cell)] + [''] * (len(COLUMNS) - 1))

    table = Table(rows, colWidths=[width * share for _, share in COLUMNS], repeatRows=2)
    style = [
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
        ('SPAN', (0, 0), (SHIP_STAFF_COLUMNS - 1, 0)),
        ('SPAN', (SHIP_STAFF_COLUMNS, 0), (-1, 0)),
        ('BACKGROUND', (0, 0), (SHIP_STAFF_COLUMNS - 1, 1), colors.HexColor('#f2f2f2')),
        ('BACKGROUND', (SHIP_STAFF_COLUMNS, 0), (-1, 1), OFFICE_TINT),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]
    if not entries:
        style.append(('SPAN', (0, 2), (-1, 2)))
    table.setStyle(TableStyle(style))
    return table


def _styles():
    base = getSampleStyleSheet()
    return {
        'title': ParagraphStyle('ReportTitle', parent=base['Heading1'], fontSize=14, alignment=1,
                                textColor=ACCENT, spaceAfter=6),
        'org': ParagraphStyle('Org', parent=base['Normal'], fontSize=11, leading=14, alignment=1),
        'head': ParagraphStyle('Head', parent=base['Normal'], fontName='Helvetica-Bold', fontSize=7,
                               leading=9, alignment=1),
        'cell': ParagraphStyle('Cell', parent=base['Normal'], fontSize=7, leading=9),
        'small': ParagraphStyle('Small', parent=base['Normal'], fontSize=6, leading=8, textColor=colors.grey),
        'info': ParagraphStyle('Info', parent=base['Normal'], fontSize=9, leading=12),
    }


def render_report(report: InspectionReport) -> bytes:
    """Build the PDF and return its bytes."""
    buffer = io.BytesIO()
    page_size = landscape(A4)
    margin = 14 * mm
    doc = SimpleDocTemplate(
        buffer, pagesize=page_size,
        leftMargin=margin, rightMargin=margin, topMargin=margin, bottomMargin=margin,
        title=report.title, author=report.organization.name,
    )
    width = page_size[0] - 2 * margin
    styles = _styles()
    footer = report.organization.footer_text

    def on_page(canvas, document):
        canvas.saveState()
        canvas.setFont('Helvetica', 7)
        canvas.setFillColor(colors.grey)
        if footer:
            canvas.drawString(margin, 8 * mm, footer[:200])
        canvas.drawRightString(page_size[0] - margin, 8 * mm, f'Page {document.page}')
        canvas.restoreState()

    vessel = report.vessel
    info = (
        f'<b>Vessel:</b> {escape(vessel.name)}'
        f" &nbsp; <b>IMO:</b> {escape(vessel.imo_number or '-')}"
        f" &nbsp; <b>Inspected by:</b> {escape(report.inspected_by or '-')}"
        f" &nbsp; <b>Applicable FOM sections:</b> {escape(report.applicable_fom_sections or '-')}"
    )
    story = [
        _header(report, width, styles),
        Spacer(1, 4 * mm),
        Paragraph(escape(report.title), styles['title']),
        Paragraph(info, styles['info']),
        Spacer(1, 3 * mm),
        _entries_table(report, width, styles),
        Spacer(1, 2 * mm),
        Paragraph('* Remarks: status of the deficiency and office sign-off.', styles['small']),
    ]
    doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
    return buffer.getvalue()
