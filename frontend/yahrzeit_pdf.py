#!/usr/bin/env python3
"""
Neshama Yahrzeit Schedule PDF

Generates a printable yahrzeit schedule: the Hebrew date of passing and a
table of the coming yahrzeits, in the site's serif typography and warm palette.
"""

import io
from datetime import datetime

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, HRFlowable
)

# ── Color Palette (matches site CSS variables) ────────────────────
CREAM = HexColor('#FAF9F6')
SAGE_DARK = HexColor('#8a9a8d')
TERRACOTTA = HexColor('#D2691E')
DARK_BROWN = HexColor('#3E2723')
LIGHT_TAUPE = HexColor('#D4C5B9')
GOLD = HexColor('#C9A96E')
SOFT_GOLD = HexColor('#F0E6D3')


def _build_styles():
    """Paragraph styles for the schedule."""
    styles = {}

    styles['title'] = ParagraphStyle(
        'ScheduleTitle',
        fontName='Times-Bold',
        fontSize=26,
        leading=32,
        textColor=DARK_BROWN,
        alignment=TA_CENTER,
        spaceAfter=4,
    )

    styles['subtitle'] = ParagraphStyle(
        'Subtitle',
        fontName='Times-Italic',
        fontSize=12,
        leading=16,
        textColor=SAGE_DARK,
        alignment=TA_CENTER,
        spaceAfter=4,
    )

    styles['section_heading'] = ParagraphStyle(
        'SectionHeading',
        fontName='Times-Bold',
        fontSize=16,
        leading=22,
        textColor=DARK_BROWN,
        alignment=TA_CENTER,
        spaceBefore=12,
        spaceAfter=8,
    )

    styles['note'] = ParagraphStyle(
        'CandleNote',
        fontName='Times-Italic',
        fontSize=11,
        leading=15,
        textColor=TERRACOTTA,
        alignment=TA_CENTER,
        spaceBefore=4,
        spaceAfter=12,
    )

    styles['cell'] = ParagraphStyle(
        'Cell',
        fontName='Times-Roman',
        fontSize=10,
        leading=13,
        textColor=DARK_BROWN,
    )

    styles['footer'] = ParagraphStyle(
        'Footer',
        fontName='Times-Italic',
        fontSize=9,
        leading=12,
        textColor=SAGE_DARK,
        alignment=TA_CENTER,
    )

    return styles


def _gold_divider():
    return HRFlowable(
        width='40%',
        thickness=1.5,
        color=GOLD,
        spaceBefore=8,
        spaceAfter=8,
        hAlign='CENTER',
    )


def _escape_html(text):
    """Escape text for use in reportlab Paragraph XML."""
    if not text:
        return ''
    text = str(text)
    text = text.replace('&', '&amp;')
    text = text.replace('<', '&lt;')
    text = text.replace('>', '&gt;')
    text = text.replace('"', '&quot;')
    return text


def _schedule_table(occurrences, styles):
    rows = [['Year', 'Gregorian Date', 'Hebrew Date']]
    past_rows = []
    for i, occurrence in enumerate(occurrences, start=1):
        rows.append([
            str(occurrence.cycle_number),
            Paragraph(_escape_html(occurrence.gregorian_date.long_format()), styles['cell']),
            Paragraph(_escape_html(occurrence.hebrew_date.display()), styles['cell']),
        ])
        if occurrence.is_past:
            past_rows.append(i)

    table = Table(rows, colWidths=[0.7 * inch, 3.2 * inch, 2.6 * inch], repeatRows=1)
    style = [
        ('FONTNAME', (0, 0), (-1, 0), 'Times-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (-1, -1), DARK_BROWN),
        ('BACKGROUND', (0, 0), (-1, 0), SOFT_GOLD),
        ('LINEBELOW', (0, 0), (-1, -1), 0.5, LIGHT_TAUPE),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ALIGN', (0, 0), (0, -1), 'CENTER'),
        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
    ]
    for row in past_rows:
        style.append(('TEXTCOLOR', (0, row), (-1, row), SAGE_DARK))
    table.setStyle(TableStyle(style))
    return table


def _header_footer(canvas, doc, deceased_name=''):
    """Draw page background, footer and decorative lines."""
    canvas.saveState()

    canvas.setFillColor(CREAM)
    canvas.rect(0, 0, letter[0], letter[1], fill=1, stroke=0)

    canvas.setFont('Times-Italic', 8)
    canvas.setFillColor(SAGE_DARK)
    canvas.drawCentredString(
        letter[0] / 2, 0.5 * inch,
        f'Yahrzeit Schedule for {deceased_name}  •  neshama.ca'
    )
    canvas.drawRightString(
        letter[0] - 0.75 * inch, 0.5 * inch,
        f'Page {doc.page}'
    )

    canvas.setStrokeColor(GOLD)
    canvas.setLineWidth(0.5)
    canvas.line(0.75 * inch, letter[1] - 0.6 * inch, letter[0] - 0.75 * inch, letter[1] - 0.6 * inch)
    canvas.line(0.75 * inch, 0.7 * inch, letter[0] - 0.75 * inch, 0.7 * inch)

    canvas.restoreState()


def generate_schedule_pdf(deceased_name, hebrew_date_of_death, occurrences, date_of_death=''):
    """
    Generate a yahrzeit schedule PDF.

    Args:
        deceased_name: display name (blank becomes 'Loved One')
        hebrew_date_of_death: e.g. '15 Shevat 5785'
        occurrences: YahrzeitOccurrence list in cycle order
        date_of_death: optional Gregorian date string for the subtitle

    Returns:
        bytes — the PDF file content
    """
    buffer = io.BytesIO()
    styles = _build_styles()
    deceased_name = deceased_name or 'Loved One'

    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        topMargin=0.85 * inch,
        bottomMargin=0.85 * inch,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        title=f'Yahrzeit Schedule - {deceased_name}',
        author='Neshama',
        subject=f'Yahrzeit dates for {deceased_name}',
    )

    story = [Spacer(1, 0.4 * inch)]
    story.append(Paragraph(_escape_html(deceased_name), styles['title']))
    story.append(_gold_divider())

    if date_of_death:
        story.append(Paragraph(f'Date of Passing: {_escape_html(date_of_death)}', styles['subtitle']))
    story.append(Paragraph(f'Hebrew Date: {_escape_html(hebrew_date_of_death)}', styles['subtitle']))

    story.append(Paragraph('Yahrzeit Dates', styles['section_heading']))
    story.append(Paragraph(
        'Light the yahrzeit candle at sunset the evening before each date.',
        styles['note']
    ))

    if occurrences:
        story.append(_schedule_table(occurrences, styles))
    else:
        story.append(Paragraph('No yahrzeit dates were calculated.', styles['subtitle']))

    story.append(Spacer(1, 0.3 * inch))
    story.append(_gold_divider())
    story.append(Paragraph('May their memory be a blessing.', styles['note']))

    generated_date = datetime.now().strftime('%B %d, %Y')
    story.append(Paragraph(
        f'Generated on {generated_date} via <a href="https://neshama.ca" color="#D2691E">neshama.ca</a>',
        styles['footer']
    ))

    def on_page(canvas, doc):
        _header_footer(canvas, doc, deceased_name)

    doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes
