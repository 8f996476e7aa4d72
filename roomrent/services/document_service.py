"""
Printable invoice rendering.

Read-only projection of an invoice and its room, tenant, contract and
usage rows into a one-page PDF.
"""
import io
from typing import Dict, List

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT, TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.database.models import Invoice
from roomrent.services.invoice_service import get_invoice
from roomrent.utils.formatting import (
    format_amount, format_date, format_period, format_reading, get_status_badge
)

PRIMARY = colors.HexColor("#1f6feb")
MUTED = colors.HexColor("#5e6d80")
BORDER = colors.HexColor("#d0d7de")
LIGHT_BG = colors.HexColor("#f6f8fa")


def _build_styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "Title", parent=base["Normal"],
            fontSize=20, fontName="Helvetica-Bold", textColor=PRIMARY, spaceAfter=4,
        ),
        "label": ParagraphStyle(
            "Label", parent=base["Normal"],
            fontSize=8, fontName="Helvetica-Bold", textColor=MUTED,
        ),
        "value": ParagraphStyle(
            "Value", parent=base["Normal"],
            fontSize=10, fontName="Helvetica", spaceAfter=4,
        ),
        "total": ParagraphStyle(
            "Total", parent=base["Normal"],
            fontSize=14, fontName="Helvetica-Bold", textColor=PRIMARY, alignment=TA_RIGHT,
        ),
        "footer": ParagraphStyle(
            "Footer", parent=base["Normal"],
            fontSize=8, fontName="Helvetica", textColor=MUTED, alignment=TA_CENTER,
        ),
    }


def _render_parties(invoice: Invoice, s: dict) -> list:
    room = invoice.room
    tenant = invoice.tenant
    landlord = room.landlord if room else None

    address = ", ".join(filter(None, [room.ward, room.district, room.province])) if room else ""

    left = [
        Paragraph("TENANT", s["label"]),
        Paragraph(tenant.name if tenant else "-", s["value"]),
        Paragraph((tenant.phone or "-") if tenant else "-", s["value"]),
        Paragraph("LANDLORD", s["label"]),
        Paragraph(landlord.name if landlord else "-", s["value"]),
    ]
    right = [
        Paragraph("ROOM", s["label"]),
        Paragraph(room.room_number if room else str(invoice.room_id), s["value"]),
        Paragraph(address or "-", s["value"]),
        Paragraph("PERIOD", s["label"]),
        Paragraph(format_period(invoice.month, invoice.year), s["value"]),
        Paragraph("DUE DATE", s["label"]),
        Paragraph(format_date(invoice.due_date), s["value"]),
        Paragraph("STATUS", s["label"]),
        Paragraph(get_status_badge(invoice.status), s["value"]),
    ]

    table = Table([[left, right]], colWidths=[90 * mm, 80 * mm])
    table.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
    ]))
    return [table]


def _render_lines(invoice: Invoice) -> List[list]:
    usage = invoice.usage
    rows = [["Item", "Readings", "Quantity", "Unit price", "Amount"]]
    rows.append(["Room rent", "", "1", format_amount(invoice.room_price), format_amount(invoice.room_price)])

    electric_readings = (
        f"{format_reading(usage.electric_start)} - {format_reading(usage.electric_end)}" if usage else ""
    )
    water_readings = (
        f"{format_reading(usage.water_start)} - {format_reading(usage.water_end)}" if usage else ""
    )
    rows.append([
        "Electricity", electric_readings, format_reading(invoice.electric_usage),
        format_amount(invoice.electric_price), format_amount(invoice.electric_total),
    ])
    rows.append([
        "Water", water_readings, format_reading(invoice.water_usage),
        format_amount(invoice.water_price), format_amount(invoice.water_total),
    ])
    return rows


def render_invoice_pdf(invoice: Invoice) -> bytes:
    """Build the PDF for an invoice whose relations are already loaded."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        title=f"Invoice {invoice.id}",
    )
    s = _build_styles()

    story = [
        Paragraph(f"INVOICE #{invoice.id}", s["title"]),
        Spacer(1, 6),
    ]
    story.extend(_render_parties(invoice, s))
    story.append(Spacer(1, 12))

    lines = Table(_render_lines(invoice), colWidths=[35 * mm, 40 * mm, 25 * mm, 35 * mm, 35 * mm])
    lines.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("BACKGROUND", (0, 0), (-1, 0), LIGHT_BG),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, BORDER),
        ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
    ]))
    story.append(lines)
    story.append(Spacer(1, 12))

    story.append(Paragraph(f"Total: {format_amount(invoice.total_amount)}", s["total"]))
    if invoice.paid_date:
        story.append(Paragraph(f"Paid on {format_date(invoice.paid_date)}", s["value"]))
    story.append(Spacer(1, 24))
    story.append(Paragraph("Please pay before the due date.", s["footer"]))

    doc.build(story)
    return buf.getvalue()


async def render_invoice_document(session: AsyncSession, invoice_id: int) -> bytes:
    invoice = await get_invoice(session, invoice_id, with_relations=True)
    return render_invoice_pdf(invoice)
