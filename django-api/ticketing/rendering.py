"""QR images and printable ticket PDFs."""

from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_Q
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ticketing.domain import Event, Ticket


def make_qr_image(data: str, size_px: int = 360):
    qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_Q, box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    # qrcode wraps the PIL image
    if hasattr(img, "get_image"):
        img = img.get_image()
    return img.convert("RGB").resize((size_px, size_px))


def make_qr_png(data: str, size_px: int = 360) -> bytes:
    buffer = BytesIO()
    make_qr_image(data, size_px).save(buffer, format="PNG")
    return buffer.getvalue()


def _days_label(ticket: Ticket) -> str:
    days = ticket.authorized_days
    if not days:
        return ""
    if len(days) == 1:
        return days[0].strftime("%d/%m/%Y")
    return f"{days[0].strftime('%d/%m/%Y')} - {days[-1].strftime('%d/%m/%Y')}"


def render_ticket_pdf(ticket: Ticket, event: Event) -> bytes:
    """One A4 page: event header, attendee, ticket type, valid days and the QR."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    w, h = A4

    c.setFont("Helvetica-Bold", 22)
    c.drawCentredString(w / 2, h - 3 * cm, event.name)
    c.setFont("Helvetica", 12)
    c.drawCentredString(w / 2, h - 3.8 * cm, event.location)

    y = h - 6 * cm
    lines = [
        ("Attendee", ticket.attendee.name),
        ("Ticket", ticket.ticket_type_name),
        ("Valid", _days_label(ticket)),
        ("Order", ticket.order_id),
    ]
    if ticket.is_courtesy:
        lines.append(("Courtesy", ticket.courtesy_type or "yes"))
    for label, value in lines:
        c.setFont("Helvetica-Bold", 12)
        c.drawString(3 * cm, y, f"{label}:")
        c.setFont("Helvetica", 12)
        c.drawString(6 * cm, y, value)
        y -= 0.8 * cm

    qr_size = 8 * cm
    qr = ImageReader(make_qr_image(ticket.qr_id))
    c.drawImage(qr, (w - qr_size) / 2, y - qr_size - 1 * cm, qr_size, qr_size)
    c.setFont("Helvetica", 9)
    c.drawCentredString(w / 2, y - qr_size - 1.6 * cm, ticket.qr_id)

    c.showPage()
    c.save()
    return buffer.getvalue()
