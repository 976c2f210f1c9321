"""
PDF ticket rendering.

A single layout engine serves both the emailed ticket and the on-demand
download, so both are byte-identical for the same registration and event.

Layout is a top-down cursor on a fixed 80 x 150 mm page: draw an element,
move the cursor down by its height plus a fixed gap. Text is wrapped greedily
at word boundaries against the content width using the metrics of the ticket
font (built-in Helvetica unless a TrueType file is configured). Pages
never grow; detail rows that no longer fit on page two are skipped.
"""

import io
import os
import re
from datetime import datetime

import qrcode
from qrcode.constants import ERROR_CORRECT_H
from reportlab.lib.colors import Color, black, white
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from evntos.core.config import get_settings
from evntos.core.logging import get_logger
from evntos.models.event import Event
from evntos.models.registration import Registration

logger = get_logger(__name__)

PAGE_WIDTH = 80 * mm
PAGE_HEIGHT = 150 * mm

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

BRAND_ORANGE = Color(249 / 255, 115 / 255, 22 / 255)
TEXT_GRAY = Color(0.3, 0.3, 0.3)
LIGHT_GRAY = Color(0.5, 0.5, 0.5)

QR_SIZE = 40 * mm


def _register_ttf(path: str) -> str:
    name = os.path.splitext(os.path.basename(path))[0]
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, path))
    return name


def ticket_fonts() -> tuple[str, str]:
    """
    (regular, bold) font names for ticket text.

    Configured TrueType files are registered with reportlab on first use and
    embedded in every ticket. Without one, or if it cannot be loaded, the
    built-in Helvetica pair is used; it only covers Latin-1.
    """
    settings = get_settings()
    if not settings.TICKET_FONT_PATH:
        return FONT, FONT_BOLD
    try:
        regular = _register_ttf(settings.TICKET_FONT_PATH)
        bold = _register_ttf(settings.TICKET_FONT_BOLD_PATH or settings.TICKET_FONT_PATH)
    except (TTFError, OSError) as e:
        logger.error("ticket_font_unavailable", path=settings.TICKET_FONT_PATH, error=str(e))
        return FONT, FONT_BOLD
    return regular, bold


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Greedy word wrap. A single word wider than the box gets a line to itself."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and stringWidth(candidate, font, size) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def format_event_datetime(event_date: str, event_time: str) -> str:
    """'June 5, 2026, 07:30 PM'; 'N/A' when either half is missing."""
    if not (event_date or "").strip() or not (event_time or "").strip():
        return "N/A"
    try:
        moment = datetime.strptime(f"{event_date.strip()} {event_time.strip()}", "%Y-%m-%d %H:%M")
    except ValueError:
        return "Invalid Date/Time"
    return f"{moment:%B} {moment.day}, {moment.year}, {moment:%I:%M %p}"


def _safe_filename_part(text: str, default: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9\s]", "", text)
    cleaned = re.sub(r"\s+", "_", cleaned.strip())
    return cleaned or default


def ticket_filename(event: Event, registration: Registration) -> str:
    return (
        f"{_safe_filename_part(event.title, 'Event')}-Ticket-"
        f"{_safe_filename_part(registration.name, 'Guest')}.pdf"
    )


def render_qr_png(payload: str) -> bytes:
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_H, box_size=10, border=1)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class _Page:
    """Drawing helpers bound to one page and its vertical cursor."""

    def __init__(self, pdf: canvas.Canvas, margin: float, top_offset: float):
        self.pdf = pdf
        self.margin = margin
        self.content_width = PAGE_WIDTH - 2 * margin
        self.y = PAGE_HEIGHT - margin - top_offset

    def centered(self, text: str, font: str, size: float, color, y=None):
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        x = PAGE_WIDTH / 2 - stringWidth(text, font, size) / 2
        self.pdf.drawString(x, self.y if y is None else y, text)

    def wrapped(self, text, font, size, color, line_height, x=None, width=None, center=False):
        """Draw wrapped text starting at the cursor; the cursor ends below the last line."""
        x = self.margin if x is None else x
        width = self.content_width if width is None else width
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        for line in wrap_text(text, font, size, width):
            draw_x = x
            if center:
                draw_x = x + (width - stringWidth(line, font, size)) / 2
            self.pdf.drawString(draw_x, self.y, line)
            self.y -= line_height

    def rule(self):
        self.pdf.setStrokeColor(LIGHT_GRAY)
        self.pdf.setLineWidth(0.7)
        self.pdf.line(self.margin, self.y, PAGE_WIDTH - self.margin, self.y)


def _draw_front(pdf: canvas.Canvas, event: Event, registration: Registration, fonts) -> None:
    font, font_bold = fonts
    page = _Page(pdf, margin=6 * mm, top_offset=5 * mm)

    page.centered("evntos", font_bold, 22, BRAND_ORANGE)
    page.y -= 22 + 6 * mm

    banner_height = 12 * mm
    title_size = 11
    pdf.setFillColor(black)
    pdf.rect(page.margin, page.y - banner_height, page.content_width, banner_height, fill=1, stroke=0)
    banner_cursor = page.y
    page.y = banner_cursor - (banner_height - title_size) / 2 - title_size * 0.9
    page.wrapped(
        event.title, font_bold, title_size, white, title_size + 2,
        x=page.margin + 1 * mm, width=page.content_width - 2 * mm, center=True,
    )
    page.y = banner_cursor - (banner_height + 7 * mm)

    page.centered("GUEST TICKET", font_bold, 14, black)
    page.y -= 14 + 5 * mm

    qr_image = ImageReader(io.BytesIO(render_qr_png(registration.id)))
    pdf.drawImage(qr_image, PAGE_WIDTH / 2 - QR_SIZE / 2, page.y - QR_SIZE, QR_SIZE, QR_SIZE)
    page.y -= QR_SIZE + 4 * mm + 12

    page.wrapped(registration.name, font_bold, 12, black, 15, center=True)
    page.y -= 3 * mm
    page.wrapped(f"Ticket ID: {registration.id}", font, 9, TEXT_GRAY, 11, center=True)
    page.y -= 6 * mm

    page.centered("Present this page for entry.", font, 9, LIGHT_GRAY)


def _draw_details(pdf: canvas.Canvas, event: Event, registration: Registration, fonts) -> None:
    font, font_bold = fonts
    page = _Page(pdf, margin=8 * mm, top_offset=6 * mm)
    header_size = 13
    line_height = 9 + 4
    item_gap = 3.5 * mm

    def section(title: str):
        pdf.setFont(font_bold, header_size)
        pdf.setFillColor(BRAND_ORANGE)
        pdf.drawString(page.margin, page.y, title)
        page.y -= header_size + 2 * mm
        page.rule()
        page.y -= 5 * mm

    def item(label: str, value: str):
        if page.y < page.margin + header_size + line_height * 2:
            logger.warning("ticket_detail_skipped", label=label, registration_id=registration.id)
            return
        pdf.setFont(font_bold, 9)
        pdf.setFillColor(black)
        pdf.drawString(page.margin, page.y, label)
        page.y -= line_height
        page.wrapped(value, font, 9, TEXT_GRAY, line_height)
        page.y -= item_gap

    section("Guest Information")
    item("Full Name:", registration.name)
    item("Email:", registration.email)
    if registration.contact_number:
        item("Contact Number:", registration.contact_number)
    item("Ticket ID:", registration.id)

    page.y -= 7 * mm - item_gap

    section("Event Details")
    item("Event Name:", event.title)
    item("Date & Time:", format_event_datetime(event.event_date, event.event_time))
    if event.venue_name:
        item("Venue Name:", event.venue_name)
    if event.venue_address:
        address = event.venue_address.replace("\\n", "\n")
        item("Venue Address:", ", ".join(p.strip() for p in address.splitlines() if p.strip()))
    if event.map_link:
        item("Map Link:", event.map_link)
    if not (event.venue_name or event.venue_address or event.map_link):
        item("Location:", "Not specified")

    page.centered("Powered by evntos", font, 7, LIGHT_GRAY, y=page.margin - 2 * mm)


def render_ticket_pdf(event: Event, registration: Registration) -> bytes:
    """Two-page ticket: QR front page, guest and event details on the back."""
    buf = io.BytesIO()
    # invariant=1 drops the creation timestamp and random document id
    pdf = canvas.Canvas(buf, pagesize=(PAGE_WIDTH, PAGE_HEIGHT), invariant=1)
    pdf.setTitle(f"{event.title} - Ticket")
    pdf.setAuthor("evntos")

    fonts = ticket_fonts()
    _draw_front(pdf, event, registration, fonts)
    pdf.showPage()
    _draw_details(pdf, event, registration, fonts)
    pdf.showPage()
    pdf.save()

    logger.debug("ticket_rendered", registration_id=registration.id, event_id=event.id)
    return buf.getvalue()
