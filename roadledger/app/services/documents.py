"""
Document rendering.

Lays out ledger snapshots, bills, memos and loading slips as PDF (reportlab
canvas) or spreadsheet (openpyxl). Pure presentation: every figure printed
comes from the record or snapshot handed in, nothing is recomputed here.
"""

import io
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from roadledger.app.core.config import settings
from roadledger.app.domain.ledger.snapshot import LedgerSnapshot

# ─── PALETTE ───
NAVY = HexColor('#1B2A4A')
SLATE = HexColor('#64748B')
SLATE_PALE = HexColor('#F1F5F9')
CHARCOAL = HexColor('#2D3748')
GREEN = HexColor('#166534')
ROSE = HexColor('#BE185D')

MARGIN = 15 * mm
ROW_HEIGHT = 6 * mm
HEADER_FILL = "1B2A4A"

LEDGER_COLUMNS = (
    # (title, width in mm, right aligned)
    ("Date", 24, False),
    ("Reference", 30, False),
    ("Particulars", 80, False),
    ("Credit", 28, True),
    ("Debit-Payment", 30, True),
    ("Debit-Advance", 30, True),
    ("Balance", 30, True),
)


def format_amount(value: Optional[float]) -> str:
    """Indian-style two-decimal amount without currency symbol."""
    if value is None:
        return ""
    return f"{value:,.2f}"


def format_balance(value: float) -> str:
    """Balances print as magnitude with Cr / Dr suffix."""
    suffix = "Cr" if value >= 0 else "Dr"
    return f"{format_amount(abs(value))} {suffix}"


def _fit(text: Optional[str], limit: int) -> str:
    text = text or ""
    return text if len(text) <= limit else text[: limit - 3] + "..."


class PdfPage:
    """
    Canvas wrapper that tracks the vertical cursor and starts a new page
    when the next line would cross the bottom margin.
    """

    def __init__(self, title: str, pagesize=A4, bottom_margin: float = None):
        self.buffer = io.BytesIO()
        self.pagesize = pagesize
        self.width, self.height = pagesize
        self.c = canvas.Canvas(self.buffer, pagesize=pagesize)
        self.c.setTitle(title)
        self.c.setAuthor(settings.company_name)
        self.title = title
        self.bottom = bottom_margin if bottom_margin is not None else settings.pdf_bottom_margin_mm * mm
        self.page_count = 1
        self.on_new_page = None
        self.y = self.height - MARGIN

    def ensure_space(self, needed: float) -> bool:
        """Start a new page when needed points do not fit. Returns True on a page break."""
        if self.y - needed >= self.bottom:
            return False
        self.footer()
        self.c.showPage()
        self.page_count += 1
        self.y = self.height - MARGIN
        if self.on_new_page:
            self.on_new_page()
        return True

    def text(self, x: float, value: str, font: str = "Helvetica", size: float = 9, right: bool = False, color=CHARCOAL):
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        if right:
            self.c.drawRightString(x, self.y, value)
        else:
            self.c.drawString(x, self.y, value)

    def line(self, gap: float = 2 * mm, color=SLATE):
        self.c.setStrokeColor(color)
        self.c.setLineWidth(0.5)
        self.c.line(MARGIN, self.y - gap, self.width - MARGIN, self.y - gap)

    def heading(self, subtitle: Optional[str] = None):
        self.text(self.width / 2 - 60 * mm, settings.company_name, font="Helvetica-Bold", size=14, color=NAVY)
        self.y -= 7 * mm
        self.text(MARGIN, self.title, font="Helvetica-Bold", size=11)
        if subtitle:
            self.text(self.width - MARGIN, subtitle, size=9, right=True, color=SLATE)
        self.line()
        self.y -= 8 * mm

    def footer(self):
        self.c.setFont("Helvetica", 7)
        self.c.setFillColor(SLATE)
        self.c.drawCentredString(
            self.width / 2, 8 * mm,
            f"System Generated - {settings.company_name} - Page {self.page_count}",
        )

    def key_values(self, pairs: Iterable[Tuple[str, str]], label_width: float = 45 * mm):
        for label, value in pairs:
            self.ensure_space(ROW_HEIGHT)
            self.text(MARGIN, label, font="Helvetica-Bold")
            self.text(MARGIN + label_width, value)
            self.y -= ROW_HEIGHT

    def finish(self) -> bytes:
        self.footer()
        self.c.save()
        return self.buffer.getvalue()


def _range_label(snapshot: LedgerSnapshot) -> str:
    if snapshot.date_from is None and snapshot.date_to is None:
        return "All dates"
    start = snapshot.date_from.isoformat() if snapshot.date_from else "start"
    end = snapshot.date_to.isoformat() if snapshot.date_to else "today"
    return f"{start} to {end}"


def render_ledger_pdf(snapshot: LedgerSnapshot) -> bytes:
    """Landscape ledger table with a header row repeated on every page."""
    page = PdfPage(snapshot.title, pagesize=landscape(A4))
    page.heading(_range_label(snapshot))

    balance = snapshot.totals.current_balance
    page.text(MARGIN, f"Balance: {format_balance(balance)}", font="Helvetica-Bold", size=10,
              color=GREEN if balance >= 0 else ROSE)
    page.y -= 8 * mm

    def column_header():
        page.c.setFillColor(SLATE_PALE)
        page.c.rect(MARGIN, page.y - 2 * mm, page.width - 2 * MARGIN, ROW_HEIGHT, fill=1, stroke=0)
        x = MARGIN + 1 * mm
        for title, width, right in LEDGER_COLUMNS:
            edge = x + width * mm - 2 * mm if right else x
            page.text(edge, title, font="Helvetica-Bold", size=8, right=right)
            x += width * mm
        page.y -= ROW_HEIGHT

    page.on_new_page = column_header
    column_header()

    if snapshot.is_empty:
        page.text(MARGIN + 1 * mm, "No transactions in this period", color=SLATE)
        page.y -= ROW_HEIGHT

    for row in snapshot.rows:
        page.ensure_space(ROW_HEIGHT)
        values = (
            row.date.strftime("%d-%m-%Y"),
            _fit(row.reference, 16),
            _fit(row.description, 48),
            format_amount(row.credit) if row.credit else "",
            format_amount(row.debit_payment) if row.debit_payment else "",
            format_amount(row.debit_advance) if row.debit_advance else "",
            format_balance(row.running_balance),
        )
        x = MARGIN + 1 * mm
        for (title, width, right), value in zip(LEDGER_COLUMNS, values):
            edge = x + width * mm - 2 * mm if right else x
            page.text(edge, value, size=8, right=right)
            x += width * mm
        page.y -= ROW_HEIGHT

    page.ensure_space(2 * ROW_HEIGHT)
    page.line(gap=-1 * mm, color=NAVY)
    totals = snapshot.totals
    x = MARGIN + 1 * mm
    total_values = ("", "", "TOTAL", format_amount(totals.credit), format_amount(totals.debit_payment),
                    format_amount(totals.debit_advance), format_balance(totals.current_balance))
    for (title, width, right), value in zip(LEDGER_COLUMNS, total_values):
        edge = x + width * mm - 2 * mm if right else x
        page.text(edge, value, font="Helvetica-Bold", size=8, right=right)
        x += width * mm
    page.y -= ROW_HEIGHT

    return page.finish()


def ledger_sheet_rows(snapshot: LedgerSnapshot) -> List[Sequence]:
    """Spreadsheet body rows: one per ledger row plus a totals row."""
    rows = [
        [row.date, row.reference or "", row.description, row.credit, row.debit_payment,
         row.debit_advance, row.running_balance, row.remarks or ""]
        for row in snapshot.rows
    ]
    totals = snapshot.totals
    rows.append(["", "", "TOTAL", totals.credit, totals.debit_payment, totals.debit_advance,
                 totals.current_balance, ""])
    return rows


def render_ledger_xlsx(snapshot: LedgerSnapshot) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Ledger"

    ws.append([settings.company_name])
    ws.append([snapshot.title])
    ws.append([_range_label(snapshot)])
    ws.append([f"Balance: {format_balance(snapshot.totals.current_balance)}"])
    ws.append([])
    header = ["Date", "Reference", "Particulars", "Credit", "Debit-Payment", "Debit-Advance", "Balance", "Remarks"]
    ws.append(header)
    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill("solid", fgColor=HEADER_FILL)
        cell.alignment = Alignment(horizontal="center")
    ws["A1"].font = Font(bold=True, size=14)
    ws["A2"].font = Font(bold=True)

    for values in ledger_sheet_rows(snapshot):
        ws.append(values)
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)

    for row in ws.iter_rows(min_row=header_row + 1, min_col=4, max_col=7):
        for cell in row:
            cell.number_format = "#,##0.00"
    for row in ws.iter_rows(min_row=header_row + 1, max_col=1):
        for cell in row:
            cell.number_format = "DD-MM-YYYY"

    for letter, width in zip("ABCDEFGH", (12, 16, 40, 14, 15, 15, 15, 20)):
        ws.column_dimensions[letter].width = width
    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _date(value) -> str:
    return value.strftime("%d-%m-%Y") if value else ""


def render_bill_pdf(bill, slip=None) -> bytes:
    page = PdfPage(f"Bill {bill.bill_number}")
    page.heading(f"Date: {_date(bill.date)}")
    page.key_values([
        ("Bill No.", bill.bill_number),
        ("Party", bill.party_name or bill.party),
        ("Trip", _slip_trip(slip)),
        ("Status", bill.status.value.title()),
    ])
    page.y -= 4 * mm
    page.key_values([
        ("Bill Amount", format_amount(bill.bill_amount)),
        ("Detention", format_amount(bill.detention)),
        ("Extra", format_amount(bill.extra)),
        ("RTO", format_amount(bill.rto)),
        ("Total Freight", format_amount(bill.total_freight)),
        ("Mamool", format_amount(bill.mamool)),
        ("Penalties", format_amount(bill.penalties)),
        ("TDS", format_amount(bill.tds)),
        ("Commission Cut", format_amount(bill.party_commission_cut)),
        ("Net Amount", format_amount(bill.net_amount)),
    ])
    _advances(page, bill.advance_payments)
    if bill.narration:
        page.y -= 4 * mm
        page.key_values([("Narration", _fit(bill.narration, 90))])
    return page.finish()


def render_memo_pdf(memo, slip=None) -> bytes:
    page = PdfPage(f"Memo {memo.memo_number}")
    page.heading(f"Date: {_date(memo.date)}")
    page.key_values([
        ("Memo No.", memo.memo_number),
        ("Supplier", memo.supplier),
        ("Trip", _slip_trip(slip)),
        ("Status", memo.status.value.title()),
    ])
    page.y -= 4 * mm
    page.key_values([
        ("Freight", format_amount(memo.freight)),
        ("Commission", format_amount(memo.commission)),
        ("Mamool", format_amount(memo.mamool)),
        ("Detention", format_amount(memo.detention)),
        ("Extra", format_amount(memo.extra)),
        ("RTO", format_amount(memo.rto)),
        ("Net Amount", format_amount(memo.net_amount)),
    ])
    _advances(page, memo.advance_payments)
    if memo.narration:
        page.y -= 4 * mm
        page.key_values([("Narration", _fit(memo.narration, 90))])
    return page.finish()


def render_loading_slip_pdf(slip) -> bytes:
    page = PdfPage(f"Loading Slip {slip.slip_number}")
    page.heading(f"Date: {_date(slip.date)}")
    page.key_values([
        ("Slip No.", slip.slip_number),
        ("Party", slip.party),
        ("Supplier", slip.supplier or ""),
        ("Vehicle No.", slip.vehicle_no),
        ("From", slip.from_location),
        ("To", slip.to_location),
        ("Material", slip.material or ""),
        ("Dimension", slip.dimension or ""),
        ("Weight", "" if slip.weight is None else f"{slip.weight:g}"),
    ])
    page.y -= 4 * mm
    page.key_values([
        ("Freight", format_amount(slip.freight)),
        ("Advance", format_amount(slip.advance)),
        ("Balance", format_amount(slip.balance)),
        ("RTO", format_amount(slip.rto)),
        ("Total Freight", format_amount(slip.total_freight)),
    ])
    return page.finish()


def _slip_trip(slip) -> str:
    if slip is None:
        return ""
    return f"{slip.from_location} to {slip.to_location} ({slip.vehicle_no})"


def _advances(page: PdfPage, advances) -> None:
    if not advances:
        return
    page.y -= 4 * mm
    page.ensure_space(ROW_HEIGHT)
    page.text(MARGIN, "Advance Payments", font="Helvetica-Bold", size=10, color=NAVY)
    page.y -= ROW_HEIGHT
    for advance in advances:
        page.ensure_space(ROW_HEIGHT)
        page.text(MARGIN, _date(advance.date))
        page.text(MARGIN + 30 * mm, advance.mode.value.title())
        page.text(MARGIN + 55 * mm, _fit(advance.reference or advance.description, 50))
        page.text(page.width - MARGIN, format_amount(advance.amount), right=True)
        page.y -= ROW_HEIGHT


def generated_filename(stem: str, extension: str) -> str:
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in stem)
    return f"{safe}_{datetime.now().strftime('%Y%m%d')}.{extension}"
