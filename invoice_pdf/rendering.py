"""Invoice PDF rendering logic."""

from __future__ import annotations

import io
from typing import List, Optional, Sequence, Tuple

from fpdf import FPDF  # type: ignore

from .fonts import FontManager
from .formatting import fmt_number, fmt_percent, fmt_total, wrap_text
from .models import Attachments, InvoiceRequest, LineItem
from .pagination import row_top
from .pdf_constants import (
    BILLING_ROWS_Y,
    COL_DESCRIPTION_X,
    COL_DISCOUNT_X,
    COL_QUANTITY_X,
    COL_TAX_RATE_X,
    COL_TOTAL_X,
    COL_UNIT_PRICE_X,
    COLUMN_GUTTER,
    FONT_SIZE_NORMAL,
    FONT_SIZE_TITLE,
    LINE_H_NORMAL,
    LOGO_W,
    LOGO_X,
    LOGO_Y,
    META_X,
    META_Y,
    PAGE_FORMAT,
    PARTY_X,
    RIGHT_EDGE,
    SHIPPING_ROWS_Y,
    SIGNATURE_GAP,
    SIGNATURE_W,
    SIGNATURE_X,
    TABLE_TOP,
    TITLE_Y,
)

TABLE_COLUMNS: Tuple[Tuple[str, float], ...] = (
    ("Description", COL_DESCRIPTION_X),
    ("Unit Price", COL_UNIT_PRICE_X),
    ("Quantity", COL_QUANTITY_X),
    ("Discount", COL_DISCOUNT_X),
    ("Tax Rate", COL_TAX_RATE_X),
    ("Total", COL_TOTAL_X),
)


def item_cells(item: LineItem) -> List[str]:
    """Text of one table row, in column order."""
    return [
        item.description,
        fmt_number(item.unit_price),
        fmt_number(item.quantity),
        fmt_number(item.discount),
        fmt_percent(item.tax_rate),
        fmt_total(item.total),
    ]


def seller_lines(invoice: InvoiceRequest) -> List[str]:
    return [
        f"Seller: {invoice.seller_name}",
        f"Address: {invoice.seller_address}",
        f"City, State, Pincode: {invoice.seller_city_state_pincode}",
        f"PAN No: {invoice.seller_pan}",
        f"GST Registration No: {invoice.seller_gst}",
        f"Place of Supply: {invoice.place_of_supply}",
        f"Order No: {invoice.order_no}",
        f"Order Date: {invoice.order_date}",
        f"Invoice No: {invoice.invoice_no}",
        f"Invoice Date: {invoice.invoice_date}",
        f"Reverse Charge: {invoice.reverse_charge}",
    ]


def billing_lines(invoice: InvoiceRequest) -> List[str]:
    return [
        f"Billing Name: {invoice.billing_name}",
        f"Billing Address: {invoice.billing_address}",
        f"Billing City, State, Pincode: {invoice.billing_city_state_pincode}",
        f"Billing State/UT Code: {invoice.billing_state_ut_code}",
    ]


def shipping_lines(invoice: InvoiceRequest) -> List[str]:
    return [
        f"Shipping Name: {invoice.shipping_name}",
        f"Shipping Address: {invoice.shipping_address}",
        f"Shipping City, State, Pincode: {invoice.shipping_city_state_pincode}",
        f"Shipping State/UT Code: {invoice.shipping_state_ut_code}",
    ]


class InvoiceRenderer:
    def __init__(
        self,
        invoice: InvoiceRequest,
        attachments: Optional[Attachments] = None,
        use_core_font: bool = False,
    ) -> None:
        self.invoice = invoice
        self.attachments = attachments or Attachments()
        self.pdf = FPDF(unit="pt", format=PAGE_FORMAT)
        self.pdf.set_auto_page_break(False)
        self.pdf.add_page()

        self.fonts = FontManager(self.pdf, use_core_font=use_core_font)

    def _column_width(self, x: float) -> float:
        following = [col_x for _, col_x in TABLE_COLUMNS if col_x > x]
        right = min(following) if following else RIGHT_EDGE
        return right - x - COLUMN_GUTTER

    def _draw_right_block(self, left: float, top: float, text: str) -> int:
        """Draw ``text`` right-aligned between ``left`` and the margin.

        Returns the number of lines used after wrapping.
        """
        lines = wrap_text(self.fonts, text, RIGHT_EDGE - left, FONT_SIZE_NORMAL)
        for i, line in enumerate(lines):
            self.fonts.draw_text_right(RIGHT_EDGE, top + i * LINE_H_NORMAL, line, FONT_SIZE_NORMAL)
        return len(lines)

    def _draw_cell(self, x: float, top: float, text: str) -> None:
        lines = wrap_text(self.fonts, text, self._column_width(x), FONT_SIZE_NORMAL)
        for i, line in enumerate(lines):
            self.fonts.draw_text(x, top + i * LINE_H_NORMAL, line, FONT_SIZE_NORMAL)

    def _draw_image(self, blob: bytes, x: float, y: float, width: float) -> None:
        self.pdf.image(io.BytesIO(blob), x=x, y=y, w=width)

    def _draw_logo(self) -> None:
        if self.attachments.company_logo:
            self._draw_image(self.attachments.company_logo, LOGO_X, LOGO_Y, LOGO_W)

    def _draw_header(self) -> None:
        self.fonts.draw_text_right(RIGHT_EDGE, TITLE_Y, "INVOICE", FONT_SIZE_TITLE)

        y = META_Y
        for line in seller_lines(self.invoice):
            used = self._draw_right_block(META_X, y, line)
            y += used * LINE_H_NORMAL

    def _draw_party(self, lines: Sequence[str], rows_y: Sequence[float]) -> None:
        # Fixed rows: wrapped continuation lines are not flowed.
        for line, top in zip(lines, rows_y):
            self._draw_right_block(PARTY_X, top, line)

    def _draw_table_header(self) -> None:
        for label, x in TABLE_COLUMNS:
            self.fonts.draw_text(x, TABLE_TOP, label, FONT_SIZE_NORMAL)

    def _draw_items(self) -> float:
        for index, item in enumerate(self.invoice.items):
            top = row_top(index)
            for (_, x), text in zip(TABLE_COLUMNS, item_cells(item)):
                self._draw_cell(x, top, text)
        return row_top(len(self.invoice.items))

    def _draw_signature(self, position: float) -> None:
        if self.attachments.signature_image:
            self._draw_image(
                self.attachments.signature_image,
                SIGNATURE_X,
                position + SIGNATURE_GAP,
                SIGNATURE_W,
            )

    def render(self) -> bytes:
        self._draw_logo()
        self._draw_header()
        self._draw_party(billing_lines(self.invoice), BILLING_ROWS_Y)
        self._draw_party(shipping_lines(self.invoice), SHIPPING_ROWS_Y)
        self._draw_table_header()
        position = self._draw_items()
        self._draw_signature(position)

        pdf_blob = self.pdf.output()
        if isinstance(pdf_blob, (bytes, bytearray)):
            return bytes(pdf_blob)
        raise RuntimeError(f"Unexpected PDF output type: {type(pdf_blob).__name__}")


def render_invoice(
    invoice: InvoiceRequest,
    attachments: Optional[Attachments] = None,
) -> bytes:
    return InvoiceRenderer(invoice, attachments).render()
