"""Font discovery and text drawing helpers."""

from __future__ import annotations

import logging
import os
import threading
from typing import List, Optional, Tuple

from fpdf import FPDF  # type: ignore

from .pdf_constants import COLOR_TEXT

logger = logging.getLogger(__name__)


def find_font_path(env_var: str, candidates: List[str]) -> Optional[str]:
    override = os.getenv(env_var)
    if override and os.path.exists(override):
        return override

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


FONT_INIT_LOCK = threading.Lock()


class FontManager:
    """Registers the invoice font on a document and draws text by its top edge.

    A DejaVu TTF is preferred so that any Unicode text renders. Without one
    the PDF core Helvetica font is used, which only covers Latin-1.
    """

    FAMILY = "InvoiceFont"
    CORE_FAMILY = "helvetica"
    # Distance from the top of a line to its baseline, as a share of font size.
    BASELINE_RATIO = 0.8
    SYSTEM_REGULAR_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans.ttf",
        "/Library/Fonts/DejaVuSans.ttf",
    ]

    def __init__(self, pdf: FPDF, use_core_font: bool = False) -> None:
        self.pdf = pdf
        self.family = self.CORE_FAMILY

        if use_core_font:
            return

        regular_path = find_font_path(
            "INVOICE_FONT_PATH",
            self.SYSTEM_REGULAR_CANDIDATES,
        )
        if not regular_path:
            logger.debug("No Unicode font found; using core %s", self.CORE_FAMILY)
            return

        with FONT_INIT_LOCK:
            self.pdf.add_font(self.FAMILY, "", regular_path)
        self.family = self.FAMILY

    def set_font(self, size: int) -> None:
        self.pdf.set_font(self.family, "", size)

    def text_width(self, text: str, size: int) -> float:
        self.set_font(size)
        return self.pdf.get_string_width(text)

    def draw_text(
        self,
        x: float,
        top: float,
        text: str,
        size: int,
        color: Tuple[int, int, int] = COLOR_TEXT,
    ) -> None:
        self.pdf.set_text_color(*color)
        self.set_font(size)
        self.pdf.text(x, top + size * self.BASELINE_RATIO, text)

    def draw_text_right(
        self,
        right: float,
        top: float,
        text: str,
        size: int,
        color: Tuple[int, int, int] = COLOR_TEXT,
    ) -> None:
        self.draw_text(right - self.text_width(text, size), top, text, size, color)
