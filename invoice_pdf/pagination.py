"""Item-table geometry for the single invoice page."""

from __future__ import annotations

import io
import math
from typing import Optional

from PIL import Image

from .pdf_constants import BOTTOM_EDGE, ITEM_ROW_H, LINE_H_NORMAL, SIGNATURE_GAP, SIGNATURE_W, TABLE_TOP


def row_top(index: int) -> float:
    return TABLE_TOP + ITEM_ROW_H * (index + 1)


def signature_height(blob: Optional[bytes]) -> float:
    """Drawn height of a signature scaled to the fixed signature width."""
    if not blob:
        return 0.0
    with Image.open(io.BytesIO(blob)) as image:
        width, height = image.size
    return SIGNATURE_W * height / width


def max_rows_per_page(signature_h: float = 0.0) -> int:
    usable = BOTTOM_EDGE - LINE_H_NORMAL - row_top(0)
    if usable < 0:
        return 0
    rows = int(usable // ITEM_ROW_H) + 1
    if signature_h > 0:
        # The signature sits SIGNATURE_GAP below row_top(rows).
        room = BOTTOM_EDGE - SIGNATURE_GAP - signature_h - TABLE_TOP
        rows = min(rows, max(0, math.floor(room / ITEM_ROW_H) - 1))
    return rows


def fits_on_page(item_count: int, signature_h: float = 0.0) -> bool:
    return item_count <= max_rows_per_page(signature_h)
