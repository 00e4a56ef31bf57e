"""Page geometry and fixed layout coordinates (points, top-left origin)."""

from __future__ import annotations

PAGE_FORMAT = "A4"
PAGE_W = 595.28
PAGE_H = 841.89
MARGIN = 50
RIGHT_EDGE = PAGE_W - MARGIN
BOTTOM_EDGE = PAGE_H - MARGIN

FONT_SIZE_TITLE = 20
FONT_SIZE_NORMAL = 10

# Line advance per font size, matching the default leading of the core fonts.
LINE_H_TITLE = 23.0
LINE_H_NORMAL = 11.5

COLOR_TEXT = (0, 0, 0)

LOGO_X = 50
LOGO_Y = 45
LOGO_W = 150

TITLE_Y = 50

# Seller/order metadata flows under the title inside the same column.
META_X = 275
META_Y = TITLE_Y + LINE_H_TITLE

PARTY_X = 300
BILLING_ROWS_Y = (200, 215, 230, 245)
SHIPPING_ROWS_Y = (265, 280, 295, 310)

TABLE_TOP = 380
ITEM_ROW_H = 20
COL_DESCRIPTION_X = 50
COL_UNIT_PRICE_X = 200
COL_QUANTITY_X = 250
COL_DISCOUNT_X = 300
COL_TAX_RATE_X = 350
COL_TOTAL_X = 400
COLUMN_GUTTER = 4

SIGNATURE_X = 50
SIGNATURE_GAP = 20
SIGNATURE_W = 100
