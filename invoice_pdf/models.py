"""Invoice request records and form validation."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

ValidationError = Tuple[int, str]

# Form field name -> InvoiceRequest attribute, in canonical validation order.
TEXT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("sellerName", "seller_name"),
    ("sellerAddress", "seller_address"),
    ("sellerCityStatePincode", "seller_city_state_pincode"),
    ("sellerPAN", "seller_pan"),
    ("sellerGST", "seller_gst"),
    ("placeOfSupply", "place_of_supply"),
    ("billingName", "billing_name"),
    ("billingAddress", "billing_address"),
    ("billingCityStatePincode", "billing_city_state_pincode"),
    ("billingStateUTCode", "billing_state_ut_code"),
    ("shippingName", "shipping_name"),
    ("shippingAddress", "shipping_address"),
    ("shippingCityStatePincode", "shipping_city_state_pincode"),
    ("shippingStateUTCode", "shipping_state_ut_code"),
    ("orderNo", "order_no"),
    ("orderDate", "order_date"),
    ("invoiceNo", "invoice_no"),
    ("invoiceDate", "invoice_date"),
    ("reverseCharge", "reverse_charge"),
)
ITEMS_FIELD = "items"
REQUIRED_FIELDS: Tuple[str, ...] = tuple(name for name, _ in TEXT_FIELDS) + (ITEMS_FIELD,)

NUMERIC_ITEM_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("unitPrice", "unit_price"),
    ("quantity", "quantity"),
    ("discount", "discount"),
    ("taxRate", "tax_rate"),
)


class MalformedInputError(ValueError):
    """Raised when line items cannot be read as typed records."""


@dataclass(frozen=True)
class LineItem:
    description: str
    unit_price: float
    quantity: float
    discount: float
    tax_rate: float

    @property
    def total(self) -> float:
        return (
            self.unit_price
            * self.quantity
            * (1 - self.discount / 100.0)
            * (1 + self.tax_rate / 100.0)
        )


@dataclass(frozen=True)
class InvoiceRequest:
    seller_name: str
    seller_address: str
    seller_city_state_pincode: str
    seller_pan: str
    seller_gst: str
    place_of_supply: str
    billing_name: str
    billing_address: str
    billing_city_state_pincode: str
    billing_state_ut_code: str
    shipping_name: str
    shipping_address: str
    shipping_city_state_pincode: str
    shipping_state_ut_code: str
    order_no: str
    order_date: str
    invoice_no: str
    invoice_date: str
    reverse_charge: str
    items: Tuple[LineItem, ...]

    @property
    def filename(self) -> str:
        return f"{self.invoice_no}.pdf"


@dataclass(frozen=True)
class Attachments:
    company_logo: Optional[bytes] = None
    signature_image: Optional[bytes] = None

    @classmethod
    def from_files(cls, files: Mapping[str, List[bytes]]) -> "Attachments":
        """Pick the first non-empty upload for each image slot."""

        def first(name: str) -> Optional[bytes]:
            for blob in files.get(name, []):
                if blob:
                    return blob
            return None

        return cls(company_logo=first("companyLogo"), signature_image=first("signatureImage"))


def _item_number(item: Dict[str, Any], index: int, key: str) -> float:
    if key not in item:
        raise MalformedInputError(f"Item {index}: '{key}' is required.")
    raw = item[key]
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise MalformedInputError(f"Item {index}: '{key}' must be a number.")
    try:
        value = float(raw)
    except (ValueError, OverflowError):
        raise MalformedInputError(f"Item {index}: '{key}' must be a finite number.") from None
    if not math.isfinite(value):
        raise MalformedInputError(f"Item {index}: '{key}' must be a finite number.")
    return value


def line_items_from_json(payload: Any) -> Tuple[LineItem, ...]:
    """Type-check an already decoded ``items`` array."""
    if not isinstance(payload, list):
        raise MalformedInputError("'items' must be a JSON array.")

    items: List[LineItem] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise MalformedInputError(f"Item {index}: must be an object.")
        description = entry.get("description")
        numbers = {attr: _item_number(entry, index, key) for key, attr in NUMERIC_ITEM_FIELDS}
        items.append(
            LineItem(
                description="" if description is None else str(description),
                **numbers,
            )
        )
    return tuple(items)


def parse_line_items(raw: str) -> Tuple[LineItem, ...]:
    """Decode the JSON ``items`` field into typed line items.

    Invalid JSON propagates as :class:`json.JSONDecodeError`; structurally
    wrong content raises :class:`MalformedInputError`.
    """
    return line_items_from_json(json.loads(raw))


def missing_fields(fields: Mapping[str, str]) -> List[str]:
    return [name for name in REQUIRED_FIELDS if not fields.get(name)]


def validate_invoice_form(
    fields: Mapping[str, str],
) -> Tuple[Optional[InvoiceRequest], Optional[ValidationError]]:
    # A present ``items`` field is decoded first, so malformed JSON fails the
    # request even when other fields are missing.
    raw_items = fields.get(ITEMS_FIELD)
    payload = json.loads(raw_items) if raw_items else None

    missing = missing_fields(fields)
    if missing:
        return None, (400, f"Missing required fields: {', '.join(missing)}")

    items = line_items_from_json(payload)
    if not items:
        return None, (400, "Items are required.")

    values = {attr: fields[name] for name, attr in TEXT_FIELDS}
    return InvoiceRequest(items=items, **values), None
