"""Shared fixtures for the invoice test suite."""

import io
import json
from typing import Dict, List, Optional, Tuple

WIDGET = {"description": "Widget", "unitPrice": 100, "quantity": 2, "discount": 10, "taxRate": 5}


def valid_form(items: Optional[List[dict]] = None) -> Dict[str, str]:
    return {
        "sellerName": "ACME Traders",
        "sellerAddress": "12 Market Road",
        "sellerCityStatePincode": "Pune, Maharashtra, 411001",
        "sellerPAN": "ABCDE1234F",
        "sellerGST": "27ABCDE1234F1Z5",
        "placeOfSupply": "Maharashtra",
        "billingName": "Client Co",
        "billingAddress": "4 Lake View",
        "billingCityStatePincode": "Mumbai, Maharashtra, 400001",
        "billingStateUTCode": "27",
        "shippingName": "Client Co Warehouse",
        "shippingAddress": "Plot 9, MIDC",
        "shippingCityStatePincode": "Thane, Maharashtra, 400604",
        "shippingStateUTCode": "27",
        "orderNo": "PO-77",
        "orderDate": "2024-03-01",
        "invoiceNo": "INV-001",
        "invoiceDate": "2024-03-02",
        "reverseCharge": "No",
        "items": json.dumps([WIDGET] if items is None else items),
    }


def make_png(size: Tuple[int, int] = (20, 10)) -> bytes:
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def encode_multipart(
    fields: Dict[str, str],
    files: Optional[Dict[str, bytes]] = None,
    boundary: str = "----invoice-test-boundary",
) -> Tuple[str, bytes]:
    chunks: List[bytes] = []
    for name, value in fields.items():
        chunks.append(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode("utf-8")
            + value.encode("utf-8")
            + b"\r\n"
        )
    for name, blob in (files or {}).items():
        chunks.append(
            (
                f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"; '
                f'filename="{name}.png"\r\nContent-Type: image/png\r\n\r\n'
            ).encode("utf-8")
            + blob
            + b"\r\n"
        )
    chunks.append(f"--{boundary}--\r\n".encode("utf-8"))
    return f"multipart/form-data; boundary={boundary}", b"".join(chunks)
