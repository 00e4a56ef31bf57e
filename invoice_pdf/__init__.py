"""Public package API for invoice PDF generation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .config import ServerConfig, load_config
from .models import (
    REQUIRED_FIELDS,
    Attachments,
    InvoiceRequest,
    LineItem,
    MalformedInputError,
    parse_line_items,
    validate_invoice_form,
)

if TYPE_CHECKING:
    from .server import InvoiceServer


def render_invoice(invoice: InvoiceRequest, attachments: Optional[Attachments] = None) -> bytes:
    from .rendering import render_invoice as _render_invoice

    return _render_invoice(invoice, attachments)


def create_server(config: Optional[ServerConfig] = None) -> "InvoiceServer":
    from .server import InvoiceServer

    return InvoiceServer(config or load_config())


def run(config: Optional[ServerConfig] = None) -> None:
    from .server import run as _run

    _run(config)


__all__ = [
    "REQUIRED_FIELDS",
    "Attachments",
    "InvoiceRequest",
    "LineItem",
    "MalformedInputError",
    "ServerConfig",
    "create_server",
    "load_config",
    "parse_line_items",
    "render_invoice",
    "run",
    "validate_invoice_form",
]
