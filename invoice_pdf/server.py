"""HTTP server entrypoints for invoice rendering."""

from __future__ import annotations

import logging
import multiprocessing as mp
import signal
import threading
from concurrent.futures import Future, ProcessPoolExecutor, TimeoutError as FutureTimeoutError
from concurrent.futures.process import BrokenProcessPool
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional
from urllib.parse import quote, urlsplit

from .config import ServerConfig, load_config
from .models import Attachments, InvoiceRequest, MalformedInputError, validate_invoice_form
from .net import MultipartError, is_client_disconnect, parse_multipart
from .pagination import fits_on_page, max_rows_per_page, signature_height

logger = logging.getLogger(__name__)

GENERATE_PATH = "/generate-invoice"
HEALTH_PATHS = ("/health", "/healthz", "/ready")
CORS_ALLOW_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


def load_render_invoice():
    try:
        from .rendering import render_invoice
    except ModuleNotFoundError as exc:
        if exc.name == "fpdf":
            raise DependencyError(
                "Missing dependency 'fpdf2'. Install the project with 'pip install .'."
            ) from exc
        raise
    return render_invoice


def render_job(invoice: InvoiceRequest, attachments: Attachments) -> bytes:
    return load_render_invoice()(invoice, attachments)


def content_disposition(filename: str) -> str:
    filename = filename.replace("\r", " ").replace("\n", " ")
    try:
        filename.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment; filename*=UTF-8''{quote(filename)}"
    return f"attachment; filename={filename}"


class InvoiceHandler(BaseHTTPRequestHandler):
    server: "InvoiceServer"

    @property
    def route(self) -> str:
        return urlsplit(self.path).path

    def _cors_headers(self) -> Dict[str, str]:
        headers = {"Access-Control-Allow-Origin": self.server.config.cors_origin}
        if self.server.config.cors_origin != "*":
            headers["Vary"] = "Origin"
        return headers

    def _write_response(
        self,
        status: int,
        content_type: str,
        body: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> bool:
        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            for name, value in {**self._cors_headers(), **(headers or {})}.items():
                self.send_header(name, value)
            self.end_headers()
            self.wfile.write(body)
            return True
        except Exception as exc:
            if is_client_disconnect(exc):
                logger.debug("Client went away before the %s response was sent", status)
                return False
            raise

    def _send_text(self, status: int, text: str) -> bool:
        return self._write_response(status, "text/plain; charset=utf-8", text.encode("utf-8"))

    def _read_body(self) -> Optional[bytes]:
        header = self.headers.get("Content-Length")
        if header is None:
            self._send_text(411, "Content-Length header is required.")
            return None

        try:
            content_length = int(header)
        except ValueError:
            self._send_text(400, "Content-Length must be an integer.")
            return None

        if content_length <= 0:
            self._send_text(400, "Request body cannot be empty.")
            return None

        if content_length > self.server.config.max_body_bytes:
            self._send_text(413, f"Body exceeds {self.server.config.max_body_bytes} bytes.")
            return None

        try:
            return self.rfile.read(content_length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def do_POST(self) -> None:
        if self.route != GENERATE_PATH:
            self._send_text(404, "Not Found")
            return

        body = self._read_body()
        if body is None:
            return

        try:
            form = parse_multipart(self.headers.get("Content-Type", ""), body)
        except MultipartError as exc:
            self._send_text(400, str(exc))
            return

        try:
            invoice, validation_error = validate_invoice_form(form.fields)
        except MalformedInputError as exc:
            self._send_text(400, str(exc))
            return
        except Exception:
            logger.exception("Error reading invoice form")
            self._send_text(500, "Internal Server Error")
            return

        if validation_error is not None:
            status, message = validation_error
            self._send_text(status, message)
            return

        attachments = Attachments.from_files(form.files)
        try:
            signature_h = signature_height(attachments.signature_image)
        except Exception:
            logger.exception("Unreadable signature image for invoice %r", invoice.invoice_no)
            self._send_text(500, "Internal Server Error")
            return

        if not fits_on_page(len(invoice.items), signature_h):
            self._send_text(
                413,
                f"Invoice has {len(invoice.items)} items; "
                f"a single page fits at most {max_rows_per_page(signature_h)}.",
            )
            return

        config = self.server.config
        acquired = self.server.inflight.acquire(timeout=config.render_queue_timeout_ms / 1000.0)
        if not acquired:
            self._send_text(503, "Render queue is full; retry shortly.")
            return

        future: Optional[Future] = None
        try:
            future = self.server.submit_render(invoice, attachments)
            pdf_bytes = future.result(timeout=config.render_timeout_ms / 1000.0)
        except FutureTimeoutError:
            if future is not None:
                future.cancel()
            logger.error("Render of invoice %r exceeded %d ms", invoice.invoice_no, config.render_timeout_ms)
            self._send_text(504, "Render timed out.")
            return
        except BrokenProcessPool:
            logger.error("Render worker pool broke while rendering invoice %r", invoice.invoice_no)
            self.server.restart_executor()
            self._send_text(500, "Internal Server Error")
            return
        except Exception:
            logger.exception("Error generating invoice %r", invoice.invoice_no)
            self._send_text(500, "Internal Server Error")
            return
        finally:
            self.server.inflight.release()

        self._write_response(
            200,
            "application/pdf",
            pdf_bytes,
            headers={"Content-Disposition": content_disposition(invoice.filename)},
        )

    def do_GET(self) -> None:
        if self.route in HEALTH_PATHS:
            self._send_text(200, "ok")
            return
        self._send_text(404, "Not Found")

    def do_OPTIONS(self) -> None:
        headers = {"Access-Control-Allow-Methods": CORS_ALLOW_METHODS}
        requested = self.headers.get("Access-Control-Request-Headers")
        if requested:
            headers["Access-Control-Allow-Headers"] = requested
            headers["Vary"] = "Access-Control-Request-Headers"
        self._write_response(204, "text/plain", b"", headers=headers)

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if is_client_disconnect(exc):
                return
            raise

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class InvoiceServer(ThreadingHTTPServer):
    """Threaded HTTP server that owns its render worker pool.

    The socket is bound on construction; the pool is created by
    :meth:`start` (or the first :meth:`serve_forever`) and torn down by
    :meth:`server_close`.
    """

    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, config: ServerConfig, bind_and_activate: bool = True) -> None:
        self.config = config
        self.request_queue_size = config.listen_backlog
        self.inflight = threading.BoundedSemaphore(config.max_inflight_renders)
        self._executor: Optional[ProcessPoolExecutor] = None
        self._executor_lock = threading.Lock()
        super().__init__((config.host, config.port), InvoiceHandler, bind_and_activate)

    @property
    def port(self) -> int:
        return self.server_address[1]

    def _create_executor(self) -> ProcessPoolExecutor:
        return ProcessPoolExecutor(
            max_workers=self.config.max_concurrent_renders,
            mp_context=mp.get_context("spawn"),
        )

    def get_executor(self) -> ProcessPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = self._create_executor()
            return self._executor

    def start(self) -> None:
        self.get_executor()

    def restart_executor(self, previous: Optional[ProcessPoolExecutor] = None) -> ProcessPoolExecutor:
        """Replace a broken pool unless another request already replaced it."""
        with self._executor_lock:
            stale = self._executor
            if previous is not None and stale is not None and stale is not previous:
                return stale
            fresh = self._executor = self._create_executor()
        if stale is not None:
            stale.shutdown(wait=False, cancel_futures=True)
        return fresh

    def submit_render(self, invoice: InvoiceRequest, attachments: Attachments) -> Future:
        executor = self.get_executor()
        try:
            return executor.submit(render_job, invoice, attachments)
        except BrokenProcessPool:
            return self.restart_executor(executor).submit(render_job, invoice, attachments)

    def serve_forever(self, poll_interval: float = 0.5) -> None:
        self.start()
        super().serve_forever(poll_interval)

    def server_close(self) -> None:
        super().server_close()
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)


def _raise_keyboard_interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt


def run(config: Optional[ServerConfig] = None) -> None:
    load_render_invoice()
    config = config or load_config()
    with InvoiceServer(config) as server:
        if threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGTERM, _raise_keyboard_interrupt)
        logger.info("Invoice API server listening on http://%s:%d", config.host, server.port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down invoice API server")
