"""Local HTTP API for validating bags."""

import json
import logging
import shutil
import socket
import tempfile
import threading
import time
import uuid
from datetime import UTC, datetime
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from io import BytesIO
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

from bagcheck import __version__
from bagcheck.config import BagcheckConfig
from bagcheck.engine import DepositType, ValidationLevel
from bagcheck.exceptions import BagNotFoundError
from bagcheck.service import RuleEngineService, ValidationRequest

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """API error with HTTP status code."""

    def __init__(self, status_code: int, error_type: str, detail: str):
        self.status_code = status_code
        self.error_type = error_type
        self.detail = detail
        super().__init__(f"{error_type}: {detail}")


def parse_deposit_type(value: str | None) -> DepositType:
    """Parse a requested package type; ALL is not a valid request."""
    if value is None:
        return DepositType.DEPOSIT
    try:
        deposit_type = DepositType(value.upper())
    except ValueError:
        deposit_type = None
    if deposit_type not in (DepositType.DEPOSIT, DepositType.MIGRATION):
        raise ApiError(400, "bad_request", f"Invalid packageType: {value}")
    return deposit_type


def parse_level(value: str | None) -> ValidationLevel:
    if value is None:
        return ValidationLevel.STAND_ALONE
    try:
        return ValidationLevel(value.upper())
    except ValueError:
        raise ApiError(400, "bad_request", f"Invalid level: {value}")


class BagcheckApiHandler(BaseHTTPRequestHandler):
    """HTTP request handler for bagcheck API endpoints."""

    def __init__(self, request, client_address, server, api_server):
        self.api_server = api_server
        super().__init__(request, client_address, server)

    def log_message(self, format, *args):
        """Override to use bagcheck logger instead of stderr."""
        logger.info(f"{self.address_string()} - {format % args}")

    def _dispatch(self, handler):
        start_time = time.time()
        status_code = 500

        try:
            status_code = handler()
        except ApiError as e:
            status_code = e.status_code
            self._send_error_response(e)
        except (ConnectionAbortedError, BrokenPipeError):
            # Client closed connection
            status_code = 0
        except Exception:
            logger.exception(f"Unexpected error handling {self.path}")
            self._send_error_response(ApiError(500, "internal", "Internal server error"))
        finally:
            if status_code:
                elapsed_ms = int((time.time() - start_time) * 1000)
                logger.debug(f"{self.command} {self.path} {status_code} {elapsed_ms}ms")

    def do_GET(self):
        """Handle GET requests."""
        self._dispatch(self._route_get)

    def do_POST(self):
        """Handle POST requests."""
        self._dispatch(self._route_post)

    def do_PUT(self):
        self._send_method_not_allowed()

    def do_DELETE(self):
        self._send_method_not_allowed()

    def do_PATCH(self):
        self._send_method_not_allowed()

    def _send_method_not_allowed(self):
        """Send 405 Method Not Allowed response."""
        self._send_error_response(ApiError(405, "method_not_allowed", f"Method {self.command} not allowed"))

    def _route_get(self) -> int:
        parsed_url = urlparse(self.path)
        query = parse_qs(parsed_url.query)

        if parsed_url.path == "/health":
            self._handle_health()
        elif parsed_url.path == "/rules":
            self._handle_rules(query)
        elif parsed_url.path == "/validate":
            raise ApiError(405, "method_not_allowed", "Use POST for /validate")
        else:
            raise ApiError(404, "not_found", f"Unknown endpoint: {parsed_url.path}")
        return 200

    def _route_post(self) -> int:
        parsed_url = urlparse(self.path)

        if parsed_url.path == "/validate":
            self._handle_validate(parse_qs(parsed_url.query))
        elif parsed_url.path in ("/health", "/rules"):
            raise ApiError(405, "method_not_allowed", f"Use GET for {parsed_url.path}")
        else:
            raise ApiError(404, "not_found", f"Unknown endpoint: {parsed_url.path}")
        return 200

    def _handle_health(self):
        """Handle /health endpoint."""
        response = {
            "status": "ok",
            "version": __version__,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        self._send_json_response(200, response)

    def _handle_rules(self, query: dict[str, list[str]]):
        """Handle /rules endpoint, optionally filtered by packageType and level."""
        rules = self.api_server.service.rules
        if "packageType" in query or "level" in query:
            deposit_type = parse_deposit_type(query.get("packageType", [None])[0])
            level = parse_level(query.get("level", [None])[0])
            rules = self.api_server.service.active_rules(deposit_type, level)

        response = [
            {
                "number": rule.number,
                "dependencies": list(rule.dependencies),
                "depositType": rule.deposit_type.value,
                "context": rule.context.value,
            }
            for rule in rules
        ]
        self._send_json_response(200, response)

    def _read_body(self) -> bytes:
        header = self.headers.get("Content-Length") or "0"
        try:
            length = int(header)
        except ValueError:
            length = -1
        if length < 0:
            raise ApiError(400, "bad_request", f"Invalid Content-Length: {header}")
        limit = self.api_server.config.api.max_upload_size
        if length > limit:
            raise ApiError(413, "payload_too_large", f"Request body exceeds {limit} bytes")
        return self.rfile.read(length)

    def _handle_validate(self, query: dict[str, list[str]]):
        """Handle /validate with a JSON request or a zipped bag."""
        content_type = (self.headers.get("Content-Type") or "").split(";")[0].strip().lower()
        body = self._read_body()

        if content_type == "application/json":
            try:
                payload = json.loads(body or b"{}")
            except json.JSONDecodeError as e:
                raise ApiError(400, "bad_request", f"Invalid JSON body: {e}")
            if not isinstance(payload, dict) or not payload.get("bagLocation"):
                raise ApiError(400, "bad_request", "Missing bagLocation")

            request = ValidationRequest(
                Path(payload["bagLocation"]),
                parse_deposit_type(payload.get("packageType")),
                parse_level(payload.get("level")),
            )
            self._send_json_response(200, self._validate(request))

        elif content_type in ("application/zip", "application/octet-stream"):
            deposit_type = parse_deposit_type(query.get("packageType", [None])[0])
            level = parse_level(query.get("level", [None])[0])

            temp_dir = Path(tempfile.mkdtemp(prefix="bagcheck-"))
            try:
                try:
                    bag_dir = self.api_server.service.file_service.extract_zip_file(BytesIO(body), temp_dir)
                except ValueError as e:
                    raise ApiError(400, "bad_request", str(e))
                report = self._validate(ValidationRequest(bag_dir, deposit_type, level))
            finally:
                shutil.rmtree(temp_dir, ignore_errors=True)
            # the extracted location is meaningless to the caller
            report["bagLocation"] = None
            self._send_json_response(200, report)

        else:
            raise ApiError(415, "unsupported_media_type", f"Unsupported Content-Type: {content_type or 'none'}")

    def _validate(self, request: ValidationRequest) -> dict[str, Any]:
        try:
            return self.api_server.service.validate_bag(request).to_dict()
        except BagNotFoundError as e:
            raise ApiError(400, "bag_not_found", str(e))

    def _send_json_response(self, status_code: int, data: Any):
        """Send JSON response."""
        response_bytes = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")

        try:
            self.send_response(status_code)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Content-Length", str(len(response_bytes)))
            self.end_headers()
            self.wfile.write(response_bytes)
        except (ConnectionAbortedError, BrokenPipeError):
            # Client closed connection before response was sent
            pass

    def _send_error_response(self, error: ApiError):
        """Send standardized error response."""
        response = {
            "error": error.error_type,
            "detail": error.detail,
            "traceId": str(uuid.uuid4()),
            "timestamp": datetime.now(UTC).isoformat(),
            "requestPath": self.path,
        }
        self._send_json_response(error.status_code, response)


class BagcheckApiServer:
    """bagcheck API server running on a background thread."""

    def __init__(self, config: BagcheckConfig, service: RuleEngineService, port: int | None = None):
        self.config = config
        self.service = service
        self.requested_port = port
        self.start_time = time.time()
        self.server = None
        self.server_thread = None
        self.actual_port = None

    def _find_available_port(self, start_port: int) -> int:
        """Find available port starting from start_port."""
        for port in range(start_port, start_port + 100):
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.bind((self.config.api.bind, port))
                    return port
            except OSError:
                continue
        raise ApiError(503, "service_unavailable", f"No available ports found starting from {start_port}")

    def start(self) -> str:
        """Start the API server and return its base URL."""
        port = self.requested_port
        if port is None:
            port = self._find_available_port(self.config.api.port)

        def handler_factory(request, client_address, server):
            return BagcheckApiHandler(request, client_address, server, self)

        self.server = ThreadingHTTPServer((self.config.api.bind, port), handler_factory)
        self.actual_port = self.server.server_address[1]

        self.server_thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.server_thread.start()

        url = f"http://{self.config.api.bind}:{self.actual_port}"
        logger.info(f"bagcheck API started at {url} ({len(self.service.rules)} rules)")
        return url

    def stop(self):
        """Stop the API server."""
        if self.server:
            logger.info("Shutting down API server...")
            self.server.shutdown()
            self.server.server_close()
            if self.server_thread:
                self.server_thread.join(timeout=5.0)
            logger.info("API server stopped")


def start_api_server(config: BagcheckConfig, service: RuleEngineService, port: int | None = None) -> BagcheckApiServer:
    """Start bagcheck API server with given configuration."""
    server = BagcheckApiServer(config, service, port=port)
    server.start()
    return server
