# src/panelhub/core/responses.py
"""
CyberPanel response normalisation

Every cloudAPI reply, whatever its shape, is turned into a PanelResult here.
Callers never look at HTTP status codes or raw bodies.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Closed set of failure classes used for all branching on panel errors"""

    AUTH_REJECTED = "AUTH_REJECTED"
    DOMAIN_CONFLICT = "DOMAIN_CONFLICT"
    TRANSPORT = "TRANSPORT"
    TIMEOUT = "TIMEOUT"
    PARSE = "PARSE"
    INVALID_FORMAT = "INVALID_FORMAT"
    NOT_CONFIGURED = "NOT_CONFIGURED"
    NO_AUTH_METHOD = "NO_AUTH_METHOD"
    AUTH_EXHAUSTED = "AUTH_EXHAUSTED"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN = "UNKNOWN"


# Upstream error vocabulary is free text. Extend these tables as new phrases
# show up; matching is a case-sensitive substring test, first hit wins.
ERROR_PATTERNS = (
    ("Invalid login", ErrorCode.AUTH_REJECTED),
    ("Unauthorized", ErrorCode.AUTH_REJECTED),
    ("API Access Disabled", ErrorCode.AUTH_REJECTED),
    ("already exists", ErrorCode.DOMAIN_CONFLICT),
    ("already exist", ErrorCode.DOMAIN_CONFLICT),
)

TRANSPORT_CODES = frozenset({ErrorCode.TRANSPORT, ErrorCode.TIMEOUT, ErrorCode.PARSE})

SUCCESS_STATUSES = (1, True, "success")


class PanelPayloadError(ValueError):
    """Raised when a successful result carries data that cannot be decoded"""


@dataclass(frozen=True)
class PanelResult:
    """Uniform outcome of a CyberPanel call"""

    succeeded: bool
    payload: Any = None
    error_message: Optional[str] = None
    message: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, payload=None, message=None):
        return cls(succeeded=True, payload=payload, message=message)

    @classmethod
    def fail(cls, error_message, error_code=None):
        if error_code is None:
            error_code = classify_error(error_message)
        return cls(succeeded=False, error_message=error_message, error_code=error_code)

    @property
    def is_transport_failure(self):
        return not self.succeeded and self.error_code in TRANSPORT_CODES

    def to_dict(self):
        """Serialise to the dashboard's JSON response shape"""
        result = {"success": self.succeeded}
        if self.succeeded:
            result["data"] = self.payload
            if self.message:
                result["message"] = self.message
        else:
            result["error"] = self.error_message
            if self.error_code:
                result["error_code"] = self.error_code.value
        return result


def classify_error(message):
    """Map an upstream error message onto an ErrorCode"""
    if not message:
        return ErrorCode.UNKNOWN
    for pattern, code in ERROR_PATTERNS:
        if pattern in message:
            return code
    return ErrorCode.UNKNOWN


def is_success_status(status):
    """Only 1, True and the exact string "success" count as success"""
    if isinstance(status, str):
        return status == "success"
    if isinstance(status, bool):
        return status
    if isinstance(status, (int, float)):
        return status == 1
    return False


def normalize_response(status_code, body):
    """
    Turn an HTTP status code and raw text body into a PanelResult.

    Non-2xx replies and unparseable bodies are reported as transport-class
    failures; they are never interpreted as the panel's own error format.
    """
    if not 200 <= status_code < 300:
        return PanelResult.fail(f"HTTP {status_code}", ErrorCode.TRANSPORT)

    try:
        parsed = json.loads(body)
    except (TypeError, ValueError) as e:
        return PanelResult.fail(f"Failed to parse response: {e}", ErrorCode.PARSE)

    if not isinstance(parsed, dict) or (
        "status" not in parsed and "error_message" not in parsed
    ):
        return PanelResult.fail("Invalid response format", ErrorCode.INVALID_FORMAT)

    if is_success_status(parsed.get("status")):
        data = parsed.get("data")
        return PanelResult.ok(
            payload=data if data is not None else parsed,
            message=parsed.get("message"),
        )

    error = parsed.get("error_message") or parsed.get("error") or "Unknown error"
    return PanelResult.fail(str(error))


def decode_payload(payload):
    """
    CyberPanel returns most listings as a JSON-encoded string inside "data".
    Decode strings, pass already-structured payloads through.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except ValueError as e:
            raise PanelPayloadError(f"Undecodable panel payload: {e}") from e
    return payload
