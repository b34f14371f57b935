"""Application-wide exception hierarchy for the TikTok gateway.

All custom exceptions subclass ``GatewayError``, so the request-handling
boundary can turn any of them into the JSON error envelope with a single
``except`` clause.  Each class carries a short machine-readable ``kind`` and
the HTTP status the boundary should answer with.

Hierarchy::

    GatewayError
    ├── ValidationError          (400)
    ├── UpstreamError            (code: int | None)
    ├── MalformedResponseError   (path: str | None)
    └── TransportError
"""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base class for all gateway exceptions.

    Args:
        message: Human-readable description of the failure.
    """

    kind: str = "gateway_error"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GatewayError):
    """Raised when a required query parameter is missing or empty.

    Args:
        message: Text returned to the caller, e.g.
            ``"Please provide a TikTok username"``.
        parameter: Name of the offending query parameter.
    """

    kind = "validation_error"
    status_code = 400

    def __init__(self, message: str, parameter: str | None = None) -> None:
        super().__init__(message)
        self.parameter = parameter


class UpstreamError(GatewayError):
    """Raised when tikwm.com answered but reported a non-zero status code.

    Args:
        message: The upstream ``msg`` field, or a generic fallback when empty.
        code: The upstream ``code`` value (``None`` when absent).
    """

    kind = "upstream_error"

    def __init__(self, message: str, code: Any = None) -> None:
        super().__init__(message)
        self.code = code


class MalformedResponseError(GatewayError):
    """Raised when a successful upstream payload does not match the expected shape.

    Args:
        message: Description of the mismatch.
        path: Dotted path of the missing or mistyped field
            (e.g. ``"data.videos[2].music_info.id"``).
    """

    kind = "malformed_response"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class TransportError(GatewayError):
    """Raised when tikwm.com could not be reached or answered with an HTTP error.

    Covers connection failures, timeouts and non-2xx HTTP statuses.

    Args:
        message: Description of the transport failure.
        status_code_upstream: HTTP status returned by tikwm.com, if any.
    """

    kind = "transport_error"

    def __init__(self, message: str, status_code_upstream: int | None = None) -> None:
        super().__init__(message)
        self.status_code_upstream = status_code_upstream
