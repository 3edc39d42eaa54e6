"""Error types and the error normalizer.

Three failure shapes reach callers of the API client:

- ``ResponseError``: the API answered with an error status.
- ``AuthError``: obtaining a token failed (always reported as HTTP 401).
- anything else (transport errors, local errors), passed through unchanged.

``format_error`` turns the first two into a ``HubError`` carrying the action
that failed, which is what commands display.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from .hosts import Project


class ConfigError(Exception):
    """Invalid or missing configuration."""


class ResponseErrorType(Enum):
    """Classification of an error response."""

    CLIENT_ERROR = "client_error"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    ONE_TIME_PASSWORD_REQUIRED = "one_time_password_required"
    FORBIDDEN = "forbidden"
    TOO_MANY_REQUESTS = "too_many_requests"
    TOO_MANY_LOGIN_ATTEMPTS = "too_many_login_attempts"
    NOT_FOUND = "not_found"
    NOT_ACCEPTABLE = "not_acceptable"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    UNPROCESSABLE_ENTITY = "unprocessable_entity"
    SERVER_ERROR = "server_error"
    INTERNAL_SERVER_ERROR = "internal_server_error"
    NOT_IMPLEMENTED = "not_implemented"
    BAD_GATEWAY = "bad_gateway"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNKNOWN_ERROR = "unknown_error"


_STATUS_TYPES = {
    400: ResponseErrorType.BAD_REQUEST,
    404: ResponseErrorType.NOT_FOUND,
    406: ResponseErrorType.NOT_ACCEPTABLE,
    415: ResponseErrorType.UNSUPPORTED_MEDIA_TYPE,
    422: ResponseErrorType.UNPROCESSABLE_ENTITY,
    500: ResponseErrorType.INTERNAL_SERVER_ERROR,
    501: ResponseErrorType.NOT_IMPLEMENTED,
    502: ResponseErrorType.BAD_GATEWAY,
    503: ResponseErrorType.SERVICE_UNAVAILABLE,
}


def classify_response_error(status_code: int, message: str, otp_header: str = "") -> ResponseErrorType:
    """Map status, message and ``X-GitHub-OTP`` header to an error type."""
    if status_code == 401:
        if otp_header.lower().startswith("required"):
            return ResponseErrorType.ONE_TIME_PASSWORD_REQUIRED
        return ResponseErrorType.UNAUTHORIZED
    if status_code == 403:
        lowered = message.lower()
        if "rate limit exceeded" in lowered:
            return ResponseErrorType.TOO_MANY_REQUESTS
        if "login attempts exceeded" in lowered:
            return ResponseErrorType.TOO_MANY_LOGIN_ATTEMPTS
        return ResponseErrorType.FORBIDDEN
    if status_code in _STATUS_TYPES:
        return _STATUS_TYPES[status_code]
    if 400 <= status_code <= 499:
        return ResponseErrorType.CLIENT_ERROR
    if 500 <= status_code <= 599:
        return ResponseErrorType.SERVER_ERROR
    return ResponseErrorType.UNKNOWN_ERROR


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A field-level error from a 422 response."""

    resource: str = ""
    field: str = ""
    code: str = ""
    message: str = ""

    def __str__(self) -> str:
        if self.message:
            return self.message
        text = f"{self.code} error"
        if self.field:
            text = f"{text} caused by {self.field} field"
        if self.resource:
            text = f"{text} on {self.resource} resource"
        return text

    @classmethod
    def from_payload(cls, payload: Any) -> ValidationError:
        if isinstance(payload, str):
            return cls(message=payload)
        if not isinstance(payload, dict):
            return cls(message=str(payload))
        return cls(
            resource=str(payload.get("resource") or ""),
            field=str(payload.get("field") or ""),
            code=str(payload.get("code") or ""),
            message=str(payload.get("message") or ""),
        )


class ResponseError(Exception):
    """The API rejected a request."""

    def __init__(
        self,
        *,
        status_code: int,
        reason: str = "",
        message: str = "",
        errors: tuple[ValidationError, ...] = (),
        error_type: ResponseErrorType | None = None,
        documentation_url: str = "",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.message = message
        self.errors = tuple(errors)
        self.error_type = error_type or classify_response_error(status_code, message)
        self.documentation_url = documentation_url
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.status_code} {self.reason}".rstrip()
        if self.message:
            text = f"{text} - {self.message}"
        return text

    @classmethod
    def from_response(cls, response: httpx.Response) -> ResponseError:
        """Build an error from an HTTP error response.

        The body is decoded leniently: a non-JSON body leaves ``message``
        and ``errors`` empty.
        """
        message = ""
        errors: tuple[ValidationError, ...] = ()
        documentation_url = ""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            if isinstance(payload.get("message"), str):
                message = payload["message"]
            if isinstance(payload.get("errors"), list):
                errors = tuple(ValidationError.from_payload(e) for e in payload["errors"])
            if isinstance(payload.get("documentation_url"), str):
                documentation_url = payload["documentation_url"]

        return cls(
            status_code=response.status_code,
            reason=response.reason_phrase,
            message=message,
            errors=errors,
            error_type=classify_response_error(
                response.status_code, message, response.headers.get("X-GitHub-OTP", "")
            ),
            documentation_url=documentation_url,
        )


class AuthError(Exception):
    """Obtaining an access token failed."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(str(cause))

    def is_two_factor_error(self) -> bool:
        """True when the server asked for a one-time password."""
        return (
            isinstance(self.cause, ResponseError)
            and self.cause.error_type is ResponseErrorType.ONE_TIME_PASSWORD_REQUIRED
        )


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class HubError(Exception):
    """A normalized, display-ready API error."""

    action: str
    message: str
    kind: ErrorKind = ErrorKind.GENERIC
    validation_messages: tuple[str, ...] = ()
    status_code: int | None = None
    hint: str | None = None

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n{self.hint}"
        return self.message

    def with_hint(self, hint: str) -> HubError:
        return replace(self, hint=hint)


def _kind_for_status(status_code: int) -> ErrorKind:
    if status_code == 401:
        return ErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 422:
        return ErrorKind.VALIDATION
    return ErrorKind.GENERIC


def format_error(action: str, err: Exception) -> Exception:
    """Normalize an error for display, labelled with ``action``.

    Errors that are neither ``ResponseError`` nor ``AuthError`` are returned
    unchanged.
    """
    if isinstance(err, ResponseError):
        text = f"Error {action}: {err.reason} (HTTP {err.status_code})"
        messages: list[str] = []
        if err.status_code == 422:
            if err.message:
                messages.append(err.message)
            messages.extend(str(e) for e in err.errors)
        if messages:
            text = "\n".join([text, *messages])
        return HubError(
            action=action,
            message=text,
            kind=_kind_for_status(err.status_code),
            validation_messages=tuple(messages),
            status_code=err.status_code,
        )

    if isinstance(err, AuthError):
        return HubError(
            action=action,
            message=f"Error {action}: Unauthorized (HTTP 401)",
            kind=ErrorKind.UNAUTHORIZED,
            status_code=401,
        )

    return err


def existence_hint(project: Project, err: Exception) -> str | None:
    """Suggest checking that ``project`` exists when ``err`` is a 404."""
    if not isinstance(err, ResponseError) or err.status_code != 404:
        return None
    _, sep, url = project.web_url().partition("://")
    if not sep or not url:
        return None
    return f"Are you sure that {url} exists?"
