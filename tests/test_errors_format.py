"""Error normalization tests."""

from __future__ import annotations

import httpx
from hub_api.errors import (
    AuthError,
    ErrorKind,
    HubError,
    ResponseError,
    ResponseErrorType,
    ValidationError,
    existence_hint,
    format_error,
)
from hub_api.hosts import Project


def test_422_lists_message_and_field_errors() -> None:
    err = ResponseError(
        status_code=422,
        reason="Unprocessable Entity",
        message="Validation Failed",
        errors=(ValidationError(resource="Repository", field="name", code="custom", message="name already exists"),),
    )

    out = format_error("creating repository", err)

    assert isinstance(out, HubError)
    assert str(out) == "Error creating repository: Unprocessable Entity (HTTP 422)\nValidation Failed\nname already exists"
    assert out.kind is ErrorKind.VALIDATION
    assert out.validation_messages == ("Validation Failed", "name already exists")
    assert out.action == "creating repository"


def test_field_error_without_message_describes_field() -> None:
    err = ResponseError(
        status_code=422,
        reason="Unprocessable Entity",
        errors=(ValidationError(resource="PullRequest", field="head", code="invalid"),),
    )

    out = format_error("creating pull request", err)

    assert str(out) == (
        "Error creating pull request: Unprocessable Entity (HTTP 422)\n"
        "invalid error caused by head field on PullRequest resource"
    )


def test_field_error_without_resource_has_no_resource_clause() -> None:
    assert str(ValidationError(field="title", code="missing_field")) == "missing_field error caused by title field"

def test_non_422_omits_details() -> None:
    err = ResponseError(status_code=404, reason="Not Found", message="Not Found")

    out = format_error("getting repository", err)

    assert str(out) == "Error getting repository: Not Found (HTTP 404)"
    assert isinstance(out, HubError)
    assert out.kind is ErrorKind.NOT_FOUND
    assert out.status_code == 404


def test_auth_error_always_reports_401() -> None:
    cause = ResponseError(status_code=403, reason="Forbidden", message="Maximum number of login attempts exceeded")

    out = format_error("getting pull request", AuthError(cause))

    assert str(out) == "Error getting pull request: Unauthorized (HTTP 401)"
    assert isinstance(out, HubError)
    assert out.kind is ErrorKind.UNAUTHORIZED


def test_other_errors_pass_through_unchanged() -> None:
    err = httpx.ConnectError("connection refused")
    assert format_error("getting issues", err) is err


def test_two_factor_predicate() -> None:
    otp = ResponseError(
        status_code=401,
        reason="Unauthorized",
        error_type=ResponseErrorType.ONE_TIME_PASSWORD_REQUIRED,
    )
    bad_creds = ResponseError(status_code=401, reason="Unauthorized", message="Bad credentials")

    assert AuthError(otp).is_two_factor_error() is True
    assert AuthError(bad_creds).is_two_factor_error() is False
    assert AuthError(httpx.ConnectError("nope")).is_two_factor_error() is False


def test_response_error_from_response_classifies_otp_header() -> None:
    resp = httpx.Response(
        401,
        headers={"X-GitHub-OTP": "required; sms"},
        json={"message": "Must specify two-factor authentication OTP code."},
    )

    err = ResponseError.from_response(resp)

    assert err.error_type is ResponseErrorType.ONE_TIME_PASSWORD_REQUIRED
    assert err.message.startswith("Must specify")


def test_response_error_from_response_parses_errors_list() -> None:
    resp = httpx.Response(
        422,
        json={
            "message": "Validation Failed",
            "errors": [{"resource": "Issue", "field": "title", "code": "missing_field"}, "plain text"],
            "documentation_url": "https://docs.github.com/rest",
        },
        extensions={"reason_phrase": b"Unprocessable Entity"},
    )

    err = ResponseError.from_response(resp)

    assert err.reason == "Unprocessable Entity"
    assert [str(e) for e in err.errors] == ["missing_field error caused by title field on Issue resource", "plain text"]
    assert err.documentation_url == "https://docs.github.com/rest"
    assert err.error_type is ResponseErrorType.UNPROCESSABLE_ENTITY


def test_response_error_from_non_json_body() -> None:
    err = ResponseError.from_response(httpx.Response(502, content=b"<html>bad gateway</html>"))
    assert err.message == ""
    assert err.errors == ()
    assert err.error_type is ResponseErrorType.BAD_GATEWAY


def test_403_classification_by_message() -> None:
    rate = ResponseError(status_code=403, message="API rate limit exceeded for 1.2.3.4")
    logins = ResponseError(status_code=403, message="Maximum number of login attempts exceeded")
    plain = ResponseError(status_code=403, message="Resource not accessible")

    assert rate.error_type is ResponseErrorType.TOO_MANY_REQUESTS
    assert logins.error_type is ResponseErrorType.TOO_MANY_LOGIN_ATTEMPTS
    assert plain.error_type is ResponseErrorType.FORBIDDEN
    assert ResponseError(status_code=418).error_type is ResponseErrorType.CLIENT_ERROR
    assert ResponseError(status_code=504).error_type is ResponseErrorType.SERVER_ERROR


def test_existence_hint_only_for_404() -> None:
    project = Project(owner="octo", name="repo", host="git.corp.example")

    hint = existence_hint(project, ResponseError(status_code=404, reason="Not Found"))

    assert hint == "Are you sure that git.corp.example/octo/repo exists?"
    assert existence_hint(project, ResponseError(status_code=422)) is None
    assert existence_hint(project, RuntimeError("x")) is None


def test_with_hint_appends_line() -> None:
    err = HubError(action="creating pull request", message="Error creating pull request: Not Found (HTTP 404)")
    hinted = err.with_hint("Are you sure that github.com/octo/repo exists?")

    assert str(hinted) == (
        "Error creating pull request: Not Found (HTTP 404)\nAre you sure that github.com/octo/repo exists?"
    )
    assert str(err) == "Error creating pull request: Not Found (HTTP 404)"
