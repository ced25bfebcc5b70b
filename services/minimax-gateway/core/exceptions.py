from typing import Any, Dict, Optional


class GatewayError(Exception):
    """
    Base class for all application-specific exceptions.
    captures the original exception for debugging if needed.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class RelayError(GatewayError):
    """
    A failure that is reported to the caller as a JSON envelope:
    {"error": <short code>, "message": <human text>, "details"?: ...}
    """

    status_code: int = 500

    def __init__(
        self,
        error: str,
        message: str,
        details: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.error = error
        self.message = message
        self.details = details
        self.extra = extra or {}

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


# --- Input Errors (400, raised before any outbound call) ---


class MissingFieldError(RelayError):
    """
    Raised when the credential or a required request field is absent.
    """

    status_code = 400


class InvalidRequestError(RelayError):
    """
    Raised when the request body is not JSON or a field has the wrong type.
    """

    status_code = 400


# --- Upstream Errors (500) ---


class UpstreamHTTPError(RelayError):
    """
    Raised when the provider answers with a non-OK HTTP status,
    or cannot be reached at all.
    """

    pass


class InvalidEnvelopeError(RelayError):
    """
    Raised when the provider body is not valid JSON (or not the expected shape).
    """

    pass


class ProviderError(RelayError):
    """
    Raised when the provider envelope declares a non-zero base_resp.status_code.
    Never retried.
    """

    def __init__(self, code: int, message: str, original_error: Optional[Exception] = None):
        super().__init__(f"Error {code}", message, original_error=original_error)
        self.code = code


class ContentError(RelayError):
    """
    Raised when the envelope is well-formed but the expected payload
    (assistant message, task id, audio data, parsed JSON) is missing.
    """

    pass


# --- Job Terminal Errors (500) ---


class JobFailedError(RelayError):
    """
    Raised when the provider reports the generation task as failed.
    """

    pass


class JobTimeoutError(RelayError):
    """
    Raised when the poll ceiling is reached without a result id.
    """

    pass
