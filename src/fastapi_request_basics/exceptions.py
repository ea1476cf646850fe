"""BasicsException hierarchy for body parsing failures."""

from __future__ import annotations


class BasicsException(Exception):
    """Base for all request-basics exceptions."""


class BodyError(BasicsException):
    """The request body could not be turned into a value.

    Carries the HTTP status an application handler would typically answer
    with, so a rejection can be converted with
    ``HTTPException(status_code=exc.status_code, detail=exc.detail)``.
    """

    def __init__(
        self,
        detail: str,
        *,
        status_code: int = 400,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.cause = cause


class MalformedBody(BodyError):
    """Payload is not valid JSON (400)."""

    def __init__(
        self, detail: str = "Malformed JSON body", *, cause: BaseException | None = None
    ) -> None:
        super().__init__(detail, status_code=400, cause=cause)


class BodyTooLarge(BodyError):
    """Payload exceeds the configured size limit (413)."""

    def __init__(
        self, detail: str = "Request body too large", *, limit: int | None = None
    ) -> None:
        super().__init__(detail, status_code=413)
        self.limit = limit


class BodyStreamError(BodyError):
    """Request stream ended early or was already consumed (400)."""

    def __init__(
        self,
        detail: str = "Request body stream failed",
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(detail, status_code=400, cause=cause)
