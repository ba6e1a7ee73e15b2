from __future__ import annotations


class ForumError(Exception):
    """Base for errors surfaced to API callers.

    ``code`` is the machine-readable kind, ``status_code`` the HTTP status the
    API renders it with.
    """

    code: str = "INTERNAL_SERVER_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(ForumError):
    code = "BAD_REQUEST"
    status_code = 400


class UnauthorizedError(ForumError):
    code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenError(ForumError):
    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(ForumError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(ForumError):
    code = "CONFLICT"
    status_code = 409
