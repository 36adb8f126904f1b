from __future__ import annotations

from threading import Event


class DthError(Exception):
    """Base class for errors surfaced to callers of the core operations."""

    status_code = 500


class NotFound(DthError):
    status_code = 404


class MalformedWorkload(DthError):
    status_code = 422


class InvalidTag(DthError):
    status_code = 400


class GatewayError(DthError):
    """Transport, auth or conflict failure reported by the cluster API.

    `status` is the API server's HTTP status when there was a response.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 409 if self.status == 409 else 502


class Cancelled(DthError):
    status_code = 504


def check_cancelled(cancel: Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise Cancelled("operation cancelled")
