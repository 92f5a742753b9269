"""Errors raised by collaborator clients (feed, download client, catalog store)."""

from typing import Optional


class CollaboratorError(Exception):
    """Base class for collaborator failures.

    Jobs catch this per source or per item, record it in the run summary and
    carry on with the rest of the run.
    """

    def __init__(self, message: str, collaborator: Optional[str] = None) -> None:
        super().__init__(message)
        self.collaborator = collaborator


class NotConfiguredError(CollaboratorError):
    """The collaborator has no endpoint or credentials configured.

    Raised by a job body at entry. The scheduler logs it at INFO once per run
    instead of treating it as a failure.
    """


class CollaboratorConnectionError(CollaboratorError):
    """The collaborator could not be reached (refused, DNS, reset). Transient."""

    def __init__(
        self, message: str, collaborator: Optional[str] = None, url: Optional[str] = None
    ) -> None:
        super().__init__(message, collaborator)
        self.url = url


class CollaboratorTimeoutError(CollaboratorConnectionError):
    """The collaborator did not answer within the configured timeout."""


class CollaboratorResponseError(CollaboratorError):
    """The collaborator answered with an error status or an unusable body."""

    def __init__(
        self,
        message: str,
        collaborator: Optional[str] = None,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message, collaborator)
        self.status_code = status_code
        self.url = url


class StorageError(CollaboratorError):
    """The catalog store failed to read or apply a change."""
