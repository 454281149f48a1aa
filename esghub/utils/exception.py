"""Error kinds shared by the pipeline and the views.

DocumentParseError aborts an upload/open. NetworkError and ServiceError come
from the two AI services and the document store; the analysis path folds them
into a single AnalysisError, the chat path turns them into assistant turns.
"""
from __future__ import annotations


class ReportHubError(Exception):
    """Base class for every error raised by esghub."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message or self.__class__.__name__


class ConfigError(ReportHubError):
    pass


class DocumentParseError(ReportHubError):
    pass


class ServiceCallError(ReportHubError):
    pass


class NetworkError(ServiceCallError):
    """Transport failure or timeout talking to a remote service."""


class ServiceError(ServiceCallError):
    """Non-success status or malformed payload from a remote service."""


class AnalysisError(ReportHubError):
    pass


class LocateUnavailable(ReportHubError):
    pass


class ViewerNotReady(ReportHubError):
    pass
