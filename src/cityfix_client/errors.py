"""Client-side exceptions."""

from __future__ import annotations


class ClientError(Exception):
    """Base class for CityFix client failures."""


class NetworkError(ClientError):
    """The server could not be reached (connection refused, timeout, DNS)."""


class ApiError(ClientError):
    """The server answered with an error status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class SubmissionError(ClientError):
    """A submission flow failed at a step that must block it."""


class FlowInProgressError(ClientError):
    """Another submission flow for the same image has not finished."""

    def __init__(self, image_uri: str):
        self.image_uri = image_uri
        super().__init__(f"A submission for {image_uri} is already in progress")


class FlowStateError(ClientError):
    """A flow step was called out of order (no label chosen, flow finished)."""
