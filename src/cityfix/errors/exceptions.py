"""Custom exception classes for the CityFix API."""


class CityFixError(Exception):
    """Base exception for CityFix."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(CityFixError):
    """Missing or malformed request field."""

    def __init__(self, message: str, field: str | None = None, details=None):
        if field and details is None:
            details = {"field": field}
        self.field = field
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class NotFoundError(CityFixError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class AuthenticationError(CityFixError):
    """Authentication required, token invalid, or bad credentials."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class UnauthorizedError(CityFixError):
    """Caller is authenticated but does not own the resource."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__("UNAUTHORIZED", message, status_code=401)


class UnsupportedMediaTypeError(CityFixError):
    """Upload is not an accepted image type."""

    def __init__(self, message: str = "Only image files are allowed"):
        super().__init__("UNSUPPORTED_MEDIA_TYPE", message, status_code=415)


class PayloadTooLargeError(CityFixError):
    """Upload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            "PAYLOAD_TOO_LARGE",
            f"Image of {size} bytes exceeds the {limit} byte limit",
            details={"size": size, "limit": limit},
            status_code=413,
        )


class UnuploadedLocalReferenceError(CityFixError):
    """A device-local image path reached persistence without being uploaded."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(
            "UNUPLOADED_LOCAL_REFERENCE",
            "Local file paths cannot be saved directly. Please upload the image first.",
            details={"image": reference},
            status_code=400,
        )


class UpstreamUnavailableError(CityFixError):
    """External collaborator (classifier, API) failed or timed out."""

    def __init__(self, service: str, reason: str):
        self.service = service
        super().__init__(
            "UPSTREAM_UNAVAILABLE",
            f"{service} unavailable: {reason}",
            status_code=502,
        )
