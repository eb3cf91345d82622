"""String enums for report and image fields."""

from enum import StrEnum


class ReportStatus(StrEnum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class Urgency(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ImageStoreBackend(StrEnum):
    DATABASE = "database"
    FILESYSTEM = "filesystem"


class ImageRefKind(StrEnum):
    EMPTY = "empty"
    LOCAL_DEVICE = "local_device"
    ABSOLUTE_URL = "absolute_url"
    SERVER_RELATIVE = "server_relative"
    UNKNOWN = "unknown"


class ClassificationSource(StrEnum):
    EXTERNAL = "external"
    MOCK = "mock"
    FALLBACK = "fallback"
