"""Errors raised while decoding the parking GeoJSON."""

from enum import Enum

PREVIEW_BYTES = 400


class DecodeErrorKind(str, Enum):
    MALFORMED_DATA = "malformed data"
    MISSING_KEY = "missing required key"
    TYPE_MISMATCH = "type mismatch"
    UNEXPECTED_NULL = "unexpected null"


class GeoJSONDecodeError(ValueError):
    """Raised when the payload is not a usable GeoJSON FeatureCollection."""

    def __init__(
        self,
        kind: DecodeErrorKind,
        message: str,
        *,
        path: tuple[str | int, ...] = (),
        preview: str = "",
    ) -> None:
        self.kind = kind
        self.message = message
        self.path = path
        self.preview = preview
        super().__init__(str(self))

    @property
    def location(self) -> str:
        """Dotted path to the offending field, e.g. "features.3.geometry.type"."""
        return ".".join(str(part) for part in self.path)

    def __str__(self) -> str:
        if self.path:
            return f"GeoJSON {self.kind.value} at {self.location}: {self.message}"
        return f"GeoJSON {self.kind.value}: {self.message}"


def payload_preview(data: bytes, limit: int = PREVIEW_BYTES) -> str:
    """First bytes of a payload as text, for logging failed decodes."""
    return data[:limit].decode("utf-8", errors="replace")
