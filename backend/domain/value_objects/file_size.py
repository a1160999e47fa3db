"""
FileSize Value Object

Immutable representation of a file size with formatting capabilities.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FileSize:
    """
    Immutable file size value object.

    Provides human-readable formatting and validation.
    """

    bytes: int

    def __post_init__(self):
        """Validate file size."""
        if self.bytes < 0:
            raise ValueError(f"File size cannot be negative: {self.bytes}")

    def to_human_readable(self) -> str:
        """
        Format size in human-readable format.

        Returns:
            String like "1.5 MB" or "256.0 KB"
        """
        size = float(self.bytes)
        for unit in ["B", "KB", "MB", "GB", "TB"]:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} PB"

    def exceeds(self, limit: "FileSize") -> bool:
        """True when this size is strictly larger than the limit."""
        return limit < self

    def __str__(self) -> str:
        return self.to_human_readable()

    def __lt__(self, other: "FileSize") -> bool:
        """Compare file sizes."""
        if not isinstance(other, FileSize):
            raise TypeError(f"Cannot compare FileSize and {type(other)}")
        return self.bytes < other.bytes
