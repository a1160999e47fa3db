"""
ImageDescriptor Value Object

Describes one stored, transcoded product image.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageDescriptor:
    """
    Public reference to a transcoded image.

    Returned to the caller after an upload and intended to be stored inside a
    Product record. The pipeline keeps no reference to it once returned.
    """

    url: str
    alt: str = ""
    is_primary: bool = False

    def to_dict(self) -> dict:
        """Wire/document representation"""
        return {"url": self.url, "alt": self.alt, "isPrimary": self.is_primary}
