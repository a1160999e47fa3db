"""
Domain Value Objects

Value objects are immutable types that represent descriptive aspects of the domain.
They have no conceptual identity and are compared by their values, not by ID.

- FileSize: Size with formatting and validation
- ImageDescriptor: Public url/alt/primary flag of a transcoded image
"""

from .file_size import FileSize
from .image_descriptor import ImageDescriptor

__all__ = ["FileSize", "ImageDescriptor"]
