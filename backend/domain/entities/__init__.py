"""
Domain Entities

Entities are objects with a distinct identity that runs through time and different states.

- UploadedFile: a received upload awaiting transcoding
"""

from .uploaded_file import UploadedFile, discard_all

__all__ = ["UploadedFile", "discard_all"]
