"""
Domain Layer

Plain objects used by the upload pipeline, independent of HTTP and storage.

- entities/: UploadedFile, a received upload awaiting transcoding
- value_objects/: FileSize and ImageDescriptor
"""
