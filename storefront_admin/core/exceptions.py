"""
Exception types raised by the storefront admin package.

Pages catch ``StorefrontError`` and show a message with a retry button;
nothing below that is treated as fatal.
"""


class StorefrontError(Exception):
    """Base class for all storefront admin errors."""


class DataStoreError(StorefrontError):
    """A document store read or write failed."""

    def __init__(self, message: str, collection: str = None):
        super().__init__(message)
        self.collection = collection


class BlobStorageError(StorefrontError):
    """A blob storage call failed."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class MalformedRecordError(StorefrontError, ValueError):
    """A stored record could not be interpreted."""

    def __init__(self, message: str, doc_id: str = None):
        super().__init__(message)
        self.doc_id = doc_id


class ValidationError(StorefrontError):
    """User-supplied data failed validation."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
