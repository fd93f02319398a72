class DocstoreError(Exception):
    """Base exception for document store errors."""

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.collection = collection


class DocstoreConnectionError(DocstoreError, ConnectionError):
    """Cannot establish or keep the link to the store."""

    pass


class DocstoreSerializationError(DocstoreError):
    """Entity could not be converted to or from BSON."""

    pass


class DocstoreNotFoundError(DocstoreError):
    """Document not found."""

    pass


class DocstoreMultipleResultsError(DocstoreError):
    """Single-result query matched more than one document."""

    pass
