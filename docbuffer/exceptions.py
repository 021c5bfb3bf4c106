class DocBufferError(Exception):
    """Base exception for docbuffer errors."""
    pass


class NotConnectedError(DocBufferError):
    """Raised when a storage operation runs before connect()."""
    pass


class UnknownSessionError(DocBufferError, KeyError):
    """Raised when a session token is unknown or already disposed."""
    pass
