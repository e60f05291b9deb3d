"""Error types raised by docsync."""

OTHER_CAUSE = -1
CONNECTION_FAILED = 100
OBJECT_NOT_FOUND = 101
INVALID_KEY_NAME = 105
INVALID_JSON = 107
NOT_INITIALIZED = 109
INCORRECT_TYPE = 111


class DocSyncError(Exception):
    """Structured error carrying a machine-readable code and a message."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidArgumentError(DocSyncError, ValueError):
    """A mutation precondition failed. Raised before anything hits the network."""

    def __init__(self, message: str, code: int = OTHER_CAUSE):
        super().__init__(code, message)


class TransportError(DocSyncError):
    """The request never produced a server response."""

    def __init__(self, message: str, code: int = CONNECTION_FAILED):
        super().__init__(code, message)


class ServerError(DocSyncError):
    """The server answered with a non-success status."""

    def __init__(self, code: int, message: str, status_code: int | None = None):
        super().__init__(code, message)
        self.status_code = status_code


class MalformedResponseError(DocSyncError):
    """The server reported success but the body lacks what we need."""

    def __init__(self, message: str, code: int = INVALID_JSON):
        super().__init__(code, message)
