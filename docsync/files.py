"""References to files stored on the backend."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FileRef:
    """A file already known to the backend.

    Only uploaded files (those with a ``url``) may be stored on a record;
    uploading itself happens elsewhere.
    """

    name: str
    url: str | None = None

    @property
    def is_uploaded(self) -> bool:
        return self.url is not None

    def to_wire(self) -> dict:
        return {"__type": "File", "name": self.name, "url": self.url}
