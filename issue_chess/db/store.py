"""Protocol of the versioned Store holding the authoritative game encoding."""

from typing import Optional, Protocol

from issue_chess.core.models import StoredBlob, VersionToken


class GameStore(Protocol):
    """
    Blob storage with compare-and-swap semantics per path.

    A write or delete only succeeds when the supplied version equals the stored one; otherwise it raises
    StaleVersionError and nothing changes.
    """

    def read(self, path: str) -> StoredBlob | None:
        """Content + version at path, if anything is stored there."""
        ...

    def write(
        self, path: str, content: bytes, expected_version: Optional[VersionToken]
    ) -> VersionToken:
        """Replace the content at path. `expected_version=None` means: create, only if nothing is stored yet."""
        ...

    def delete(self, path: str, expected_version: VersionToken) -> None:
        """Remove the content at path. Raises RecordNotFoundError if nothing is stored there."""
        ...
