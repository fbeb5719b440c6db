from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Tuple


class IContentHasher(ABC):
    """
    Produces the storage key (content hash) from upload metadata,
    before any byte is read.
    """

    @abstractmethod
    def compute(self, filename: str, size_bytes: int) -> str:
        pass


class IStreamHasher(ABC):
    """
    Produces the storage key from the uploaded bytes. The key is only
    known once the store has fed every chunk through `new()`.
    """

    @abstractmethod
    def new(self):
        """A fresh hashlib-style object with update() and hexdigest()."""
        pass


class IContentStore(ABC):
    """
    Contract for the filesystem area holding raw uploads and renditions.
    Everything is addressed by content hash.
    """

    @abstractmethod
    def asset_dir(self, content_hash: str) -> Path:
        pass

    @abstractmethod
    def write_upload(self, stream: BinaryIO, content_hash: str, filename: str) -> Path:
        """
        Copies the stream into {root}/{content_hash}/{filename}.
        Returns the absolute path of the written file.
        """
        pass

    @abstractmethod
    def write_upload_digested(self, stream: BinaryIO, filename: str, hasher: IStreamHasher) -> Tuple[str, Path]:
        """
        Copies the stream while feeding `hasher`; the directory is named
        after the final digest. Returns (content_hash, written_path).
        """
        pass

    @abstractmethod
    def read(self, content_hash: str, name: str) -> bytes:
        pass

    @abstractmethod
    def exists(self, content_hash: str, name: str) -> bool:
        pass

    @abstractmethod
    def remove_asset_dir(self, content_hash: str) -> bool:
        pass

    @abstractmethod
    def remove_asset_dir_if_empty(self, content_hash: str) -> bool:
        """Removes {root}/{content_hash} only when nothing is left in it."""
        pass

    @abstractmethod
    def remove_file(self, path: Path) -> bool:
        pass
