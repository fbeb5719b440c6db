import hashlib
from typing import Union
from ..domain.interfaces import IContentHasher, IStreamHasher


class MetadataHasher(IContentHasher):
    def compute(self, filename: str, size_bytes: int) -> str:
        """
        sha256("{filename}-{size}").
        Two different files with the same name and size share a directory.
        """
        return hashlib.sha256(f"{filename}-{size_bytes}".encode("utf-8")).hexdigest()


class StreamDigestHasher(IStreamHasher):
    """
    Hashes the uploaded bytes themselves. The store feeds each chunk
    through `new()` while writing, so the upload is read only once.
    """

    def new(self):
        return hashlib.sha256()


def build_hasher(mode: str) -> Union[IContentHasher, IStreamHasher]:
    if mode == "metadata":
        return MetadataHasher()
    if mode == "digest":
        return StreamDigestHasher()
    raise ValueError(f"Unknown CONTENT_HASH_MODE: {mode}")
