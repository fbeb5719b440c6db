from dataclasses import dataclass
from typing import List

from streamvault.core.common.enums import RequestKind

SEGMENT_CONTENT_TYPE = "video/mp2ts"
PLAYLIST_CONTENT_TYPE = "application/x-mpegURL"


@dataclass(frozen=True)
class PlaybackRequest:
    """
    A request path split into components and classified.

        .../{hash}/{label}_{seq}.ts   -> SEGMENT
        .../{hash}/{label}.m3u8       -> VARIANT_PLAYLIST (needs >= 2 components)
        .../{uuid}                    -> MASTER_PLAYLIST
    """
    raw_path: str
    kind: RequestKind
    components: List[str]

    @classmethod
    def parse(cls, request_path: str) -> "PlaybackRequest":
        components = [c for c in request_path.strip("/").split("/") if c]

        if ".ts" in request_path:
            kind = RequestKind.SEGMENT
        elif ".m3u8" in request_path and len(components) >= 2:
            kind = RequestKind.VARIANT_PLAYLIST
        else:
            kind = RequestKind.MASTER_PLAYLIST

        return cls(raw_path=request_path, kind=kind, components=components)

    @property
    def content_hash(self) -> str:
        return self.components[-2]

    @property
    def resource_name(self) -> str:
        return self.components[-1]

    @property
    def asset_uuid(self) -> str:
        return self.components[-1] if self.components else ""


@dataclass(frozen=True)
class ResolvedResource:
    content: bytes
    content_type: str
    # The file actually served; differs from the request after a fallback
    served_name: str
