from dataclasses import dataclass

MASTER_PLAYLIST_NAME = "playlist.m3u8"


@dataclass(frozen=True)
class RenditionLayout:
    """
    The on-disk naming convention for one asset's renditions.
    Not persisted anywhere: the directory *is* the rendition set.

        {hash}/playlist.m3u8
        {hash}/{label}.m3u8
        {hash}/{label}_{seq:03d}.ts
    """
    content_hash: str

    @property
    def master_playlist(self) -> str:
        return MASTER_PLAYLIST_NAME

    def variant_playlist(self, label: str) -> str:
        return f"{label}.m3u8"

    def segment_pattern(self, label: str) -> str:
        """printf-style pattern handed to the encoder."""
        return f"{label}_%03d.ts"

    def master_entry(self, label: str) -> str:
        """Variant URI as written into the master playlist."""
        return f"{self.content_hash}/{self.variant_playlist(label)}"
