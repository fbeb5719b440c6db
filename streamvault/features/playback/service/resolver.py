import logging
from typing import Dict

from streamvault.core.common.enums import RequestKind
from streamvault.core.common.errors import ResolutionNotFoundError
from streamvault.features.content_store.domain.interfaces import IContentStore
from streamvault.features.content_store.domain.models import RenditionLayout
from streamvault.features.status_tracker.service.tracker import StatusTracker
from ..domain.models import (
    PLAYLIST_CONTENT_TYPE,
    SEGMENT_CONTENT_TYPE,
    PlaybackRequest,
    ResolvedResource,
)

logger = logging.getLogger(__name__)

FORBIDDEN_COMPONENTS = {"", ".", ".."}


class PlaybackResolver:
    """
    Maps a GET path to bytes in the Content Store.

    Variant playlists fall back to any other configured label that exists,
    tried in configuration order. The fallback does not check that the
    served quality matches the one asked for: a request for 720.m3u8 may
    be answered with 360.m3u8. That ambiguity is accepted behaviour.
    """

    def __init__(self, store: IContentStore, tracker: StatusTracker, resolutions: Dict[str, str]):
        self.store = store
        self.tracker = tracker
        self.labels = list(resolutions.values())

    def resolve(self, request_path: str) -> ResolvedResource:
        request = PlaybackRequest.parse(request_path)

        if request.kind == RequestKind.SEGMENT:
            return self._resolve_segment(request)
        if request.kind == RequestKind.VARIANT_PLAYLIST:
            return self._resolve_variant(request)
        return self._resolve_master(request)

    def _resolve_segment(self, request: PlaybackRequest) -> ResolvedResource:
        op = "PlaybackResolver.resolve_segment"
        content_hash, name = self._hash_and_name(op, request)
        content = self._read(op, content_hash, name)
        return ResolvedResource(content, SEGMENT_CONTENT_TYPE, name)

    def _resolve_variant(self, request: PlaybackRequest) -> ResolvedResource:
        op = "PlaybackResolver.resolve_variant"
        content_hash, name = self._hash_and_name(op, request)

        if self.store.exists(content_hash, name):
            return ResolvedResource(self._read(op, content_hash, name), PLAYLIST_CONTENT_TYPE, name)

        logger.warning(f"[op={op}] {content_hash[:12]}/{name} missing, trying other resolutions")
        for label in self.labels:
            candidate = f"{label}.m3u8"
            if candidate == name:
                continue
            if self.store.exists(content_hash, candidate):
                logger.info(f"[op={op}] serving {candidate} in place of {name}")
                return ResolvedResource(self._read(op, content_hash, candidate), PLAYLIST_CONTENT_TYPE, candidate)

        logger.error(f"[op={op}] failed to find any suitable video file for {request.raw_path}")
        raise ResolutionNotFoundError(op, f"no playlist available for {request.raw_path}")

    def _resolve_master(self, request: PlaybackRequest) -> ResolvedResource:
        op = "PlaybackResolver.resolve_master"
        if not request.asset_uuid:
            raise ResolutionNotFoundError(op, "UUID is required")

        asset = self.tracker.get_playable_by_uuid(request.asset_uuid)
        name = RenditionLayout(asset.content_hash).master_playlist
        content = self._read(op, asset.content_hash, name)
        return ResolvedResource(content, PLAYLIST_CONTENT_TYPE, name)

    def _hash_and_name(self, op: str, request: PlaybackRequest):
        if len(request.components) < 2:
            raise ResolutionNotFoundError(op, f"invalid path: {request.raw_path}")

        content_hash, name = request.content_hash, request.resource_name
        if content_hash in FORBIDDEN_COMPONENTS or name in FORBIDDEN_COMPONENTS:
            raise ResolutionNotFoundError(op, f"invalid path: {request.raw_path}")
        return content_hash, name

    def _read(self, op: str, content_hash: str, name: str) -> bytes:
        try:
            return self.store.read(content_hash, name)
        except OSError as e:
            logger.error(f"[op={op}] failed to read file {content_hash[:12]}/{name}: {e}")
            raise ResolutionNotFoundError(op, "failed to read file") from e
