"""HandleManager - owns every live ViewHandle."""

import logging

from vidiary.domain.video.model.aggregate import VideoRecord
from vidiary.domain.video.model.handle import ViewHandle
from vidiary.domain.video.model.value import VideoId

logger = logging.getLogger(__name__)


class HandleManager:
    """Maps each visible clip to exactly one live view handle.

    No other component keeps a handle past revocation: callers look handles up
    here each time they need one.
    """

    def __init__(self, url_scheme: str = "blob:vidiary") -> None:
        self._url_scheme = url_scheme
        self._handles: dict[VideoId, ViewHandle] = {}
        self._by_url: dict[str, ViewHandle] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, video_id: object) -> bool:
        return video_id in self._handles

    def mint(self, record: VideoRecord) -> ViewHandle:
        """Create the handle for ``record``, revoking any previous one for its id."""
        self.revoke(record.id)
        handle = ViewHandle(
            video_id=record.id,
            payload=record.payload,
            mime_type=record.mime_type,
            url_scheme=self._url_scheme,
        )
        self._handles[record.id] = handle
        self._by_url[handle.url] = handle
        logger.debug("Minted view handle %s for video %s", handle.url, record.id)
        return handle

    def revoke(self, video_id: VideoId) -> bool:
        """Release the handle for ``video_id``. Returns False if there was none."""
        handle = self._handles.pop(video_id, None)
        if handle is None:
            return False
        self._by_url.pop(handle.url, None)
        handle.revoke()
        logger.debug("Revoked view handle %s for video %s", handle.url, video_id)
        return True

    def revoke_all(self) -> int:
        count = 0
        for video_id in list(self._handles):
            count += self.revoke(video_id)
        return count

    def get(self, video_id: VideoId) -> ViewHandle | None:
        return self._handles.get(video_id)

    def resolve(self, url: str) -> ViewHandle | None:
        """Find the live handle behind a blob URL."""
        return self._by_url.get(url)
