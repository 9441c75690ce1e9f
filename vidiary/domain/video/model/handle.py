"""ViewHandle - a revocable in-memory view of one clip's payload."""

import io
import logging
from uuid import uuid4

from vidiary.domain.shared.error import InvalidStateError
from vidiary.domain.video.model.value import VideoId

logger = logging.getLogger(__name__)


class ViewHandle:
    """Playback reference for a stored payload.

    Players address the clip by ``url`` and read it through :meth:`open` or
    :meth:`read` without going back to the database. Revoking releases the
    underlying ``memoryview``; any later read raises ``InvalidStateError``.
    """

    def __init__(
        self,
        video_id: VideoId,
        payload: bytes,
        mime_type: str,
        url_scheme: str = "blob:vidiary",
    ) -> None:
        self.video_id = video_id
        self.mime_type = mime_type
        self.url = f"{url_scheme}/{uuid4()}"
        self.size = len(payload)
        self._view: memoryview | None = memoryview(payload)

    def __repr__(self) -> str:
        state = "revoked" if self.revoked else "live"
        return f"ViewHandle(video_id={self.video_id!r}, url={self.url!r}, {state})"

    @property
    def revoked(self) -> bool:
        return self._view is None

    @property
    def view(self) -> memoryview:
        if self._view is None:
            raise InvalidStateError(f"View handle {self.url} has been revoked")
        return self._view

    def read(self) -> bytes:
        return self.view.tobytes()

    def open(self) -> io.BytesIO:
        """Return a seekable stream over the payload, for players that want a file."""
        return io.BytesIO(self.view)

    def revoke(self) -> None:
        """Release the view. Only the HandleManager calls this."""
        view, self._view = self._view, None
        if view is None:
            return
        try:
            view.release()
        except BufferError:
            # A consumer still holds an export of the view; the buffer is
            # freed when that export is dropped.
            logger.debug("View handle %s revoked while still exported", self.url)
