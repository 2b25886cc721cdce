import asyncio
from typing import Callable, Optional

from utils.logger import get_logger

_logger = get_logger(__name__)


class NoticeBoard:
    """
    Holds at most one transient notice.

    Posting a notice schedules its dismissal after `ttl` seconds. A newer
    notice replaces the current one and cancels the pending dismissal, so
    an old timer can never clear a fresh notice.
    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        ttl: float = 1.8,
        listener: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.ttl = ttl
        self.listener = listener
        self.current: Optional[str] = None
        self._dismissal: Optional[asyncio.Task] = None

    def post(self, text: str) -> None:
        self._cancel_pending()
        self.current = text
        _logger.debug(f"notice: {text}")
        self._dismissal = asyncio.get_running_loop().create_task(
            self._dismiss_later(self.ttl)
        )
        if self.listener:
            self.listener(text)

    def dismiss(self) -> None:
        self._cancel_pending()
        self.current = None

    @property
    def pending(self) -> bool:
        return self._dismissal is not None and not self._dismissal.done()

    def _cancel_pending(self) -> None:
        if self._dismissal is not None and not self._dismissal.done():
            self._dismissal.cancel()
        self._dismissal = None

    async def _dismiss_later(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self.current = None
        self._dismissal = None
