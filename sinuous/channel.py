import asyncio

from .errors import ChannelClosed

_CLOSED = object()


class Channel:
    """A bounded single-consumer queue that the sender can close.

    Items sent before close() are still delivered; after that, recv()
    returns None and try_recv() raises ChannelClosed.
    """

    def __init__(self, capacity=2):
        self._queue = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._drained = False

    @property
    def closed(self):
        return self._closed

    async def send(self, item):
        if self._closed:
            raise ChannelClosed("send on a closed channel")
        await self._queue.put(item)

    def close(self):
        """Marks the channel closed without waiting for buffer space."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # recv() notices the flag once the buffer drains
            pass

    def _unwrap(self, item):
        if item is _CLOSED:
            self._drained = True
            return None
        return item

    async def recv(self):
        """Waits for the next item; returns None once closed and drained."""
        if self._drained or (self._closed and self._queue.empty()):
            self._drained = True
            return None
        return self._unwrap(await self._queue.get())

    def try_recv(self):
        """Returns the next buffered item, or None if nothing is waiting."""
        if self._drained or (self._closed and self._queue.empty()):
            self._drained = True
            raise ChannelClosed("channel closed")
        try:
            item = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        if item is _CLOSED:
            self._drained = True
            raise ChannelClosed("channel closed")
        return item
