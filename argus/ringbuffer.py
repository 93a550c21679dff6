"""A fixed-size byte buffer that keeps only the most recent data."""

from __future__ import annotations


class RingBuffer:
    """Holds at most ``size`` bytes; new writes push out the oldest data."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("ring buffer size must be positive")
        self.size = size
        self._data = bytearray()
        self._total = 0

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Append data, discarding the oldest bytes beyond the capacity."""
        self._total += len(data)
        if len(data) >= self.size:
            self._data[:] = data[-self.size:]
            return
        self._data += data
        excess = len(self._data) - self.size
        if excess > 0:
            del self._data[:excess]

    def getvalue(self) -> bytes:
        """Return the buffered bytes, oldest first."""
        return bytes(self._data)

    def total_written(self) -> int:
        """Return the count of all bytes ever written, including discarded ones."""
        return self._total

    def __len__(self) -> int:
        return len(self._data)

    def reset(self) -> None:
        """Discard the buffered bytes; the total written count is kept."""
        self._data.clear()