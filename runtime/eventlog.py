from typing import List, Tuple
from battlespace.model import GameLog

class EventLog:
    """Append-only journal storage for streaming to clients.

    The state keeps only the newest entries; this keeps all of them.
    """

    def __init__(self):
        self._log: List[GameLog] = []

    def __len__(self) -> int:
        return len(self._log)

    def append_many(self, entries: List[GameLog]) -> Tuple[int, int]:
        """Append entries and return (start_offset, end_offset)."""
        start = len(self._log)
        self._log.extend(entries)
        end = len(self._log) - 1
        return start, end

    def since(self, offset: int, limit: int = 1000) -> Tuple[List[GameLog], int]:
        """Return entries starting from offset, up to limit, and the next offset."""
        offset = max(0, offset)
        chunk = self._log[offset: offset + limit]
        return chunk, offset + len(chunk)
