"""Per-user processing guard."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class UserProcessingGuard:
    """Allows at most one in-flight event per user within this process.

    The busy set lives in memory only, so separate instances do not see
    each other's locks.
    """

    _busy: set[str] = field(default_factory=set)

    def acquire(self, user_id: str) -> bool:
        """Mark the user busy; return False when a lock is already held."""
        if user_id in self._busy:
            return False
        self._busy.add(user_id)
        return True

    def release(self, user_id: str) -> None:
        """Clear the user's lock."""
        self._busy.discard(user_id)

    def is_busy(self, user_id: str) -> bool:
        """Return True while an event for the user is being handled."""
        return user_id in self._busy

    @contextmanager
    def hold(self, user_id: str) -> Iterator[bool]:
        """Acquire for the duration of the block and always release after."""
        acquired = self.acquire(user_id)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(user_id)
