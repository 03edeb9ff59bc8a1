"""Atomic integer word shared by counters, meters and the EWMA accumulators."""

from __future__ import annotations
import threading


_WORD_BITS = 64
_WORD_MASK = (1 << _WORD_BITS) - 1
_SIGN_BIT = 1 << (_WORD_BITS - 1)


def _wrap(value: int) -> int:
    """Fold ``value`` into the signed 64-bit range (two's complement)."""
    value &= _WORD_MASK
    if value & _SIGN_BIT:
        return value - (1 << _WORD_BITS)
    return value


class AtomicInteger:
    """Signed 64-bit integer with linearizable read-modify-write operations.

    Each operation is a single indivisible step on one word; the internal lock
    is held only for that step and never across calls. Arithmetic wraps
    around on overflow like a fixed-width machine word.
    """

    __slots__ = ("_lock", "_value")

    def __init__(self, value: int = 0) -> None:
        """Create the word holding ``value``."""
        self._lock = threading.Lock()
        self._value = _wrap(int(value))

    def get(self) -> int:
        """Return the current value."""
        with self._lock:
            return self._value

    def set(self, value: int) -> None:
        """Replace the current value."""
        with self._lock:
            self._value = _wrap(int(value))

    def get_and_set(self, value: int) -> int:
        """Replace the current value and return the previous one."""
        with self._lock:
            previous = self._value
            self._value = _wrap(int(value))
            return previous

    def add_and_get(self, delta: int) -> int:
        """Add ``delta`` and return the updated value."""
        with self._lock:
            self._value = _wrap(self._value + int(delta))
            return self._value

    def get_and_add(self, delta: int) -> int:
        """Add ``delta`` and return the value held before the addition."""
        with self._lock:
            previous = self._value
            self._value = _wrap(previous + int(delta))
            return previous

    def compare_and_set(self, expected: int, value: int) -> bool:
        """Store ``value`` only if the word still holds ``expected``."""
        with self._lock:
            if self._value != expected:
                return False
            self._value = _wrap(int(value))
            return True

    def __repr__(self) -> str:
        return f"AtomicInteger({self.get()})"


__all__ = ["AtomicInteger"]
