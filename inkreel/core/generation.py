"""
Monotonic tokens used to discard superseded asynchronous work.
"""


class GenerationCounter:
    """
    Epoch counter compared when an asynchronous operation resolves.

    An operation captures ``bump()`` when it starts and checks
    ``is_current(token)`` when it completes. Any later ``bump()`` makes the
    earlier token stale.
    """

    def __init__(self, name: str = "generation"):
        self.name = name
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def bump(self) -> int:
        """Advance the counter and return the new token."""
        self._value += 1
        return self._value

    def is_current(self, token: int) -> bool:
        return token == self._value

    def __repr__(self) -> str:
        return f"GenerationCounter({self.name}={self._value})"
