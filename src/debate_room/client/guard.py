from __future__ import annotations


class JudgingGuard:
    """Latch allowing one judging request per debate instance.

    Only a new timer start re-arms it; joining or rejoining a room does not.
    """

    def __init__(self) -> None:
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def try_fire(self) -> bool:
        if self._fired:
            return False
        self._fired = True
        return True

    def rearm(self) -> None:
        self._fired = False

    def settle(self) -> None:
        """The debate already has a verdict; nothing left to request."""
        self._fired = True

    def release(self) -> None:
        """Undo a fire whose request never reached the server."""
        self._fired = False
