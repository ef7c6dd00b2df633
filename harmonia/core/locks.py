import threading
from collections.abc import Iterator
from contextlib import contextmanager


class UserLocks:
    """
    One reentrant lock per user id.

    Mutations for the same user are serialized because decay-then-apply is not
    commutative. Different users never contend.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def get(self, user_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        with self.get(user_id):
            yield

    def discard(self, user_id: str) -> None:
        with self._registry_lock:
            self._locks.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._locks)
