import threading
import time
from typing import Dict, Generic, Hashable, Optional, Tuple, TypeVar

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Cache em memória com expiração individual por chave."""

    def __init__(self, max_size: int = 128, clock=time.monotonic):
        self.max_size = max_size
        self._clock = clock
        self._store: Dict[Hashable, Tuple[float, V]] = {}
        self._lock = threading.Lock()

    def _evict_if_needed(self):
        # Remove expirados e controla tamanho
        now = self._clock()
        expired_keys = [k for k, (deadline, _) in self._store.items() if deadline <= now]
        for k in expired_keys:
            self._store.pop(k, None)
        if len(self._store) > self.max_size:
            # Descarta os que expiram primeiro
            by_deadline = sorted(self._store, key=lambda k: self._store[k][0])
            for k in by_deadline[: (len(self._store) - self.max_size)]:
                self._store.pop(k, None)

    def set(self, key: Hashable, value: V, ttl_seconds: float):
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._store[key] = (self._clock() + ttl_seconds, value)
            self._evict_if_needed()

    def get(self, key: Hashable) -> Optional[V]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            deadline, value = entry
            if deadline <= self._clock():
                self._store.pop(key, None)
                return None
            return value

    def clear(self):
        with self._lock:
            self._store.clear()
