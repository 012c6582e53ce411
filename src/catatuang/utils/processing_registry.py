"""In-memory registry of chat items currently being processed."""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional, Tuple

from .logger import get_logger

logger = get_logger()

RegistryKey = Tuple[str, str]


@dataclass
class ProcessingRecord:
    chat_id: str
    item_id: str
    started_at: float


class ProcessingRegistry:
    """
    Tracks (chat, item) pairs that are in flight or were handled recently.
    
    Entries expire after ``ttl_seconds``. The registry is owned by the
    request-handling layer and handed to the components that need it.
    """
    
    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._records: Dict[RegistryKey, ProcessingRecord] = {}
        self._lock = threading.Lock()
    
    @staticmethod
    def _key(chat_id: Hashable, item_id: Hashable) -> RegistryKey:
        return str(chat_id), str(item_id)
    
    def try_acquire(self, chat_id: Hashable, item_id: Hashable) -> bool:
        """
        Register an item as being processed.
        
        Args:
            chat_id: Chat identifier
            item_id: Update, message or file identifier
            
        Returns:
            False if the same item is already registered and not yet expired
        """
        key = self._key(chat_id, item_id)
        with self._lock:
            self._evict_expired()
            if key in self._records:
                logger.info(f"Skipping item {key[1]} for chat {key[0]}: already processing")
                return False
            self._records[key] = ProcessingRecord(key[0], key[1], self._clock())
            return True
    
    def is_processing(self, chat_id: Hashable, item_id: Hashable) -> bool:
        """Return True if the item is registered and not expired."""
        with self._lock:
            self._evict_expired()
            return self._key(chat_id, item_id) in self._records
    
    def release(self, chat_id: Hashable, item_id: Hashable) -> None:
        """Forget an item so it can be processed again."""
        with self._lock:
            self._records.pop(self._key(chat_id, item_id), None)
    
    def clear(self, chat_id: Optional[Hashable] = None) -> int:
        """Drop all entries, or only those of one chat. Returns the number removed."""
        with self._lock:
            if chat_id is None:
                removed = len(self._records)
                self._records.clear()
                return removed
            
            chat_key = str(chat_id)
            keys = [key for key in self._records if key[0] == chat_key]
            for key in keys:
                del self._records[key]
            return len(keys)
    
    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [
            key for key, record in self._records.items()
            if now - record.started_at >= self.ttl_seconds
        ]
        for key in expired:
            del self._records[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired processing entries")
    
    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._records)
