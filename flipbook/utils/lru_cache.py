import threading
from collections import OrderedDict


class ThreadSafeLRUCache:
    """A thread-safe Least Recently Used (LRU) cache.

    Used to hold rendered page rasters: worker threads ``put`` finished
    pages while the GUI thread ``get``s them for painting. When the cache
    is full the least recently used entry is evicted. ``max_size=None``
    disables eviction (every decoded page is kept).

    Example:
    >>> cache = ThreadSafeLRUCache(max_size=2)
    >>> cache.put(0, "page-0")
    >>> cache.get(0)
    'page-0'
    >>> cache.contains(1)
    False
    """

    def __init__(self, max_size=30):
        """
        Args:
            max_size (int | None): Maximum number of entries, or None for
                no limit.
        """
        self.max_size = max_size
        self.cache_dict = OrderedDict()
        self.lock = threading.Lock()

    def get(self, key):
        """Return the value for ``key`` (marking it recently used) or None."""
        with self.lock:
            if key not in self.cache_dict:
                return None
            self.cache_dict.move_to_end(key)
            return self.cache_dict[key]

    def put(self, key, value):
        """Store ``value``; evicts the oldest entry when over capacity."""
        with self.lock:
            self.cache_dict[key] = value
            self.cache_dict.move_to_end(key)
            if self.max_size is not None and len(self.cache_dict) > self.max_size:
                self.cache_dict.popitem(last=False)

    def contains(self, key):
        with self.lock:
            return key in self.cache_dict

    def clear(self):
        with self.lock:
            self.cache_dict.clear()

    def __len__(self):
        with self.lock:
            return len(self.cache_dict)
