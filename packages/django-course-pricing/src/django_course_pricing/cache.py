"""In-process price memoization and calculation counters.

The cache is an explicit object owned by a CoursePricingService, never a
module global. Create one per request or batch job with PriceCache.scoped(),
or share one instance across threads; every access takes the lock.
Entries are never persisted and disappear with the cache object.
"""
import threading
from collections import Counter
from decimal import Decimal
from typing import Dict, Optional


class PriceCache:
    """
    Thread-safe mapping of cache key to computed price.

    Keys come from CourseContext.cache_key(as_of) and embed the canonical
    id, the content signature and the as-of date, so a configuration change
    never returns a stale price.

    Usage:
        cache = PriceCache()
        cache.set(context.cache_key(as_of), Decimal('120.00'))
        cache.get(context.cache_key(as_of))  # Decimal('120.00')
    """

    def __init__(self):
        self._entries: Dict[str, Decimal] = {}
        self._lock = threading.Lock()

    @classmethod
    def scoped(cls) -> 'PriceCache':
        """Return a fresh, empty cache for one request or batch scope."""
        return cls()

    def get(self, key: str) -> Optional[Decimal]:
        """Return the memoized price for key, or None on a miss."""
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, price: Decimal) -> None:
        """Memoize a price. A concurrent write for the same key stores the same pure result."""
        with self._lock:
            self._entries[key] = price

    def clear(self) -> None:
        """Drop all memoized prices."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CalculationStats:
    """
    Resettable counters describing what the pricing service did.

    Attributes:
        cache_hits: Lookups served from the cache, by canonical id
        price_computations: Prices computed from scratch, by canonical id
        guard_triggered: Computations short-circuited by a guard, by guard value
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.cache_hits: Counter = Counter()
        self.price_computations: Counter = Counter()
        self.guard_triggered: Counter = Counter()

    def record_hit(self, canonical_id: str) -> None:
        with self._lock:
            self.cache_hits[canonical_id] += 1

    def record_computation(self, canonical_id: str, guard: Optional[str] = None) -> None:
        with self._lock:
            self.price_computations[canonical_id] += 1
            if guard:
                self.guard_triggered[guard] += 1

    def reset(self) -> None:
        """Zero all counters."""
        with self._lock:
            self.cache_hits.clear()
            self.price_computations.clear()
            self.guard_triggered.clear()

    def snapshot(self) -> dict:
        """Return a plain-dict copy of the counters."""
        with self._lock:
            return {
                'cache_hits': dict(self.cache_hits),
                'price_computations': dict(self.price_computations),
                'guard_triggered': dict(self.guard_triggered),
            }
