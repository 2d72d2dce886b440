"""Caller-side comparison result cache.

The engine itself is stateless. Callers that want to avoid recomputing
identical comparisons wrap the orchestrator in CachedComparisonService,
which keys results on the ordered technology identities plus the
constraints signature and drops every entry whenever the repository is
written to.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, Optional

from .app_logging import get_logger
from .config import CacheConfig, get_config
from .engine import ComparisonOrchestrator
from .repository import RepositoryEvent
from .schema import ComparisonResult, UserConstraints

logger = get_logger(__name__)


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_ratio(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class ComparisonCache:
    """Thread-safe TTL cache of comparison results.

    Entries expire after ttl_seconds. When max_entries is reached the
    oldest entry is dropped.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or get_config().cache
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[Hashable, tuple[float, ComparisonResult]]" = OrderedDict()
        self.stats = CacheStats()
        self._generation = 0

    @staticmethod
    def make_key(identities: Iterable, constraints: Optional[UserConstraints]) -> tuple:
        """Cache key from ordered technology ids or names and the constraints."""
        normalized = tuple(i.strip().lower() if isinstance(i, str) else i for i in identities)
        return normalized, (constraints or UserConstraints.empty()).signature()

    def get(self, key: Hashable) -> Optional[ComparisonResult]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry[0] >= self.config.ttl_seconds:
                del self._entries[key]
                entry = None
            if entry is None:
                self.stats.misses += 1
                return None
            self.stats.hits += 1
            return entry[1]

    @property
    def generation(self) -> int:
        """Incremented by every evict_all; results computed under an older generation are stale."""
        with self._lock:
            return self._generation

    def put(self, key: Hashable, result: ComparisonResult, generation: Optional[int] = None) -> bool:
        """Store a result. Skipped when it was computed before the latest eviction."""
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._entries.pop(key, None)
            while len(self._entries) >= self.config.max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = (self._clock(), result)
            return True

    def evict_all(self, reason: str = "manual") -> int:
        """Drop every entry; returns how many were removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            self._generation += 1
            self.stats.evictions += 1
            stats = CacheStats(self.stats.hits, self.stats.misses, self.stats.evictions)

        logger.info(
            "Evicted %d cached comparisons (%s); hits=%d misses=%d evictions=%d",
            removed, reason, stats.hits, stats.misses, stats.evictions,
        )
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CachedComparisonService:
    """Comparison service with result caching.

    Subscribes to the orchestrator's repository (when it supports
    subscriptions) so any technology or criterion write clears the cache.
    """

    def __init__(
        self,
        orchestrator: ComparisonOrchestrator,
        cache: Optional[ComparisonCache] = None,
    ):
        self.orchestrator = orchestrator
        self.cache = cache or ComparisonCache()

        subscribe = getattr(orchestrator.repository, "subscribe", None)
        if callable(subscribe):
            subscribe(self._on_repository_event)

    def generate_comparison(
        self,
        technology_ids: list[int],
        constraints: Optional[UserConstraints] = None,
    ) -> ComparisonResult:
        return self._cached(
            ComparisonCache.make_key(technology_ids, constraints),
            lambda: self.orchestrator.generate_comparison(technology_ids, constraints),
        )

    def generate_comparison_by_names(
        self,
        technology_names: list[str],
        constraints: Optional[UserConstraints] = None,
    ) -> ComparisonResult:
        return self._cached(
            ComparisonCache.make_key(technology_names, constraints),
            lambda: self.orchestrator.generate_comparison_by_names(technology_names, constraints),
        )

    def _cached(self, key: tuple, compute: Callable[[], ComparisonResult]) -> ComparisonResult:
        if not self.cache.config.enabled:
            return compute()

        result = self.cache.get(key)
        if result is not None:
            logger.debug("Comparison cache hit for %s", key)
            return result

        generation = self.cache.generation
        result = compute()
        if not self.cache.put(key, result, generation):
            logger.debug("Repository changed during comparison; not caching %s", key)
        return result

    def _on_repository_event(self, event: RepositoryEvent) -> None:
        self.cache.evict_all(reason=f"{event.entity} {event.entity_id} {event.action}")
