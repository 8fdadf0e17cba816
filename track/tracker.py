"""Identity-preserving blob tracker."""

from __future__ import annotations

import time
from typing import Callable, Dict, Iterable, List, Optional

from contracts import Blob
from log_config.logger import get_logger
from track.config import TrackerConfig

logger = get_logger(__name__)


class BlobTracker:
    """Matches each tick's detections against the previously tracked blobs.

    Tracked blobs are visited in ascending identity order and each greedily
    claims the closest still-unmatched detection that passes the distance cap
    and the mass/area-ratio similarity gates. The first tracked blob to claim
    a detection wins it. Unclaimed detections get fresh identities, which are
    never reused. Tracked blobs that go unmatched keep their last blob until
    the staleness window is exceeded, then they are evicted.
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or TrackerConfig()
        self._clock = clock
        self._next_id = 0
        self._tracked: Dict[int, Blob] = {}
        self.last_confirmed: List[int] = []
        self.last_evicted: List[int] = []

    @property
    def tracked_count(self) -> int:
        return len(self._tracked)

    @property
    def next_identity(self) -> int:
        return self._next_id

    def get(self, identity: int) -> Optional[Blob]:
        return self._tracked.get(identity)

    def tracked(self) -> List[Blob]:
        return list(self._tracked.values())

    def update(self, detected: Iterable[Blob], now: Optional[float] = None) -> List[Blob]:
        """Assign identities to this tick's detections.

        Args:
            detected: Blobs from the detector, in detection order
            now: Tick timestamp in seconds (the tracker clock if None)

        Returns:
            Every tracked blob after the update, sorted by identity
        """
        now = self._clock() if now is None else now
        unmatched: List[Blob] = list(detected)
        updated: Dict[int, Blob] = {}
        confirmed: List[int] = []
        evicted: List[int] = []

        for identity in sorted(self._tracked):
            previous = self._tracked[identity]
            index = self._find_best_match(previous, unmatched)
            if index is not None:
                match = unmatched.pop(index)
                match.identity = identity
                match.last_seen = now
                updated[identity] = match
                confirmed.append(identity)
            elif previous.has_timed_out(now, self.config.staleness_timeout_s):
                evicted.append(identity)
            else:
                updated[identity] = previous

        for blob in unmatched:
            identity = self._next_id
            self._next_id += 1
            blob.identity = identity
            blob.last_seen = now
            updated[identity] = blob
            confirmed.append(identity)
            logger.debug("track.new id={} center=({:.1f},{:.1f}) mass={}", identity, blob.center_x, blob.center_y, blob.mass)

        for identity in evicted:
            logger.debug("track.evicted id={}", identity)

        self._tracked = dict(sorted(updated.items()))
        self.last_confirmed = sorted(confirmed)
        self.last_evicted = evicted
        return list(self._tracked.values())

    def reset(self) -> None:
        """Forget every tracked blob. Identities keep counting up."""
        if self._tracked:
            logger.info("track.reset dropped={}", len(self._tracked))
        self._tracked.clear()
        self.last_confirmed = []
        self.last_evicted = []

    def _find_best_match(self, tracked: Blob, candidates: List[Blob]) -> Optional[int]:
        best_index: Optional[int] = None
        best_distance = self.config.max_matching_distance
        for index, candidate in enumerate(candidates):
            distance = tracked.distance_to(candidate)
            if distance < best_distance and self._is_similar(tracked, candidate):
                best_index = index
                best_distance = distance
        return best_index

    def _is_similar(self, a: Blob, b: Blob) -> bool:
        if a.mass <= 0 or b.mass <= 0:
            return False
        low, high = self.config.mass_ratio_range
        mass_ratio = max(a.mass, b.mass) / min(a.mass, b.mass)
        if mass_ratio < low or mass_ratio > high:
            return False
        return abs(a.area_ratio - b.area_ratio) <= self.config.max_area_ratio_diff
