"""Per-scan memo of link verdicts."""

from __future__ import annotations

from typing import NamedTuple

from .models import Verdict


class CacheKey(NamedTuple):
    """Composite key, so a colon inside a target can never collide with the type."""

    type: str
    target: str


class LinkValidityCache:
    """Verdicts keyed by (type, target), valid for a single scan.

    A hit short-circuits validation, so each distinct pair is validated at most
    once per scan no matter how many notes link to it.
    """

    def __init__(self) -> None:
        self._verdicts: dict[CacheKey, Verdict] = {}
        self.hits = 0

    def lookup(self, key: CacheKey) -> Verdict | None:
        verdict = self._verdicts.get(key)
        if verdict is not None:
            self.hits += 1
        return verdict

    def store(self, key: CacheKey, verdict: Verdict) -> None:
        # Last write wins
        self._verdicts[key] = verdict

    def __contains__(self, key: object) -> bool:
        return key in self._verdicts

    def __len__(self) -> int:
        return len(self._verdicts)
