# marginate/services/request_tracker.py
from __future__ import annotations

import itertools
from collections import OrderedDict
from dataclasses import dataclass

DEFAULT_MAX_KEYS = 1024


@dataclass(frozen=True)
class RequestToken:
    key: str
    generation: int


class LatestRequestTracker:
    """
    Merges are never cancelled. Instead every new request for a key bumps
    its generation, and a finished result is only delivered if it still
    belongs to the latest generation.

    Only the `max_keys` most recently active keys are remembered; a token
    for an evicted key is no longer current.
    """

    def __init__(self, max_keys: int = DEFAULT_MAX_KEYS) -> None:
        if max_keys < 1:
            raise ValueError(f"max_keys must be >= 1, got {max_keys}")
        self.max_keys = max_keys
        self._latest: OrderedDict[str, int] = OrderedDict()
        # shared across keys so a re-admitted key never reuses a generation
        self._generations = itertools.count(1)

    def __len__(self) -> int:
        return len(self._latest)

    def begin(self, key: str) -> RequestToken:
        self._latest.pop(key, None)
        gen = next(self._generations)
        self._latest[key] = gen
        while len(self._latest) > self.max_keys:
            self._latest.popitem(last=False)
        return RequestToken(key=key, generation=gen)

    def is_current(self, token: RequestToken) -> bool:
        return self._latest.get(token.key) == token.generation
