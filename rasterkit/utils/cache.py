"""Bounded store of dither results for the preview app."""

from __future__ import annotations

from rasterkit.core.pipeline import DitherResult, Settings


class ResultCache:
    """Least-recently-used map from (image key, settings) to a DitherResult.

    The image key is whatever identifies the source, usually its path.
    Settings are keyed by ``Settings.hash()``, so two equal settings objects
    share an entry. Reopening a file calls :meth:`evict` so an image edited
    on disk is processed again.
    """

    def __init__(self, max_size: int = 16) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self.max_size = max_size
        self._entries: dict[tuple[str, str], DitherResult] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: tuple[str, Settings]) -> bool:
        image_key, settings = key
        return (image_key, settings.hash()) in self._entries

    def lookup(self, image_key: str, settings: Settings) -> DitherResult | None:
        """Return the cached result and mark it as most recently used."""
        key = (image_key, settings.hash())
        result = self._entries.pop(key, None)
        if result is not None:
            self._entries[key] = result
        return result

    def store(self, image_key: str, settings: Settings, result: DitherResult) -> None:
        key = (image_key, settings.hash())
        self._entries.pop(key, None)
        self._entries[key] = result
        # dicts keep insertion order, so the first key is the oldest
        while len(self._entries) > self.max_size:
            del self._entries[next(iter(self._entries))]

    def evict(self, image_key: str) -> int:
        """Drop every result for one image; return how many were dropped."""
        stale = [key for key in self._entries if key[0] == image_key]
        for key in stale:
            del self._entries[key]
        return len(stale)
