"""Opt-in timing of sampling and guessing steps.

Callers pass a dict "store" that collects timings in milliseconds. Passing
store=None turns every section into a no-op, so timing costs nothing unless
asked for. No logging or printing happens here.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from time import perf_counter


class _NoOpSection(AbstractContextManager[None]):
    def __enter__(self) -> None:  # noqa: D401
        return None

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        return None


_NOOP_SECTION = _NoOpSection()


class _ProfileSection(AbstractContextManager[None]):
    def __init__(self, name: str, store: dict[str, float]) -> None:
        self._name = name
        self._store = store
        self._start: float | None = None

    def __enter__(self) -> None:
        self._start = perf_counter()
        return None

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        if self._start is None:
            return None
        # repeated sections accumulate
        elapsed = (perf_counter() - self._start) * 1000.0
        self._store[self._name] = self._store.get(self._name, 0.0) + elapsed
        return None


def profile_section(name: str, store: dict[str, float] | None) -> AbstractContextManager[None]:
    """Context manager that adds the elapsed time of its block to store[name] (ms)."""
    if store is None:
        return _NOOP_SECTION
    return _ProfileSection(name, store)


def profile_summary(store: dict[str, float]) -> dict:
    """Rounded per-step timings plus their total."""
    steps = {name: round(ms, 3) for name, ms in store.items()}
    return {"total_ms": round(sum(store.values()), 3), "steps": steps}
