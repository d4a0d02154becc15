"""Deferred values computed at serialization time."""

from __future__ import annotations

from collections.abc import Callable

__all__ = ["Lazy"]


class Lazy[T]:
    """A value produced on demand by a zero-argument function.

    Builders hand one of these to their `~podcraft.chart.ApiObject` in place
    of an eagerly computed spec, so that all modifications made after
    construction are reflected in the output. The producer runs at most
    once, on the first call to `resolve`, and its result is cached for any
    later serialization.

    Parameters
    ----------
    producer
        Function returning the value.
    """

    def __init__(self, producer: Callable[[], T]) -> None:
        self._producer = producer
        self._value: T | None = None
        self._resolved = False

    @property
    def resolved(self) -> bool:
        """Whether the producer has been run."""
        return self._resolved

    def resolve(self) -> T:
        """Return the value, running the producer if necessary.

        Exceptions from the producer propagate and leave the value
        unresolved, so a failed resolution may be retried after the input
        has been fixed.
        """
        if not self._resolved:
            self._value = self._producer()
            self._resolved = True
        return self._value  # type: ignore[return-value]
