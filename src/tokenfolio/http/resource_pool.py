"""Least-used resource pool with ceiling-triggered reset."""

from typing import Generic, Hashable, Iterable, Optional, TypeVar

T = TypeVar("T", bound=Hashable)


class ResourcePool(Generic[T]):
    """
    Hands out the resource with the fewest uses since the last reset.

    Ties go to the resource listed first. Once every resource has been
    used `ceiling` times, all counters go back to zero.
    """

    def __init__(self, resources: Iterable[T], ceiling: int = 50):
        self._resources: list[T] = list(resources)
        if not self._resources:
            raise ValueError("ResourcePool needs at least one resource")
        if ceiling < 1:
            raise ValueError("ceiling must be at least 1")
        self._ceiling = ceiling
        self._usage: dict[T, int] = {r: 0 for r in self._resources}

    def __len__(self) -> int:
        return len(self._resources)

    @property
    def resources(self) -> list[T]:
        return list(self._resources)

    def usage(self, resource: T) -> int:
        """Uses of a resource since the last reset."""
        return self._usage[resource]

    def acquire(self, exclude: Optional[T] = None) -> T:
        """
        Pick the least-used resource and count one use against it.

        `exclude` skips a resource (e.g. the one that just failed) unless
        it is the only one in the pool.
        """
        if all(count >= self._ceiling for count in self._usage.values()):
            self.reset()

        candidates = [r for r in self._resources if r != exclude] or self._resources
        chosen = min(candidates, key=lambda r: self._usage[r])
        self._usage[chosen] += 1
        return chosen

    def reset(self) -> None:
        """Zero every usage counter."""
        for resource in self._resources:
            self._usage[resource] = 0
