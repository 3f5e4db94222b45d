"""Ordered collection of hittables.

A HittableList is built on the host before rendering and may nest other
lists. When the scene is uploaded it is flattened into the sphere table, and
the kernel-side traversal (``pathtracer.scene.intersection.intersect_scene``)
returns the nearest hit among all children regardless of their order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pathtracer.geometry.hittable import Hittable
from pathtracer.geometry.sphere import Sphere


class HittableList(Hittable):
    """A list of Hittable objects (spheres or nested lists).

    Example:
        >>> world = HittableList()
        >>> world.add(Sphere((0, 0, -1), 0.5, Lambertian((0.5, 0.5, 0.5))))
        >>> len(world)
        1
    """

    def __init__(self, objects: Iterable[Hittable] | None = None) -> None:
        self.objects: list[Hittable] = []
        if objects is not None:
            for obj in objects:
                self.add(obj)

    def add(self, obj: Hittable) -> None:
        """Append an object to the list.

        Raises:
            TypeError: If obj is not a Hittable.
            ValueError: If obj is this list or a list that already
                contains it, directly or through nested lists.
        """
        if not isinstance(obj, Hittable):
            raise TypeError(f"Expected a Hittable, got {type(obj).__name__}")
        if obj is self or (isinstance(obj, HittableList) and obj._contains(self)):
            raise ValueError("A HittableList cannot contain itself")
        self.objects.append(obj)

    def _contains(self, target: HittableList) -> bool:
        """Whether target is reachable through this list's nested lists."""
        pending = [self]
        seen = set()
        while pending:
            current = pending.pop()
            if id(current) in seen:
                continue
            seen.add(id(current))
            for obj in current.objects:
                if obj is target:
                    return True
                if isinstance(obj, HittableList):
                    pending.append(obj)
        return False

    def clear(self) -> None:
        self.objects.clear()

    def spheres(self) -> Iterator[Sphere]:
        for obj in self.objects:
            yield from obj.spheres()

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)

    def __repr__(self) -> str:
        return f"HittableList({self.objects!r})"
