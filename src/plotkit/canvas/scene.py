"""Scene: the objects to draw plus the canvas they are drawn on."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from plotkit.canvas.layers import Layer, bucket_by_layer
from plotkit.geometry.objects import PlotObject
from plotkit.geometry.primitives import Frame


class Scene:
    """Ordered collection of plot objects on a target frame.

    Objects are immutable, so the scene only copies its containers: a list
    passed to :meth:`extend` can be changed afterwards without affecting
    the scene, and :attr:`objects` returns a tuple snapshot.
    """

    def __init__(self, frame: Frame, objects: Iterable[PlotObject] = ()) -> None:
        self.frame = frame
        self._objects: list[PlotObject] = list(objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[PlotObject]:
        return iter(tuple(self._objects))

    @property
    def objects(self) -> tuple[PlotObject, ...]:
        return tuple(self._objects)

    def add(self, obj: PlotObject) -> None:
        self._objects.append(obj)

    def extend(self, objects: Iterable[PlotObject]) -> None:
        self._objects.extend(objects)

    def layers(self, priority: Sequence[str] | None = None) -> list[Layer]:
        return bucket_by_layer(self._objects, priority)
