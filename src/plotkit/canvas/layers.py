"""Grouping objects into ordered pen layers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from plotkit.geometry.objects import PlotObject


@dataclass(frozen=True)
class Layer:
    """Objects drawn with one pen, in drawing order.

    Attributes:
        name: Layer identifier.
        color: Stroke color of the first object in the layer.
        objects: Objects in ingestion order.
    """

    name: str
    color: str
    objects: tuple[PlotObject, ...]

    def __len__(self) -> int:
        return len(self.objects)


def bucket_by_layer(
    objects: Iterable[PlotObject],
    priority: Sequence[str] | None = None,
) -> list[Layer]:
    """Partition objects by layer name.

    Layers named in ``priority`` come first, in that order; the rest follow
    in first-seen order. Object order inside a layer is preserved, and
    every input object lands in exactly one layer. Priority names with no
    objects produce no layer.
    """
    buckets: dict[str, list[PlotObject]] = {}
    for obj in objects:
        buckets.setdefault(obj.style.layer, []).append(obj)

    order: list[str] = []
    for name in priority or ():
        if name in buckets and name not in order:
            order.append(name)
    order.extend(name for name in buckets if name not in order)

    return [
        Layer(name=name, color=buckets[name][0].style.color, objects=tuple(buckets[name]))
        for name in order
    ]
