from __future__ import annotations

from typing import Sequence

PALETTE: tuple[str, ...] = (
    "#5470c6",
    "#91cc75",
    "#fac858",
    "#ee6666",
    "#73c0de",
    "#3ba272",
    "#fc8452",
    "#9a60b4",
    "#ea7ccc",
    "#58d9f9",
    "#f7b23b",
    "#ff7875",
    "#95de64",
    "#b37feb",
    "#ffd666",
    "#ff9c6e",
    "#69c0ff",
    "#bae637",
    "#ff85c0",
    "#5cdbd3",
    "#ffa940",
    "#9254de",
    "#40a9ff",
    "#73d13d",
    "#ff4d4f",
    "#722ed1",
    "#13c2c2",
    "#fa8c16",
    "#eb2f96",
    "#52c41a",
)


class ColorAllocator:
    """
    Hands out palette colors in order, wrapping around at the end.

    Not thread-safe: share one instance between concurrent conversions and the
    assignments interleave (still valid palette colors, just not reproducible).
    """

    def __init__(self, palette: Sequence[str] = PALETTE):
        if not palette:
            raise ValueError("palette must contain at least one color")
        self.palette = tuple(palette)
        self.index = 0

    def next_color(self) -> str:
        color = self.palette[self.index % len(self.palette)]
        self.index += 1
        return color

    def reset(self) -> None:
        self.index = 0


_default_allocator = ColorAllocator()


def default_allocator() -> ColorAllocator:
    """Process-wide allocator for callers that want colors to continue across conversions."""
    return _default_allocator


def next_color() -> str:
    return _default_allocator.next_color()


def reset_color_index() -> None:
    _default_allocator.reset()
