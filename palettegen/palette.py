"""Palette formatting and the state a presentation layer binds to."""
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import numpy as np

from palettegen.types import BLACK, WHITE, ColorSample

DEFAULT_PALETTE_SIZE = 5

# ITU-R BT.601 luma weights, per mille
LUMA_WEIGHTS = (299, 587, 114)
CONTRAST_THRESHOLD = 0.5


def _channel_byte(value: float) -> int:
    """Scale a [0, 1] channel to 0-255, rounding half away from zero."""
    value = min(max(float(value), 0.0), 1.0)
    return int(math.floor(value * 255.0 + 0.5))


def to_hex(color: Iterable[float]) -> str:
    """Format a color as an uppercase '#RRGGBB' string."""
    r, g, b = (_channel_byte(v) for v in color)
    return f"#{r:02X}{g:02X}{b:02X}"


def luminance(color: Iterable[float]) -> float:
    # Integer weights keep mid-gray at exactly 0.5
    r, g, b = color
    return (r * LUMA_WEIGHTS[0] + g * LUMA_WEIGHTS[1] + b * LUMA_WEIGHTS[2]) / 1000.0


def contrast_color(color: Iterable[float]) -> ColorSample:
    """Black for light colors, white for dark ones."""
    return BLACK if luminance(color) >= CONTRAST_THRESHOLD else WHITE


@dataclass(frozen=True)
class PaletteEntry:
    """A palette color with its display hex code and text color."""
    color: ColorSample
    hex: str
    contrast: ColorSample


def make_entry(color: Iterable[float]) -> PaletteEntry:
    sample = color if isinstance(color, ColorSample) else ColorSample.from_array(tuple(color))
    return PaletteEntry(color=sample, hex=to_hex(sample), contrast=contrast_color(sample))


def random_palette(
    n: int = DEFAULT_PALETTE_SIZE, rng: Optional[np.random.Generator] = None
) -> List[ColorSample]:
    """
    Generate n uniformly random colors.

    Args:
        n: Number of colors
        rng: Random generator (a fresh unseeded one if None)

    Returns:
        List of n ColorSample values
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    rng = rng if rng is not None else np.random.default_rng()
    return [ColorSample.from_array(row) for row in rng.random((n, 3))]


@dataclass
class PaletteState:
    """
    Palette shown to the user.

    Holds the ordered entries and a loading flag while an image palette
    is computed in the background. The clustering core never touches it;
    the worker and the presentation layer do.
    """
    entries: List[PaletteEntry] = field(default_factory=list)
    is_loading: bool = False

    @classmethod
    def random(cls, n: int = DEFAULT_PALETTE_SIZE, rng: Optional[np.random.Generator] = None) -> "PaletteState":
        state = cls()
        state.regenerate(n, rng)
        return state

    def regenerate(self, n: int = DEFAULT_PALETTE_SIZE, rng: Optional[np.random.Generator] = None) -> None:
        """Replace the palette with n random colors."""
        self.entries = [make_entry(c) for c in random_palette(n, rng)]

    def apply(self, colors: Iterable[Iterable[float]]) -> None:
        """Replace the palette with computed colors and clear the loading flag."""
        self.entries = [make_entry(c) for c in colors]
        self.is_loading = False

    def move(self, source: Sequence[int], destination: int) -> None:
        """
        Move the entries at the source offsets to before destination.

        Destination is an offset into the list as it was before the move,
        so moving index 0 to the end uses destination == len(entries).
        """
        size = len(self.entries)
        picked = sorted(set(source))
        for i in picked:
            if not 0 <= i < size:
                raise IndexError(f"Source index {i} out of range for {size} entries")
        if not 0 <= destination <= size:
            raise IndexError(f"Destination {destination} out of range for {size} entries")

        moving = [self.entries[i] for i in picked]
        remaining = [e for i, e in enumerate(self.entries) if i not in picked]
        insert_at = destination - sum(1 for i in picked if i < destination)
        self.entries = remaining[:insert_at] + moving + remaining[insert_at:]

    def hex_codes(self) -> List[str]:
        return [entry.hex for entry in self.entries]

    def colors(self) -> List[ColorSample]:
        return [entry.color for entry in self.entries]
