"""Static colour table for the dashboard charts.

The aggregation code has no styling concerns; only the Streamlit app reads
this module.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Palette:
    """Brand colours plus the cycle used for categorical slices."""
    primary_blue: str = "#0033A0"
    secondary_blue: str = "#00215C"
    light_blue: str = "#3366CC"
    accent_green: str = "#C5D92D"
    white: str = "#FFFFFF"
    extra: tuple[str, ...] = ("#8884d8", "#ffc658")

    @property
    def cycle(self) -> tuple[str, ...]:
        return (self.light_blue, self.accent_green, self.primary_blue, self.white, *self.extra)

    def color_for(self, index: int) -> str:
        """Return the slice colour for position `index`, wrapping around."""
        return self.cycle[index % len(self.cycle)]

    def colors_for(self, n: int) -> list[str]:
        """Return `n` slice colours in cycle order."""
        return [self.color_for(i) for i in range(n)]


DEFAULT_PALETTE = Palette()
