"""Linear map units and render flags carried by :class:`MapSettings`."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class MapUnit(str, Enum):
    """Map unit of the destination CRS.  The value is the persisted encoding."""

    METERS = "meters"
    FEET = "feet"
    DEGREES = "degrees"
    NAUTICAL_MILES = "nautical miles"
    UNKNOWN = "unknown"

    @classmethod
    def decode(cls, text: str | None) -> MapUnit:
        """Parse a persisted unit string; anything unrecognised is UNKNOWN."""
        if not text:
            return cls.UNKNOWN
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class RenderFlag(str, Enum):
    ANTIALIASING = "antialiasing"
    USE_ADVANCED_EFFECTS = "use_advanced_effects"
    DRAW_LABELING = "draw_labeling"


@dataclass(frozen=True, slots=True)
class RenderFlags:
    """
    Independent rendering switches.  They play no part in viewport
    derivation and are carried for the renderer only.
    """

    antialiasing: bool = True
    use_advanced_effects: bool = True
    draw_labeling: bool = True

    def test(self, flag: RenderFlag | str) -> bool:
        return bool(getattr(self, RenderFlag(flag).value))

    def with_flag(self, flag: RenderFlag | str, on: bool) -> RenderFlags:
        return replace(self, **{RenderFlag(flag).value: bool(on)})

    def enabled(self) -> list[RenderFlag]:
        return [f for f in RenderFlag if self.test(f)]
