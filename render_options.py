from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

RGBA = Tuple[float, float, float, float]


class ScalingMode(IntEnum):
    # Values are the integer codes the display service understands.
    AXES_INDEPENDENT = 1
    NONE = 2
    PROPORTIONAL_FIT = 3

    @classmethod
    def from_wire(cls, value: str) -> "ScalingMode":
        try:
            return WIRE_NAMES[value.strip().lower()]
        except (AttributeError, KeyError):
            raise ValueError(
                f"Unknown scaling mode {value!r}. Use one of: {', '.join(WIRE_NAMES)}."
            ) from None

    @property
    def wire_name(self) -> str:
        return {mode: name for name, mode in WIRE_NAMES.items()}[self]


WIRE_NAMES = {
    "stretch": ScalingMode.AXES_INDEPENDENT,
    "none": ScalingMode.NONE,
    "fit": ScalingMode.PROPORTIONAL_FIT,
}


def parse_color(value: str) -> RGBA:
    """Parse ``#RRGGBB`` or ``#RRGGBBAA`` into floats in the 0.0-1.0 range."""
    text = value.strip().lstrip("#")
    if len(text) not in (6, 8):
        raise ValueError(f"Invalid color '{value}', expected #RRGGBB or #RRGGBBAA")
    try:
        channels = [int(text[index:index + 2], 16) for index in range(0, len(text), 2)]
    except ValueError:
        raise ValueError(f"Invalid color '{value}', expected hexadecimal digits") from None
    if len(channels) == 3:
        channels.append(255)
    r, g, b, a = (round(channel / 255.0, 4) for channel in channels)
    return r, g, b, a


@dataclass(frozen=True)
class RenderOptions:
    scaling: ScalingMode = ScalingMode.PROPORTIONAL_FIT
    background_color: RGBA = (0.0, 0.0, 0.0, 1.0)
    allow_clipping: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.scaling, ScalingMode):
            raise ValueError(f"scaling must be a ScalingMode, got {self.scaling!r}")
        color = tuple(self.background_color)
        if len(color) != 4:
            raise ValueError("background_color needs exactly four channels (r, g, b, a)")
        for channel in color:
            if isinstance(channel, bool) or not isinstance(channel, (int, float)):
                raise ValueError(f"Color channel {channel!r} is not a number")
            if not 0.0 <= channel <= 1.0:
                raise ValueError(f"Color channel {channel} is outside the 0.0-1.0 range")
        object.__setattr__(self, "background_color", tuple(float(channel) for channel in color))

    @classmethod
    def from_settings(cls, settings: dict, scaling: Optional[ScalingMode] = None) -> "RenderOptions":
        chosen = scaling
        if chosen is None:
            chosen = ScalingMode.from_wire(str(settings.get("scaling", "fit")))
        color = settings.get("background_color", (0.0, 0.0, 0.0, 1.0))
        if isinstance(color, str):
            color = parse_color(color)
        return cls(
            scaling=chosen,
            background_color=tuple(color),
            allow_clipping=bool(settings.get("allow_clipping", True)),
        )

    def with_scaling(self, scaling: ScalingMode) -> "RenderOptions":
        return RenderOptions(scaling, self.background_color, self.allow_clipping)
