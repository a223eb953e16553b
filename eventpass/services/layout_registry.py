"""
Layout Registry - fixed pixel geometry for every drawable element of a pass.

Each layout is tied to one template asset. Coordinates are tuned by hand
against that asset and are never fitted to content, so long strings can run
past the printed labels. Swapping the template means registering a new
layout version, not editing numbers in place.

Text anchors are left/middle: (x, y) is where the first glyph starts,
vertically centred. Rotations follow canvas convention (positive is
clockwise on screen), so -90 reads bottom-to-top.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from eventpass.core.exceptions import LayoutNotFoundError

# Off-white used for all overlay text on the dark template
TEXT_COLOR = "#E8E4DD"


@dataclass(frozen=True)
class TextField:
    """A text overlay bound to one PassData attribute."""
    name: str
    source: str
    x: int
    y: int
    font_size: int
    font_weight: str = "normal"
    color: str = TEXT_COLOR
    rotation: Optional[float] = None


@dataclass(frozen=True)
class BarcodeSlot:
    """Barcode placement. (x, y) is the slot centre, before rotation."""
    x: int
    y: int
    width: int
    height: int
    rotation: float = 0.0


@dataclass(frozen=True)
class PassLayout:
    version: str
    template_file: str
    canvas_width: int
    canvas_height: int
    text_fields: Tuple[TextField, ...]
    barcode_slot: BarcodeSlot

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return (self.canvas_width, self.canvas_height)

    def field(self, name: str) -> TextField:
        for text_field in self.text_fields:
            if text_field.name == name:
                return text_field
        raise KeyError(name)


LAYOUT_2026_V1 = PassLayout(
    version="2026-v1",
    template_file="pass-template.png",
    canvas_width=2000,
    canvas_height=647,
    text_fields=(
        # "ID" label is printed on the template; only the value goes here
        TextField("teamIdCenter", "team_id", x=950, y=260, font_size=42, font_weight="bold"),
        TextField("teamName", "team_name", x=850, y=490, font_size=26),
        TextField("eventName", "event_name", x=850, y=530, font_size=26),
        TextField("collegeName", "college_name", x=850, y=570, font_size=26),
        # Right edge, kept left of the barcode
        TextField(
            "teamIdVertical", "team_id", x=1790, y=600, font_size=28,
            font_weight="bold", rotation=-90,
        ),
    ),
    # 64px margin from the right edge once rotated
    barcode_slot=BarcodeSlot(x=1880, y=323, width=600, height=100, rotation=-90),
)

LAYOUTS: Dict[str, PassLayout] = {
    LAYOUT_2026_V1.version: LAYOUT_2026_V1,
}

DEFAULT_LAYOUT_VERSION = LAYOUT_2026_V1.version


def get_layout(version: Optional[str] = None) -> PassLayout:
    """Return the layout registered for ``version`` (default layout if None)."""
    key = version or DEFAULT_LAYOUT_VERSION
    try:
        return LAYOUTS[key]
    except KeyError:
        raise LayoutNotFoundError(
            f"No pass layout registered for version {key!r}",
            details={"version": key, "available": sorted(LAYOUTS)},
        ) from None
