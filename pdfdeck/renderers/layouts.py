"""
Fixed slide geometry for each SlideLayout, in inches on a 10 x 5.625 slide.
"""

from typing import Callable, Dict, Literal, NamedTuple, Optional

from pdfdeck.models import SlideLayout

TITLE_COLOR = "#363636"
BODY_COLOR = "#666666"


class Box(NamedTuple):
    x: float
    y: float
    w: float
    h: float


class TextFrameSpec(NamedTuple):
    box: Box
    font_size: int
    bold: bool = False
    align: Literal["left", "center", "right"] = "left"
    valign: Literal["top", "middle", "bottom"] = "top"
    color: str = BODY_COLOR


class LayoutGeometry(NamedTuple):
    title: TextFrameSpec
    content: TextFrameSpec
    image: Optional[Box] = None


def _heading() -> TextFrameSpec:
    return TextFrameSpec(Box(0.5, 0.5, 9, 0.75), font_size=32, bold=True, color=TITLE_COLOR)


def _title_geometry() -> LayoutGeometry:
    return LayoutGeometry(
        title=TextFrameSpec(
            Box(1, 2, 8, 1.5), font_size=44, bold=True, align="center", valign="middle", color=TITLE_COLOR
        ),
        content=TextFrameSpec(Box(1, 3.5, 8, 1), font_size=24, align="center", valign="middle"),
    )


def _content_geometry() -> LayoutGeometry:
    return LayoutGeometry(
        title=_heading(),
        content=TextFrameSpec(Box(0.5, 1.5, 9, 3), font_size=18),
        image=Box(6, 4.5, 3, 2),
    )


def _two_column_geometry() -> LayoutGeometry:
    return LayoutGeometry(
        title=_heading(),
        content=TextFrameSpec(Box(0.5, 1.5, 4.25, 4), font_size=18),
        image=Box(5.25, 1.5, 4.25, 4),
    )


def _image_left_geometry() -> LayoutGeometry:
    return LayoutGeometry(
        title=_heading(),
        content=TextFrameSpec(Box(5, 1.5, 4.5, 4), font_size=18),
        image=Box(0.5, 1.5, 4, 4),
    )


def _image_right_geometry() -> LayoutGeometry:
    return LayoutGeometry(
        title=_heading(),
        content=TextFrameSpec(Box(0.5, 1.5, 4.5, 4), font_size=18),
        image=Box(5.5, 1.5, 4, 4),
    )


_GEOMETRY: Dict[SlideLayout, Callable[[], LayoutGeometry]] = {
    SlideLayout.TITLE: _title_geometry,
    SlideLayout.CONTENT: _content_geometry,
    SlideLayout.TWO_COLUMN: _two_column_geometry,
    SlideLayout.IMAGE_LEFT: _image_left_geometry,
    SlideLayout.IMAGE_RIGHT: _image_right_geometry,
}

_missing = set(SlideLayout) - set(_GEOMETRY)
if _missing:
    raise RuntimeError(f"No geometry for layouts: {sorted(layout.value for layout in _missing)}")


def geometry_for(layout: SlideLayout) -> LayoutGeometry:
    return _GEOMETRY[SlideLayout(layout)]()
