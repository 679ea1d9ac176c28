"""
pcfdots.vector - dotted outlines from glyph bitmaps

(c) 2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from enum import Enum
from functools import cached_property
from typing import NamedTuple, Optional

from .basetypes import Coord, Bounds
from .binary import unpack_rows


# design units per em
UNITS_PER_EM = 1000
# bytes per bitmap row; rows are assumed padded to 32 bits
ROW_STRIDE = 4
# advance width of the missing glyph, in pixels
NOTDEF_WIDTH = 8
# control point distance for a quarter circle, as a fraction of the radius
CIRCLE_FACTOR = 0.551915

# bitmap rendering characters for debug output
PAPER = '_'
INK = '#'


class DotShape(Enum):
    """Shape drawn for each inked pixel."""
    SQUARE = 'square'
    DIAMOND = 'diamond'
    CIRCLE = 'circle'


##############################################################################
# outline paths

class Line(NamedTuple):
    """Straight segment to end point."""
    end: Coord


class Curve(NamedTuple):
    """Cubic Bezier segment to end point."""
    control1: Coord
    control2: Coord
    end: Coord


class Contour(NamedTuple):
    """Closed sub-path."""
    start: Coord
    segments: tuple

    @property
    def points(self):
        """All on- and off-curve points, starting point first."""
        return (self.start, *(_p for _seg in self.segments for _p in _seg))

    @property
    def end(self):
        """Last point reached before closing."""
        if not self.segments:
            return self.start
        return self.segments[-1].end

    def as_svg(self):
        """SVG path 'd' value"""
        commands = [f'M {self.start.x:g} {self.start.y:g}']
        for seg in self.segments:
            if isinstance(seg, Curve):
                commands.append('C ' + ' '.join(f'{_p.x:g} {_p.y:g}' for _p in seg))
            else:
                commands.append(f'L {seg.end.x:g} {seg.end.y:g}')
        commands.append('Z')
        return ' '.join(commands)

    def draw(self, pen):
        """Draw onto a fontTools-style segment pen."""
        pen.moveTo(tuple(self.start))
        for seg in self.segments:
            if isinstance(seg, Curve):
                pen.curveTo(*(tuple(_p) for _p in seg))
            else:
                pen.lineTo(tuple(seg.end))
        pen.closePath()


class OutlinePath:
    """Sequence of closed contours in design units."""

    def __init__(self, contours=()):
        self._contours = tuple(contours)

    def __iter__(self):
        return iter(self._contours)

    def __len__(self):
        return len(self._contours)

    def __bool__(self):
        """Path is not empty."""
        return bool(self._contours)

    def __str__(self):
        return '\n'.join(_c.as_svg() for _c in self._contours)

    def __repr__(self):
        return f'{type(self).__name__}(<{len(self)} contours>)'

    @property
    def contours(self):
        return self._contours

    def as_svg(self):
        """SVG path 'd' value"""
        return ' '.join(_c.as_svg() for _c in self._contours)

    @cached_property
    def bounds(self):
        """Bounding box of all points, including control points."""
        points = tuple(_p for _c in self._contours for _p in _c.points)
        if not points:
            return Bounds(0, 0, 0, 0)
        return Bounds(
            left=min(_p.x for _p in points),
            bottom=min(_p.y for _p in points),
            right=max(_p.x for _p in points),
            top=max(_p.y for _p in points),
        )

    def draw(self, pen):
        """Draw all contours onto a fontTools-style segment pen."""
        for contour in self._contours:
            contour.draw(pen)


##############################################################################
# pixel grid

class Grid(NamedTuple):
    """Placement of the pixel grid in design space."""
    pixel_height: int
    units_per_em: int
    pixel_size: float
    # gap between neighbouring dots
    padding: float
    descender_height: float
    glyph_top: float
    default_ascent: int

    @classmethod
    def create(cls, pixel_height, units_per_em=UNITS_PER_EM):
        """Derive grid constants from the glyph height in pixels."""
        if pixel_height <= 0:
            raise ValueError(f'Pixel height must be positive, not {pixel_height}.')
        pixel_size = units_per_em / pixel_height
        descender_height = pixel_size * 3
        return cls(
            pixel_height=pixel_height,
            units_per_em=units_per_em,
            pixel_size=pixel_size,
            padding=pixel_size / 9,
            descender_height=descender_height,
            glyph_top=pixel_height * pixel_size - descender_height,
            default_ascent=pixel_height - 2,
        )

    @property
    def ascender(self):
        return self.glyph_top

    @property
    def descender(self):
        return -self.descender_height

    def to_font(self, x, y):
        """Convert pixel-space coordinates (y down) to design space (y up)."""
        return Coord(x, self.glyph_top - y)

    def dot_cell(self, x, y, x_offset=0, y_offset=0):
        """Padded cell for the pixel at column x, row y, in design space."""
        left, top = self.to_font(
            x_offset + x * self.pixel_size + self.padding,
            y_offset + y * self.pixel_size + self.padding,
        )
        right, bottom = self.to_font(
            x_offset + (x+1) * self.pixel_size - self.padding,
            y_offset + (y+1) * self.pixel_size - self.padding,
        )
        return Bounds(left=left, bottom=bottom, right=right, top=top)


##############################################################################
# dot shapes

def _square(cell):
    """Rectangle filling the cell."""
    return Contour(
        start=Coord(cell.left, cell.top),
        segments=(
            Line(Coord(cell.left, cell.bottom)),
            Line(Coord(cell.right, cell.bottom)),
            Line(Coord(cell.right, cell.top)),
        ),
    )

def _diamond(cell):
    """Rotated square through the midpoints of the cell sides."""
    mid_x = (cell.left + cell.right) / 2
    mid_y = (cell.bottom + cell.top) / 2
    return Contour(
        start=Coord(mid_x, cell.top),
        segments=(
            Line(Coord(cell.left, mid_y)),
            Line(Coord(mid_x, cell.bottom)),
            Line(Coord(cell.right, mid_y)),
        ),
    )

def _circle(cell):
    """Inscribed circle, as four cubic arcs."""
    mid_x = (cell.left + cell.right) / 2
    mid_y = (cell.bottom + cell.top) / 2
    kx = (cell.right - cell.left) / 2 * CIRCLE_FACTOR
    ky = (cell.top - cell.bottom) / 2 * CIRCLE_FACTOR
    top = Coord(mid_x, cell.top)
    return Contour(
        start=top,
        segments=(
            Curve(
                Coord(mid_x - kx, cell.top), Coord(cell.left, mid_y + ky),
                Coord(cell.left, mid_y)
            ),
            Curve(
                Coord(cell.left, mid_y - ky), Coord(mid_x - kx, cell.bottom),
                Coord(mid_x, cell.bottom)
            ),
            Curve(
                Coord(mid_x + kx, cell.bottom), Coord(cell.right, mid_y - ky),
                Coord(cell.right, mid_y)
            ),
            Curve(
                Coord(cell.right, mid_y + ky), Coord(mid_x + kx, cell.top),
                top
            ),
        ),
    )


def draw_dot(cell, dot_shape):
    """Create the contour of one dot inside a cell."""
    dot_shape = DotShape(dot_shape)
    if dot_shape == DotShape.SQUARE:
        return _square(cell)
    elif dot_shape == DotShape.DIAMOND:
        return _diamond(cell)
    elif dot_shape == DotShape.CIRCLE:
        return _circle(cell)
    raise ValueError(f'Unsupported dot shape {dot_shape}.')


##############################################################################
# vectorizer

class VectorGlyph(NamedTuple):
    """Outline glyph ready for a font builder."""
    codepoint: Optional[int]
    name: str
    path: OutlinePath
    advance_width: float


def bitmap_rows(record, stride=ROW_STRIDE):
    """Unpack a glyph's bitmap into rows of bits, msb first."""
    width = record.metrics.character_width
    if width > stride * 8:
        logging.warning(
            'Glyph %r is %d pixels wide; bitmap rows are truncated to %d pixels.',
            record.name, width, stride * 8
        )
        width = stride * 8
    return unpack_rows(record.bitmap, stride, max(0, width))


def bitmap_to_text(rows):
    """Render rows of bits as text."""
    return '\n'.join(
        ''.join(INK if _bit else PAPER for _bit in _row)
        for _row in rows
    )


def vectorize(record, dot_shape=DotShape.SQUARE, pixel_height=13, *, stride=ROW_STRIDE):
    """Convert a glyph bitmap into a dotted outline glyph."""
    grid = pixel_height if isinstance(pixel_height, Grid) else Grid.create(pixel_height)
    metrics = record.metrics
    x_offset = metrics.left_side_bearing * grid.pixel_size
    y_offset = (grid.default_ascent - metrics.character_ascent) * grid.pixel_size
    rows = bitmap_rows(record, stride)
    contours = tuple(
        draw_dot(grid.dot_cell(_x, _y, x_offset, y_offset), dot_shape)
        for _y, _row in enumerate(rows)
        for _x, _bit in enumerate(_row)
        if _bit
    )
    if logging.getLogger().isEnabledFor(logging.DEBUG):
        logging.debug(
            'Glyph %r U+%04X width=%d: %d dots\n%s',
            record.name, record.codepoint, metrics.character_width,
            len(contours), bitmap_to_text(rows)
        )
    return VectorGlyph(
        codepoint=record.codepoint,
        name=record.name,
        path=OutlinePath(contours),
        advance_width=metrics.character_width * grid.pixel_size,
    )


def notdef(pixel_height=13):
    """Empty missing-glyph placeholder."""
    grid = pixel_height if isinstance(pixel_height, Grid) else Grid.create(pixel_height)
    return VectorGlyph(
        codepoint=None,
        name='.notdef',
        path=OutlinePath(),
        advance_width=NOTDEF_WIDTH * grid.pixel_size,
    )
