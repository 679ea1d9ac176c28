"""
pcfdots.chart - proof sheet of glyph bitmaps

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging

try:
    from PIL import Image
except ImportError:
    Image = None

from .binary import ceildiv
from .vector import bitmap_rows, ROW_STRIDE


# greyscale levels
PAPER = 255
INK = 0


def glyph_to_image(record, stride=ROW_STRIDE):
    """Create image of single glyph bitmap."""
    if not Image:
        raise ImportError('Rendering to image requires PIL module.')
    rows = bitmap_rows(record, stride)
    width = max((len(_row) for _row in rows), default=0)
    if not width or not rows:
        return Image.new('L', (0, 0), PAPER)
    charimg = Image.new('L', (width, len(rows)), PAPER)
    charimg.putdata([
        INK if _bit else PAPER
        for _row in rows
        for _bit in _row + (False,) * (width - len(_row))
    ])
    return charimg


def chart_image(records, columns=32, scale=2, margin=2, stride=ROW_STRIDE):
    """Arrange glyph bitmaps on a grid."""
    if not Image:
        raise ImportError('Rendering to image requires PIL module.')
    images = tuple(glyph_to_image(_rec, stride) for _rec in records)
    cell_width = max((_img.width for _img in images), default=0) + margin
    cell_height = max((_img.height for _img in images), default=0) + margin
    columns = max(1, min(columns, len(images)))
    rows = ceildiv(len(images), columns)
    chart = Image.new(
        'L', (columns * cell_width + margin, rows * cell_height + margin), PAPER
    )
    for count, img in enumerate(images):
        if not img.width or not img.height:
            continue
        row, column = divmod(count, columns)
        chart.paste(img, (margin + column * cell_width, margin + row * cell_height))
    if scale != 1:
        chart = chart.resize(
            (chart.width * scale, chart.height * scale), Image.NEAREST
        )
    return chart


def save_chart(records, outfile, **kwargs):
    """Save a chart of glyph bitmaps to an image file."""
    records = tuple(records)
    chart_image(records, **kwargs).save(outfile)
    logging.info('Wrote chart of %d glyphs to %s.', len(records), outfile)
