"""
pcfdots.convert - convert PCF bitmap font to dotted OpenType font

(c) 2019--2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from .font import PcfFont, GlyphNotFound
from .selection import Selection, accepts, requested_codepoints
from .vector import DotShape, Grid, ROW_STRIDE, vectorize, notdef
from .sfnt import FontInfo, save_otf
from .chart import save_chart


# glyph height used if neither given nor found in the font
DEFAULT_PIXEL_HEIGHT = 13

STYLE_NAMES = {
    DotShape.SQUARE: 'Square Regular',
    DotShape.DIAMOND: 'Diamond Regular',
    DotShape.CIRCLE: 'Circle Regular',
}


def _check_bitmap_format(flags):
    """Warn if bitmaps are not stored in the layout the vectorizer reads."""
    if not flags.msb_first:
        logging.warning(
            'Bitmaps are stored least significant bit first; '
            'glyphs will be read as if most significant bit first.'
        )
    if flags.glyph_pad != ROW_STRIDE:
        logging.warning(
            'Bitmap rows are padded to %d bytes; they will be read as if padded to %d.',
            flags.glyph_pad, ROW_STRIDE
        )


def select_glyphs(font, selection=Selection.FULL, missing='skip'):
    """
    Resolve the code points to convert, in code point order.

    selection: which code points to include: 'full', 'ascii' or 'gb2312'
    missing: 'skip' (default) to leave out code points without a glyph;
        'default' to draw requested code points the font lacks with its default glyph
    """
    codepoints = {
        _cp for _cp in font.encoding.codepoints() if accepts(_cp, selection)
    }
    substitute = ()
    if missing == 'default':
        substitute = requested_codepoints(selection) or ()
        codepoints.update(substitute)
    elif missing != 'skip':
        raise ValueError(f"Missing-glyph policy must be 'skip' or 'default', not {missing!r}.")
    substitute = frozenset(substitute)
    records = []
    for codepoint in sorted(codepoints):
        try:
            record = font.resolve(codepoint)
        except GlyphNotFound:
            if codepoint not in substitute:
                continue
            try:
                record = font.resolve(codepoint, missing='default')
            except GlyphNotFound:
                continue
            # don't duplicate the default glyph's name
            record = record._replace(name='')
        records.append(record)
    return records


def vectorize_glyphs(records, dot_shape, grid, workers=None):
    """Vectorize glyph records, keeping their order; missing glyph first."""
    dot_shape = DotShape(dot_shape)
    func = partial(vectorize, dot_shape=dot_shape, pixel_height=grid)
    if workers and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            glyphs = list(executor.map(func, records))
    else:
        glyphs = [func(_rec) for _rec in records]
    return [notdef(grid), *glyphs]


def vectorize_font(
        font, *, dot_shape=DotShape.SQUARE, pixel_height=None,
        selection=Selection.FULL, missing='skip', workers=None,
    ):
    """
    Convert the selected glyphs of a parsed font to outline glyphs.

    Returns the outline glyphs, missing glyph first, and the pixel grid
    which holds the global metrics.
    """
    _check_bitmap_format(font.bitmaps.format)
    if pixel_height is None:
        pixel_height = font.pixel_size or DEFAULT_PIXEL_HEIGHT
        logging.info('Using pixel height %d.', pixel_height)
    grid = Grid.create(pixel_height)
    records = select_glyphs(font, selection, missing)
    logging.info('Number of glyphs to be converted: %d', len(records))
    return vectorize_glyphs(records, dot_shape, grid, workers), grid


def convert(
        infile, outfile, *,
        family_name:str, pixel_height:int=None, dot_shape:str='square',
        selection:str='full', version:str='0.1', designer:str='wixette',
        license:str='GPL 2.0', missing:str='skip', chart:str=None,
        workers:int=None,
    ):
    """
    Convert a PCF bitmap font to a dotted OpenType font.

    family_name: family name of the generated font
    pixel_height: glyph height in pixels (default: PIXEL_SIZE property, or 13)
    dot_shape: 'square' (default), 'diamond' or 'circle'
    selection: 'full' (default), 'ascii' or 'gb2312'
    version: font version (default 0.1)
    designer: font designer
    license: license description
    missing: 'skip' (default) or 'default' to fill requested code points with the default glyph
    chart: if given, image file to write a chart of the converted bitmaps to
    workers: number of threads to vectorize with (default: no threading)
    """
    dot_shape = DotShape(dot_shape)
    font = PcfFont.load(infile)
    if 'FONT' in font.properties:
        logging.info('Converting %s', font.properties['FONT'])
    glyphs, grid = vectorize_font(
        font, dot_shape=dot_shape, pixel_height=pixel_height,
        selection=selection, missing=missing, workers=workers,
    )
    if chart:
        save_chart(select_glyphs(font, selection, missing), chart)
    info = FontInfo(
        family_name=family_name,
        style_name=STYLE_NAMES[dot_shape],
        version=version,
        designer=designer,
        license=license,
    )
    return save_otf(glyphs, grid, info, outfile)
