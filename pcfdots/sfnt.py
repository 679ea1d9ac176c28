"""
pcfdots.sfnt - OpenType (CFF) font builder

(c) 2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from collections import Counter
from typing import NamedTuple

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.t2CharStringPen import T2CharStringPen
from fontTools.misc.roundTools import otRound


class FontInfo(NamedTuple):
    """Naming metadata, passed through to the name and CFF tables."""
    family_name: str
    style_name: str = 'Regular'
    version: str = '0.1'
    designer: str = ''
    license: str = ''

    @property
    def full_name(self):
        return f'{self.family_name} {self.style_name}'

    @property
    def ps_name(self):
        """PostScript name: printable ascii without spaces."""
        name = f'{self.family_name}-{self.style_name}'
        return ''.join(
            _c for _c in name
            if 0x21 <= ord(_c) < 0x7f and _c not in '[](){}<>/%'
        )


def _font_revision(version):
    """Convert version string to head.fontRevision."""
    try:
        return float(version)
    except ValueError:
        logging.warning('Version %r is not a number; setting revision to 0.', version)
        return 0.0


def _valid_codepoint(codepoint):
    """Code point can be stored in a cmap."""
    return (
        codepoint is not None
        and 0 <= codepoint <= 0x10ffff
        and not 0xd800 <= codepoint < 0xe000
    )


def glyph_names(glyphs):
    """Unique, non-empty glyph names in glyph order."""
    seen = Counter()
    names = []
    for glyph in glyphs:
        name = glyph.name
        if not name:
            if _valid_codepoint(glyph.codepoint):
                name = f'uni{glyph.codepoint:04X}'
            else:
                name = f'glyph{len(names)}'
        base = name
        while name in seen:
            name = f'{base}.{seen[base]}'
            seen[base] += 1
        seen[name] += 1
        names.append(name)
    return names


def build_otf(glyphs, grid, info):
    """
    Build a CFF-flavoured OpenType font from outline glyphs.

    glyphs: sequence of VectorGlyph, missing glyph first
    grid: pixel grid, provides units per em, ascender and descender
    info: FontInfo naming metadata
    """
    glyphs = tuple(glyphs)
    names = glyph_names(glyphs)
    ascender, descender = otRound(grid.ascender), otRound(grid.descender)
    fb = FontBuilder(grid.units_per_em, isTTF=False)
    fb.setupGlyphOrder(names)
    cmap = {}
    for glyph, name in zip(glyphs, names):
        if not _valid_codepoint(glyph.codepoint):
            continue
        if glyph.codepoint in cmap:
            logging.warning('Duplicate code point U+%04X dropped.', glyph.codepoint)
            continue
        cmap[glyph.codepoint] = name
    fb.setupCharacterMap(cmap)
    charstrings = {}
    metrics = {}
    for glyph, name in zip(glyphs, names):
        width = otRound(glyph.advance_width)
        pen = T2CharStringPen(width=width, glyphSet=None)
        glyph.path.draw(pen)
        charstrings[name] = pen.getCharString()
        lsb = otRound(glyph.path.bounds.left) if glyph.path else 0
        metrics[name] = (width, lsb)
    fb.setupCFF(
        psName=info.ps_name,
        fontInfo={
            'FamilyName': info.family_name,
            'FullName': info.full_name,
            'version': info.version,
            'Notice': info.license,
        },
        charStringsDict=charstrings,
        privateDict={},
    )
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=ascender, descent=descender)
    name_strings = {
        'familyName': info.family_name,
        'styleName': info.style_name,
        'uniqueFontIdentifier': f'{info.ps_name};{info.version}',
        'fullName': info.full_name,
        'psName': info.ps_name,
        'version': f'Version {info.version}',
        'designer': info.designer,
        'licenseDescription': info.license,
    }
    fb.setupNameTable({_k: _v for _k, _v in name_strings.items() if _v})
    fb.setupOS2(
        sTypoAscender=ascender,
        sTypoDescender=descender,
        sTypoLineGap=0,
        usWinAscent=ascender,
        usWinDescent=abs(descender),
    )
    fb.setupPost()
    fb.setupHead(
        unitsPerEm=grid.units_per_em,
        fontRevision=_font_revision(info.version),
    )
    return fb.font


def save_otf(glyphs, grid, info, outfile):
    """Build an OpenType font and write it to a file or binary stream."""
    tt_font = build_otf(glyphs, grid, info)
    tt_font.save(outfile)
    logging.info('Wrote %d glyphs to %s.', len(tt_font.getGlyphOrder()), outfile)
    return tt_font
