"""
pcfdots - dotted outline fonts from PCF bitmap fonts

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import sys as _sys
assert _sys.version_info >= (3, 9)

from .constants import VERSION as __version__
from .magic import FormatError
from .pcf import read_pcf
from .font import PcfFont, GlyphRecord, GlyphNotFound
from .selection import Selection, accepts
from .vector import DotShape, Grid, OutlinePath, VectorGlyph, vectorize, notdef
from .convert import convert, vectorize_font


def load(infile):
    """Read and parse a PCF font file."""
    return PcfFont.load(infile)
