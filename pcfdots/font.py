"""
pcfdots.font - glyph access on a parsed PCF font

(c) 2019--2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from pathlib import Path
from typing import NamedTuple

from .magic import FormatError
from .pcf import (
    read_pcf, Metrics, NO_GLYPH,
    PCF_PROPERTIES, PCF_GLYPH_NAMES, PCF_BDF_ENCODINGS, PCF_METRICS, PCF_BITMAPS,
)


class GlyphNotFound(KeyError):
    """Code point has no glyph in the font."""


class GlyphRecord(NamedTuple):
    """Everything needed to vectorize one glyph."""
    codepoint: int
    index: int
    name: str
    metrics: Metrics
    bitmap: bytes


class PcfFont:
    """Parsed PCF font with code point lookup."""

    def __init__(self, data):
        """Parse the tables of a PCF font held in a bytes buffer."""
        self._data = bytes(data)
        tables = read_pcf(self._data)
        try:
            self.encoding = tables[PCF_BDF_ENCODINGS]
            self.metrics = tables[PCF_METRICS]
            self.bitmaps = tables[PCF_BITMAPS]
        except KeyError as e:
            raise FormatError(f'PCF file lacks mandatory table: {e}') from e
        self.glyph_names = tables.get(PCF_GLYPH_NAMES, None)
        if PCF_PROPERTIES in tables:
            self.properties = tables[PCF_PROPERTIES].properties
        else:
            self.properties = {}
        if self.metrics.metrics_count != self.bitmaps.glyph_count:
            logging.warning(
                'Metrics table has %d entries but bitmap table has %d glyphs.',
                self.metrics.metrics_count, self.bitmaps.glyph_count
            )
        logging.info('Parsed %d glyphs in total.', self.metrics.metrics_count)

    @classmethod
    def load(cls, infile):
        """Read and parse a PCF file."""
        data = Path(infile).read_bytes()
        logging.info('Read %d bytes from %s.', len(data), infile)
        return cls(data)

    def __repr__(self):
        return (
            f'{type(self).__name__}(<{self.metrics.metrics_count} glyphs, '
            f'{len(self.encoding.glyph_indices)} encoded code points>)'
        )

    @property
    def default_char(self):
        """Code point to use for missing glyphs."""
        return self.encoding.default_char

    @property
    def pixel_size(self):
        """Pixel size from the XLFD properties, None if not given."""
        value = self.properties.get('PIXEL_SIZE', None)
        if isinstance(value, int) and value > 0:
            return value
        return None

    def get_index(self, codepoint):
        """Glyph index for a code point."""
        index = self.encoding.index_of(codepoint)
        if index == NO_GLYPH or not 0 <= index < self.metrics.metrics_count:
            raise GlyphNotFound(codepoint)
        return index

    def get_name(self, index):
        """Glyph name by index; empty if the font has no glyph names."""
        if self.glyph_names is None or index >= self.glyph_names.glyph_count:
            return ''
        return self.glyph_names.names[index]

    def get_bitmap(self, index):
        """Raw bitmap bytes of the glyph at the given index."""
        if index >= self.bitmaps.glyph_count:
            return b''
        start, end = self.bitmaps.extent(index)
        return self._data[start:end]

    def resolve(self, codepoint, missing='raise'):
        """
        Gather name, metrics and bitmap for a code point.

        missing: 'raise' (default) to raise GlyphNotFound if the code point
            has no glyph; 'default' to fall back to the default character
        """
        try:
            index = self.get_index(codepoint)
        except GlyphNotFound:
            if missing != 'default':
                raise
            index = self.get_index(self.default_char)
        return GlyphRecord(
            codepoint=codepoint,
            index=index,
            name=self.get_name(index),
            metrics=self.metrics.metrics[index],
            bitmap=self.get_bitmap(index),
        )

    def get(self, codepoint, default=None):
        """Resolve a code point; return default if it has no glyph."""
        try:
            return self.resolve(codepoint)
        except GlyphNotFound:
            return default

    def get_codepoints(self):
        """Code points that resolve to a glyph, in order."""
        return tuple(
            _cp for _cp in self.encoding.codepoints()
            if self.get(_cp) is not None
        )
