"""
pcfdots test suite
testing utilities
"""

import tempfile
import unittest
import logging
from itertools import accumulate
from pathlib import Path

from pcfdots.struct import big_endian as be, little_endian as le
from pcfdots.magic import MAGIC
from pcfdots.pcf import (
    Metrics, NO_GLYPH, PCF_BYTE_MASK, PCF_BIT_MASK, PCF_COMPRESSED_METRICS,
    PCF_PROPERTIES, PCF_METRICS, PCF_BITMAPS, PCF_BDF_ENCODINGS, PCF_GLYPH_NAMES,
)


# most significant bit first, rows padded to 32 bits: the layout the vectorizer reads
LE_FORMAT = PCF_BIT_MASK | 2
BE_FORMAT = PCF_BYTE_MASK | PCF_BIT_MASK | 2

_HEADER_SIZE = 8
_TOC_ENTRY_SIZE = 16


def _base(format):
    return be if format & PCF_BYTE_MASK else le


def properties_table(props, format=LE_FORMAT):
    """Create a Properties table."""
    base = _base(format)
    strings = bytearray()
    records = []
    for key, value in props.items():
        name_offset = len(strings)
        strings += key.encode('latin-1') + b'\0'
        if isinstance(value, str):
            records.append(base.Struct(
                name_offset='int32', isStringProp='int8', value='int32'
            ).to_bytes(name_offset=name_offset, isStringProp=1, value=len(strings)))
            strings += value.encode('latin-1') + b'\0'
        else:
            records.append(base.Struct(
                name_offset='int32', isStringProp='int8', value='int32'
            ).to_bytes(name_offset=name_offset, isStringProp=0, value=value))
    return (
        le.uint32.to_bytes(format)
        + base.uint32.to_bytes(len(records))
        + b''.join(records)
        + bytes(0 if len(records)&3 == 0 else 4-(len(records)&3))
        + base.uint32.to_bytes(len(strings))
        + bytes(strings)
    )


def glyph_names_table(names, format=LE_FORMAT):
    """Create a Glyph Names table."""
    base = _base(format)
    encoded = tuple(_n.encode('latin-1') + b'\0' for _n in names)
    offsets = tuple(accumulate((len(_n) for _n in encoded), initial=0))[:-1]
    strings = b''.join(encoded)
    return (
        le.uint32.to_bytes(format)
        + base.uint32.to_bytes(len(names))
        + (base.uint32 * len(offsets)).to_bytes(*offsets)
        + base.uint32.to_bytes(len(strings))
        + strings
    )


def encoding_table(
        mapping, format=LE_FORMAT, *,
        min_byte2=0, max_byte2=0xff, min_byte1=0, max_byte1=0, default_char=0,
    ):
    """Create an Encodings table from a code point to glyph index mapping."""
    base = _base(format)
    indices = tuple(
        mapping.get((_b1 << 8) | _b2, NO_GLYPH)
        for _b1 in range(min_byte1, max_byte1+1)
        for _b2 in range(min_byte2, max_byte2+1)
    )
    return (
        le.uint32.to_bytes(format)
        + base.Struct(
            min_char_or_byte2='uint16', max_char_or_byte2='uint16',
            min_byte1='uint16', max_byte1='uint16', default_char='uint16',
        ).to_bytes(
            min_char_or_byte2=min_byte2, max_char_or_byte2=max_byte2,
            min_byte1=min_byte1, max_byte1=max_byte1, default_char=default_char,
        )
        + (base.uint16 * len(indices)).to_bytes(*indices)
    )


def metrics_table(metrics, format=LE_FORMAT):
    """Create a Metrics table, compressed if the format says so."""
    base = _base(format)
    if format & PCF_COMPRESSED_METRICS:
        entries = b''.join(
            bytes(_v + 0x80 for _v in tuple(_m)[:5])
            for _m in metrics
        )
        count = base.uint16.to_bytes(len(metrics))
    else:
        entries = b''.join(
            (base.int16 * 5).to_bytes(*tuple(_m)[:5])
            + base.uint16.to_bytes(_m.character_attributes)
            for _m in metrics
        )
        count = base.uint32.to_bytes(len(metrics))
    return le.uint32.to_bytes(format) + count + entries


def bitmaps_table(bitmaps, format=LE_FORMAT, bitmap_sizes=None):
    """Create a Bitmaps table from per-glyph bitmap bytes."""
    base = _base(format)
    offsets = tuple(accumulate((len(_b) for _b in bitmaps), initial=0))[:-1]
    data = b''.join(bitmaps)
    if bitmap_sizes is None:
        bitmap_sizes = (len(data),) * 4
    return (
        le.uint32.to_bytes(format)
        + base.uint32.to_bytes(len(bitmaps))
        + (base.uint32 * len(offsets)).to_bytes(*offsets)
        + (base.uint32 * 4).to_bytes(*bitmap_sizes)
        + data
    )


def make_pcf(tables):
    """Assemble a PCF file from (type, format, table bytes) triples."""
    offset = _HEADER_SIZE + _TOC_ENTRY_SIZE * len(tables)
    toc = []
    for type, format, table in tables:
        toc.append(
            (le.uint32 * 4).to_bytes(type, format, len(table), offset)
        )
        offset += len(table)
    return (
        MAGIC + le.uint32.to_bytes(len(tables))
        + b''.join(toc)
        + b''.join(_t for _, _, _t in tables)
    )


def make_font(glyphs, format=LE_FORMAT, properties=None, **encoding_kwargs):
    """
    Create a PCF file.

    glyphs: sequence of (code point, name, Metrics, bitmap bytes)
    """
    mapping = {_cp: _i for _i, (_cp, *_) in enumerate(glyphs)}
    tables = []
    if properties is not None:
        tables.append((PCF_PROPERTIES, format, properties_table(properties, format)))
    tables.extend((
        (PCF_METRICS, format, metrics_table(tuple(_g[2] for _g in glyphs), format)),
        (PCF_BITMAPS, format, bitmaps_table(tuple(_g[3] for _g in glyphs), format)),
        (PCF_BDF_ENCODINGS, format, encoding_table(mapping, format, **encoding_kwargs)),
        (PCF_GLYPH_NAMES, format, glyph_names_table(tuple(_g[1] for _g in glyphs), format)),
    ))
    return make_pcf(tables)


def checkerboard(width, height, stride=4):
    """Bitmap bytes of a checkerboard pattern, inked at the top left."""
    rows = []
    for y in range(height):
        bits = ''.join('1' if (_x + y) % 2 == 0 else '0' for _x in range(width))
        bits = bits.ljust(stride * 8, '0')
        rows.append(int(bits, 2).to_bytes(stride, 'big'))
    return b''.join(rows)


# 'A' with 5-pixel advance and ascent of 11, the letter drawn on an 5x8 checkerboard
GLYPH_A = (0x41, 'A', Metrics(0, 5, 5, 11, 0), checkerboard(5, 8))
# single pixel
GLYPH_DOT = (0x2e, 'period', Metrics(1, 2, 3, 1, 0), bytes((0x80, 0, 0, 0)))
# wide glyph, chinese 'zhong'
GLYPH_ZHONG = (
    0x4e2d, 'uni4E2D', Metrics(0, 12, 12, 10, 2), bytes((0xff, 0xf0, 0, 0)) * 12
)


class BaseTester(unittest.TestCase):
    """Base class for testers."""

    logging.basicConfig(level=logging.WARNING)

    def setUp(self):
        """Setup ahead of each test."""
        bar = '-' * 20
        logging.debug('%s %s %s', bar, self.id(), bar)
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

    def tearDown(self):
        """Clean up after each test."""
        self.temp_dir.cleanup()

    def write_font(self, data, name='test.pcf'):
        """Write PCF data to a file in the temporary directory."""
        path = self.temp_path / name
        path.write_bytes(data)
        return path
