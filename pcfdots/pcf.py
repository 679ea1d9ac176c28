"""
pcfdots.pcf - X11 portable compiled format, table directory and decoders

(c) 2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from functools import wraps
from typing import NamedTuple

from .struct import big_endian as be, little_endian as le, StructError
from .magic import FormatError, maybe_pcf


##############################################################################
# https://fontforge.org/docs/techref/pcf-format.html

_HEADER = le.Struct(
    # /* always "\1fcp" */
    header='4s',
    table_count='uint32',
)

# fontforge recap has these as apparent signed ints,
# but X sources say CARD32 which is an unsigned int
_TOC_ENTRY = le.Struct(
    # /* See below, indicates which table */
    type='uint32',
    # /* See below, indicates how the data are formatted in the table */
    format='uint32',
    # /* In bytes */
    size='uint32',
    # /* from start of file */
    offset='uint32',
)

# format field
#define PCF_DEFAULT_FORMAT       0x00000000
PCF_DEFAULT_FORMAT = 0x00000000
#define PCF_INKBOUNDS           0x00000200
PCF_INKBOUNDS = 0x00000200
#define PCF_ACCEL_W_INKBOUNDS   0x00000100
PCF_ACCEL_W_INKBOUNDS = 0x00000100
#define PCF_COMPRESSED_METRICS  0x00000100
PCF_COMPRESSED_METRICS = 0x00000100
PCF_FORMAT_MASK = 0xffffff00

# format field modifiers
#define PCF_GLYPH_PAD_MASK       (3<<0)            /* See the bitmap table for explanation */
PCF_GLYPH_PAD_MASK = (3<<0)
#define PCF_BYTE_MASK           (1<<2)            /* If set then Most Sig Byte First */
PCF_BYTE_MASK = (1<<2)
#define PCF_BIT_MASK            (1<<3)            /* If set then Most Sig Bit First */
PCF_BIT_MASK = (1<<3)
#define PCF_SCAN_UNIT_MASK      (3<<4)            /* See the bitmap table for explanation */
PCF_SCAN_UNIT_MASK = (3<<4)

# type field
PCF_PROPERTIES = (1<<0)
PCF_ACCELERATORS = (1<<1)
PCF_METRICS = (1<<2)
PCF_BITMAPS = (1<<3)
PCF_INK_METRICS = (1<<4)
PCF_BDF_ENCODINGS = (1<<5)
PCF_SWIDTHS = (1<<6)
PCF_GLYPH_NAMES = (1<<7)
PCF_BDF_ACCELERATORS = (1<<8)

TABLE_TYPES = {
    PCF_PROPERTIES: 'PCF_PROPERTIES',
    PCF_ACCELERATORS: 'PCF_ACCELERATORS',
    PCF_METRICS: 'PCF_METRICS',
    PCF_BITMAPS: 'PCF_BITMAPS',
    PCF_INK_METRICS: 'PCF_INK_METRICS',
    PCF_BDF_ENCODINGS: 'PCF_BDF_ENCODINGS',
    PCF_SWIDTHS: 'PCF_SWIDTHS',
    PCF_GLYPH_NAMES: 'PCF_GLYPH_NAMES',
    PCF_BDF_ACCELERATORS: 'PCF_BDF_ACCELERATORS',
}

# encoding table marker for code points without a glyph
NO_GLYPH = 0xffff

# the table format word plus the count that follows it
_TABLE_HEADER_SIZE = 8


##############################################################################
# format flags

class FormatFlags(NamedTuple):
    """Decoded table format word."""
    format: int
    # /* how each row in each glyph's bitmap is padded (format&3) */
    # /*  0=>bytes, 1=>shorts, 2=>ints */
    glyph_pad: int
    # most significant byte first
    big_endian: bool
    # most significant bit first
    msb_first: bool
    # /* what the bits are stored in (bytes, shorts, ints) (format>>4)&3 */
    scan_unit: int
    compressed: bool
    ink_bounds: bool

    @classmethod
    def from_format(cls, format):
        """Decode a table format word."""
        variant = format & PCF_FORMAT_MASK
        if variant not in (PCF_DEFAULT_FORMAT, PCF_COMPRESSED_METRICS, PCF_INKBOUNDS):
            raise FormatError(f'Unsupported PCF table format 0x{format:08x}.')
        return cls(
            format=format,
            glyph_pad=1 << (format & PCF_GLYPH_PAD_MASK),
            big_endian=bool(format & PCF_BYTE_MASK),
            msb_first=bool(format & PCF_BIT_MASK),
            scan_unit=1 << ((format & PCF_SCAN_UNIT_MASK) >> 4),
            compressed=variant == PCF_COMPRESSED_METRICS,
            ink_bounds=variant == PCF_INKBOUNDS,
        )

    @property
    def base(self):
        """Struct namespace for the byte order of fields after the format word."""
        return be if self.big_endian else le

    @property
    def padding_index(self):
        """Index of the active size in the bitmap table's size candidates."""
        return self.format & PCF_GLYPH_PAD_MASK

    def __str__(self):
        if self.compressed:
            names = ['PCF_COMPRESSED_METRICS']
        elif self.ink_bounds:
            names = ['PCF_INKBOUNDS']
        else:
            names = ['PCF_DEFAULT_FORMAT']
        names.append('MSByteFirst' if self.big_endian else 'LSByteFirst')
        names.append('MSBitFirst' if self.msb_first else 'LSBitFirst')
        names.append(f'pad={self.glyph_pad}')
        names.append(f'unit={self.scan_unit}')
        return ' | '.join(names)


class TocEntry(NamedTuple):
    """Table directory entry."""
    type: int
    format: int
    size: int
    offset: int
    flags: FormatFlags

    @property
    def type_names(self):
        """Names of the table types set in the type bitmask."""
        return tuple(
            _name for _bit, _name in TABLE_TYPES.items() if self.type & _bit
        )

    def __str__(self):
        return (
            f"{' | '.join(self.type_names) or hex(self.type)} [{self.flags}] "
            f'size={self.size} offset={self.offset}'
        )


##############################################################################
# table variants

class Metrics(NamedTuple):
    """Per-glyph metrics, in pixels."""
    left_side_bearing: int
    right_side_bearing: int
    character_width: int
    character_ascent: int
    character_descent: int
    character_attributes: int = 0


class PropertiesTable(NamedTuple):
    format: FormatFlags
    properties: dict


class NameTable(NamedTuple):
    format: FormatFlags
    names: tuple

    @property
    def glyph_count(self):
        return len(self.names)


class EncodingTable(NamedTuple):
    format: FormatFlags
    min_char_or_byte2: int
    max_char_or_byte2: int
    min_byte1: int
    max_byte1: int
    default_char: int
    glyph_indices: tuple

    @property
    def row_length(self):
        return self.max_char_or_byte2 - self.min_char_or_byte2 + 1

    def index_of(self, codepoint):
        """Glyph index for a code point; NO_GLYPH if not encoded."""
        byte1, byte2 = divmod(codepoint, 0x100)
        if not (
                self.min_byte1 <= byte1 <= self.max_byte1
                and self.min_char_or_byte2 <= byte2 <= self.max_char_or_byte2
            ):
            return NO_GLYPH
        row = byte1 - self.min_byte1
        column = byte2 - self.min_char_or_byte2
        return self.glyph_indices[row * self.row_length + column]

    def codepoints(self):
        """Iterate over all code points in the encoding grid, in order."""
        return (
            (_byte1 << 8) | _byte2
            for _byte1 in range(self.min_byte1, self.max_byte1+1)
            for _byte2 in range(self.min_char_or_byte2, self.max_char_or_byte2+1)
        )


class MetricsTable(NamedTuple):
    format: FormatFlags
    metrics: tuple

    @property
    def metrics_count(self):
        return len(self.metrics)


class BitmapTable(NamedTuple):
    format: FormatFlags
    offsets: tuple
    bitmap_sizes: tuple
    # size of the bitmap blob for the table's glyph padding
    bitmap_size: int
    # absolute buffer offset of the bitmap blob
    bitmaps_base_offset: int

    @property
    def glyph_count(self):
        return len(self.offsets)

    def extent(self, index):
        """Absolute (start, end) buffer offsets of a glyph's bitmap."""
        start = self.offsets[index]
        if index == len(self.offsets) - 1:
            end = self.bitmap_size
        else:
            end = self.offsets[index+1]
        return start + self.bitmaps_base_offset, end + self.bitmaps_base_offset


##############################################################################
# reader

def read_toc(data):
    """Read the file header and table of contents."""
    if not maybe_pcf(data):
        raise FormatError('Not a PCF file: signature does not match.')
    try:
        header = _HEADER.from_bytes(data)
        entries = (_TOC_ENTRY * header.table_count).from_bytes(data, _HEADER.size)
    except StructError as e:
        raise FormatError(f'Truncated PCF table directory: {e}') from e
    toc = []
    for entry in entries:
        if entry.offset + entry.size > len(data):
            raise FormatError(
                f'PCF table at offset {entry.offset} with size {entry.size} '
                f'exceeds file length {len(data)}.'
            )
        toc.append(TocEntry(
            type=entry.type, format=entry.format,
            size=entry.size, offset=entry.offset,
            flags=FormatFlags.from_format(entry.format),
        ))
    return tuple(toc)


def read_table(data, entry):
    """Decode the table an entry points to; None for tables we don't use."""
    if entry.type == PCF_PROPERTIES:
        decoder = read_properties
    elif entry.type == PCF_GLYPH_NAMES:
        decoder = read_glyph_names
    elif entry.type == PCF_BDF_ENCODINGS:
        decoder = read_encoding
    elif entry.type == PCF_METRICS:
        decoder = read_metrics
    elif entry.type == PCF_BITMAPS:
        decoder = read_bitmaps
    else:
        if entry.type not in TABLE_TYPES:
            logging.warning('Skipping unknown PCF table type 0x%x.', entry.type)
        return None
    return decoder(data, entry.offset, entry.flags)


def read_pcf(data):
    """
    Read the tables of a PCF font from a buffer.

    Returns a dict of decoded tables keyed by table type.
    Raises FormatError if the buffer is not a well-formed PCF file.
    """
    toc = read_toc(data)
    logging.info('Found %d tables.', len(toc))
    tables = {}
    for entry in toc:
        logging.debug('Table %s', entry)
        table = read_table(data, entry)
        if table is not None:
            tables[entry.type] = table
    return tables


def _read_format(data, offset, flags):
    """Read the format word at the start of a table, always little-endian."""
    format = le.uint32.from_bytes(data, offset)
    if format != flags.format:
        logging.debug(
            'Table format 0x%x differs from directory entry 0x%x.',
            format, flags.format
        )
    return offset + le.uint32.size


def _decoder(func):
    """Convert short reads in a table decoder into format errors."""

    @wraps(func)
    def _decode(data, offset, flags):
        try:
            return func(data, offset, flags)
        except StructError as e:
            raise FormatError(
                f'Truncated PCF table at offset {offset}: {e}'
            ) from e

    return _decode


def _read_string(data, offset, limit):
    """Read a null-terminated string that ends before limit."""
    if not 0 <= offset < limit:
        raise FormatError(f'String offset {offset} outside string table.')
    end = data.find(b'\0', offset, limit)
    if end < 0:
        raise FormatError(f'Unterminated string at offset {offset}.')
    return bytes(data[offset:end]).decode('latin-1')


# Properties table

# can be be or le
_PROPS = dict(
    name_offset='int32',
    isStringProp='int8',
    value='int32',
)

@_decoder
def read_properties(data, offset, flags):
    """Read the Properties table."""
    base = flags.base
    pos = _read_format(data, offset, flags)
    nprops = base.uint32.from_bytes(data, pos)
    pos += base.uint32.size
    props_struct = base.Struct(**_PROPS)
    props = (props_struct * nprops).from_bytes(data, pos)
    pos += props_struct.size * nprops
    #  pad to next int32 boundary
    pos += 0 if nprops&3 == 0 else 4-(nprops&3)
    string_size = base.uint32.from_bytes(data, pos)
    pos += base.uint32.size
    if pos + string_size > len(data):
        raise FormatError('PCF properties strings exceed file length.')
    strings = bytes(data[pos:pos+string_size])
    properties = {}
    for prop in props:
        name = _read_string(strings, prop.name_offset, string_size)
        if prop.isStringProp:
            value = _read_string(strings, prop.value, string_size)
        else:
            value = prop.value
        properties[name] = value
    return PropertiesTable(format=flags, properties=properties)


# Glyph names

@_decoder
def read_glyph_names(data, offset, flags):
    """Read the Glyph Names table."""
    base = flags.base
    pos = _read_format(data, offset, flags)
    glyph_count = base.uint32.from_bytes(data, pos)
    pos += base.uint32.size
    offsets = (base.uint32 * glyph_count).from_bytes(data, pos)
    pos += base.uint32.size * glyph_count
    string_size = base.uint32.from_bytes(data, pos)
    strings_base = offset + _TABLE_HEADER_SIZE + 4 * glyph_count + 4
    if strings_base + string_size > len(data):
        raise FormatError('PCF glyph name strings exceed file length.')
    names = tuple(
        _read_string(data, strings_base + _ofs, strings_base + string_size)
        for _ofs in offsets
    )
    return NameTable(format=flags, names=names)


# Encoding

# FontForge docs suggest the encoding table has signed integers
# but the XFontStruct has them unsigned
# they also make more sense unsigned, especially default_char which may be two-byte.
_ENCODING_TABLE = dict(
    min_char_or_byte2='uint16',
    max_char_or_byte2='uint16',
    min_byte1='uint16',
    max_byte1='uint16',
    default_char='uint16',
)

@_decoder
def read_encoding(data, offset, flags):
    """Read the BDF Encodings table."""
    base = flags.base
    pos = _read_format(data, offset, flags)
    enc_struct = base.Struct(**_ENCODING_TABLE)
    enc = enc_struct.from_bytes(data, pos)
    pos += enc_struct.size
    count = (
        (enc.max_char_or_byte2 - enc.min_char_or_byte2 + 1)
        * (enc.max_byte1 - enc.min_byte1 + 1)
    )
    if count < 0:
        raise FormatError('Inverted code range in PCF encoding table.')
    glyph_indices = (base.uint16 * count).from_bytes(data, pos)
    return EncodingTable(format=flags, glyph_indices=glyph_indices, **vars(enc))


# Glyph metrics

# from https://tronche.com/gui/x/xlib/graphics/font-metrics/#XCharStruct
# typedef struct {
# 	short lbearing;			/* origin to left edge of raster */
# 	short rbearing;			/* origin to right edge of raster */
# 	short width;			/* advance to next char's origin */
# 	short ascent;			/* baseline to top edge of raster */
# 	short descent;			/* baseline to bottom edge of raster */
# 	unsigned short attributes;	/* per char flags (not predefined) */
# } XCharStruct;

_UNCOMPRESSED_METRICS = dict(
    left_side_bearing='int16',
    right_side_bearing='int16',
    character_width='int16',
    character_ascent='int16',
    character_descent='int16',
    character_attributes='uint16',
)

# The (compressed) bytes are unsigned bytes which are offset by 0x80
# (so the actual value will be (getc(pcf_file)-0x80). :
_COMPRESSED_METRICS = dict(
    left_side_bearing='uint8',
    right_side_bearing='uint8',
    character_width='uint8',
    character_ascent='uint8',
    character_descent='uint8',
)

@_decoder
def read_metrics(data, offset, flags):
    """Read the Metrics table."""
    base = flags.base
    pos = _read_format(data, offset, flags)
    if flags.compressed:
        # documented as signed int, but used as uint by bdftopcf for e.g. unifont
        count = base.uint16.from_bytes(data, pos)
        pos += base.uint16.size
        entries = (base.Struct(**_COMPRESSED_METRICS) * count).from_bytes(data, pos)
        # adjust unsigned bytes by 0x80 offset
        metrics = tuple(
            Metrics(**{_k: _v-0x80 for _k, _v in vars(_m).items()})
            for _m in entries
        )
    else:
        count = base.uint32.from_bytes(data, pos)
        pos += base.uint32.size
        entries = (base.Struct(**_UNCOMPRESSED_METRICS) * count).from_bytes(data, pos)
        metrics = tuple(Metrics(**vars(_m)) for _m in entries)
    return MetricsTable(format=flags, metrics=metrics)


# Bitmaps

@_decoder
def read_bitmaps(data, offset, flags):
    """Read the Bitmaps table."""
    base = flags.base
    pos = _read_format(data, offset, flags)
    glyph_count = base.uint32.from_bytes(data, pos)
    pos += base.uint32.size
    offsets = (base.uint32 * glyph_count).from_bytes(data, pos)
    pos += base.uint32.size * glyph_count
    # bytes # shorts # ints # longs
    bitmap_sizes = (base.uint32 * 4).from_bytes(data, pos)
    bitmap_size = bitmap_sizes[flags.padding_index]
    bitmaps_base_offset = offset + _TABLE_HEADER_SIZE + 4 * glyph_count + 16
    if bitmaps_base_offset + bitmap_size > len(data):
        raise FormatError('PCF bitmap data exceeds file length.')
    if any(_a > _b for _a, _b in zip(offsets, offsets[1:] + (bitmap_size,))):
        raise FormatError('PCF bitmap offsets are not in ascending order.')
    return BitmapTable(
        format=flags,
        offsets=offsets,
        bitmap_sizes=bitmap_sizes,
        bitmap_size=bitmap_size,
        bitmaps_base_offset=bitmaps_base_offset,
    )
