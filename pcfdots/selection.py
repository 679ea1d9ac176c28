"""
pcfdots.selection - code point selection

(c) 2019--2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import logging
from enum import Enum
from functools import cache


class Selection(Enum):
    """Which code points to convert."""
    FULL = 'full'
    ASCII = 'ascii'
    GB2312 = 'gb2312'


# printable ascii plus latin-1
ASCII_RANGE = range(0x20, 0x100)

# GB2312 rows as two-byte sequences: symbols and hanzi levels 1 and 2
# decoded with the GB18030 mapping, which also assigns the unused positions
GB2312_RANGES = (
    (range(0xa1, 0xaa), range(0xa1, 0xff)),
    (range(0xb0, 0xf8), range(0xa1, 0xff)),
)


@cache
def gb2312_set():
    """Unicode code points of all valid GB2312 characters."""
    codepoints = set()
    for leads, trails in GB2312_RANGES:
        for byte1 in leads:
            for byte2 in trails:
                try:
                    char = bytes((byte1, byte2)).decode('gb18030')
                except UnicodeDecodeError:
                    logging.debug('Undecodable GB2312 position %02X%02X.', byte1, byte2)
                    continue
                codepoints.add(ord(char))
    return frozenset(codepoints)


def accepts(codepoint, selection=Selection.FULL):
    """Code point is included in selection."""
    selection = Selection(selection)
    if selection == Selection.FULL:
        return True
    if codepoint in ASCII_RANGE:
        return True
    if selection == Selection.GB2312:
        return codepoint in gb2312_set()
    return False


def requested_codepoints(selection):
    """Code points explicitly requested by a selection, None for all."""
    selection = Selection(selection)
    if selection == Selection.FULL:
        return None
    if selection == Selection.ASCII:
        return tuple(ASCII_RANGE)
    return tuple(sorted(set(ASCII_RANGE) | gb2312_set()))
