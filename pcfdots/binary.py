"""
pcfdots.binary - binary utilities

(c) 2019--2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""


def ceildiv(num, den):
    """Integer division, rounding up."""
    return -(-num // den)

def bytes_to_bits(inbytes, width=None):
    """Convert bytes/bytearray/sequence of int to tuple of bits, msb first."""
    bitstr = ''.join('{:08b}'.format(_b) for _b in inbytes)
    bits = tuple(_c == '1' for _c in bitstr)
    if width is None:
        return bits
    return bits[:width]

def unpack_rows(data, stride, width):
    """
    Split packed bitmap bytes into rows of bits.

    data: bitmap bytes, rows stored consecutively
    stride: number of bytes per stored row
    width: number of meaningful bits at the start of each row
    """
    return tuple(
        bytes_to_bits(data[_offset:_offset+stride], width)
        for _offset in range(0, len(data), stride)
    )
