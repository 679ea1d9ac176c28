"""
pcfdots.struct - binary structures

(c) 2019--2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import ctypes
from types import SimpleNamespace
from functools import partial


class StructError(ValueError):
    """Binary structure could not be read."""


##############################################################################
# binary structs


# type strings
TYPES = {
    'uint8': ctypes.c_uint8,
    'int8': ctypes.c_int8,
    'uint16': ctypes.c_uint16,
    'int16': ctypes.c_int16,
    'uint32': ctypes.c_uint32,
    'int32': ctypes.c_int32,
}


def _parse_type(atype):
    """Convert struct member type specification to ctypes base type or array."""
    if isinstance(atype, _WrappedCType):
        return atype._ctype
    try:
        return TYPES[atype]
    except KeyError:
        pass
    if isinstance(atype, str) and atype.endswith('s'):
        return ctypes.c_char * int(atype[:-1])
    raise ValueError('Field type `{}` not understood'.format(atype))


def _parse_endian(endian):
    """Normalise endianness specification to 'big' or 'little'."""
    if endian[:1].lower() in ('b', '>'):
        return 'big'
    elif endian[:1].lower() in ('l', '<'):
        return 'little'
    raise ValueError(f"Endianness '{endian}' not recognised.")


class _WrappedCType:
    """Wrapper for ctypes type."""

    def __mul__(self, count):
        """Create an array."""
        return ArrayType(self, count)

    __rmul__ = __mul__

    def __call__(self, *args, **kwargs):
        """Instantiate a value and convert to python types."""
        # pylint: disable=no-member
        return self._convert(self._ctype(*args, **kwargs))

    def to_bytes(self, *args, **kwargs):
        """Instantiate and convert to bytes."""
        # pylint: disable=no-member
        return bytes(self._ctype(*args, **kwargs))

    def from_bytes(self, data, offset=0):
        """Read a value from a buffer at the given offset."""
        # pylint: disable=no-member
        if offset < 0 or offset + self.size > len(data):
            raise StructError(
                f'Reading {self.size} bytes at offset {offset} '
                f'exceeds buffer length {len(data)}.'
            )
        cvalue = self._ctype.from_buffer_copy(data, offset)
        return self._convert(cvalue)

    @property
    def size(self):
        # pylint: disable=no-member
        return ctypes.sizeof(self._ctype)


class ScalarType(_WrappedCType):
    """Wrapper for scalar types. Values come out as int or bytes."""

    def __init__(self, endian, ctype):
        if _parse_endian(endian) == 'big':
            self._ctype = ctype.__ctype_be__
        else:
            self._ctype = ctype.__ctype_le__

    def _convert(self, cvalue):
        # array elements of scalar type already come out as python ints
        return getattr(cvalue, 'value', cvalue)


class StructType(_WrappedCType):
    """
    Represent a structured type.

    mystruct = StructType('big', first='uint8', second='uint16')
    assert mystruct.to_bytes(first=1, second=2) == b'\1\0\2'
    assert mystruct.from_bytes(b'\1\0\2') == SimpleNamespace(first=1, second=2)
    """

    def __init__(self, endian, /, **description):
        """Create a structured type."""
        if _parse_endian(endian) == 'big':
            parent = ctypes.BigEndianStructure
        else:
            parent = ctypes.LittleEndianStructure

        class _CStruct(parent):
            _fields_ = tuple(
                (_field, _parse_type(_type))
                for _field, _type in description.items()
            )
            _pack_ = True

        self._ctype = _CStruct
        self.fields = tuple(description)

    def _convert(self, cvalue):
        return SimpleNamespace(**{
            _field: getattr(cvalue, _field) for _field in self.fields
        })


class ArrayType(_WrappedCType):
    """Wrapper for ctypes array type. Values come out as tuples."""

    def __init__(self, element_type, count):
        if count < 0:
            raise StructError(f'Negative array length {count}.')
        self.element_type = element_type
        try:
            self._ctype = element_type._ctype * count
        except OverflowError as e:
            raise StructError(f"Array length {count} too large.") from e

    def _convert(self, cvalue):
        return tuple(self.element_type._convert(_e) for _e in cvalue)

    def to_bytes(self, *args):
        return bytes(self._ctype(*args))


def _endian_namespace(endian):
    return SimpleNamespace(
        endian=_parse_endian(endian),
        Struct=partial(StructType, endian),
        uint8=ScalarType(endian, ctypes.c_uint8),
        int8=ScalarType(endian, ctypes.c_int8),
        uint16=ScalarType(endian, ctypes.c_uint16),
        int16=ScalarType(endian, ctypes.c_int16),
        uint32=ScalarType(endian, ctypes.c_uint32),
        int32=ScalarType(endian, ctypes.c_int32),
    )

big_endian = _endian_namespace('>')
little_endian = _endian_namespace('<')
