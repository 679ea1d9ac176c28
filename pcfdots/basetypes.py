"""
pcfdots.basetypes - base data types

(c) 2019--2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

from collections import namedtuple


class _VectorMixin:
    """Vector operations on tuple."""

    def __str__(self):
        return ' '.join(f'{_e}' for _e in self)

    def __bool__(self):
        return any(self)


class Bounds(_VectorMixin, namedtuple('Bounds', 'left bottom right top')):
    """4-coordinate tuple."""

    def contains(self, other):
        """Other bounds lie strictly inside these bounds."""
        return (
            other.left > self.left and other.right < self.right
            and other.bottom > self.bottom and other.top < self.top
        )


class Coord(_VectorMixin, namedtuple('Coord', 'x y')):
    """Coordinate tuple."""
