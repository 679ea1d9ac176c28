"""
pcfdots.magic - file type recognition

(c) 2019--2023 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

# PCF signature, "\1fcp"
MAGIC = b'\1fcp'


class FormatError(Exception):
    """Incorrect file format."""


def maybe_pcf(data):
    """Check if a buffer starts with the PCF signature."""
    return bytes(data[:len(MAGIC)]) == MAGIC
