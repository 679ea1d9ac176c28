#!/usr/bin/env python3
"""
Convert a PCF bitmap font to a dotted OpenType font
(c) 2019--2023 Rob Hagemans, licence: https://opensource.org/licenses/MIT
"""

import sys
import argparse
import logging

import pcfdots
from pcfdots.convert import convert, DEFAULT_PIXEL_HEIGHT
from pcfdots.selection import Selection
from pcfdots.vector import DotShape


def _positive_int(value):
    value = int(value)
    if value <= 0:
        raise argparse.ArgumentTypeError(f'{value} is not a positive integer')
    return value


def create_parser():
    """Set up the command-line parser."""
    parser = argparse.ArgumentParser(
        description='Convert a PCF bitmap font to a dotted OpenType font.'
    )
    parser.add_argument(
        '-i', '--input', required=True,
        help='the bitmap font file to be converted, in PCF format'
    )
    parser.add_argument(
        '-o', '--output', required=True,
        help='the output OpenType font file, in OTF format'
    )
    parser.add_argument(
        '-p', '--glyph-size-in-pixel', type=_positive_int, default=None,
        help=(
            'the max glyph size in pixels. E.g., 10pt Chinese bitmap fonts '
            'usually use 13 as the pixel size, 15 for 11pt, 16 for 12pt. '
            'Default is the PIXEL_SIZE property of the PCF file, '
            f'or {DEFAULT_PIXEL_HEIGHT} if it has none.'
        )
    )
    parser.add_argument(
        '-s', '--font-style', default=DotShape.SQUARE.value,
        choices=tuple(_s.value for _s in DotShape),
        help='shape of the dots that make up the glyphs (default: square)'
    )
    parser.add_argument(
        '-f', '--family-name', required=True,
        help='the family name of the generated font'
    )
    parser.add_argument(
        '-r', '--font-version', default='0.1',
        help='the version of the generated font'
    )
    parser.add_argument(
        '-e', '--font-designer', default='wixette',
        help='the designer of the generated font'
    )
    parser.add_argument(
        '-l', '--font-license', default='GPL 2.0',
        help='the license of the generated font'
    )
    parser.add_argument(
        '-d', '--dry-run', action='store_true', default=False,
        help='only export the ASCII and Latin-1 glyphs, for testing purposes'
    )
    parser.add_argument(
        '-g', '--gb2312-only', action='store_true', default=False,
        help='only export ASCII and GB2312 Chinese glyphs'
    )
    parser.add_argument(
        '--missing', choices=('skip', 'default'), default='skip',
        help=(
            'what to do with selected code points the font lacks: '
            "'skip' them (default) or draw the font's default character"
        )
    )
    parser.add_argument(
        '--chart', default=None,
        help='also write a chart of the converted bitmaps to this image file'
    )
    parser.add_argument(
        '--workers', type=_positive_int, default=None,
        help='number of threads to vectorize glyphs with'
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true', default=False,
        help='show progress messages'
    )
    parser.add_argument(
        '--debug', action='store_true', default=False,
        help='enable debugging output'
    )
    parser.add_argument(
        '--version', action='version', version=f'pcfdots v{pcfdots.__version__}'
    )
    return parser


def _get_selection(args):
    """Map the selection flags to a code point selection."""
    if args.dry_run:
        return Selection.ASCII
    if args.gb2312_only:
        return Selection.GB2312
    return Selection.FULL


def _log_level(args):
    if args.debug:
        return logging.DEBUG
    if args.verbose:
        return logging.INFO
    return logging.WARNING


def main(argv=None):
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=_log_level(args), format='%(levelname)s: %(message)s', force=True
    )
    try:
        convert(
            args.input, args.output,
            family_name=args.family_name,
            pixel_height=args.glyph_size_in_pixel,
            dot_shape=args.font_style,
            selection=_get_selection(args),
            version=args.font_version,
            designer=args.font_designer,
            license=args.font_license,
            missing=args.missing,
            chart=args.chart,
            workers=args.workers,
        )
    except Exception as exc:
        # tracebacks only when debugging
        if args.debug:
            raise
        logging.error('Could not convert %s: %s', args.input, exc)
        sys.exit(1)
    logging.info('Wrote %s.', args.output)


if __name__ == '__main__':
    main()
