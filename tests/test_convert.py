"""
pcfdots test suite
conversion and command-line tests
"""

import unittest

from fontTools.ttLib import TTFont
from fontTools.pens.recordingPen import RecordingPen

import pcfdots
from pcfdots import PcfFont, Selection, DotShape
from pcfdots.convert import select_glyphs, vectorize_glyphs, vectorize_font
from pcfdots.chart import chart_image
from pcfdots.sfnt import FontInfo, glyph_names
from pcfdots.vector import Grid, VectorGlyph, OutlinePath
from pcfdots.scripts import pcf2otf
from .base import (
    BaseTester, make_font, BE_FORMAT, GLYPH_A, GLYPH_DOT, GLYPH_ZHONG,
)


def _wide_font(**kwargs):
    """Font with glyphs in the first and the 0x4e rows."""
    return make_font(
        [GLYPH_A, GLYPH_DOT, GLYPH_ZHONG],
        min_byte2=0x20, max_byte2=0xff, min_byte1=0, max_byte1=0x4e,
        **kwargs
    )


class TestSelectGlyphs(BaseTester):
    """Test glyph selection on a parsed font."""

    def test_full(self):
        font = PcfFont(_wide_font())
        records = select_glyphs(font)
        self.assertEqual([_r.codepoint for _r in records], [0x2e, 0x41, 0x4e2d])

    def test_ascii(self):
        font = PcfFont(_wide_font())
        records = select_glyphs(font, Selection.ASCII)
        self.assertEqual([_r.codepoint for _r in records], [0x2e, 0x41])

    def test_gb2312(self):
        font = PcfFont(_wide_font())
        records = select_glyphs(font, 'gb2312')
        self.assertEqual([_r.codepoint for _r in records], [0x2e, 0x41, 0x4e2d])

    def test_missing_default(self):
        """Requested code points the font lacks get the default glyph."""
        font = PcfFont(_wide_font(default_char=0x2e))
        records = select_glyphs(font, Selection.ASCII, missing='default')
        self.assertEqual(len(records), 0x100 - 0x20)
        by_codepoint = {_r.codepoint: _r for _r in records}
        self.assertEqual(by_codepoint[0x42].index, 1)
        self.assertEqual(by_codepoint[0x42].name, '')
        self.assertEqual(by_codepoint[0x2e].name, 'period')
        self.assertEqual(by_codepoint[0x41].name, 'A')

    def test_missing_default_full(self):
        """The full selection requests nothing beyond the encoded glyphs."""
        font = PcfFont(_wide_font(default_char=0x2e))
        records = select_glyphs(font, Selection.FULL, missing='default')
        self.assertEqual(len(records), 3)

    def test_missing_policy(self):
        font = PcfFont(_wide_font())
        with self.assertRaises(ValueError):
            select_glyphs(font, missing='ignore')


class TestVectorizeFont(BaseTester):
    """Test font vectorization."""

    def test_notdef_first(self):
        font = PcfFont(_wide_font())
        glyphs, grid = vectorize_font(font, dot_shape='circle')
        self.assertEqual(grid.pixel_height, 13)
        self.assertEqual(
            [_g.name for _g in glyphs], ['.notdef', 'period', 'A', 'uni4E2D']
        )
        self.assertIsNone(glyphs[0].codepoint)
        self.assertEqual(len(glyphs[2].path), 20)

    def test_advance_widths(self):
        """Every glyph advances by its character width in pixels."""
        font = PcfFont(_wide_font())
        for height in (None, 16):
            glyphs, grid = vectorize_font(font, pixel_height=height)
            self.assertEqual(len(glyphs), 4)
            for glyph in glyphs[1:]:
                metrics = font.resolve(glyph.codepoint).metrics
                self.assertAlmostEqual(
                    glyph.advance_width, metrics.character_width * grid.pixel_size
                )

    def test_pixel_size_property(self):
        font = PcfFont(make_font([GLYPH_A], properties={'PIXEL_SIZE': 16}))
        _, grid = vectorize_font(font)
        self.assertEqual(grid.pixel_height, 16)
        _, grid = vectorize_font(font, pixel_height=12)
        self.assertEqual(grid.pixel_height, 12)

    def test_workers(self):
        font = PcfFont(_wide_font())
        records = select_glyphs(font)
        grid = Grid.create(13)
        serial = vectorize_glyphs(records, DotShape.SQUARE, grid)
        threaded = vectorize_glyphs(records, DotShape.SQUARE, grid, workers=3)
        self.assertEqual(
            [(_g.codepoint, _g.name, _g.advance_width, len(_g.path)) for _g in serial],
            [(_g.codepoint, _g.name, _g.advance_width, len(_g.path)) for _g in threaded],
        )

    def test_bit_order_warning(self):
        font = PcfFont(make_font([GLYPH_A], format=2))
        with self.assertLogs(level='WARNING'):
            vectorize_font(font)


class TestGlyphNames(BaseTester):
    """Test glyph naming for the font builder."""

    def test_unique(self):
        glyphs = [
            VectorGlyph(None, '.notdef', OutlinePath(), 0),
            VectorGlyph(0x41, 'A', OutlinePath(), 0),
            VectorGlyph(0x391, 'A', OutlinePath(), 0),
            VectorGlyph(0x42, '', OutlinePath(), 0),
            VectorGlyph(None, '', OutlinePath(), 0),
        ]
        self.assertEqual(
            glyph_names(glyphs), ['.notdef', 'A', 'A.1', 'uni0042', 'glyph4']
        )

    def test_font_info(self):
        info = FontInfo('WenQuanYi Dots', 'Circle Regular')
        self.assertEqual(info.full_name, 'WenQuanYi Dots Circle Regular')
        self.assertEqual(info.ps_name, 'WenQuanYiDots-CircleRegular')


class TestConvert(BaseTester):
    """Test writing OpenType fonts."""

    def test_convert(self):
        infile = self.write_font(_wide_font(format=BE_FORMAT))
        outfile = self.temp_path / 'test.otf'
        pcfdots.convert(infile, outfile, family_name='Test Dots')
        font = TTFont(outfile)
        self.assertIn('CFF ', font)
        self.assertEqual(font['head'].unitsPerEm, 1000)
        self.assertEqual(font.getGlyphOrder()[0], '.notdef')
        cmap = font.getBestCmap()
        self.assertEqual(cmap[0x41], 'A')
        self.assertEqual(cmap[0x4e2d], 'uni4E2D')
        self.assertNotIn(0x42, cmap)
        self.assertEqual(font['hmtx']['A'][0], 385)
        self.assertEqual(font['hmtx']['.notdef'][0], 615)
        self.assertEqual(font['hhea'].ascent, 769)
        self.assertEqual(font['hhea'].descent, -231)
        self.assertEqual(font['name'].getDebugName(1), 'Test Dots')
        self.assertEqual(font['name'].getDebugName(2), 'Square Regular')
        self.assertEqual(font['name'].getDebugName(9), 'wixette')
        pen = RecordingPen()
        font.getGlyphSet()['A'].draw(pen)
        self.assertEqual(sum(1 for _op, _ in pen.value if _op == 'moveTo'), 20)

    def test_convert_options(self):
        infile = self.write_font(make_font([GLYPH_A, GLYPH_DOT]))
        outfile = self.temp_path / 'test.otf'
        pcfdots.convert(
            infile, outfile, family_name='Test', dot_shape='diamond',
            pixel_height=16, selection='ascii', version='1.5',
            designer='Someone', license='OFL',
        )
        font = TTFont(outfile)
        self.assertEqual(font['name'].getDebugName(2), 'Diamond Regular')
        self.assertEqual(font['name'].getDebugName(9), 'Someone')
        self.assertEqual(font['hmtx']['A'][0], 313)
        self.assertAlmostEqual(font['head'].fontRevision, 1.5)

    def test_chart(self):
        infile = self.write_font(make_font([GLYPH_A, GLYPH_DOT]))
        chart = self.temp_path / 'chart.png'
        pcfdots.convert(
            infile, self.temp_path / 'test.otf', family_name='Test', chart=chart
        )
        self.assertTrue(chart.exists())

    def test_chart_image(self):
        font = PcfFont(make_font([GLYPH_A, GLYPH_DOT]))
        image = chart_image(select_glyphs(font), scale=1)
        # two cells of 5+2 by 8+2 pixels plus margin
        self.assertEqual(image.size, (16, 12))
        # top left of the 'period' cell, then of the 'A' cell
        self.assertEqual(image.getpixel((2, 2)), 0)
        self.assertEqual(image.getpixel((9, 2)), 0)
        self.assertEqual(image.getpixel((10, 2)), 255)


class TestCommandLine(BaseTester):
    """Test the pcf2otf script."""

    def test_main(self):
        infile = self.write_font(_wide_font())
        outfile = self.temp_path / 'test.otf'
        pcf2otf.main([
            '-i', str(infile), '-o', str(outfile), '-f', 'Test',
            '-s', 'circle', '-p', '16', '-d',
        ])
        font = TTFont(outfile)
        self.assertEqual(font['name'].getDebugName(2), 'Circle Regular')
        self.assertNotIn(0x4e2d, font.getBestCmap())

    def test_gb2312(self):
        infile = self.write_font(_wide_font())
        outfile = self.temp_path / 'test.otf'
        pcf2otf.main(['-i', str(infile), '-o', str(outfile), '-f', 'Test', '-g'])
        self.assertIn(0x4e2d, TTFont(outfile).getBestCmap())

    def test_bad_input(self):
        infile = self.write_font(b'not a font')
        with self.assertRaises(SystemExit) as cm:
            pcf2otf.main([
                '-i', str(infile), '-o', str(self.temp_path / 'test.otf'), '-f', 'Test',
            ])
        self.assertEqual(cm.exception.code, 1)

    def test_bad_input_debug(self):
        """With --debug the error propagates."""
        infile = self.write_font(b'not a font')
        with self.assertRaises(pcfdots.FormatError):
            pcf2otf.main([
                '-i', str(infile), '-o', str(self.temp_path / 'test.otf'),
                '-f', 'Test', '--debug',
            ])
        self.assertFalse((self.temp_path / 'test.otf').exists())

    def test_bad_pixel_size(self):
        with self.assertRaises(SystemExit):
            pcf2otf.main(['-i', 'x.pcf', '-o', 'x.otf', '-f', 'Test', '-p', '0'])

    def test_selection_flags(self):
        parser = pcf2otf.create_parser()
        args = parser.parse_args(['-i', 'x', '-o', 'y', '-f', 'z', '-d', '-g'])
        self.assertEqual(pcf2otf._get_selection(args), Selection.ASCII)
        args = parser.parse_args(['-i', 'x', '-o', 'y', '-f', 'z'])
        self.assertEqual(pcf2otf._get_selection(args), Selection.FULL)
        self.assertIsNone(args.glyph_size_in_pixel)
        self.assertEqual(args.font_style, 'square')


if __name__ == '__main__':
    unittest.main()
