"""Tests for the ODT provider and its style resolution."""
import unittest

from office_renderer.config import ConverterSettings
from office_renderer.errors import ProviderError
from office_renderer.model.elements import Heading, ListItem, ListKind, Paragraph, Run, RunFormatting, Table
from office_renderer.providers.odt_provider import OdtProvider
from office_renderer.tests.builders import odt_bytes, zip_bytes

AUTOMATIC_STYLES = """
<style:style style:name="T1" style:family="text"><style:text-properties fo:font-weight="bold"/></style:style>
<style:style style:name="T2" style:family="text" style:parent-style-name="T1">
  <style:text-properties fo:font-style="italic" style:text-underline-style="solid"/>
</style:style>
<style:style style:name="P1" style:family="paragraph">
  <style:text-properties style:text-line-through-style="solid"/>
</style:style>
<text:list-style style:name="L1">
  <text:list-level-style-number text:level="1"/>
  <text:list-level-style-bullet text:level="2"/>
</text:list-style>
"""


class OdtProviderTest(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = OdtProvider()

    def test_spans_inherit_parent_styles(self) -> None:
        body = '<text:p>Plain <text:span text:style-name="T2">styled</text:span></text:p>'

        document = self.provider.parse(odt_bytes(body, AUTOMATIC_STYLES))

        self.assertEqual(
            document.blocks,
            (Paragraph(runs=(Run("Plain "), Run("styled", RunFormatting(bold=True, italic=True, underline=True)))),),
        )

    def test_paragraph_style_formatting_applies_to_runs(self) -> None:
        body = '<text:p text:style-name="P1">gone <text:span text:style-name="T1">bold</text:span></text:p>'

        runs = self.provider.parse(odt_bytes(body, AUTOMATIC_STYLES)).blocks[0].runs

        self.assertEqual(
            runs,
            (Run("gone ", RunFormatting(strikethrough=True)), Run("bold", RunFormatting(bold=True, strikethrough=True))),
        )

    def test_headings_use_outline_level(self) -> None:
        body = '<text:h text:outline-level="2">Section</text:h><text:h text:outline-level="10">Deep</text:h>'

        document = self.provider.parse(odt_bytes(body))

        self.assertEqual(
            document.blocks,
            (Heading(level=2, runs=(Run("Section"),)), Heading(level=6, runs=(Run("Deep"),))),
        )

    def test_heading_from_paragraph_style_in_styles_part(self) -> None:
        styles = '<style:style style:name="Title" style:family="paragraph" style:default-outline-level="1"/>'
        body = '<text:p text:style-name="Title">Report</text:p>'

        document = self.provider.parse(odt_bytes(body, styles=styles))

        self.assertEqual(document.blocks, (Heading(level=1, runs=(Run("Report"),)),))

    def test_nested_lists(self) -> None:
        body = (
            '<text:list text:style-name="L1">'
            "<text:list-item><text:p>first</text:p>"
            "<text:list><text:list-item><text:p>inner</text:p></text:list-item></text:list>"
            "</text:list-item>"
            "<text:list-item><text:p>second</text:p></text:list-item>"
            "</text:list>"
            "<text:list><text:list-item><text:p>loose</text:p></text:list-item></text:list>"
        )

        document = self.provider.parse(odt_bytes(body, AUTOMATIC_STYLES))

        self.assertEqual(
            document.blocks,
            (
                ListItem(runs=(Run("first"),), kind=ListKind.NUMBERED, depth=0),
                ListItem(runs=(Run("inner"),), kind=ListKind.BULLET, depth=1),
                ListItem(runs=(Run("second"),), kind=ListKind.NUMBERED, depth=0),
                ListItem(runs=(Run("loose"),), kind=ListKind.BULLET, depth=0),
            ),
        )

    def test_whitespace_and_inline_elements(self) -> None:
        body = (
            "<text:p>a\n   b<text:s text:c=\"3\"/>c<text:tab/>d<text:line-break/>e"
            '<text:note><text:note-body><text:p>footnote</text:p></text:note-body></text:note>'
            '<text:a xlink:href="https://example.com">link</text:a></text:p>'
        )

        runs = self.provider.parse(odt_bytes(body)).blocks[0].runs

        self.assertEqual(runs, (Run("a b   c\td\ne"), Run("link", hyperlink="https://example.com")))

    def test_table_repeats_and_padding(self) -> None:
        body = (
            "<table:table>"
            "<table:table-column/>"
            "<table:table-header-rows><table:table-row>"
            "<table:table-cell><text:p>H1</text:p></table:table-cell>"
            "<table:table-cell><text:p>H2</text:p></table:table-cell>"
            "<table:table-cell><text:p>H3</text:p></table:table-cell>"
            "</table:table-row></table:table-header-rows>"
            '<table:table-row table:number-rows-repeated="2">'
            '<table:table-cell table:number-columns-repeated="2"/>'
            "</table:table-row>"
            "<table:table-row>"
            '<table:table-cell table:number-columns-spanned="2"><text:p>span</text:p></table:table-cell>'
            "<table:covered-table-cell/>"
            "</table:table-row>"
            "</table:table>"
        )

        table = self.provider.parse(odt_bytes(body)).blocks[0]

        self.assertIsInstance(table, Table)
        self.assertEqual(len(table.rows), 4)
        self.assertEqual([len(row.cells) for row in table.rows], [3, 3, 3, 3])
        self.assertEqual(table.rows[3].cells[0].blocks, (Paragraph(runs=(Run("span"),)),))

    def test_repeat_counts_are_capped(self) -> None:
        provider = OdtProvider(ConverterSettings(max_repeat=4))
        body = (
            '<table:table><table:table-row table:number-rows-repeated="1048576">'
            '<table:table-cell table:number-columns-repeated="16384"/>'
            "</table:table-row></table:table>"
        )

        table = provider.parse(odt_bytes(body)).blocks[0]

        self.assertEqual(len(table.rows), 4)
        self.assertEqual(table.column_count, 4)

    def test_non_ascii_digit_attributes_fall_back(self) -> None:
        body = (
            '<text:h text:outline-level="\u00b2">Title</text:h>'
            '<text:p>a<text:s text:c="\u00b2"/>b</text:p>'
        )

        document = self.provider.parse(odt_bytes(body))

        self.assertEqual(
            document.blocks,
            (Heading(level=1, runs=(Run("Title"),)), Paragraph(runs=(Run("a b"),))),
        )

    def test_space_count_is_capped(self) -> None:
        provider = OdtProvider(ConverterSettings(max_repeat=4))

        document = provider.parse(odt_bytes('<text:p>a<text:s text:c="99999999"/>b</text:p>'))

        self.assertEqual(document.text_content(), "a    b")

    def test_deeply_nested_spans_are_rejected(self) -> None:
        body = "<text:p>" + "<text:span>" * 100 + "deep" + "</text:span>" * 100 + "</text:p>"

        with self.assertRaises(ProviderError) as ctx:
            self.provider.parse(odt_bytes(body))
        self.assertEqual(ctx.exception.code, "nesting_too_deep")

    def test_nested_tables_within_limit(self) -> None:
        body = "<text:p>x</text:p>"
        for _ in range(3):
            body = f"<table:table><table:table-row><table:table-cell>{body}</table:table-cell></table:table-row></table:table>"

        document = self.provider.parse(odt_bytes(body))

        self.assertEqual(document.text_content(), "x")

    def test_missing_content_part(self) -> None:
        with self.assertRaises(ProviderError) as ctx:
            self.provider.parse(zip_bytes({"mimetype": "application/vnd.oasis.opendocument.text"}))
        self.assertEqual(ctx.exception.code, "missing_part")


if __name__ == "__main__":
    unittest.main()
