"""Tests for numbering parser behavior."""
import unittest
from xml.etree import ElementTree as ET

from office_renderer.model.elements import ListKind
from office_renderer.parser.numbering_parser import NumberingParser


NUMBERING_XML = """
<w:numbering xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:abstractNum w:abstractNumId="1">
    <w:multiLevelType w:val="multilevel"/>
    <w:name w:val="List Bullet"/>
    <w:lvl w:ilvl="0">
      <w:start w:val="1"/>
      <w:numFmt w:val="bullet"/>
      <w:lvlText w:val="\u2022"/>
      <w:lvlJc w:val="left"/>
      <w:pPr>
        <w:ind w:left="720" w:hanging="360"/>
      </w:pPr>
    </w:lvl>
    <w:lvl w:ilvl="1">
      <w:start w:val="1"/>
      <w:numFmt w:val="decimal"/>
      <w:lvlText w:val="%2."/>
    </w:lvl>
  </w:abstractNum>
  <w:num w:numId="5">
    <w:abstractNumId w:val="1"/>
    <w:lvlOverride w:ilvl="0">
      <w:startOverride w:val="3"/>
    </w:lvlOverride>
  </w:num>
</w:numbering>
"""


class NumberingParserTest(unittest.TestCase):
    """Ensure numbering parser captures definitions correctly."""

    def setUp(self) -> None:
        self.tree = ET.ElementTree(ET.fromstring(NUMBERING_XML))
        self.catalog = NumberingParser(self.tree).parse()

    def test_abstracts_parsed(self) -> None:
        abstract = self.catalog.get_abstract(1)
        self.assertIsNotNone(abstract)
        assert abstract
        self.assertIn(0, abstract.levels)
        level0 = abstract.levels[0]
        self.assertEqual(level0.num_format, "bullet")
        self.assertEqual(abstract.levels[1].num_format, "decimal")

    def test_instances_and_overrides(self) -> None:
        instance = self.catalog.get_instance(5)
        self.assertIsNotNone(instance)
        assert instance
        self.assertEqual(instance.abstract_num_id, 1)
        self.assertIn(0, instance.overrides)
        self.assertIsNone(instance.overrides[0].level)

    def test_list_kind_per_level(self) -> None:
        self.assertIs(self.catalog.list_kind(5, 0), ListKind.BULLET)
        self.assertIs(self.catalog.list_kind(5, 1), ListKind.NUMBERED)

    def test_unknown_definitions_fall_back_to_bullets(self) -> None:
        self.assertIs(self.catalog.list_kind(42, 0), ListKind.BULLET)
        self.assertIs(self.catalog.list_kind(5, 7), ListKind.BULLET)
        self.assertIs(NumberingParser(None).parse().list_kind(1, 0), ListKind.BULLET)

    def test_level_override_replaces_format(self) -> None:
        xml = """
        <w:numbering xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
          <w:abstractNum w:abstractNumId="0"><w:lvl w:ilvl="0"><w:numFmt w:val="bullet"/></w:lvl></w:abstractNum>
          <w:num w:numId="1">
            <w:abstractNumId w:val="0"/>
            <w:lvlOverride w:ilvl="0"><w:lvl w:ilvl="0"><w:numFmt w:val="lowerRoman"/></w:lvl></w:lvlOverride>
          </w:num>
        </w:numbering>
        """
        catalog = NumberingParser(ET.ElementTree(ET.fromstring(xml))).parse()
        self.assertIs(catalog.list_kind(1, 0), ListKind.NUMBERED)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
