"""Entry-point for the office document to HTML pipeline."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from office_renderer.config import ConverterSettings
from office_renderer.converter import DocumentConverter, resolve_document_type
from office_renderer.detection import document_type_from_url
from office_renderer.errors import ConversionError, UnsupportedFormatError
from office_renderer.providers.base import DocumentType
from office_renderer.utils.debug import DebugDumper
from office_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)


def detect_input_type(input_path: Path, declared: Optional[str] = None) -> DocumentType:
    """Use the declared type when given, otherwise the file extension."""
    if declared:
        return resolve_document_type(declared)
    doc_type = document_type_from_url(input_path.name)
    if doc_type is None:
        raise UnsupportedFormatError(input_path.suffix or input_path.name)
    return doc_type


def main(
    input_file: str,
    output_file: Optional[str] = None,
    doc_type: Optional[str] = None,
    debug_dir: Optional[str] = None,
) -> Path:
    """Run the document -> Document Model -> HTML pipeline and return the output path."""
    input_path = Path(input_file).resolve()
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    resolved_type = detect_input_type(input_path, doc_type)
    converter = DocumentConverter(ConverterSettings.from_env())

    LOGGER.info("Converting %s as %s", input_path.name, resolved_type.value)
    data = input_path.read_bytes()
    document = converter.convert_to_document(data, resolved_type)
    html = converter.render_document(document)

    output_path = Path(output_file).resolve() if output_file else input_path.with_suffix(".html")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    LOGGER.info("Wrote %s", output_path)

    if debug_dir:
        DebugDumper(Path(debug_dir)).dump(document)
    return output_path


def cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Convert DOCX, ODT and RTF documents into HTML")
    parser.add_argument("input_file", help="Path to the input document")
    parser.add_argument("--output", help="Path of the HTML file to write")
    parser.add_argument("--type", dest="doc_type", help="Document type (docx, odt, rtf); defaults to the extension")
    parser.add_argument("--debug-dir", help="Directory to dump the intermediate document model")

    args = parser.parse_args(argv)
    try:
        main(args.input_file, args.output, args.doc_type, args.debug_dir)
    except (ConversionError, FileNotFoundError) as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(cli())
