"""Documentation parsers producing ParsedContent items."""

from docindex.core.parsing.json_parser import JsonApiParser
from docindex.core.parsing.loader import ParseReport, parse_documents
from docindex.core.parsing.markdown_parser import MarkdownParser

__all__ = [
    "JsonApiParser",
    "MarkdownParser",
    "ParseReport",
    "parse_documents",
]
