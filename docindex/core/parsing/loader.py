"""
Corpus loader.

Routes each (filename, text) source to the matching parser by extension and
collects the parsed items. A malformed document is logged and skipped so one
bad file never aborts a corpus run.

Dependencies: pydantic
System role: Entry point of the indexing pipeline
"""

import logging
from collections.abc import Iterable
from pathlib import PurePath

from pydantic import BaseModel, Field

from docindex.core.exceptions import ParseError
from docindex.core.parsing.json_parser import JsonApiParser
from docindex.core.parsing.markdown_parser import MarkdownParser
from docindex.models.parsed_content import ParsedContent
from docindex.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".mdx")


class ParseReport(BaseModel):
    """Items parsed from a corpus plus the sources that were skipped."""

    items: list[ParsedContent] = Field(default_factory=list)
    failed_sources: dict[str, str] = Field(default_factory=dict, description="filename -> error message")


def parse_documents(sources: Iterable[tuple[str, str]]) -> ParseReport:
    """
    Parse a corpus of documentation sources.

    Args:
        sources: (filename, text) pairs; .json is parsed as an API spec,
            .md/.mdx as markdown

    Returns:
        ParseReport: Parsed items in source order and skipped sources
    """
    report = ParseReport()
    markdown = MarkdownParser()

    for filename, text in sources:
        suffix = PurePath(filename).suffix.lower()
        try:
            if suffix == ".json":
                items = JsonApiParser(source_file=filename).parse_spec(text)
            elif suffix in MARKDOWN_SUFFIXES:
                items = markdown.parse_file(text, filename)
            else:
                raise ParseError(f"Unsupported document type: {suffix or 'none'}", source=filename)
        except ParseError as e:
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:parse_documents - Skipping {filename}: {e.message}",
                source_file=filename,
                error_details=e.details,
            )
            report.failed_sources[filename] = e.message
            continue
        report.items.extend(items)

    logger.info(
        f"{__name__}:parse_documents - Parsed corpus",
        extra={"items": len(report.items), "failed": len(report.failed_sources)},
    )
    return report
