"""
Hierarchical chunking.

Rebuilds the heading tree of an item and emits a root chunk plus one chunk
per section, each prefixed with a breadcrumb and followed by summaries of its
subsections.

Dependencies: re (stdlib)
System role: Strategy for deeply structured documents
"""

import re
from dataclasses import dataclass, field

from docindex.core.chunking.strategies.base import ChunkingStrategy
from docindex.core.chunking.text_utils import dash_case
from docindex.models.chunk import DocumentChunk
from docindex.models.parsed_content import ParsedContent

HEADING_LINE = re.compile(r"^(#{1,6})\s+(.+)$")
SIZE_THRESHOLD = 1000
MIN_CHILD_CONTENT = 100
SUMMARY_LENGTH = 100


@dataclass(eq=False)
class SectionNode:
    level: int
    title: str
    content: str = ""
    children: list["SectionNode"] = field(default_factory=list)
    parent: "SectionNode | None" = None

    def breadcrumb(self) -> str:
        path = [self.title]
        node = self.parent
        while node is not None:
            path.insert(0, node.title)
            node = node.parent
        return " > ".join(path)


def build_hierarchy(content: str) -> list[SectionNode]:
    """Top-level heading nodes; text before the first heading is discarded."""
    roots: list[SectionNode] = []
    stack: list[SectionNode] = []
    current: SectionNode | None = None

    for line in content.split("\n"):
        heading = HEADING_LINE.match(line)
        if not heading:
            if current is not None:
                current.content += line + "\n"
            continue

        level = len(heading.group(1))
        while stack and stack[-1].level >= level:
            stack.pop()
        parent = stack[-1] if stack else None
        node = SectionNode(level=level, title=heading.group(2).strip(), parent=parent)
        if parent is not None:
            parent.children.append(node)
        else:
            roots.append(node)
        stack.append(node)
        current = node

    return roots


class HierarchicalStrategy(ChunkingStrategy):
    """Preserve parent/child relationships between sections."""

    name = "hierarchical"

    def should_split(self, item: ParsedContent) -> bool:
        return "##" in item.content or len(item.content) > SIZE_THRESHOLD

    def split_logic(self, item: ParsedContent) -> list[DocumentChunk]:
        chunks = [self._root_chunk(item)]
        for node in build_hierarchy(item.content):
            chunks.extend(self._section_chunks(item, node))
        return chunks

    def _root_chunk(self, item: ParsedContent) -> DocumentChunk:
        content = f"# {item.name}\n\n{item.description}\n\n"
        preface = re.split(r"^#{1,6}\s+", item.content, maxsplit=1, flags=re.MULTILINE)[0].strip()
        if preface:
            content += preface
        return self.derive_chunk(item, content, "root", ["root", "hierarchy-root"])

    def _section_chunks(self, item: ParsedContent, node: SectionNode) -> list[DocumentChunk]:
        chunks = [self._section_chunk(item, node)]
        for child in node.children:
            if len(child.content) > MIN_CHILD_CONTENT or child.children:
                chunks.extend(self._section_chunks(item, child))
        return chunks

    def _section_chunk(self, item: ParsedContent, node: SectionNode) -> DocumentChunk:
        content = f"**Navigation**: {node.breadcrumb()}\n\n---\n\n"
        content += f"{'#' * node.level} {node.title}\n\n{node.content}"
        if node.children:
            content += "\n\n## Subsections\n\n"
            for child in node.children:
                content += f"- **{child.title}**: {child.content[:SUMMARY_LENGTH].strip()}...\n"

        slug = dash_case(node.title)
        return self.derive_chunk(item, content, slug, ["hierarchical", f"level-{node.level}", slug])
