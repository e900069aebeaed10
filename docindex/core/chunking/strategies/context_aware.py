"""
Context-aware chunking.

Groups related content instead of cutting blindly: class methods are grouped
by functionality, long tutorials by top-level sections, and anything else is
split at header or paragraph boundaries with overlap.

Dependencies: langchain_text_splitters
System role: Strategy for large classes and multi-section guides
"""

import re

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docindex.core.chunking.strategies.base import ChunkingStrategy, single_chunk
from docindex.core.chunking.text_utils import (
    METHOD_HEADING_PATTERN,
    SECTION_HEADING_PATTERN,
    MarkdownBlock,
    count_methods,
    count_sections,
    dash_case,
    extract_section,
    split_on_headings,
)
from docindex.models.chunk import DocumentChunk
from docindex.models.parsed_content import ParsedContent

SIZE_THRESHOLD = 2000
METHOD_THRESHOLD = 5
SECTION_THRESHOLD = 3
CONTEXTUAL_CHUNK_SIZE = 1500
CONTEXTUAL_OVERLAP = 200
MIN_INTRODUCTION = 50

GROUP_ORDER = ("CRUD Operations", "Communication", "Authentication", "Configuration", "Utilities")

GROUP_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("CRUD Operations", ("create", "get", "update", "delete", "list", "find")),
    ("Communication", ("send", "receive", "message", "notify")),
    ("Authentication", ("login", "auth", "connect", "disconnect")),
    ("Configuration", ("config", "setting", "setup", "init")),
]

GROUP_DESCRIPTIONS = {
    "CRUD Operations": "These methods handle basic data operations: creating, reading, updating, and deleting resources.",
    "Communication": "These methods handle message sending, receiving, and communication between users.",
    "Authentication": "These methods handle user authentication, connections, and session management.",
    "Configuration": "These methods handle configuration, setup, and initialization tasks.",
    "Utilities": "These utility methods provide additional functionality and support operations.",
}

GROUP_NOTES = {
    "CRUD Operations": [
        "Always check permissions before performing operations",
        "Handle errors appropriately for each operation",
        "Consider pagination for list operations",
    ],
    "Communication": [
        "Validate message content before sending",
        "Handle offline recipients gracefully",
        "Implement proper error handling for network issues",
    ],
    "Authentication": [
        "Always validate credentials securely",
        "Implement proper session management",
        "Handle connection timeouts appropriately",
    ],
}

GROUP_USE_CASES = {
    "CRUD Operations": ["Data management", "Resource administration", "Content manipulation"],
    "Communication": ["Real-time messaging", "Notifications", "Team collaboration"],
    "Authentication": ["User login", "Session management", "Security validation"],
    "Configuration": ["System setup", "Settings management", "Initialization"],
    "Utilities": ["General utilities", "Helper operations", "Support functions"],
}


def categorize_method(method_name: str) -> str:
    lowered = method_name.lower()
    for group, keywords in GROUP_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return group
    return "Utilities"


class ContextAwareStrategy(ChunkingStrategy):
    """Split along semantic groupings rather than fixed sizes."""

    name = "context-aware"

    def __init__(
        self,
        chunk_size: int = CONTEXTUAL_CHUNK_SIZE,
        chunk_overlap: int = CONTEXTUAL_OVERLAP,
    ) -> None:
        """
        Initialize strategy with the contextual splitter.

        Args:
            chunk_size: Maximum size of contextual pieces
            chunk_overlap: Characters shared by consecutive pieces
        """
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=["\n# ", "\n## ", "\n### ", "\n#### ", "\n\n", "\n", " ", ""],
            keep_separator=True,
            length_function=len,
        )

    def should_split(self, item: ParsedContent) -> bool:
        if len(item.content) > SIZE_THRESHOLD:
            return True
        if item.type == "class" and count_methods(item.content) > METHOD_THRESHOLD:
            return True
        if item.type == "example" and "##" in item.content:
            return count_sections(item.content) > SECTION_THRESHOLD
        return False

    def split_logic(self, item: ParsedContent) -> list[DocumentChunk]:
        if item.type == "class":
            return self._split_class_by_functionality(item)
        if item.type == "example":
            return self._split_tutorial_by_sections(item)
        return self._split_by_contextual_boundaries(item)

    def _split_class_by_functionality(self, item: ParsedContent) -> list[DocumentChunk]:
        groups: dict[str, list[MarkdownBlock]] = {name: [] for name in GROUP_ORDER}
        for block in split_on_headings(item.content, METHOD_HEADING_PATTERN):
            groups[categorize_method(block.title)].append(block)

        chunks = [self._class_overview_chunk(item)]
        for group_name, methods in groups.items():
            if methods:
                chunks.append(self._functional_group_chunk(item, group_name, methods))
        return chunks

    def _class_overview_chunk(self, item: ParsedContent) -> DocumentChunk:
        content = f"# {item.name} Class Overview\n\n{item.description}\n\n"
        content += f"**Namespace**: {item.metadata.namespace}\n"
        content += f"**Importance**: {item.metadata.importance}\n\n"
        for section_name in ("Overview", "Constructor", "Properties", "Events"):
            section = extract_section(item.content, section_name)
            if section:
                content += f"## {section_name}\n\n{section}\n\n"
        return self.derive_chunk(item, content, "overview", ["overview", "class-structure"], type="class")

    def _functional_group_chunk(
        self,
        item: ParsedContent,
        group_name: str,
        methods: list[MarkdownBlock],
    ) -> DocumentChunk:
        class_name = item.name
        group_slug = dash_case(group_name)

        content = f"# {class_name} - {group_name}\n\n"
        content += f"This section covers {group_name.lower()} methods for the **{class_name}** class.\n\n"
        content += f"{GROUP_DESCRIPTIONS[group_name]}\n\n"
        for method in methods:
            content += f"{method.content}\n\n---\n\n"
        content += "## Related Information\n\n"
        content += "".join(f"- {note}\n" for note in GROUP_NOTES.get(group_name, []))

        return self.derive_chunk(
            item,
            content,
            group_slug,
            ["functional-group", group_slug, *[m.title.lower() for m in methods]],
            type="method",
            class_name=class_name,
            related_methods=[f"{class_name}.{m.title}" for m in methods],
            use_cases=GROUP_USE_CASES[group_name],
        )

    def _split_tutorial_by_sections(self, item: ParsedContent) -> list[DocumentChunk]:
        chunks = []
        introduction = self._introduction_chunk(item)
        if introduction is not None:
            chunks.append(introduction)

        groups: list[list[MarkdownBlock]] = []
        for section in split_on_headings(item.content, SECTION_HEADING_PATTERN):
            if section.level <= 2 or not groups:
                groups.append([section])
            else:
                groups[-1].append(section)

        for group in groups:
            title = group[0].title
            body = "\n\n---\n\n".join(section.content for section in group)
            content = f"# {item.name} - {title}\n\n{body}\n\n"
            chunks.append(self.derive_chunk(item, content, dash_case(title), ["tutorial-section", dash_case(title)]))
        return chunks

    def _introduction_chunk(self, item: ParsedContent) -> DocumentChunk | None:
        first_heading = re.search(r"^#{1,3}\s+", item.content, re.MULTILINE)
        if not first_heading:
            return None
        introduction = item.content[: first_heading.start()].strip()
        if len(introduction) < MIN_INTRODUCTION:
            return None
        content = f"# {item.name} - Introduction\n\n{item.description}\n\n{introduction}"
        return self.derive_chunk(item, content, "introduction", ["introduction", "getting-started"])

    def _split_by_contextual_boundaries(self, item: ParsedContent) -> list[DocumentChunk]:
        pieces = [piece for piece in self._splitter.split_text(item.content) if piece.strip()]
        if not pieces:
            return [single_chunk(item)]

        chunks = []
        for index, piece in enumerate(pieces):
            content = piece.strip()
            if content.startswith("#"):
                content = f"# {item.name} - Part {index + 1}\n\n{content}"
            chunks.append(self.derive_chunk(item, content, f"part-{index}", ["contextual-chunk", f"part-{index}"]))
        return chunks
