"""
Text helpers shared by chunking strategies and the optimizer.

Dependencies: hashlib, re (stdlib)
System role: Markdown section scanning, similarity, and hashing primitives
"""

import hashlib
import re
from dataclasses import dataclass

METHOD_HEADING_PATTERN = re.compile(r"^(#{2,3})\s+([a-zA-Z][a-zA-Z0-9_]*)\s*\([^)]*\)", re.MULTILINE)
SECTION_HEADING_PATTERN = re.compile(r"^(#{1,3})\s+(.+)$", re.MULTILINE)
ANY_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$", re.MULTILINE)
PARAGRAPH_BREAK_PATTERN = re.compile(r"\n\s*\n")


@dataclass
class MarkdownBlock:
    """A heading-delimited slice of markdown."""

    title: str
    level: int
    content: str


def slugify(text: str) -> str:
    """Replace every non-alphanumeric character with '-' and lowercase."""
    return re.sub(r"[^a-zA-Z0-9]", "-", text).lower()


def dash_case(text: str) -> str:
    """Lowercase and join whitespace-separated words with '-'."""
    return re.sub(r"\s+", "-", text.strip().lower())


def word_set(text: str) -> set[str]:
    return set(text.lower().split())


def jaccard(a: str, b: str) -> float:
    """Jaccard similarity of the lowercased whitespace-split word sets."""
    words_a, words_b = word_set(a), word_set(b)
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def normalized_hash(text: str) -> str:
    """sha256 of lowercased text with collapsed whitespace and no punctuation."""
    normalized = re.sub(r"\s+", " ", text.lower())
    normalized = re.sub(r"[^\w\s]", "", normalized).strip()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def split_on_headings(content: str, pattern: re.Pattern[str] = ANY_HEADING_PATTERN) -> list[MarkdownBlock]:
    """
    Slice content at every heading matched by pattern.

    Text before the first heading is not included.
    """
    matches = list(pattern.finditer(content))
    blocks = []
    for index, match in enumerate(matches):
        end = matches[index + 1].start() if index + 1 < len(matches) else len(content)
        blocks.append(
            MarkdownBlock(
                title=match.group(2).strip(),
                level=len(match.group(1)),
                content=content[match.start():end].strip(),
            )
        )
    return blocks


def count_methods(content: str) -> int:
    return len(METHOD_HEADING_PATTERN.findall(content))


def count_sections(content: str) -> int:
    return len(SECTION_HEADING_PATTERN.findall(content))


def extract_section(content: str, section_name: str) -> str | None:
    """Body of the h2/h3 section titled section_name, up to the next h2/h3."""
    heading = re.search(rf"^#{{2,3}}\s+{re.escape(section_name)}\s*$", content, re.MULTILINE | re.IGNORECASE)
    if not heading:
        return None
    following = re.compile(r"^#{2,3}\s+", re.MULTILINE).search(content, heading.end())
    end = following.start() if following else len(content)
    return content[heading.end():end].strip()


def heading_boundaries(content: str) -> list[str]:
    """Heading-delimited sections, falling back to blank-line paragraphs."""
    matches = list(ANY_HEADING_PATTERN.finditer(content))
    if not matches:
        return [p for p in PARAGRAPH_BREAK_PATTERN.split(content) if p.strip()]

    boundaries = []
    preface = content[: matches[0].start()].strip()
    if preface:
        boundaries.append(preface)
    boundaries.extend(block.content for block in split_on_headings(content))
    return boundaries


def overlap_tail(text: str, overlap_size: int) -> str:
    """
    Last overlap_size characters of text, trimmed to start after a sentence end.

    The sentence trim only applies when the '. ' lies past the midpoint of the tail.
    """
    if overlap_size <= 0:
        return ""
    if len(text) <= overlap_size:
        return text
    tail = text[-overlap_size:]
    sentence_end = tail.rfind(". ")
    if sentence_end > overlap_size / 2:
        return tail[sentence_end + 2:]
    return tail


def hard_split(text: str, max_size: int) -> list[str]:
    """
    Cut text into pieces no longer than max_size.

    Prefers the last '. ' then the last newline before max_size, as long as
    the cut lands past max_size / 2.
    """
    pieces = []
    remaining = text
    while len(remaining) > max_size:
        window = remaining[:max_size]
        cut = window.rfind(". ")
        if cut > max_size / 2:
            cut += 1
        else:
            cut = window.rfind("\n")
            if cut <= max_size / 2:
                cut = max_size
        pieces.append(remaining[:cut].rstrip())
        remaining = remaining[cut:].lstrip()
    if remaining.strip():
        pieces.append(remaining)
    return [piece for piece in pieces if piece.strip()]
