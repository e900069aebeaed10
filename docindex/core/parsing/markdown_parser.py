"""
Markdown / MDX documentation parser.

Splits prose documentation with YAML front-matter into heading sections
and fenced code blocks, then emits either one tutorial item (workflow
documents) or one example item per section.

Dependencies: PyYAML, pydantic, re (stdlib)
System role: First stage of the indexing pipeline for guides and tutorials
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import PurePath
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from docindex.core.exceptions import ParseError
from docindex.models.chunk import ChunkMetadata, Importance, unique_ordered
from docindex.models.parsed_content import CodeExample, ParsedContent

logger = logging.getLogger(__name__)

FRONT_MATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
FENCE_PATTERN = re.compile(r"^```(\w+)?(.*)$")
FENCED_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
STEP_TITLE_PATTERN = re.compile(r"step|krok|\d+\.", re.IGNORECASE)
PREREQUISITE_PATTERN = re.compile(r"(?:prerequisites?|requirements?|before|needed):?\s*(.+)", re.IGNORECASE)
USE_CASE_PATTERN = re.compile(r"(?:use case|usage|when to use|good for):?\s*(.+)", re.IGNORECASE)


def _as_text(value: Any) -> Any:
    # YAML turns bare numbers and dates into non-strings
    if isinstance(value, (int, float, date)):
        return str(value)
    return value


class FrontMatter(BaseModel):
    """Recognised front-matter keys; scalars are coerced to text, single values to lists."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    description: str | None = None
    category: str | None = None
    difficulty: str | None = None
    workflow: bool = False
    tags: list[str] = Field(default_factory=list)
    related_methods: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("related_methods", "relatedMethods"),
    )

    @field_validator("title", "description", "category", "difficulty", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _as_text(value)

    @field_validator("workflow", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("tags", "related_methods", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [_as_text(item) for item in value if item is not None]
        if isinstance(value, (str, int, float, date)):
            return [_as_text(value)]
        return value


@dataclass
class CodeBlock:
    language: str
    code: str = ""
    info: str = ""
    line_start: int = 0


@dataclass
class HeadingSection:
    level: int
    title: str
    line_start: int
    body_lines: list[str] = field(default_factory=list)
    code_blocks: list[CodeBlock] = field(default_factory=list)

    @property
    def body(self) -> str:
        return "\n".join(self.body_lines).strip()


class MarkdownParser:
    """Parse markdown and MDX documents with front-matter."""

    def parse_file(self, content: str, filename: str) -> list[ParsedContent]:
        """
        Parse one markdown document.

        Args:
            content: Raw file text including optional front-matter
            filename: Source file name recorded in metadata

        Returns:
            list[ParsedContent]: One tutorial item for workflows, else one item per section

        Raises:
            ParseError: When the front-matter is not a valid YAML mapping of
                recognised value types
        """
        front_matter, body, body_offset = self._split_front_matter(content, filename)
        sections = self._extract_sections(body, body_offset)

        if not sections:
            title = front_matter.title or PurePath(filename).stem
            sections = [HeadingSection(level=1, title=title, line_start=body_offset + 1, body_lines=body.splitlines())]

        try:
            if front_matter.workflow:
                items = [self._parse_workflow(sections, front_matter, filename)]
            else:
                items = [self._parse_section(section, front_matter, filename) for section in sections]
        except ValidationError as e:
            raise ParseError("Malformed document", source=filename, details={"errors": e.error_count()}) from e

        logger.info(
            f"{__name__}:parse_file - Parsed {len(items)} items",
            extra={"source_file": filename, "workflow": front_matter.workflow},
        )
        return items

    def _split_front_matter(self, content: str, filename: str) -> tuple[FrontMatter, str, int]:
        match = FRONT_MATTER_PATTERN.match(content)
        if not match:
            return FrontMatter(), content, 0
        try:
            data = yaml.safe_load(match.group(1)) or {}
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid front-matter: {e}", source=filename) from e
        if not isinstance(data, dict):
            raise ParseError("Front-matter must be a mapping", source=filename)
        try:
            front_matter = FrontMatter.model_validate(data)
        except ValidationError as e:
            raise ParseError(
                "Invalid front-matter values",
                source=filename,
                details={"fields": sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})},
            ) from e
        offset = content[: match.end()].count("\n")
        return front_matter, content[match.end():], offset

    @staticmethod
    def _extract_sections(body: str, line_offset: int) -> list[HeadingSection]:
        sections: list[HeadingSection] = []
        current: HeadingSection | None = None
        block: CodeBlock | None = None

        for index, line in enumerate(body.split("\n")):
            line_number = line_offset + index + 1
            heading = HEADING_PATTERN.match(line)
            if heading and block is None:
                current = HeadingSection(
                    level=len(heading.group(1)),
                    title=heading.group(2).strip(),
                    line_start=line_number,
                )
                sections.append(current)
                continue

            fence = FENCE_PATTERN.match(line)
            if fence:
                if block is None:
                    block = CodeBlock(
                        language=fence.group(1) or "text",
                        info=fence.group(2).strip(),
                        line_start=line_number,
                    )
                else:
                    if current is not None:
                        current.code_blocks.append(block)
                    block = None
            elif block is not None:
                block.code += ("\n" if block.code else "") + line

            if current is not None:
                current.body_lines.append(line)

        return sections

    def _parse_section(
        self,
        section: HeadingSection,
        front_matter: FrontMatter,
        filename: str,
    ) -> ParsedContent:
        examples = [
            CodeExample(
                language=block.language,
                code=block.code,
                explanation=block.info or f"Example code from {section.title}",
                title=f"{section.title} - {block.language} example",
            )
            for block in section.code_blocks
        ]
        metadata = ChunkMetadata(
            type="example",
            namespace=front_matter.category or "general",
            importance=self._importance(front_matter),
            tags=self._tags(front_matter, filename),
            source_file=filename,
            line_number=section.line_start,
            related_methods=self._related_methods(front_matter),
            use_cases=[m.strip() for m in USE_CASE_PATTERN.findall(section.body)],
        )
        return ParsedContent(
            type="example",
            name=section.title,
            description=self._first_paragraph(section.body),
            content=self._section_content(section, front_matter),
            metadata=metadata,
            examples=examples,
        )

    def _parse_workflow(
        self,
        sections: list[HeadingSection],
        front_matter: FrontMatter,
        filename: str,
    ) -> ParsedContent:
        steps = [
            s for s in sections
            if 2 <= s.level <= 3 and (STEP_TITLE_PATTERN.search(s.title) or s.code_blocks)
        ]
        title = front_matter.title or PurePath(filename).stem
        parts = [front_matter.description or "Complete workflow tutorial"]
        if front_matter.difficulty:
            parts.append(f"**Difficulty:** {front_matter.difficulty}")
        parts.append(f"## Overview\n\nThis tutorial provides a step-by-step guide to {title.lower()}.")

        for number, step in enumerate(steps, start=1):
            lines = [f"## Step {number}: {step.title}", "", self._step_description(step.body)]
            if step.code_blocks:
                code = step.code_blocks[0]
                lines += ["", "### Code Example", f"```{code.language}", code.code, "```", code.info or f"Code for {step.title}"]
            prerequisites = self._prerequisites(step.body)
            if prerequisites:
                lines += ["", "### Prerequisites", *[f"- {p}" for p in prerequisites]]
            parts.append("\n".join(lines))

        next_hint = (
            f"Next, you might want to explore: {steps[-1].title}"
            if steps else "You can now apply these techniques to your own projects."
        )
        parts.append(f"## Summary\n\nYou have completed the {title} workflow. {next_hint}")

        metadata = ChunkMetadata(
            type="tutorial",
            namespace=front_matter.category or "workflows",
            importance=self._importance(front_matter),
            tags=self._tags(front_matter, filename),
            source_file=filename,
            related_methods=self._related_methods(front_matter),
        )
        return ParsedContent(
            type="example",
            name=title,
            description=front_matter.description or f"Step-by-step workflow: {title}",
            content="\n\n".join(parts),
            metadata=metadata,
        )

    def _section_content(self, section: HeadingSection, front_matter: FrontMatter) -> str:
        parts = []
        if front_matter.difficulty:
            parts.append(f"**Difficulty:** {front_matter.difficulty}")
        if front_matter.category:
            parts.append(f"**Category:** {front_matter.category}")
        prose = FENCED_BLOCK_PATTERN.sub("", section.body).strip()
        if prose:
            parts.append(prose)
        related = self._related_methods(front_matter)
        if related:
            parts.append(f"## Related Information\n\n**Related methods:** {', '.join(related)}")
        return "\n\n".join(parts)

    @staticmethod
    def _first_paragraph(body: str) -> str:
        for line in body.split("\n"):
            if line.strip() and not line.startswith("#") and not line.startswith("```"):
                return line.strip()
        return "Documentation section"

    @staticmethod
    def _step_description(body: str) -> str:
        lines = [
            line for line in FENCED_BLOCK_PATTERN.sub("", body).split("\n")
            if line.strip() and not line.startswith("#")
        ]
        text = " ".join(lines[:3])
        return text[:200] + ("..." if len(text) > 200 else "")

    @staticmethod
    def _prerequisites(body: str) -> list[str]:
        match = PREREQUISITE_PATTERN.search(body)
        if not match:
            return []
        return [p.strip() for p in re.split(r"[,;]", match.group(1)) if p.strip()]

    @staticmethod
    def _importance(front_matter: FrontMatter) -> Importance:
        difficulty = front_matter.difficulty
        if difficulty == "beginner":
            return "critical"
        if difficulty == "intermediate" or front_matter.workflow:
            return "high"
        return "medium"

    @staticmethod
    def _related_methods(front_matter: FrontMatter) -> list[str]:
        return list(front_matter.related_methods)

    @staticmethod
    def _tags(front_matter: FrontMatter, filename: str) -> list[str]:
        tags = list(front_matter.tags)
        if front_matter.category:
            tags.append(front_matter.category)
        if front_matter.difficulty:
            tags.append(front_matter.difficulty)
        stem = re.sub(r"\.mdx?$", "", PurePath(filename).name)
        tags.append(re.sub(r"[_-]", " ", stem).lower())
        if front_matter.workflow:
            tags += ["workflow", "tutorial"]
        else:
            tags += ["example", "guide"]
        return unique_ordered(tags)
