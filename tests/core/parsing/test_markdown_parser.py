"""
Test suite for MarkdownParser.

Tests front-matter handling, section extraction, workflow tutorials, and
rejection of malformed front-matter.

System role: Verification of markdown guide parsing
"""

import pytest

from docindex.core.exceptions import ParseError
from docindex.core.parsing.markdown_parser import MarkdownParser

GUIDE = """---
title: Sending messages
category: Threads
difficulty: beginner
tags: [messaging]
related_methods: [ThreadApi.sendMessage]
---
# Sending messages

Use case: Chat messages between users

```typescript
await threadApi.sendMessage(threadId, meta, data);
```

## Reading messages

Fetch messages with listMessages.
"""

WORKFLOW = """---
title: First thread
workflow: true
description: Build a thread from scratch
---
# First thread

## Connect to the bridge

Open a connection first.

```typescript
const connection = await Endpoint.connect(key, solution, url);
```

## Create the thread

Prerequisites: connection, context id

```typescript
const threadId = await threadApi.createThread(contextId, users, managers);
```
"""


@pytest.fixture
def parser() -> MarkdownParser:
    """Provide markdown parser."""
    return MarkdownParser()


class TestParseFile:
    """Test suite for MarkdownParser.parse_file on plain guides."""

    def test_parse_file_should_emit_one_item_per_section(self, parser: MarkdownParser) -> None:
        """Should split the document at headings."""
        # Act
        items = parser.parse_file(GUIDE, "guides/sending-messages.md")

        # Assert
        assert [item.name for item in items] == ["Sending messages", "Reading messages"]
        assert all(item.type == "example" for item in items)

    def test_section_should_inherit_front_matter(self, parser: MarkdownParser) -> None:
        """Should map category, difficulty, tags, and related methods onto metadata."""
        # Act
        first = parser.parse_file(GUIDE, "guides/sending-messages.md")[0]

        # Assert
        metadata = first.metadata
        assert metadata.namespace == "Threads"
        assert metadata.importance == "critical"
        assert metadata.tags == ["messaging", "Threads", "beginner", "sending messages", "example", "guide"]
        assert metadata.related_methods == ["ThreadApi.sendMessage"]
        assert metadata.source_file == "guides/sending-messages.md"

    def test_section_should_record_line_number_after_front_matter(self, parser: MarkdownParser) -> None:
        """Should count front-matter lines when numbering headings."""
        # Act
        first = parser.parse_file(GUIDE, "guides/sending-messages.md")[0]

        # Assert
        assert first.metadata.line_number == 8

    def test_section_should_extract_code_examples_and_use_cases(self, parser: MarkdownParser) -> None:
        """Should move fenced code into examples and keep prose in content."""
        # Act
        first = parser.parse_file(GUIDE, "guides/sending-messages.md")[0]

        # Assert
        assert len(first.examples) == 1
        assert first.examples[0].language == "typescript"
        assert "sendMessage" in first.examples[0].code
        assert "```" not in first.content
        assert first.metadata.use_cases == ["Chat messages between users"]
        assert first.description == "Use case: Chat messages between users"

    def test_document_without_headings_should_use_file_stem(self, parser: MarkdownParser) -> None:
        """Should treat a heading-less document as one section titled by its file name."""
        # Act
        items = parser.parse_file("Just a short note about setup.", "notes.md")

        # Assert
        assert len(items) == 1
        assert items[0].name == "notes"
        assert items[0].metadata.namespace == "general"


class TestWorkflow:
    """Test suite for workflow tutorials."""

    def test_workflow_should_collapse_into_one_tutorial(self, parser: MarkdownParser) -> None:
        """Should emit a single tutorial item with numbered steps."""
        # Act
        items = parser.parse_file(WORKFLOW, "tutorials/first-thread.md")

        # Assert
        assert len(items) == 1
        tutorial = items[0]
        assert tutorial.metadata.type == "tutorial"
        assert tutorial.metadata.namespace == "workflows"
        assert tutorial.metadata.importance == "high"
        assert "## Step 1: Connect to the bridge" in tutorial.content
        assert "## Step 2: Create the thread" in tutorial.content
        assert "- connection\n- context id" in tutorial.content
        assert "Next, you might want to explore: Create the thread" in tutorial.content
        assert tutorial.metadata.tags[-2:] == ["workflow", "tutorial"]


class TestFrontMatterErrors:
    """Test suite for malformed front-matter."""

    def test_invalid_yaml_should_raise_parse_error(self, parser: MarkdownParser) -> None:
        """Should wrap YAML errors with the source file."""
        # Arrange
        content = "---\ntitle: [unclosed\n---\n# Title\n"

        # Act & Assert
        with pytest.raises(ParseError) as exc_info:
            parser.parse_file(content, "broken.md")

        assert exc_info.value.details["source"] == "broken.md"

    def test_non_mapping_front_matter_should_raise_parse_error(self, parser: MarkdownParser) -> None:
        """Should reject front-matter that is a list."""
        with pytest.raises(ParseError, match="mapping"):
            parser.parse_file("---\n- a\n- b\n---\n# Title\n", "list.md")

    def test_unsupported_front_matter_value_should_raise_parse_error(self, parser: MarkdownParser) -> None:
        """Should reject front-matter values that cannot be read as text."""
        # Act & Assert
        with pytest.raises(ParseError, match="Invalid front-matter values") as exc_info:
            parser.parse_file("---\ntags: {kind: guide}\n---\n# Title\n\nText", "nested.md")

        assert exc_info.value.details["fields"] == ["tags"]


class TestFrontMatterCoercion:
    """Test suite for front-matter values YAML does not load as strings."""

    def test_numeric_values_should_be_read_as_text(self, parser: MarkdownParser) -> None:
        """Should accept bare numbers for text fields."""
        # Act
        items = parser.parse_file("---\ncategory: 2024\ndescription: 5\n---\n# Release notes\n\nWhat changed.", "notes.md")

        # Assert
        assert items[0].metadata.namespace == "2024"
        assert "**Category:** 2024" in items[0].content
        assert items[0].metadata.tags[:2] == ["2024", "notes"]

    def test_single_values_should_become_lists(self, parser: MarkdownParser) -> None:
        """Should treat scalar tags and related methods as one-element lists."""
        # Act
        items = parser.parse_file(
            "---\ntags: messaging\nrelatedMethods: ThreadApi.sendMessage\n---\n# Sending\n\nSend a message.",
            "sending.md",
        )

        # Assert
        metadata = items[0].metadata
        assert metadata.tags[0] == "messaging"
        assert metadata.related_methods == ["ThreadApi.sendMessage"]

    def test_null_workflow_should_mean_plain_guide(self, parser: MarkdownParser) -> None:
        """Should read an empty workflow key as false."""
        # Act
        items = parser.parse_file("---\nworkflow:\n---\n# Intro\n\nWelcome.", "intro.md")

        # Assert
        assert items[0].metadata.type == "example"
