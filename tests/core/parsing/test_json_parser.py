"""
Test suite for JsonApiParser.

Tests namespace traversal, method and type extraction, importance rules,
and rejection of malformed specs.

System role: Verification of structured API documentation parsing
"""

import json

import pytest

from docindex.core.exceptions import ParseError
from docindex.core.parsing.json_parser import JsonApiParser
from docindex.models.parsed_content import ParsedContent


@pytest.fixture
def parser() -> JsonApiParser:
    """Provide parser with a fixed source file."""
    return JsonApiParser(source_file="spec/out.js.json")


class TestParseSpec:
    """Test suite for JsonApiParser.parse_spec."""

    def test_parse_spec_should_emit_classes_methods_and_types(self, parsed_items: list[ParsedContent]) -> None:
        """Should yield each class followed by its methods, and types as class items."""
        # Act
        names = [item.name for item in parsed_items]

        # Assert
        assert names == [
            "Endpoint",
            "Endpoint.setup",
            "Endpoint.connect",
            "ThreadApi",
            "ThreadApi.createThread",
            "UserWithPubKey",
        ]

    def test_parse_spec_should_skip_meta_section(self, parsed_items: list[ParsedContent]) -> None:
        """Should never produce items for the _meta key."""
        assert all(item.metadata.namespace in ("Core", "Threads") for item in parsed_items)

    def test_method_item_should_carry_signature_and_context(self, parsed_items: list[ParsedContent]) -> None:
        """Should render the signature snippet and the usage context of known methods."""
        # Arrange
        connect = next(item for item in parsed_items if item.name == "Endpoint.connect")

        # Assert
        assert connect.type == "method"
        assert "## Signature\n```javascript\nstatic async connect(" in connect.content
        assert "## Method Type: static" in connect.content
        assert "establishing a secure connection to the backend" in connect.content
        assert connect.metadata.class_name == "Endpoint"
        assert connect.metadata.method_name == "connect"
        assert connect.metadata.tags == ["core", "method", "endpoint", "connect"]
        assert connect.metadata.common_mistakes == ["Invalid private key format", "Wrong bridge URL"]

    def test_method_item_should_list_parameters_and_returns(self, parsed_items: list[ParsedContent]) -> None:
        """Should convert params and returns into typed parameter models."""
        # Arrange
        connect = next(item for item in parsed_items if item.name == "Endpoint.connect")

        # Assert
        assert [p.name for p in connect.parameters] == ["userPrivKey", "solutionId", "bridgeUrl"]
        assert connect.returns[0].type.name == "Connection"
        assert connect.examples[0].code == 'const result = Endpoint.connect("userPrivKey", "solutionId", "bridgeUrl");'

    def test_unknown_method_should_fall_back_to_class_use_case(self, parser: JsonApiParser) -> None:
        """Should default use cases and context for methods without a lookup entry."""
        # Arrange
        spec = {
            "Stores": [
                {
                    "content": [
                        {
                            "type": "class",
                            "name": "StoreApi",
                            "methods": [{"name": "listStores", "snippet": "listStores()"}],
                        }
                    ]
                }
            ]
        }

        # Act
        items = parser.parse_spec(json.dumps(spec))

        # Assert
        method = items[1]
        assert method.metadata.use_cases == ["StoreApi operations"]
        assert "StoreApi management operations" in method.content
        assert method.metadata.importance == "high"

    def test_type_item_should_be_indexed_as_class(self, parsed_items: list[ParsedContent]) -> None:
        """Should render type fields and mark the item as a class."""
        # Arrange
        type_item = parsed_items[-1]

        # Assert
        assert type_item.metadata.type == "class"
        assert "- `userId` (string): User identifier" in type_item.content
        assert "type" in type_item.metadata.tags


class TestImportance:
    """Test suite for importance rules."""

    @pytest.mark.parametrize(
        "method_name, expected",
        [
            ("setup", "critical"),
            ("connect", "critical"),
            ("getThread", "critical"),
            ("createThread", "critical"),
            ("listThreads", "high"),
            ("deleteThread", "high"),
            ("subscribe", "medium"),
        ],
    )
    def test_method_importance_should_follow_name_fragments(self, method_name: str, expected: str) -> None:
        """Should rank methods by the verbs in their name."""
        assert JsonApiParser._method_importance(method_name) == expected

    def test_class_importance_should_rank_core_classes_high(self) -> None:
        """Should rank known entry classes critical and other Core classes high."""
        assert JsonApiParser._class_importance("Endpoint", "Core") == "critical"
        assert JsonApiParser._class_importance("EventQueue", "Core") == "high"
        assert JsonApiParser._class_importance("InboxApi", "Inboxes") == "medium"


class TestMalformedSpec:
    """Test suite for parse failures."""

    def test_invalid_json_should_raise_parse_error(self, parser: JsonApiParser) -> None:
        """Should wrap JSON decoding errors with the source file."""
        # Act & Assert
        with pytest.raises(ParseError) as exc_info:
            parser.parse_spec("{not json")

        assert exc_info.value.details["source"] == "spec/out.js.json"

    def test_non_object_root_should_raise_parse_error(self, parser: JsonApiParser) -> None:
        """Should reject a spec whose root is not an object."""
        with pytest.raises(ParseError):
            parser.parse_spec("[1, 2, 3]")

    def test_method_without_name_should_raise_parse_error(self, parser: JsonApiParser) -> None:
        """Should reject class entries that fail validation."""
        # Arrange
        spec = {"Core": [{"content": [{"type": "class", "name": "Endpoint", "methods": [{"snippet": "x()"}]}]}]}

        # Act & Assert
        with pytest.raises(ParseError, match="Malformed class entry"):
            parser.parse_spec(json.dumps(spec))

    def test_section_with_null_content_should_raise_parse_error(self, parser: JsonApiParser) -> None:
        """Should reject a section whose content is not a list."""
        # Arrange
        spec = {"Core": [{"title": "Endpoint", "content": None}]}

        # Act & Assert
        with pytest.raises(ParseError, match="Malformed namespace section") as exc_info:
            parser.parse_spec(json.dumps(spec))

        assert exc_info.value.details["namespace"] == "Core"

    def test_non_object_section_should_raise_parse_error(self, parser: JsonApiParser) -> None:
        """Should reject a namespace whose sections are not objects."""
        with pytest.raises(ParseError, match="Malformed namespace section"):
            parser.parse_spec(json.dumps({"Core": ["Endpoint"]}))
