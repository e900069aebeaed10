"""
JSON API reference parser.

Turns a structured API specification (namespace -> sections -> classes and
types) into ParsedContent items: one per class, one per method, one per type.

Dependencies: json (stdlib), pydantic
System role: First stage of the indexing pipeline for API references
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docindex.core.exceptions import ParseError
from docindex.models.chunk import ChunkMetadata, Importance
from docindex.models.parsed_content import (
    CodeExample,
    Parameter,
    ParsedContent,
    ReturnValue,
    TypeInfo,
)

logger = logging.getLogger(__name__)

CRITICAL_CLASSES = ("Endpoint", "Connection")
CRITICAL_NAME_FRAGMENTS = ("setup", "connect", "createThreadApi", "createStoreApi")
CRITICAL_METHOD_FRAGMENTS = ("setup", "connect", "create", "get")
HIGH_METHOD_FRAGMENTS = ("list", "update", "delete")

COMMON_MISTAKES: dict[str, list[str]] = {
    "setup": ["Forgetting to await", "Missing WASM assets path"],
    "connect": ["Invalid private key format", "Wrong bridge URL"],
    "createThread": ["Empty users array", "Missing manager permissions"],
    "sendMessage": ["Data not serialized", "Missing thread access"],
}

USE_CASES: dict[str, list[str]] = {
    "setup": ["Application initialization", "Library configuration"],
    "connect": ["User authentication", "Bridge connection"],
    "createThread": ["Group messaging", "Collaborative workspace"],
    "sendMessage": ["Chat messages", "Notifications"],
}

METHOD_CONTEXTS: dict[str, str] = {
    "setup": "application initialization and library preparation",
    "connect": "establishing a secure connection to the backend",
    "createThread": "setting up encrypted communication channels",
    "sendMessage": "real-time messaging and data exchange",
}


class _JsonType(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    optional: bool = False


class _JsonParam(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    type: _JsonType


class _JsonReturn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: _JsonType
    description: str = ""


class _JsonMethod(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    description: str = ""
    snippet: str = ""
    method_type: str = Field(default="method", alias="methodType")
    params: list[_JsonParam] = Field(default_factory=list)
    returns: list[_JsonReturn] | None = None


class _JsonClass(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    methods: list[_JsonMethod] = Field(default_factory=list)


class _JsonTypeDef(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    description: str = ""
    snippet: str = ""
    members: list[_JsonParam] = Field(default_factory=list, alias="fields")


class _JsonSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: list[Any] = Field(default_factory=list)


class JsonApiParser:
    """Parse structured JSON API documentation."""

    def __init__(self, source_file: str = "spec/out.js.json") -> None:
        """
        Initialize parser.

        Args:
            source_file: Value recorded as metadata.source_file on every item
        """
        self._source_file = source_file

    def parse_spec(self, json_content: str) -> list[ParsedContent]:
        """
        Parse a complete JSON API specification.

        Args:
            json_content: Raw JSON text

        Returns:
            list[ParsedContent]: Classes, methods, and types in document order

        Raises:
            ParseError: When the text is not valid JSON or an item is malformed
        """
        try:
            spec = json.loads(json_content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e.msg}", source=self._source_file, details={"line": e.lineno}) from e

        if not isinstance(spec, dict):
            raise ParseError("API spec root must be an object", source=self._source_file)

        parsed: list[ParsedContent] = []
        for namespace_name, namespace_data in spec.items():
            if namespace_name == "_meta" or not isinstance(namespace_data, list):
                continue
            for raw_section in namespace_data:
                try:
                    section = _JsonSection.model_validate(raw_section)
                except ValidationError as e:
                    raise ParseError(
                        "Malformed namespace section",
                        source=self._source_file,
                        details={"namespace": namespace_name, "errors": e.error_count()},
                    ) from e
                parsed.extend(self._parse_section(section, namespace_name))

        logger.info(
            f"{__name__}:parse_spec - Parsed {len(parsed)} items",
            extra={"source_file": self._source_file},
        )
        return parsed

    def _parse_section(self, section: _JsonSection, namespace: str) -> list[ParsedContent]:
        items: list[ParsedContent] = []
        for raw in section.content:
            kind = raw.get("type") if isinstance(raw, dict) else None
            try:
                if kind == "class":
                    items.extend(self._parse_class(_JsonClass.model_validate(raw), namespace))
                elif kind == "type":
                    items.append(self._parse_type(_JsonTypeDef.model_validate(raw), namespace))
            except ValidationError as e:
                raise ParseError(
                    f"Malformed {kind} entry",
                    source=self._source_file,
                    details={"namespace": namespace, "errors": e.error_count()},
                ) from e
        return items

    def _parse_class(self, item: _JsonClass, namespace: str) -> list[ParsedContent]:
        metadata = ChunkMetadata(
            type="class",
            namespace=namespace,
            class_name=item.name,
            importance=self._class_importance(item.name, namespace),
            tags=[namespace.lower(), "class", item.name.lower()],
            source_file=self._source_file,
        )
        items = [
            ParsedContent(
                type="class",
                name=item.name,
                description=item.description,
                content=self._class_content(item, namespace),
                metadata=metadata,
            )
        ]
        items.extend(self._parse_method(method, item.name, namespace) for method in item.methods)
        return items

    def _parse_method(self, method: _JsonMethod, class_name: str, namespace: str) -> ParsedContent:
        metadata = ChunkMetadata(
            type="method",
            namespace=namespace,
            class_name=class_name,
            method_name=method.name,
            importance=self._method_importance(method.name),
            tags=[namespace.lower(), "method", class_name.lower(), method.name.lower()],
            source_file=self._source_file,
            dependencies=self._dependencies(method),
            common_mistakes=COMMON_MISTAKES.get(method.name, []),
            use_cases=USE_CASES.get(method.name, [f"{class_name} operations"]),
        )
        parameters = [
            Parameter(
                name=p.name,
                description=p.description,
                type=TypeInfo(name=p.type.name, optional=p.type.optional),
            )
            for p in method.params
        ]
        returns = [
            ReturnValue(type=TypeInfo(name=r.type.name, optional=r.type.optional), description=r.description)
            for r in method.returns or []
        ]
        example = CodeExample(
            language="javascript",
            code=self._basic_example(method, class_name),
            explanation=f"Basic usage of {class_name}.{method.name}()",
            title=f"{method.name} Example",
        )
        return ParsedContent(
            type="method",
            name=f"{class_name}.{method.name}",
            description=method.description,
            content=self._method_content(method, class_name),
            metadata=metadata,
            parameters=parameters,
            returns=returns,
            examples=[example],
        )

    def _parse_type(self, item: _JsonTypeDef, namespace: str) -> ParsedContent:
        # Types are indexed as classes
        metadata = ChunkMetadata(
            type="class",
            namespace=namespace,
            class_name=item.name,
            importance="medium",
            tags=[namespace.lower(), "type", item.name.lower()],
            source_file=self._source_file,
        )
        fields = "\n".join(
            f"- `{f.name}` ({f.type.name}{'?' if f.type.optional else ''}): {f.description}"
            for f in item.members
        )
        content = (
            f"## Type Definition\n```typescript\n{item.snippet}\n```\n\n"
            f"## Fields\n{fields or 'No fields defined'}"
        )
        return ParsedContent(
            type="class",
            name=item.name,
            description=item.description,
            content=content,
            metadata=metadata,
        )

    @staticmethod
    def _class_content(item: _JsonClass, namespace: str) -> str:
        methods = "\n".join(f"- {m.name}()" for m in item.methods)
        return (
            f"## Available Methods\n{methods or 'No methods'}\n\n"
            f"## Namespace: {namespace}"
        )

    @staticmethod
    def _method_content(method: _JsonMethod, class_name: str) -> str:
        context = METHOD_CONTEXTS.get(method.name, f"{class_name} management operations")
        return (
            f"## Signature\n```javascript\n{method.snippet}\n```\n\n"
            f"## Method Type: {method.method_type}\n\n"
            f"This method is typically used in the context of {context}."
        )

    @staticmethod
    def _class_importance(name: str, namespace: str) -> Importance:
        if name in CRITICAL_CLASSES:
            return "critical"
        if any(fragment in name for fragment in CRITICAL_NAME_FRAGMENTS):
            return "critical"
        if namespace == "Core":
            return "high"
        return "medium"

    @staticmethod
    def _method_importance(method_name: str) -> Importance:
        lowered = method_name.lower()
        if any(fragment in lowered for fragment in CRITICAL_METHOD_FRAGMENTS):
            return "critical"
        if any(fragment in lowered for fragment in HIGH_METHOD_FRAGMENTS):
            return "high"
        return "medium"

    @staticmethod
    def _dependencies(method: _JsonMethod) -> list[str]:
        deps: list[str] = []
        for param in method.params:
            if param.type.name == "Connection":
                deps.append("Endpoint.connect()")
            if "Api" in param.type.name:
                deps.append(f"Endpoint.create{param.type.name}()")
        return deps

    @staticmethod
    def _basic_example(method: _JsonMethod, class_name: str) -> str:
        args = []
        for p in method.params:
            if p.type.name == "string":
                args.append(f'"{p.name}"')
            elif p.type.name == "number":
                args.append("0")
            elif p.type.name == "boolean":
                args.append("true")
            elif "[]" in p.type.name:
                args.append("[]")
            else:
                args.append(p.name)
        prefix = "const result = " if method.returns else ""
        await_prefix = "await " if method.method_type == "method" else ""
        return f"{prefix}{await_prefix}{class_name}.{method.name}({', '.join(args)});"
