"""
Method-level chunking.

Every API method becomes its own chunk. A class whose content carries a
"## Methods" section is split into an overview chunk plus one chunk per
method heading; everything else stays whole.

Dependencies: re (stdlib)
System role: Default strategy for API reference material
"""

from docindex.core.chunking.strategies.base import ChunkingStrategy, single_chunk
from docindex.core.chunking.text_utils import METHOD_HEADING_PATTERN, extract_section, split_on_headings
from docindex.models.chunk import DocumentChunk, unique_ordered
from docindex.models.parsed_content import ParsedContent

OVERVIEW_SECTIONS = ("Overview", "Constructor", "Properties")

# (name fragment, related verbs); first match wins
CRUD_RELATIONS: list[tuple[str, list[str]]] = [
    ("create", ["get", "update", "delete", "list"]),
    ("get", ["create", "update", "list"]),
    ("update", ["get", "create", "delete"]),
    ("delete", ["get", "list"]),
    ("list", ["get", "create"]),
]
MESSAGE_RELATIONS: list[tuple[str, list[str]]] = [
    ("send", ["receive", "list"]),
    ("receive", ["send", "list"]),
]
CONNECTION_RELATIONS: list[tuple[str, list[str]]] = [
    ("disconnect", ["connect"]),
    ("connect", ["disconnect", "login"]),
]

METHOD_USE_CASES: list[tuple[str, list[str]]] = [
    ("create", ["Setting up new resources", "Initial configuration", "Resource provisioning"]),
    ("get", ["Data retrieval", "Status checking", "Information display"]),
    ("update", ["Data modification", "Settings change", "Resource updating"]),
    ("delete", ["Resource cleanup", "Data removal", "Resource deprovisioning"]),
    ("list", ["Data browsing", "Inventory management", "Overview display"]),
    ("send", ["Message delivery", "Data transmission", "Communication"]),
    ("connect", ["Establishing connections", "Authentication", "Session management"]),
]

GENERIC_MISTAKES = [
    "Not checking return values for errors",
    "Missing proper error handling",
    "Not validating input parameters",
]
METHOD_MISTAKES: list[tuple[str, list[str]]] = [
    ("create", ["Creating duplicate resources", "Not checking if resource already exists"]),
    ("get", ["Not handling missing resources", "Assuming resource always exists"]),
    ("update", ["Not checking if resource exists first", "Partial updates without validation"]),
    ("delete", ["Not checking dependencies before deletion", "Missing confirmation for destructive operations"]),
    ("send", ["Not validating message content", "Sending to inactive recipients"]),
    ("connect", ["Not handling connection timeouts", "Missing retry logic for network failures"]),
]

NAMESPACE_LOOKUPS = {"Threads": "Thread.get", "Stores": "Store.get", "Inboxes": "Inbox.get"}


def _first_match(method_name: str, table: list[tuple[str, list[str]]]) -> list[str]:
    for fragment, values in table:
        if fragment in method_name:
            return values
    return []


def related_methods_for(method_name: str, class_name: str) -> list[str]:
    """Class.method references suggested by CRUD, messaging, and connection verbs."""
    verbs = [
        *_first_match(method_name, CRUD_RELATIONS),
        *_first_match(method_name, MESSAGE_RELATIONS),
        *_first_match(method_name, CONNECTION_RELATIONS),
    ]
    own = f"{class_name}.{method_name}"
    return [ref for ref in unique_ordered([f"{class_name}.{verb}" for verb in verbs]) if ref != own]


def method_dependencies(method_name: str, namespace: str) -> list[str]:
    dependencies = []
    if namespace != "Core":
        dependencies += ["Connection.connect", "Platform.login", "Context.create"]
    if ("send" in method_name or "create" in method_name) and namespace in NAMESPACE_LOOKUPS:
        dependencies.append(NAMESPACE_LOOKUPS[namespace])
    return dependencies


class MethodLevelStrategy(ChunkingStrategy):
    """One chunk per method."""

    name = "method-level"

    def should_split(self, item: ParsedContent) -> bool:
        return item.type == "class" and "## Methods" in item.content

    def split_logic(self, item: ParsedContent) -> list[DocumentChunk]:
        if item.type != "class":
            return [single_chunk(item)]

        chunks = [self._overview_chunk(item)]
        for block in split_on_headings(item.content, METHOD_HEADING_PATTERN):
            chunks.append(self._method_chunk(item, block.title, block.content))
        return chunks

    def _overview_chunk(self, item: ParsedContent) -> DocumentChunk:
        content = f"# {item.name} Class\n\n{item.description}\n\n"
        for section_name in OVERVIEW_SECTIONS:
            section = extract_section(item.content, section_name)
            if section:
                content += f"## {section_name}\n\n{section}\n\n"
        return self.derive_chunk(
            item,
            content,
            "overview",
            ["overview", "class-info"],
            type="class",
            method_name=None,
        )

    def _method_chunk(self, item: ParsedContent, method_name: str, method_text: str) -> DocumentChunk:
        class_name = item.name
        namespace = item.metadata.namespace
        signature = method_text.split("\n", 1)[0]

        content = f"# {class_name}.{method_name}\n\n```typescript\n{signature}\n```\n\n{method_text}"
        content += "\n\n## Class Context\n\n"
        content += f"This method belongs to the **{class_name}** class in the **{namespace}** namespace.\n\n"
        if item.description:
            content += f"**Class Description**: {item.description}\n\n"

        return self.derive_chunk(
            item,
            content,
            method_name,
            ["method", method_name.lower(), class_name.lower()],
            type="method",
            class_name=class_name,
            method_name=method_name,
            related_methods=related_methods_for(method_name, class_name),
            dependencies=method_dependencies(method_name, namespace),
            use_cases=_first_match(method_name, METHOD_USE_CASES),
            common_mistakes=[*GENERIC_MISTAKES, *_first_match(method_name, METHOD_MISTAKES)],
        )
