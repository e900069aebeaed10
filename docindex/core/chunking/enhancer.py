"""
Chunk enhancer.

Appends retrieval-oriented context to chunks: related methods, usage
patterns, troubleshooting notes, prerequisites, and derived metadata.
Enhancement never changes a chunk id.

Dependencies: pydantic
System role: Optional stage between the chunk builder and the optimizer
"""

import logging

from pydantic import BaseModel

from docindex.models.chunk import ChunkMetadata, DocumentChunk, unique_ordered

logger = logging.getLogger(__name__)


class EnhancementOptions(BaseModel):
    """Toggles for each enhancement."""

    add_related_methods: bool = True
    add_usage_examples: bool = True
    add_troubleshooting: bool = True
    add_dependencies: bool = True
    enhance_metadata: bool = True


class UsagePattern(BaseModel):
    title: str
    description: str
    code: str


class Issue(BaseModel):
    problem: str
    cause: str
    solution: str
    example: str | None = None


CRUD_RELATED: list[tuple[str, list[str]]] = [
    ("create", ["get", "update", "delete"]),
    ("get", ["create", "list", "update"]),
    ("update", ["get", "create", "delete"]),
    ("delete", ["get", "list"]),
    ("list", ["get", "create"]),
]

NAMESPACE_RELATED: dict[str, list[str]] = {
    "Threads": ["Thread.create", "Thread.get", "Message.send", "Message.list"],
    "Stores": ["Store.create", "Store.get", "File.upload", "File.download"],
    "Inboxes": ["Inbox.create", "Inbox.get", "InboxMessage.send"],
    "Core": ["Connection.connect", "Platform.login", "Context.create"],
}

USAGE_PATTERNS: dict[tuple[str, str, str], list[UsagePattern]] = {
    ("Threads", "Thread", "create"): [
        UsagePattern(
            title="Creating a Thread with Users",
            description="Create a new thread and add users to it.",
            code=(
                "// Create a thread with initial users\n"
                "const thread = await Thread.create({\n"
                "  contextId: 'context-id',\n"
                "  users: ['user1', 'user2'],\n"
                "  managers: ['manager1'],\n"
                "  name: 'Project Discussion'\n"
                "});\n\n"
                "console.log('Thread created:', thread.id);"
            ),
        )
    ],
    ("Threads", "Thread", "get"): [
        UsagePattern(
            title="Getting Thread Information",
            description="Retrieve thread details and metadata.",
            code=(
                "// Get thread details\n"
                "const thread = await Thread.get(threadId);\n"
                "console.log('Thread name:', thread.name);\n"
                "console.log('Users count:', thread.users.length);"
            ),
        )
    ],
    ("Stores", "Store", "create"): [
        UsagePattern(
            title="Creating a Store for File Management",
            description="Create a new store for organizing files.",
            code=(
                "// Create a store for project files\n"
                "const store = await Store.create({\n"
                "  contextId: 'context-id',\n"
                "  users: ['user1', 'user2'],\n"
                "  managers: ['manager1'],\n"
                "  name: 'Project Files'\n"
                "});\n\n"
                "console.log('Store created:', store.id);"
            ),
        )
    ],
}

CONNECTION_ISSUE = Issue(
    problem="Connection timeout or failure",
    cause="Network issues or invalid credentials",
    solution="Check network connectivity and verify credentials. Implement retry logic.",
    example=(
        "try {\n"
        "  await Connection.connect(endpoint);\n"
        "} catch (error) {\n"
        "  if (error.code === 'TIMEOUT') {\n"
        "    // Retry with exponential backoff\n"
        "    await retryWithBackoff(() => Connection.connect(endpoint));\n"
        "  }\n"
        "}"
    ),
)

PERMISSION_ISSUE = Issue(
    problem="Permission denied error",
    cause="User lacks necessary permissions for the operation",
    solution="Ensure user has proper access rights or is listed as a manager.",
    example=(
        "// Check user permissions before operation\n"
        "const hasPermission = await Context.checkUserPermission(userId, 'create');\n"
        "if (!hasPermission) {\n"
        "  throw new Error('User lacks create permission');\n"
        "}"
    ),
)

VERB_USE_CASES: list[tuple[str, list[str]]] = [
    ("create", ["Setting up new resources", "Initial configuration", "Resource provisioning"]),
    ("get", ["Data retrieval", "Status checking", "Information display"]),
    ("update", ["Data modification", "Settings change", "Resource updating"]),
    ("delete", ["Resource cleanup", "Data removal", "Resource deprovisioning"]),
    ("list", ["Data browsing", "Inventory management", "Overview display"]),
]

NAMESPACE_USE_CASES: dict[str, list[str]] = {
    "Threads": ["Team communication", "Message collaboration", "Discussion threads"],
    "Stores": ["File management", "Document storage", "Asset organization"],
    "Inboxes": ["Message delivery", "Notification system", "Communication hub"],
}

VERB_MISTAKES: list[tuple[str, list[str]]] = [
    ("create", ["Not validating input parameters", "Creating duplicate resources"]),
    ("get", ["Not handling missing resources", "Assuming resource always exists"]),
    ("update", ["Not checking if resource exists first", "Partial updates without validation"]),
    ("delete", ["Not checking dependencies before deletion", "Missing confirmation for destructive operations"]),
]

VERB_TAGS: dict[str, list[str]] = {
    "create": ["crud", "creation", "new"],
    "get": ["crud", "retrieval", "fetch", "read"],
    "update": ["crud", "modification", "edit"],
    "delete": ["crud", "removal", "cleanup"],
    "list": ["crud", "enumeration", "browse"],
}

NAMESPACE_TAGS: dict[str, list[str]] = {
    "Threads": ["messaging", "communication", "collaboration"],
    "Stores": ["files", "storage", "documents"],
    "Inboxes": ["inbox", "notifications", "delivery"],
    "Core": ["connection", "platform", "authentication"],
    "Crypto": ["encryption", "security", "crypto"],
}


def _first_match(method_name: str, table: list[tuple[str, list[str]]]) -> list[str]:
    for fragment, values in table:
        if fragment in method_name:
            return values
    return []


class ChunkEnhancer:
    """Add related context to chunks."""

    def __init__(self, options: EnhancementOptions | None = None) -> None:
        self._options = options or EnhancementOptions()

    def enhance(self, chunk: DocumentChunk, options: EnhancementOptions | None = None) -> DocumentChunk:
        """
        Enhance a single chunk.

        Args:
            chunk: Chunk to enhance
            options: Per-call toggles, defaults to the enhancer's options

        Returns:
            DocumentChunk: New chunk with the same id
        """
        opts = options or self._options
        content = chunk.content
        metadata = chunk.metadata

        if opts.add_related_methods:
            related = self._related_methods(metadata)
            if related:
                content += "\n\n## Related Methods\n\n" + "".join(f"- `{ref}`\n" for ref in related) + "\n"
                metadata = metadata.model_copy(
                    update={"related_methods": unique_ordered([*metadata.related_methods, *related])}
                )

        if opts.add_usage_examples:
            content += self._usage_section(metadata)

        if opts.add_troubleshooting:
            content += self._troubleshooting_section(metadata)

        if opts.add_dependencies:
            dependencies = self._dependencies(metadata)
            if dependencies:
                content += "\n\n## Prerequisites\n\nBefore using this method, ensure you have:\n\n"
                content += "".join(f"- Called `{dep}`\n" for dep in dependencies) + "\n"
                metadata = metadata.model_copy(
                    update={"dependencies": unique_ordered([*metadata.dependencies, *dependencies])}
                )

        if opts.enhance_metadata:
            metadata = self._enhance_metadata(metadata)

        return chunk.model_copy(update={"content": content, "metadata": metadata})

    def enhance_all(self, chunks: list[DocumentChunk], options: EnhancementOptions | None = None) -> list[DocumentChunk]:
        enhanced = [self.enhance(chunk, options) for chunk in chunks]
        logger.debug(f"{__name__}:enhance_all - Enhanced {len(enhanced)} chunks")
        return enhanced

    @staticmethod
    def _related_methods(metadata: ChunkMetadata) -> list[str]:
        related: list[str] = []
        if metadata.type == "method" and metadata.class_name:
            verbs = _first_match(metadata.method_name or "", CRUD_RELATED)
            related += [f"{metadata.class_name}.{verb}" for verb in verbs]
        if metadata.type == "class":
            related += NAMESPACE_RELATED.get(metadata.namespace, [])
        return [ref for ref in related if ref != metadata.qualified_name]

    @staticmethod
    def _usage_section(metadata: ChunkMetadata) -> str:
        if metadata.type != "method" or not metadata.method_name or not metadata.class_name:
            return ""
        patterns = USAGE_PATTERNS.get((metadata.namespace, metadata.class_name, metadata.method_name), [])
        if not patterns:
            return ""
        section = "\n\n## Common Usage Patterns\n\n"
        for pattern in patterns:
            section += f"### {pattern.title}\n\n{pattern.description}\n\n```typescript\n{pattern.code}\n```\n\n"
        return section

    @staticmethod
    def _troubleshooting_section(metadata: ChunkMetadata) -> str:
        if metadata.type != "method" or not metadata.method_name or not metadata.class_name:
            return ""
        name = metadata.method_name
        issues = []
        if "connect" in name or "login" in name:
            issues.append(CONNECTION_ISSUE)
        if any(verb in name for verb in ("create", "update", "delete")):
            issues.append(PERMISSION_ISSUE)
        if not issues:
            return ""

        section = "\n\n## Common Issues & Solutions\n\n"
        for issue in issues:
            section += f"### {issue.problem}\n\n**Cause**: {issue.cause}\n\n**Solution**: {issue.solution}\n\n"
            if issue.example:
                section += f"```typescript\n{issue.example}\n```\n\n"
        return section

    @staticmethod
    def _dependencies(metadata: ChunkMetadata) -> list[str]:
        if metadata.type != "method" or not metadata.class_name:
            return []
        name = metadata.method_name or ""
        dependencies = []
        if "create" in name or "get" in name:
            dependencies += ["Connection.connect", "Platform.login"]
        if metadata.namespace not in ("Core", "Events"):
            dependencies += ["Context.create", "Context.connect"]
        if metadata.namespace == "Threads" and "Message" in name:
            dependencies.append("Thread.get")
        if metadata.namespace == "Stores" and "File" in name:
            dependencies.append("Store.get")
        return dependencies

    @staticmethod
    def _enhance_metadata(metadata: ChunkMetadata) -> ChunkMetadata:
        name = metadata.method_name or ""
        is_method = metadata.type == "method" and bool(name)
        updates: dict[str, list[str]] = {}

        if not metadata.use_cases:
            use_cases = _first_match(name, VERB_USE_CASES) if is_method else []
            updates["use_cases"] = [*use_cases, *NAMESPACE_USE_CASES.get(metadata.namespace, [])]

        if not metadata.common_mistakes and is_method:
            updates["common_mistakes"] = [
                "Not checking return values for errors",
                "Missing proper error handling",
                *_first_match(name, VERB_MISTAKES),
            ]

        tags = []
        if is_method:
            for verb, verb_tags in VERB_TAGS.items():
                if verb in name:
                    tags += verb_tags
        tags += NAMESPACE_TAGS.get(metadata.namespace, [])
        updates["tags"] = unique_ordered([*metadata.tags, *tags])

        return metadata.model_copy(update=updates)
