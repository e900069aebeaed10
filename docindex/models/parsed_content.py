"""
Parsed documentation models.

One ParsedContent is a logical documentation unit (method, class, guide
section) produced by a parser and consumed once by the chunk builder.

Dependencies: pydantic
System role: Parser output contract
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from docindex.models.chunk import ChunkMetadata

ContentType = Literal["method", "class", "type", "example"]


class TypeInfo(BaseModel):
    """Type reference of a parameter or return value."""

    model_config = ConfigDict(frozen=True)

    name: str
    optional: bool = False

    def render(self) -> str:
        return f"{self.name}{'?' if self.optional else ''}"


class CodeExample(BaseModel):
    """Code snippet attached to a documentation item."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(default="text")
    code: str
    explanation: str = Field(default="")
    title: str | None = None


class Parameter(BaseModel):
    """Documented parameter."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    type: TypeInfo


class ReturnValue(BaseModel):
    """Documented return value."""

    model_config = ConfigDict(frozen=True)

    type: TypeInfo
    description: str = ""


class ParsedContent(BaseModel):
    """Normalized documentation unit prior to chunking."""

    model_config = ConfigDict(frozen=True)

    type: ContentType = Field(description="Kind of parsed item")
    name: str = Field(description="Display name, e.g. 'Endpoint.connect'")
    description: str = Field(default="", description="Short prose summary")
    content: str = Field(default="", description="Free-form markdown body")
    metadata: ChunkMetadata = Field(description="Metadata inherited by produced chunks")
    examples: list[CodeExample] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    returns: list[ReturnValue] = Field(default_factory=list)
