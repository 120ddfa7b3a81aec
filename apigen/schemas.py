"""
Pydantic schemas defining the contracts between pipeline stages.

Data flow through the pipeline:
  Sanitizer → canonical bytes → ChangeGate → AccessRecord
  canonical bytes → Extractor → EndpointCatalog
  EndpointCatalog + AccessRecord → CodeGenerator → source text
"""

import base64
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Parameters every endpoint carries that never become generated arguments
FUNCTION_PARAM = "function"
APIKEY_PARAM = "apikey"

DIGEST_SIZE = 32


class AccessRecord(BaseModel):
    """When, and against which canonical content, a generation run succeeded."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    digest: bytes

    @field_validator("digest")
    @classmethod
    def _check_digest_size(cls, value: bytes) -> bytes:
        if len(value) != DIGEST_SIZE:
            raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(value)}")
        return value

    @property
    def digest_b64(self) -> str:
        return base64.b64encode(self.digest).decode("ascii")


class Parameter(BaseModel):
    """One documented query parameter."""
    model_config = ConfigDict(frozen=True)

    required: bool
    name: str
    description: str = ""   # Inner HTML of the description paragraphs

    def __str__(self) -> str:
        marker = "Required" if self.required else "Optional"
        return f"\t- {marker}: {self.name}: {self.description}"


class Category(BaseModel):
    """
    A table-of-contents group of endpoints.

    Identity is the anchor id alone: two Category objects with the same
    link_name are the same category, whatever their readable text says.
    """
    model_config = ConfigDict(frozen=True)

    link_name: str           # Anchor id without the leading '#'
    readable_name: str
    description: str = ""

    def __eq__(self, other) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.link_name == other.link_name

    def __hash__(self) -> int:
        return hash(self.link_name)

    def __str__(self) -> str:
        return f"({self.link_name}) {self.readable_name}:\n{self.description}"


class Endpoint(BaseModel):
    """One documented API function."""
    model_config = ConfigDict(frozen=True)

    link_name: str
    readable_name: str
    description: str = ""
    function_code: str
    is_premium: bool = False
    # Every documented parameter, function selector first and apikey last
    parameters: list[Parameter] = Field(default_factory=list)

    @property
    def argument_parameters(self) -> list[Parameter]:
        """Parameters that become arguments of the generated binding."""
        return [p for p in self.parameters if p.name not in (FUNCTION_PARAM, APIKEY_PARAM)]

    def __str__(self) -> str:
        premium = "[PREMIUM] " if self.is_premium else "          "
        lines = [f"{premium} {self.readable_name} ({self.link_name} / {self.function_code})"
                 f" - {self.description}:", ""]
        lines.extend(str(param) for param in self.parameters)
        return "\n".join(lines) + "\n"


class EndpointCatalog(dict):
    """
    Mapping of Category → ordered list of Endpoint.

    Insertion order is document order. Generation must go through
    sorted_items() so output does not depend on how the page happens to be
    arranged.
    """

    def sorted_items(self) -> list[tuple[Category, list[Endpoint]]]:
        return sorted(self.items(), key=lambda item: item[0].link_name)

    @property
    def endpoint_count(self) -> int:
        return sum(len(endpoints) for endpoints in self.values())

    def describe(self) -> str:
        """Human-readable dump of the catalog, categories in sorted order."""
        chunks = []
        for category, endpoints in self.sorted_items():
            chunks.append(f"Category: {category}\nEndpoints:\n")
            chunks.extend(str(endpoint) for endpoint in endpoints)
            chunks.append("\n")
        return "".join(chunks)


class OutcomeStatus(str, Enum):
    REGENERATED = "regenerated"
    NO_CHANGE = "no_change"


class PipelineOutcome(BaseModel):
    """What a pipeline run did. NO_CHANGE is a normal result, not an error."""
    status: OutcomeStatus
    digest: str                      # base64 of the canonical-content digest
    output_path: str
    category_count: int = 0
    endpoint_count: int = 0
    previous_digest: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.status == OutcomeStatus.REGENERATED
