"""Value types passed between the preprocessor, the expander and the entrypoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ExpansionRequest:
    transcript: str


@dataclass(frozen=True)
class Expansion:
    section_title: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"sectionTitle": self.section_title, "content": self.content}


@dataclass(frozen=True)
class ModelUsage:
    """Token accounting for a single model call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ExpansionResult:
    """Title plus one expansion per catalog section, in catalog order."""

    title: str
    expansions: Tuple[Expansion, ...]
    usage: Optional[ModelUsage] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "expansions": [e.to_dict() for e in self.expansions],
        }
