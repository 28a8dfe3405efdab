"""
Section catalog.

The catalog is the ordered list of sections the model is asked to fill in.
Its order is the order of the expansions returned to the app.  The default
catalog below can be replaced without code changes by pointing
``IDEASPOT_SECTIONS_FILE`` at a JSON file of the form::

    [{"key": "problemPainPoint", "title": "Problem/Pain Point",
      "instruction": "What specific problem does this solve?"}, ...]
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

SECTIONS_FILE_ENV = "IDEASPOT_SECTIONS_FILE"


@dataclass(frozen=True)
class SectionSpec:
    key: str
    title: str
    instruction: str


DEFAULT_SECTIONS: Tuple[SectionSpec, ...] = (
    SectionSpec(
        key="problemPainPoint",
        title="Problem/Pain Point",
        instruction="What specific problem does this solve? Be concrete and identify the core issue.",
    ),
    SectionSpec(
        key="targetCustomer",
        title="Target Customer",
        instruction="Who is the target customer? Describe their demographics, behaviors, and needs.",
    ),
    SectionSpec(
        key="marketSize",
        title="Market Size/Opportunity",
        instruction="What is the market size? Provide estimates and market context.",
    ),
    SectionSpec(
        key="validationPlan",
        title="Validation Plan",
        instruction="How can this be validated? Suggest concrete steps to test demand.",
    ),
    SectionSpec(
        key="firstSteps",
        title="First Steps",
        instruction="What are the first steps to get started? Provide actionable steps.",
    ),
    SectionSpec(
        key="nameOptions",
        title="Name Options",
        instruction=(
            "Generate 5 potential names for this idea. Make them memorable, "
            "professional, and creative. Format as a bulleted list."
        ),
    ),
)


def build_catalog(entries: Iterable[Any]) -> Tuple[SectionSpec, ...]:
    """Validate raw catalog entries and return them as ``SectionSpec`` objects.

    Raises:
        ValueError: If the catalog is empty, an entry is missing a field, or a
            key appears twice.
    """
    catalog: List[SectionSpec] = []
    seen = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"Section {index} must be an object")
        values = {}
        for name in ("key", "title", "instruction"):
            value = entry.get(name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Section {index} is missing '{name}'")
            values[name] = value.strip()
        if values["key"] in seen:
            raise ValueError(f"Duplicate section key '{values['key']}'")
        seen.add(values["key"])
        catalog.append(SectionSpec(**values))
    if not catalog:
        raise ValueError("Section catalog is empty")
    return tuple(catalog)


def load_catalog(path: Optional[Path] = None) -> Tuple[SectionSpec, ...]:
    """Return the configured catalog.

    ``path`` defaults to the file named by ``IDEASPOT_SECTIONS_FILE``; when
    neither is given the built-in catalog is returned.
    """
    if path is None:
        configured = os.environ.get(SECTIONS_FILE_ENV)
        if not configured:
            return DEFAULT_SECTIONS
        path = Path(configured)
    with open(path, "r", encoding="utf-8") as f:
        try:
            entries = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in section catalog {path}") from exc
    if not isinstance(entries, list):
        raise ValueError(f"Section catalog {path} must be a JSON list")
    catalog = build_catalog(entries)
    logger.info("Loaded %d sections from %s", len(catalog), path)
    return catalog
