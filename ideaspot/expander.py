"""
Idea expansion via generative AI.

This module turns a validated transcript into an :class:`ExpansionResult`.
It builds a single prompt listing every section of the catalog, calls the
Gemini model once through the ``google-generativeai`` client, strips an
optional code fence from the reply, parses it as JSON and maps it onto the
catalog.  Missing sections and titles are replaced with placeholders; a
reply that is not JSON at all is rejected.

There is no retry: a failed call is raised to the caller as
:class:`UpstreamFailure`.  The model and output-token ceiling are read from
``GENAI_MODEL`` and ``GENAI_MAX_OUTPUT_TOKENS``; the key from
``GENAI_API_KEY``.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, Optional, Sequence

import google.generativeai as genai
from google.api_core import exceptions as api_exceptions

from .errors import MalformedResponse, UpstreamFailure
from .models import Expansion, ExpansionResult, ModelUsage
from .sections import SectionSpec, load_catalog

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "models/gemini-2.5-flash"
DEFAULT_MAX_OUTPUT_TOKENS = 4096

MISSING_CONTENT = "Content not generated"
MISSING_TITLE = "Untitled Idea"

_FENCE_OPEN_RE = re.compile(r"^```[A-Za-z]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")


def build_prompt(transcript: str, sections: Sequence[SectionSpec]) -> str:
    """Build the single prompt sent to the model.

    The output is fully determined by ``transcript`` and ``sections``.
    """
    numbered = "\n\n".join(
        f"{i}. {s.title} ({s.key}): {s.instruction}"
        for i, s in enumerate(sections, start=1)
    )
    shape_lines = ",\n".join(
        f'    "{s.key}": "Your analysis here..."' for s in sections
    )
    if any(s.key == "nameOptions" for s in sections):
        title_hint = "Use the first/best name from the nameOptions section"
    else:
        title_hint = "A concise, compelling title (5-10 words max)"
    return (
        "You are a business analyst helping an entrepreneur develop their "
        "business idea.\n\n"
        f'Idea Transcript: "{transcript}"\n\n'
        "Please analyze this idea and provide structured insights for the "
        "following sections:\n\n"
        f"{numbered}\n\n"
        "IMPORTANT: Respond ONLY with a valid JSON object in this exact format:\n"
        "{\n"
        f'  "title": "{title_hint}",\n'
        '  "sections": {\n'
        f"{shape_lines}\n"
        "  }\n"
        "}\n\n"
        "FORMAT REQUIREMENTS:\n"
        "• Each section should be CONCISE but detailed\n"
        "• Use 1-2 brief intro sentences followed by bullet points\n"
        "• Keep bullets short and scannable (1 line each)\n"
        "• Focus on actionable, specific insights\n"
        "• Do not write long paragraphs\n"
        "• Do not wrap the JSON in markdown or code fences\n"
        "• Do not include any text outside the JSON object."
    )


def strip_code_fence(text: str) -> str:
    """Remove one optional ``` fence, with or without a language tag, around the reply."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_response(raw: str) -> Dict[str, Any]:
    """Parse the model's reply into a JSON object.

    Raises:
        MalformedResponse: If the sanitized text is not a JSON object.
    """
    cleaned = strip_code_fence(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error(
            "Failed to parse model response as JSON: %s\nraw=%r\ncleaned=%r",
            exc,
            raw,
            cleaned,
        )
        raise MalformedResponse("Failed to parse AI response") from exc
    if not isinstance(parsed, dict):
        logger.error(
            "Model response is not a JSON object\nraw=%r\ncleaned=%r", raw, cleaned
        )
        raise MalformedResponse("Failed to parse AI response")
    return parsed


def _non_empty(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def map_sections(
    parsed: Dict[str, Any],
    sections: Sequence[SectionSpec],
    usage: Optional[ModelUsage] = None,
) -> ExpansionResult:
    """Map a parsed reply onto the catalog, substituting placeholders."""
    generated = parsed.get("sections")
    if not isinstance(generated, dict):
        generated = {}
    expansions = []
    for section in sections:
        content = _non_empty(generated.get(section.key))
        if content is None:
            logger.warning("Model omitted section %s", section.key)
            content = MISSING_CONTENT
        expansions.append(Expansion(section_title=section.title, content=content))
    title = _non_empty(parsed.get("title")) or MISSING_TITLE
    return ExpansionResult(title=title, expansions=tuple(expansions), usage=usage)


def _model_name() -> str:
    return os.environ.get("GENAI_MODEL", DEFAULT_MODEL)


def _max_output_tokens() -> int:
    value = os.environ.get("GENAI_MAX_OUTPUT_TOKENS")
    if not value:
        return DEFAULT_MAX_OUTPUT_TOKENS
    try:
        tokens = int(value)
    except ValueError:
        tokens = 0
    if tokens <= 0:
        logger.warning(
            "Ignoring invalid GENAI_MAX_OUTPUT_TOKENS=%r; using %d",
            value,
            DEFAULT_MAX_OUTPUT_TOKENS,
        )
        return DEFAULT_MAX_OUTPUT_TOKENS
    return tokens


def _get_model(model_name: str) -> Any:
    api_key = os.environ.get("GENAI_API_KEY")
    if not api_key:
        logger.error("GENAI_API_KEY is not set; cannot call model %s", model_name)
        raise UpstreamFailure("Model API key is not configured")
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name)


def _usage_from(response: Any, model_name: str) -> Optional[ModelUsage]:
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return None
    return ModelUsage(
        model=model_name,
        input_tokens=int(getattr(metadata, "prompt_token_count", 0) or 0),
        output_tokens=int(getattr(metadata, "candidates_token_count", 0) or 0),
    )


def _call_model(model: Any, model_name: str, prompt: str, max_output_tokens: int) -> Any:
    """Send the prompt once and return the raw response object."""
    logger.info("Calling generative model %s for idea expansion", model_name)
    try:
        return model.generate_content(
            prompt,
            generation_config={"max_output_tokens": max_output_tokens},
        )
    except api_exceptions.ResourceExhausted as exc:
        logger.error("Model %s quota exhausted: %s", model_name, exc)
        raise UpstreamFailure(
            "Too many requests. Please try again later.",
            status="RESOURCE_EXHAUSTED",
            http_status=429,
        ) from exc
    except api_exceptions.GoogleAPIError as exc:
        logger.error("Model %s call failed: %s", model_name, exc)
        raise UpstreamFailure(f"Model call failed: {exc}") from exc
    except Exception as exc:
        logger.exception("Error calling model %s: %s", model_name, exc)
        raise UpstreamFailure(f"Model call failed: {exc}") from exc


def _response_text(response: Any) -> str:
    # ``text`` raises ValueError when the candidate was blocked or empty.
    try:
        text = response.text
    except ValueError as exc:
        logger.error("Model returned no text: %s", exc)
        raise MalformedResponse("AI response contained no text") from exc
    if not isinstance(text, str):
        raise MalformedResponse("AI response contained no text")
    return text


def expand(
    transcript: str,
    *,
    model: Any = None,
    sections: Optional[Sequence[SectionSpec]] = None,
) -> ExpansionResult:
    """Expand a validated transcript into a titled set of sections.

    Args:
        transcript: A transcript already accepted by
            :func:`ideaspot.transcript_preprocessor.preprocess_transcript`.
        model: Object exposing ``generate_content``.  Defaults to a
            ``genai.GenerativeModel`` for ``GENAI_MODEL``.
        sections: Catalog to expand against.  Defaults to
            :func:`ideaspot.sections.load_catalog`.

    Returns:
        An :class:`ExpansionResult` with exactly one expansion per section.

    Raises:
        UpstreamFailure: If the model call fails.
        MalformedResponse: If the reply is not a JSON object.
    """
    if sections is None:
        sections = load_catalog()
    model_name = _model_name()
    if model is None:
        model = _get_model(model_name)
    prompt = build_prompt(transcript, sections)
    response = _call_model(model, model_name, prompt, _max_output_tokens())
    usage = _usage_from(response, model_name)
    if usage is not None:
        logger.info(
            "Model %s used %d input and %d output tokens",
            model_name,
            usage.input_tokens,
            usage.output_tokens,
        )
    raw = _response_text(response)
    parsed = parse_response(raw)
    return map_sections(parsed, sections, usage=usage)
