"""
Transcript validation.

The mobile app sends whatever the on-device recogniser produced.  Before
anything is sent to the model the transcript is trimmed and bounded here.
"""

from __future__ import annotations

from typing import Any

from .errors import InvalidArgument

MAX_TRANSCRIPT_LENGTH = 5000


def preprocess_transcript(transcript: Any) -> str:
    """Validate a candidate transcript and return it trimmed.

    Args:
        transcript: The value received from the caller.

    Returns:
        The transcript with leading and trailing whitespace removed.

    Raises:
        InvalidArgument: If the value is not a string, is blank, or is longer
            than :data:`MAX_TRANSCRIPT_LENGTH` characters once trimmed.
    """
    if not isinstance(transcript, str):
        raise InvalidArgument("Transcript is required and must be a non-empty string")
    text = transcript.strip()
    if not text:
        raise InvalidArgument("Transcript is required and must be a non-empty string")
    if len(text) > MAX_TRANSCRIPT_LENGTH:
        raise InvalidArgument(
            f"Transcript is too long (max {MAX_TRANSCRIPT_LENGTH} characters)"
        )
    return text
