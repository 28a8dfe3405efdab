"""
Cloud Function entrypoints for the idea expansion function.

This module exposes the ``expandIdea`` callable two ways:

* ``expand_idea`` – the HTTP function used as the Cloud Functions entrypoint.
* ``app`` – a Flask app serving ``POST /expandIdea``, handy for local testing
  and for Cloud Run.

Requests and responses follow the Firebase callable protocol: the body is
``{"data": {"transcript": "..."}}`` and the reply is either
``{"result": {...}}`` or ``{"error": {"status": ..., "message": ...}}``.

Environment variables:

* ``GENAI_API_KEY`` – API key for the generative model, injected from Secret
  Manager.  Required.
* ``GENAI_MODEL`` / ``GENAI_MAX_OUTPUT_TOKENS`` – model id and output-token
  ceiling.
* ``IDEASPOT_SECTIONS_FILE`` – optional JSON file replacing the section
  catalog.
* ``IDEASPOT_REQUIRE_AUTH`` / ``FIREBASE_PROJECT_ID`` – caller verification;
  the token audience falls back to ``GOOGLE_CLOUD_PROJECT``.

Deploy with ``--max-instances=10`` to cap cost.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from flask import Flask, jsonify, request

from . import auth, expander
from .errors import ExpansionError, InvalidArgument
from .models import ExpansionRequest
from .transcript_preprocessor import preprocess_transcript

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to expand idea. Please try again later."

app = Flask(__name__)


def _error(exc: ExpansionError) -> Tuple[Dict[str, Any], int]:
    message = exc.message
    # Internal details stay in the logs.
    if exc.http_status >= 500:
        message = GENERIC_FAILURE
    return {"error": {"status": exc.status, "message": message}}, exc.http_status


def _payload(req: Any) -> Dict[str, Any]:
    body = req.get_json(silent=True)
    if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
        raise InvalidArgument("Request body must be a JSON object with a 'data' field")
    return body["data"]


def handle_expand_idea(req: Any) -> Tuple[Dict[str, Any], int]:
    """Run one callable request and return ``(body, http_status)``."""
    try:
        claims = auth.authenticate(req)
        data = _payload(req)
        idea = ExpansionRequest(transcript=preprocess_transcript(data.get("transcript")))
        logger.info(
            json.dumps(
                {
                    "event": "request",
                    "uid": claims.get("uid"),
                    "transcript_length": len(idea.transcript),
                }
            )
        )
        result = expander.expand(idea.transcript)
    except ExpansionError as exc:
        logger.error(
            json.dumps(
                {
                    "event": "expand_error",
                    "kind": type(exc).__name__,
                    "status": exc.status,
                    "error": exc.message,
                }
            )
        )
        return _error(exc)
    except Exception:
        logger.exception("Error in expandIdea")
        return {"error": {"status": "INTERNAL", "message": GENERIC_FAILURE}}, 500

    body = result.to_dict()
    body["metadata"] = {
        "model": result.usage.model if result.usage else None,
        "tokensUsed": result.usage.total_tokens if result.usage else None,
        "processedAt": datetime.now(timezone.utc).isoformat(),
    }
    logger.info(
        json.dumps(
            {
                "event": "expanded",
                "uid": claims.get("uid"),
                "title": result.title,
                "sections": len(result.expansions),
                "tokens_used": body["metadata"]["tokensUsed"],
            }
        )
    )
    return {"result": body}, 200


def expand_idea(request):
    """HTTP Cloud Function entrypoint for ``expandIdea``."""
    body, status = handle_expand_idea(request)
    return jsonify(body), status


@app.route("/expandIdea", methods=["POST"])
def expand_idea_route():
    return expand_idea(request)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port)
