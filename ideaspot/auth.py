"""
Caller authentication for the callable endpoint.

The mobile app signs in with Firebase and sends its ID token as
``Authorization: Bearer <token>``.  Set ``IDEASPOT_REQUIRE_AUTH=false`` to
skip verification when running the function locally.

Only tokens issued for ``FIREBASE_PROJECT_ID`` (or, when unset, the
``GOOGLE_CLOUD_PROJECT`` the function runs in) are accepted.  With neither
set every request is rejected.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import google.auth.exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from .errors import Unauthenticated

logger = logging.getLogger(__name__)

ANONYMOUS = {"uid": "anonymous"}


def auth_required() -> bool:
    return os.environ.get("IDEASPOT_REQUIRE_AUTH", "true").lower() != "false"


def project_id() -> Optional[str]:
    """Firebase project whose ID tokens are accepted."""
    return os.environ.get("FIREBASE_PROJECT_ID") or os.environ.get("GOOGLE_CLOUD_PROJECT") or None


def _bearer_token(request: Any) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("User must be authenticated to expand ideas")
    return token.strip()


def authenticate(request: Any) -> Dict[str, Any]:
    """Return the verified token claims for ``request``.

    Raises:
        Unauthenticated: If the token is missing or fails verification.
    """
    if not auth_required():
        return dict(ANONYMOUS)
    token = _bearer_token(request)
    audience = project_id()
    if not audience:
        # Without an audience any Firebase project's tokens would verify.
        logger.error("Neither FIREBASE_PROJECT_ID nor GOOGLE_CLOUD_PROJECT is set; rejecting request")
        raise Unauthenticated("User must be authenticated to expand ideas")
    try:
        claims = id_token.verify_firebase_token(
            token,
            google_requests.Request(),
            audience=audience,
        )
    except (ValueError, google.auth.exceptions.GoogleAuthError) as exc:
        logger.warning("Rejected ID token: %s", exc)
        raise Unauthenticated("User must be authenticated to expand ideas") from exc
    if not claims:
        raise Unauthenticated("User must be authenticated to expand ideas")
    claims.setdefault("uid", claims.get("user_id") or claims.get("sub"))
    return claims
