"""Path tiers and capability checks.

The authorization gate classifies every request path with the prefix table
in ``policies.yaml`` and decides whether to let it through, redirect it or
deny it. Handlers reuse ``check_capability`` through ``require_capability``.
"""
import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import Depends
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel
from yaml import safe_load

from src.jangatub.api.auth_deps import get_current_session
from src.jangatub.core.error_handlers import error_response
from src.jangatub.core.errors import AuthenticationError, PermissionError
from src.jangatub.core.security import SessionToken
from src.jangatub.schemas.enums import AccessTier, Capability

logger = logging.getLogger(__name__)

PREMIUM_REQUIRED = "premium_required"
ADMIN_REQUIRED = "admin_required"

# Most restrictive first: a path under both /profile and /profile/dashboard is premium.
TIER_PRECEDENCE = (AccessTier.PREMIUM, AccessTier.ADMIN, AccessTier.AUTHENTICATED)


class AccessPolicy(BaseModel):
    api_prefix: str = "/api"
    pricing_path: str = "/pricing"
    signin_path: str = "/auth/signin"
    home_path: str = "/"
    tiers: dict[AccessTier, list[str]] = {}


def _policy_paths() -> list[str]:
    paths = [
        "policies.yaml",  # Current directory
        "/app/policies.yaml",  # Docker app directory
        os.path.join(os.path.dirname(__file__), "../../../policies.yaml"),  # Relative to this file
    ]
    if os.getenv("POLICIES_FILE"):
        paths.insert(0, os.environ["POLICIES_FILE"])
    return paths


@lru_cache(maxsize=1)
def load_policies() -> AccessPolicy:
    """Load and validate the path tier table."""
    possible_paths = _policy_paths()
    for path in possible_paths:
        if os.path.exists(path):
            logger.info(f"Loading policies from: {path}")
            with open(path, "r") as f:
                return AccessPolicy(**(safe_load(f) or {}))

    # An empty table would make every path public.
    raise RuntimeError(f"policies.yaml not found in any of these paths: {possible_paths}")


def path_matches(path: str, prefix: str) -> bool:
    """Segment-aware prefix match: /quiz matches /quiz and /quiz/1, not /quizzes."""
    prefix = prefix.rstrip("/") or "/"
    if prefix == "/":
        return True
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str, policy: Optional[AccessPolicy] = None) -> AccessTier:
    policy = policy or load_policies()
    for tier in TIER_PRECEDENCE:
        if any(path_matches(path, prefix) for prefix in policy.tiers.get(tier, [])):
            return tier
    return AccessTier.PUBLIC


def check_capability(session: Optional[SessionToken], capability: Capability) -> bool:
    """Whether ``session`` holds ``capability``. Administrators hold every capability."""
    if session is None:
        return False
    if capability == Capability.AUTHENTICATED:
        return True
    if capability == Capability.PREMIUM:
        return session.is_premium or session.is_admin
    if capability == Capability.ADMIN:
        return session.is_admin
    return False


class GateOutcome(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"
    DENY = "deny"


@dataclass(frozen=True)
class GateDecision:
    outcome: GateOutcome
    target: Optional[str] = None
    reason: Optional[str] = None


ALLOW = GateDecision(GateOutcome.ALLOW)


def decide(path: str, session: Optional[SessionToken], policy: Optional[AccessPolicy] = None) -> GateDecision:
    """Decide whether a request for ``path`` may proceed.

    Premium is checked before role, and role before authentication, so an
    anonymous visitor of a premium page lands on pricing rather than sign-in.
    """
    policy = policy or load_policies()
    tier = classify_path(path, policy)
    if tier == AccessTier.PUBLIC:
        return ALLOW

    if tier == AccessTier.PREMIUM and not check_capability(session, Capability.PREMIUM):
        return GateDecision(
            GateOutcome.REDIRECT,
            target=f"{policy.pricing_path}?reason={PREMIUM_REQUIRED}",
            reason=PREMIUM_REQUIRED,
        )

    if tier == AccessTier.ADMIN and not check_capability(session, Capability.ADMIN):
        return GateDecision(GateOutcome.REDIRECT, target=policy.home_path, reason=ADMIN_REQUIRED)

    if not check_capability(session, Capability.AUTHENTICATED):
        return GateDecision(GateOutcome.DENY)

    return ALLOW


def gate_response(path: str, session: Optional[SessionToken], decision: GateDecision,
                  policy: Optional[AccessPolicy] = None):
    """Render a blocking decision: JSON for API paths, a redirect for pages."""
    policy = policy or load_policies()
    if path_matches(path, policy.api_prefix):
        if session is None or decision.outcome == GateOutcome.DENY:
            return error_response(401, "Authentication required")
        if decision.reason == PREMIUM_REQUIRED:
            return JSONResponse(
                status_code=403,
                content={"error": "Premium subscription required", "reason": PREMIUM_REQUIRED},
            )
        return error_response(403, "Administrator access required")

    if decision.outcome == GateOutcome.DENY:
        return RedirectResponse(f"{policy.signin_path}?callbackUrl={quote(path, safe='')}", status_code=307)
    return RedirectResponse(decision.target, status_code=307)


def require_capability(capability: Capability):
    """Dependency factory rejecting sessions that lack ``capability``."""
    async def capability_dependency(
        session: Annotated[Optional[SessionToken], Depends(get_current_session)],
    ) -> SessionToken:
        if session is None:
            raise AuthenticationError("Authentication required")
        if not check_capability(session, capability):
            logger.warning(f"User {session.user_id} lacks capability {capability.value}")
            raise PermissionError("Administrator access required")
        return session

    return capability_dependency


AuthenticatedSession = Annotated[SessionToken, Depends(require_capability(Capability.AUTHENTICATED))]
AdminSession = Annotated[SessionToken, Depends(require_capability(Capability.ADMIN))]
