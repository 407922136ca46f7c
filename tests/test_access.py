import pytest

from src.jangatub.core.access import (
    GateOutcome,
    classify_path,
    decide,
    load_policies,
    path_matches,
)
from src.jangatub.core.security import SessionToken
from src.jangatub.schemas.enums import AccessTier, Role
from tests.utils import auth_headers

FREE = SessionToken(sub="u1")
PREMIUM = SessionToken(sub="u2", is_premium=True)
ADMIN = SessionToken(sub="u3", role=Role.ADMIN)


@pytest.mark.parametrize("path,prefix,expected", [
    ("/quiz", "/quiz", True),
    ("/quiz/abc", "/quiz", True),
    ("/quizzes", "/quiz", False),
    ("/api/admin/users", "/api/admin", True),
    ("/administration", "/admin", False),
])
def test_path_matches_is_segment_aware(path, prefix, expected):
    assert path_matches(path, prefix) is expected


@pytest.mark.parametrize("path,tier", [
    ("/", AccessTier.PUBLIC),
    ("/pricing", AccessTier.PUBLIC),
    ("/quiz/123", AccessTier.PREMIUM),
    ("/profile", AccessTier.AUTHENTICATED),
    ("/profile/dashboard", AccessTier.PREMIUM),
    ("/admin/documents", AccessTier.ADMIN),
    ("/api/favorites", AccessTier.AUTHENTICATED),
    ("/api/payment/webhook", AccessTier.PUBLIC),
    ("/api/progress", AccessTier.PREMIUM),
    ("/api/ai/explain", AccessTier.PREMIUM),
    ("/api/certificate", AccessTier.PUBLIC),
    ("/support", AccessTier.PUBLIC),
])
def test_classify_path(path, tier):
    assert classify_path(path, load_policies()) == tier


def test_anonymous_premium_page_redirects_to_pricing():
    decision = decide("/quiz", None)
    assert decision.outcome == GateOutcome.REDIRECT
    assert decision.target == "/pricing?reason=premium_required"


def test_anonymous_admin_page_redirects_home():
    decision = decide("/admin", None)
    assert decision.outcome == GateOutcome.REDIRECT
    assert decision.target == "/"


def test_anonymous_authenticated_page_is_denied():
    assert decide("/favorites", None).outcome == GateOutcome.DENY


def test_free_user_is_sent_to_pricing_for_premium_paths():
    decision = decide("/download", FREE)
    assert decision.outcome == GateOutcome.REDIRECT
    assert decision.reason == "premium_required"


def test_free_user_cannot_reach_admin():
    assert decide("/admin/users", FREE).target == "/"


@pytest.mark.parametrize("session,path", [
    (FREE, "/favorites"),
    (FREE, "/profile"),
    (PREMIUM, "/quiz/abc"),
    (PREMIUM, "/profile/dashboard"),
    (ADMIN, "/admin"),
    (ADMIN, "/quiz"),
    (None, "/"),
    (None, "/quizzes"),
])
def test_allowed(session, path):
    assert decide(path, session).outcome == GateOutcome.ALLOW


def test_premium_user_is_not_admin():
    assert decide("/admin", PREMIUM).outcome == GateOutcome.REDIRECT


# Gate middleware

def test_api_anonymous_request_gets_401(client):
    response = client.get("/api/quiz")
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


def test_api_free_user_gets_premium_required(client, student):
    response = client.get("/api/quiz", headers=auth_headers(student))
    assert response.status_code == 403
    assert response.json()["reason"] == "premium_required"


def test_api_admin_path_forbidden_for_students(client, student):
    response = client.get("/api/admin/users", headers=auth_headers(student))
    assert response.status_code == 403


def test_invalid_token_is_anonymous(client):
    response = client.get("/api/favorites", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_page_redirects(client, student):
    response = client.get("/quiz", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/pricing?reason=premium_required"

    response = client.get("/favorites", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/auth/signin?callbackUrl=%2Ffavorites"

    response = client.get("/admin", headers=auth_headers(student), follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/"


def test_session_cookie_is_accepted(client, student):
    client.cookies.set("jangatub_session", auth_headers(student)["Authorization"].split(" ", 1)[1])
    response = client.get("/api/favorites")
    assert response.status_code == 200
