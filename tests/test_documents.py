from datetime import timedelta

from sqlalchemy import select

from src.jangatub.crud.crud_favorite import favorite as crud_favorite
from src.jangatub.models import Favorite
from src.jangatub.models.base import utcnow
from src.jangatub.schemas.enums import DocumentType
from tests.utils import auth_headers, make_document, make_subscription, make_user, session


# Favorites

def toggle(client, user, document_id):
    return client.post("/api/favorites", json={"documentId": document_id}, headers=auth_headers(user))


def test_favorite_toggles(client, student, bac, maths):
    document = make_document(bac, maths)

    states = [toggle(client, student, document.id).json()["favorited"] for _ in range(3)]
    assert states == [True, False, True]

    response = client.get("/api/favorites", headers=auth_headers(student))
    assert response.status_code == 200
    [favorite] = response.json()
    assert favorite["id"] == document.id
    assert favorite["level"]["slug"] == "bac"


def test_favorite_insert_race_reports_favorited(client, monkeypatch, student, bac, maths):
    document = make_document(bac, maths)
    with session() as db:
        db.add(Favorite(user_id=student.id, document_id=document.id))
        db.commit()

    async def missed_link(db, *, user_id, document_id):
        return None

    monkeypatch.setattr(crud_favorite, "get_link", missed_link)

    response = toggle(client, student, document.id)
    assert response.status_code == 200
    assert response.json() == {"favorited": True}
    with session() as db:
        rows = db.execute(select(Favorite).where(Favorite.user_id == student.id)).scalars().all()
        assert len(rows) == 1


def test_favorite_unknown_document(client, student):
    response = toggle(client, student, "missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Document not found"}


# Pack download

def premium_member(email="premium@example.com"):
    user = make_user(email, is_premium=True)
    make_subscription(user, tx_ref=f"ref-{email}")
    return user


def test_pack_is_ordered_by_subject_year_and_type(client, bac, maths, physics):
    physics_paper = make_document(bac, physics, title="Physique 2023", year=2023)
    maths_correction = make_document(bac, maths, title="Corrigé maths 2022", year=2022, type=DocumentType.CORRECTION)
    maths_paper = make_document(bac, maths, title="Maths 2022", year=2022)

    response = client.post("/api/download/pack", json={"levelSlug": "bac"}, headers=auth_headers(premium_member()))
    assert response.status_code == 200
    body = response.json()
    assert body["packName"] == "Pack BAC"
    assert body["totalDocuments"] == 3
    assert [d["id"] for d in body["documents"]] == [maths_paper.id, maths_correction.id, physics_paper.id]
    assert body["documents"][0]["pdfUrl"].startswith("https://")
    assert body["documents"][0]["subject"] == "Mathématiques"


def test_pack_name_with_subject_and_year(client, bac, maths, physics):
    make_document(bac, maths, year=2021)
    make_document(bac, maths, year=2022)
    make_document(bac, physics, year=2022)

    response = client.post(
        "/api/download/pack",
        json={"levelSlug": "bac", "subjectSlug": "mathematiques", "year": 2022},
        headers=auth_headers(premium_member()),
    )
    assert response.status_code == 200
    assert response.json()["packName"] == "Pack BAC - Mathématiques 2022"
    assert response.json()["totalDocuments"] == 1


def test_pack_empty_is_404(client, bac):
    response = client.post("/api/download/pack", json={"levelSlug": "bac"}, headers=auth_headers(premium_member()))
    assert response.status_code == 404


def test_pack_checks_entitlement_not_token(client, bac, maths):
    make_document(bac, maths)
    user = make_user("lapsed@example.com", is_premium=True)
    make_subscription(user, tx_ref="ref-lapsed", end_at=utcnow() - timedelta(days=2))

    response = client.post("/api/download/pack", json={"levelSlug": "bac"}, headers=auth_headers(user))
    assert response.status_code == 403


def test_pack_allowed_for_admin(client, admin, bac, maths):
    make_document(bac, maths)
    response = client.post("/api/download/pack", json={"levelSlug": "bac"}, headers=auth_headers(admin))
    assert response.status_code == 200
