import pytest

from src.jangatub.main import app
from src.jangatub.utils.storage import MAX_IMAGE_SIZE, get_storage
from tests.utils import auth_headers, get_user, make_document, make_quiz, make_user


class FakeStorage:
    def __init__(self, configured=True):
        self.configured = configured
        self.objects = {}

    async def put(self, key, data, content_type):
        self.objects[key] = (data, content_type)
        return f"https://files.example.com/{key}"


@pytest.fixture
def storage():
    fake = FakeStorage()
    app.dependency_overrides[get_storage] = lambda: fake
    return fake


# Users

def test_list_users_paginated(client, admin):
    for i in range(3):
        make_user(f"eleve{i}@example.com", name=f"Eleve {i}")

    response = client.get("/api/admin/users?page=1&limit=2", headers=auth_headers(admin))
    assert response.status_code == 200
    body = response.json()
    assert len(body["items"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 4, "totalPages": 2}

    response = client.get("/api/admin/users?q=eleve1", headers=auth_headers(admin))
    assert [u["email"] for u in response.json()["items"]] == ["eleve1@example.com"]


def test_admin_cannot_delete_self(client, admin):
    response = client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers(admin))
    assert response.status_code == 400
    assert get_user(admin.id) is not None


def test_delete_user(client, admin, student):
    assert client.delete(f"/api/admin/users/{student.id}", headers=auth_headers(admin)).status_code == 200
    assert get_user(student.id) is None
    assert client.delete(f"/api/admin/users/{student.id}", headers=auth_headers(admin)).status_code == 404


# Documents

def test_document_crud(client, admin, bac, maths):
    headers = auth_headers(admin)
    payload = {
        "title": "BAC 2023 Mathématiques",
        "year": 2023,
        "levelId": bac.id,
        "subjectId": maths.id,
        "type": "SUBJECT",
        "pdfUrl": "https://cdn.example.com/bac-2023.pdf",
    }
    created = client.post("/api/admin/documents", json=payload, headers=headers)
    assert created.status_code == 201
    document_id = created.json()["id"]
    assert created.json()["subject"]["name"] == "Mathématiques"

    updated = client.put(f"/api/admin/documents/{document_id}", json={"year": 2022}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["year"] == 2022
    assert updated.json()["title"] == "BAC 2023 Mathématiques"

    listing = client.get("/api/admin/documents", headers=headers).json()
    assert listing["pagination"]["total"] == 1

    assert client.delete(f"/api/admin/documents/{document_id}", headers=headers).status_code == 200
    assert client.get(f"/api/admin/documents/{document_id}", headers=headers).status_code == 404


def test_document_requires_known_level(client, admin, maths):
    payload = {
        "title": "Sujet orphelin",
        "year": 2023,
        "levelId": "missing",
        "subjectId": maths.id,
        "type": "SUBJECT",
        "pdfUrl": "https://cdn.example.com/x.pdf",
    }
    response = client.post("/api/admin/documents", json=payload, headers=auth_headers(admin))
    assert response.status_code == 404


def test_document_validation(client, admin, bac, maths):
    payload = {
        "title": "Sujet",
        "year": 1970,
        "levelId": bac.id,
        "subjectId": maths.id,
        "type": "SUBJECT",
        "pdfUrl": "ftp://cdn.example.com/x.pdf",
    }
    assert client.post("/api/admin/documents", json=payload, headers=auth_headers(admin)).status_code == 400


# Levels and subjects

def test_catalogue_slug_must_be_unique(client, admin, bac):
    response = client.post("/api/admin/levels", json={"name": "Bac bis", "slug": "bac"}, headers=auth_headers(admin))
    assert response.status_code == 409


def test_catalogue_slug_format(client, admin):
    response = client.post("/api/admin/subjects", json={"name": "SVT", "slug": "S V T"}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_catalogue_delete_refused_while_used(client, admin, bac, maths, physics):
    make_document(bac, maths)
    make_quiz(bac, physics)
    headers = auth_headers(admin)

    assert client.delete(f"/api/admin/subjects/{maths.id}", headers=headers).status_code == 409
    assert client.delete(f"/api/admin/subjects/{physics.id}", headers=headers).status_code == 409

    listing = {s["slug"]: s for s in client.get("/api/admin/subjects", headers=headers).json()}
    assert listing["mathematiques"]["documentCount"] == 1
    assert listing["physique-chimie"]["quizCount"] == 1


def test_catalogue_create_update_delete(client, admin):
    headers = auth_headers(admin)
    created = client.post("/api/admin/levels", json={"name": "CFEE", "slug": "cfee"}, headers=headers)
    assert created.status_code == 201
    level_id = created.json()["id"]

    renamed = client.put(f"/api/admin/levels/{level_id}", json={"name": "CFEE 2"}, headers=headers)
    assert renamed.json()["name"] == "CFEE 2"
    assert renamed.json()["slug"] == "cfee"

    assert client.delete(f"/api/admin/levels/{level_id}", headers=headers).status_code == 200
    assert client.delete(f"/api/admin/levels/{level_id}", headers=headers).status_code == 404


# Upload

def upload(client, admin, filename, content_type, size, kind=None):
    data = {"type": kind} if kind else {}
    return client.post(
        "/api/admin/upload",
        files={"file": (filename, b"x" * size, content_type)},
        data=data,
        headers=auth_headers(admin),
    )


def test_oversized_image_is_rejected(client, admin, storage):
    response = upload(client, admin, "cover.png", "image/png", 6 * 1024 * 1024, kind="image")
    assert response.status_code == 400
    assert "5 MB" in response.json()["error"]
    assert storage.objects == {}


def test_large_pdf_is_accepted(client, admin, storage):
    response = upload(client, admin, "bac-2023.pdf", "application/pdf", 6 * 1024 * 1024)
    assert response.status_code == 200
    body = response.json()
    assert body["size"] == 6 * 1024 * 1024
    assert body["key"].startswith("jangatub/documents/")
    assert body["key"].endswith(".pdf")
    assert body["url"] == f"https://files.example.com/{body['key']}"


def test_image_upload(client, admin, storage):
    response = upload(client, admin, "cover.webp", "image/webp", MAX_IMAGE_SIZE, kind="image")
    assert response.status_code == 200
    assert response.json()["key"].startswith("jangatub/covers/")


def test_document_upload_must_be_pdf(client, admin, storage):
    response = upload(client, admin, "notes.docx", "application/msword", 1024)
    assert response.status_code == 400
    assert response.json() == {"error": "Only PDF files are accepted"}


def test_upload_without_storage(client, admin):
    app.dependency_overrides[get_storage] = lambda: FakeStorage(configured=False)
    response = upload(client, admin, "bac.pdf", "application/pdf", 1024)
    assert response.status_code == 503
