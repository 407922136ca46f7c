from tests.utils import auth_headers, badges_of, make_quiz, make_subscription, make_user


def make_member():
    user = make_user("premium@example.com", is_premium=True)
    make_subscription(user, tx_ref="ref-member")
    return user


def premium_headers():
    return auth_headers(make_member())


def submit(client, quiz, answers, headers):
    return client.post("/api/quiz/submit", json={"quizId": quiz.id, "answers": answers}, headers=headers)


def test_read_quiz_hides_answers(client, bac, maths):
    quiz = make_quiz(bac, maths)

    response = client.get(f"/api/quiz/{quiz.id}", headers=premium_headers())
    assert response.status_code == 200
    body = response.json()
    assert body["level"]["name"] == "BAC"
    assert [q["order"] for q in body["questions"]] == [0, 1]
    for question in body["questions"]:
        assert set(question) == {"id", "question", "options", "points", "order"}
    assert "correctAnswer" not in response.text
    assert "explanation" not in response.text


def test_read_inactive_or_missing_quiz(client, bac, maths):
    inactive = make_quiz(bac, maths, is_active=False)
    headers = premium_headers()
    assert client.get(f"/api/quiz/{inactive.id}", headers=headers).status_code == 404
    assert client.get("/api/quiz/missing", headers=headers).status_code == 404


def test_submit_grades_and_records_attempt(client, bac, maths):
    quiz = make_quiz(bac, maths)
    headers = premium_headers()

    response = submit(client, quiz, [1, 0], headers)
    assert response.status_code == 200
    body = response.json()
    assert body["score"] == 1
    assert body["totalPoints"] == 3
    assert body["percentage"] == 33
    assert [r["isCorrect"] for r in body["results"]] == [True, False]
    assert [r["points"] for r in body["results"]] == [1, 0]
    assert body["badgeEarned"] is None
    assert body["results"][1]["correctAnswer"] == 1
    assert body["results"][1]["explanation"] == "1/x tend vers 0."

    listing = client.get("/api/quiz", headers=headers).json()
    [summary] = listing
    assert summary["questionCount"] == 2
    assert summary["userBestScore"] == 1
    assert summary["userTotalPoints"] == 3
    assert summary["userAttemptCount"] == 1


def test_submit_rejects_wrong_answer_count(client, bac, maths):
    quiz = make_quiz(bac, maths)
    response = client.post("/api/quiz/submit", json={"quizId": quiz.id, "answers": [1]}, headers=premium_headers())
    assert response.status_code == 400


def test_submit_rejects_out_of_range_answer(client, bac, maths):
    quiz = make_quiz(bac, maths)
    response = client.post("/api/quiz/submit", json={"quizId": quiz.id, "answers": [1, 4]}, headers=premium_headers())
    assert response.status_code == 400


def test_list_filters_by_level_and_subject(client, bac, maths, physics):
    make_quiz(bac, maths)
    headers = premium_headers()
    assert len(client.get("/api/quiz?level=bac&subject=mathematiques", headers=headers).json()) == 1
    assert client.get("/api/quiz?subject=physique-chimie", headers=headers).json() == []


def test_admin_creates_quiz(client, admin, bac, maths):
    payload = {
        "title": "Suites numériques",
        "duration": 15,
        "levelId": bac.id,
        "subjectId": maths.id,
        "questions": [
            {"question": "u(n+1) = 2u(n) est une suite ?", "options": ["arithmétique", "géométrique", "constante", "nulle"],
             "correctAnswer": 1, "explanation": "Raison 2.", "points": 2},
        ],
    }
    response = client.post("/api/quiz", json=payload, headers=auth_headers(admin))
    assert response.status_code == 201
    body = response.json()
    assert body["questionsCount"] == 1
    assert body["level"] == "BAC"

    quiz = client.get(f"/api/quiz/{body['id']}", headers=auth_headers(admin)).json()
    assert quiz["questions"][0]["points"] == 2


def test_admin_quiz_requires_four_options(client, admin, bac, maths):
    payload = {
        "title": "Quiz invalide",
        "levelId": bac.id,
        "subjectId": maths.id,
        "questions": [{"question": "Question trop courte ?", "options": ["a", "b"], "correctAnswer": 0}],
    }
    assert client.post("/api/quiz", json=payload, headers=auth_headers(admin)).status_code == 400


def test_students_cannot_create_quizzes(client, bac, maths):
    payload = {
        "title": "Quiz",
        "levelId": bac.id,
        "subjectId": maths.id,
        "questions": [{"question": "Combien font 2 + 2 ?", "options": ["3", "4", "5", "6"], "correctAnswer": 1}],
    }
    assert client.post("/api/quiz", json=payload, headers=premium_headers()).status_code == 403


def test_wrong_answers_earn_no_points(client, bac, maths):
    quiz = make_quiz(bac, maths)

    body = submit(client, quiz, [0, 3], premium_headers()).json()
    assert body["score"] == 0
    assert body["percentage"] == 0
    assert [r["points"] for r in body["results"]] == [0, 0]


def test_first_submission_earns_first_quiz_badge(client, bac, maths, badges):
    quiz = make_quiz(bac, maths)
    member = make_member()

    body = submit(client, quiz, [1, 0], auth_headers(member)).json()
    assert body["badgeEarned"] == {
        "name": "first_quiz",
        "description": "Premier quiz complété",
        "icon": "🎯",
    }
    assert badges_of(member.id) == ["first_quiz"]


def test_perfect_score_badge_is_awarded_once(client, bac, maths, badges):
    quiz = make_quiz(bac, maths)
    member = make_member()
    headers = auth_headers(member)

    assert submit(client, quiz, [1, 1], headers).json()["badgeEarned"]["name"] == "perfect_score"
    assert badges_of(member.id) == ["first_quiz", "perfect_score"]

    assert submit(client, quiz, [1, 1], headers).json()["badgeEarned"] is None
    assert badges_of(member.id) == ["first_quiz", "perfect_score"]


def test_revoked_premium_is_refused_despite_old_token(client, admin, bac, maths):
    quiz = make_quiz(bac, maths)
    member = make_member()
    old_headers = auth_headers(member)
    assert client.get(f"/api/quiz/{quiz.id}", headers=old_headers).status_code == 200

    revoke = client.patch(
        f"/api/admin/users/{member.id}/premium", json={"isPremium": False}, headers=auth_headers(admin)
    )
    assert revoke.status_code == 200

    for response in (
        client.get("/api/quiz", headers=old_headers),
        client.get(f"/api/quiz/{quiz.id}", headers=old_headers),
        submit(client, quiz, [1, 1], old_headers),
    ):
        assert response.status_code == 403
        assert response.json() == {"error": "This feature is reserved for Premium members"}


def test_premium_claim_without_subscription_is_refused(client, bac, maths):
    quiz = make_quiz(bac, maths)
    lapsed = make_user("lapsed@example.com", is_premium=True)
    assert client.get(f"/api/quiz/{quiz.id}", headers=auth_headers(lapsed)).status_code == 403


def test_progress_summarises_attempts_and_badges(client, bac, maths, physics, badges):
    maths_quiz = make_quiz(bac, maths)
    physics_quiz = make_quiz(bac, physics)
    member = make_member()
    headers = auth_headers(member)

    submit(client, maths_quiz, [1, 1], headers)
    submit(client, physics_quiz, [0, 0], headers)

    response = client.get("/api/progress", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {
        "totalAttempts": 2,
        "averagePercentage": 50,
        "totalScore": 3,
        "totalPossible": 6,
        "favoritesCount": 0,
        "badgeCount": 2,
    }
    assert [s["name"] for s in body["strongSubjects"]] == ["Mathématiques"]
    assert [s["name"] for s in body["weakSubjects"]] == ["Physique-Chimie"]
    assert sorted(a["subject"] for a in body["recentAttempts"]) == ["Mathématiques", "Physique-Chimie"]
    assert sorted(b["name"] for b in body["badges"]) == ["first_quiz", "perfect_score"]
    assert body["subscription"]["status"] == "ACTIVE"


def test_progress_requires_entitlement(client, student):
    assert client.get("/api/progress", headers=auth_headers(student)).status_code == 403
