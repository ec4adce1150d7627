"""REST surface: categories, exams, permissions, health and the error envelope."""

from tests.helpers.seed import auth_headers, create_category, create_exam_category

API = "/v1"


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Quizhub API"

    def test_health(self, client):
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ready(self, client):
        response = client.get(f"{API}/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["db"]["status"] == "ok"
        assert response.json()["checks"]["schema"]["status"] == "ok"

    def test_request_id_is_echoed(self, client):
        response = client.get(f"{API}/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestCategoriesApi:
    def test_create_requires_authentication_before_validation(self, client):
        response = client.post(f"{API}/categories", json={"name": ""})
        assert response.status_code == 401
        body = response.json()
        assert body["error_code"] == "AuthorizationRequiredError"
        assert "request_id" in body

    def test_create_and_get(self, client, test_user):
        response = client.post(
            f"{API}/categories", json={"name": "Astronomy", "required_score": 50}, headers=auth_headers(test_user)
        )
        assert response.status_code == 201
        created = response.json()
        assert created["name"] == "Astronomy"
        assert created["is_approved"] is False
        assert created["owner_id"] == test_user.id
        assert created["rating"] == {"mark_count": 0, "average_mark": None}

        response = client.get(f"{API}/categories/{created['id']}")
        assert response.status_code == 200
        assert response.json()["required_score"] == 50

    def test_validation_error_envelope(self, client, test_user):
        response = client.post(f"{API}/categories", json={"name": "ab"}, headers=auth_headers(test_user))
        assert response.status_code == 400
        assert response.json()["error_code"] == "ValidatorError"

    def test_duplicate_name(self, client, db, test_user):
        create_category(db, test_user, name="Botany")
        response = client.post(f"{API}/categories", json={"name": "Botany"}, headers=auth_headers(test_user))
        assert response.status_code == 409
        assert response.json()["error_code"] == "CategoryNameTakenError"

    def test_malformed_and_unknown_ids(self, client):
        assert client.get(f"{API}/categories/not-an-id").status_code == 400
        response = client.get(f"{API}/categories/{'0' * 24}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "CategoryNotFoundError"

    def test_update_replace_delete(self, client, db, test_user, other_user):
        category = create_category(db, test_user, name="Zoology", approved=False)
        url = f"{API}/categories/{category.id}"

        response = client.patch(url, json={"required_score": 70}, headers=auth_headers(test_user))
        assert response.status_code == 205
        assert response.content == b""

        response = client.put(url, json={"name": "Zoology II"}, headers=auth_headers(test_user))
        assert response.status_code == 205
        assert client.get(url).json()["name"] == "Zoology II"

        response = client.delete(url, headers=auth_headers(other_user))
        assert response.status_code == 403
        assert response.json()["error_code"] == "AuthorizationFailedError"

        assert client.delete(url, headers=auth_headers(test_user)).status_code == 204
        assert client.get(url).status_code == 404

    def test_list_with_pagination(self, client, db, test_user):
        for i in range(3):
            create_category(db, test_user, name=f"Listed {i}")

        response = client.get(f"{API}/categories", params={"size": 2})
        assert response.status_code == 200
        body = response.json()
        assert [c["name"] for c in body["items"]] == ["Listed 2", "Listed 1"]
        assert body["has_more"] is True

        response = client.get(f"{API}/categories", params={"size": 2, "next_cursor": body["next_cursor"]})
        assert [c["name"] for c in response.json()["items"]] == ["Listed 0"]

    def test_invalid_token_is_rejected(self, client):
        response = client.get(f"{API}/categories", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_malformed_authorization_header(self, client):
        response = client.post(f"{API}/categories", json={"name": "Nope"}, headers={"Authorization": "Token x"})
        assert response.status_code == 401


class TestExamsApi:
    def test_exam_flow(self, client, db, test_user, root_user):
        category, questions = create_exam_category(db, root_user, question_count=3)
        headers = auth_headers(test_user)

        response = client.post(f"{API}/exams", json={"category_id": category.id}, headers=headers)
        assert response.status_code == 201
        exam = response.json()
        assert exam["question_count"] == 3
        assert exam["correct_answer_count"] is None

        response = client.post(f"{API}/exams", json={"category_id": category.id}, headers=headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "ExamTakenError"

        response = client.get(f"{API}/exams/{exam['id']}/questions/2", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["number"] == 2
        assert body["choices"] == ["Right", "Wrong"]
        assert body["question"]["id"] == questions[2].id
        # Correctness stays hidden from the exam taker
        assert body["question"]["choices"] is None
        assert client.get(f"{API}/exams/{exam['id']}", headers=headers).json()["question_number"] == 2

        assert client.get(f"{API}/exams/{exam['id']}/questions/5", headers=headers).status_code == 404

        response = client.post(
            f"{API}/exams/{exam['id']}/questions/0/answer", json={"choice": 0}, headers=headers
        )
        assert response.status_code == 201
        assert response.json()["choice"] == 0

        response = client.post(
            f"{API}/exams/{exam['id']}/questions/1/answer", json={"choice": 9}, headers=headers
        )
        assert response.status_code == 400

        response = client.post(f"{API}/exams/{exam['id']}/completion", headers=headers)
        assert response.status_code == 201
        assert response.json()["correct_answer_count"] == 1

        response = client.post(f"{API}/exams/{exam['id']}/completion", headers=headers)
        assert response.status_code == 409

        response = client.get(f"{API}/exams", params={"completion": "true"}, headers=headers)
        assert [e["id"] for e in response.json()["items"]] == [exam["id"]]

        assert client.delete(f"{API}/exams/{exam['id']}", headers=headers).status_code == 204
        assert client.get(f"{API}/exams/{exam['id']}", headers=headers).status_code == 404

    def test_exam_without_approved_questions(self, client, db, test_user, root_user):
        category = create_category(db, root_user)
        response = client.post(f"{API}/exams", json={"category_id": category.id}, headers=auth_headers(test_user))
        assert response.status_code == 409
        assert response.json()["error_code"] == "CategoryWithoutApprovedQuestionsError"

    def test_exams_require_authentication(self, client):
        assert client.get(f"{API}/exams").status_code == 401


class TestPermissionsApi:
    def test_permissions(self, client):
        response = client.get(f"{API}/permissions")
        assert response.status_code == 200
        body = response.json()
        assert "approveCategory" in body["permissions"]
        assert body["hierarchy"]["root"] == ["*"]

    def test_hierarchy(self, client):
        response = client.get(f"{API}/permissions/hierarchy")
        assert "createExam" in response.json()["hierarchy"]["regular"]
