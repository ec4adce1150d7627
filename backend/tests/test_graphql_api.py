"""GraphQL surface: resolvers, field visibility and error extensions."""

from typing import Any

from sqlalchemy import select

from quizhub.models.activity import Activity
from tests.helpers.seed import auth_headers, create_category, create_exam_category, create_question

GRAPHQL = "/graphql"


def gql(client, query: str, variables: dict[str, Any] | None = None, user=None) -> dict[str, Any]:
    headers = auth_headers(user) if user is not None else {}
    response = client.post(GRAPHQL, json={"query": query, "variables": variables or {}}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def error_names(result: dict[str, Any]) -> list[str]:
    return [error["extensions"]["name"] for error in result.get("errors") or []]


CREATE_CATEGORY = """
mutation ($input: CategoryCreateInput!) {
  createCategory(input: $input) { id name requiredScore isApproved ownerId rating { markCount averageMark } }
}
"""


class TestAuthorizationOrdering:
    def test_anonymous_mutation_fails_before_validation(self, client):
        # The name is too short, but the missing identity is reported first
        result = gql(client, CREATE_CATEGORY, {"input": {"name": "x"}})
        assert error_names(result) == ["AuthorizationRequiredError"]
        assert result["errors"][0]["extensions"]["code"] == 401

    def test_invalid_input_after_authentication(self, client, test_user):
        result = gql(client, CREATE_CATEGORY, {"input": {"name": "x"}}, user=test_user)
        assert error_names(result) == ["BadRequestError"]

    def test_bad_token(self, client):
        response = client.post(
            GRAPHQL, json={"query": "{ me { id } }"}, headers={"Authorization": "Bearer nope"}
        )
        assert response.json()["errors"][0]["extensions"]["name"] == "AuthorizationRequiredError"


class TestCategories:
    def test_create_approve_and_activity(self, client, db, test_user, other_user, root_user):
        result = gql(client, CREATE_CATEGORY, {"input": {"name": "Geology", "requiredScore": 30}}, user=test_user)
        category = result["data"]["createCategory"]
        assert category["isApproved"] is False
        assert category["ownerId"] == test_user.id
        assert category["rating"] == {"markCount": 0, "averageMark": None}

        toggle = "mutation ($id: ID!) { toggleCategoryApprove(id: $id) { isApproved ownerId } }"
        result = gql(client, toggle, {"id": category["id"]}, user=other_user)
        assert error_names(result) == ["ForbiddenError"]
        assert result["errors"][0]["extensions"]["code"] == 403

        result = gql(client, toggle, {"id": category["id"]}, user=root_user)
        assert result["data"]["toggleCategoryApprove"] == {"isApproved": True, "ownerId": None}

        events = db.execute(select(Activity.event).where(Activity.category_id == category["id"])).scalars().all()
        assert sorted(events) == ["categoryApproved", "categoryCreated"]

        result = gql(client, "{ activities { data { event categoryName } meta { size hasMore } } }")
        assert [a["event"] for a in result["data"]["activities"]["data"]] == ["categoryApproved", "categoryCreated"]
        assert result["data"]["activities"]["meta"] == {"size": 10, "hasMore": False}

    def test_duplicate_name(self, client, db, test_user):
        create_category(db, test_user, name="Ecology")
        result = gql(client, CREATE_CATEGORY, {"input": {"name": "Ecology"}}, user=test_user)
        assert error_names(result) == ["ConflictError"]
        assert result["errors"][0]["extensions"]["code"] == 409

    def test_lookup_errors(self, client):
        result = gql(client, '{ category(id: "nope") { id } }')
        assert error_names(result) == ["BadRequestError"]
        result = gql(client, '{ category(id: "%s") { id } }' % ("0" * 24))
        assert error_names(result) == ["NotFoundError"]

    def test_list_and_own_categories(self, client, db, test_user, other_user):
        create_category(db, test_user, name="Mine")
        create_category(db, other_user, name="Theirs")

        result = gql(
            client,
            '{ categories(filter: {search: "the"}, pagination: {size: 5}) { data { name } meta { hasMore } } }',
        )
        assert [c["name"] for c in result["data"]["categories"]["data"]] == ["Theirs"]

        result = gql(client, "{ ownCategories { data { name } } }", user=test_user)
        assert [c["name"] for c in result["data"]["ownCategories"]["data"]] == ["Mine"]

    def test_rate_category(self, client, db, test_user, root_user):
        category = create_category(db, root_user)
        rate = "mutation ($id: ID!, $mark: Int!) { rateCategory(id: $id, mark: $mark) { rating { markCount averageMark } myRatingMark } }"

        result = gql(client, rate, {"id": category.id, "mark": 4}, user=test_user)
        assert result["data"]["rateCategory"]["rating"] == {"markCount": 1, "averageMark": 4.0}

        result = gql(client, rate, {"id": category.id, "mark": 2}, user=test_user)
        assert error_names(result) == ["ConflictError"]

        result = gql(client, rate, {"id": category.id, "mark": 6}, user=root_user)
        assert error_names(result) == ["BadRequestError"]

        result = gql(client, '{ category(id: "%s") { myRatingMark } }' % category.id, user=test_user)
        assert result["data"]["category"]["myRatingMark"] == 4


class TestQuestions:
    CREATE_QUESTION = """
    mutation ($input: QuestionCreateInput!) {
      createQuestion(input: $input) { id title type difficulty choices { title correct } }
    }
    """

    def test_create_question_and_choice_visibility(self, client, db, test_user, other_user):
        category = create_category(db, test_user)
        variables = {
            "input": {
                "categoryId": category.id,
                "type": "CHOICE",
                "difficulty": "HARD",
                "title": "Which planet is <i>red</i>?",
                "choices": [{"title": "Mars", "correct": True}, {"title": "Venus"}],
            }
        }
        result = gql(client, self.CREATE_QUESTION, variables, user=test_user)
        question = result["data"]["createQuestion"]
        assert question["title"] == "Which planet is &lt;i&gt;red&lt;/i&gt;?"
        assert question["type"] == "CHOICE"
        assert question["choices"] == [{"title": "Mars", "correct": True}, {"title": "Venus", "correct": False}]

        query = '{ question(id: "%s") { choices { title } } }' % question["id"]
        assert gql(client, query, user=other_user)["data"]["question"]["choices"] is None
        assert gql(client, query)["data"]["question"]["choices"] is None

    def test_type_question_requires_answers(self, client, db, test_user):
        category = create_category(db, test_user)
        variables = {
            "input": {
                "categoryId": category.id,
                "type": "TYPE",
                "difficulty": "EASY",
                "title": "Capital city of France?",
            }
        }
        result = gql(client, self.CREATE_QUESTION, variables, user=test_user)
        assert error_names(result) == ["BadRequestError"]

    def test_questions_filter(self, client, db, test_user):
        category = create_category(db, test_user)
        create_question(db, category, test_user, title="Question about rivers")
        create_question(db, create_category(db, test_user), test_user, title="Question about lakes")

        query = '{ questions(filter: {categoryId: "%s"}) { data { title } } }' % category.id
        assert [q["title"] for q in gql(client, query)["data"]["questions"]["data"]] == ["Question about rivers"]


class TestExams:
    def test_exam_flow(self, client, db, test_user, root_user):
        category, _ = create_exam_category(db, root_user, question_count=3)

        result = gql(
            client,
            "mutation ($input: ExamCreateInput!) { createExam(input: $input) { id questionCount questionNumber } }",
            {"input": {"categoryId": category.id}},
            user=test_user,
        )
        exam = result["data"]["createExam"]
        assert exam["questionCount"] == 3

        result = gql(
            client,
            'mutation { createExam(input: {categoryId: "%s"}) { id } }' % category.id,
            user=test_user,
        )
        assert error_names(result) == ["ConflictError"]

        result = gql(
            client,
            '{ examQuestion(examId: "%s", number: 2) { number choices exam { questionNumber } } }' % exam["id"],
            user=test_user,
        )
        assert result["data"]["examQuestion"] == {
            "number": 2,
            "choices": ["Right", "Wrong"],
            "exam": {"questionNumber": 2},
        }

        result = gql(client, '{ examQuestion(examId: "%s", number: 5) { number } }' % exam["id"], user=test_user)
        assert error_names(result) == ["NotFoundError"]

        result = gql(
            client,
            'mutation { createExamQuestionAnswer(examId: "%s", number: 0, input: {choice: 0}) { choice } }'
            % exam["id"],
            user=test_user,
        )
        assert result["data"]["createExamQuestionAnswer"]["choice"] == 0

        result = gql(
            client,
            'mutation { createExamQuestionAnswer(examId: "%s", number: 1, input: {answer: "mars"}) { choice } }'
            % exam["id"],
            user=test_user,
        )
        assert error_names(result) == ["BadRequestError"]

        result = gql(client, '{ currentExamQuestion(examId: "%s") { number } }' % exam["id"], user=test_user)
        assert result["data"]["currentExamQuestion"]["number"] == 2

        result = gql(client, "{ currentExams { id } }", user=test_user)
        assert result["data"]["currentExams"] == [{"id": exam["id"]}]

        result = gql(
            client,
            'mutation { createExamCompletion(examId: "%s") { correctAnswerCount completedAt } }' % exam["id"],
            user=test_user,
        )
        assert result["data"]["createExamCompletion"]["correctAnswerCount"] == 1

        result = gql(client, "{ exams(filter: {completion: true}) { data { id } } }", user=test_user)
        assert result["data"]["exams"]["data"] == [{"id": exam["id"]}]

        result = gql(client, 'mutation { deleteExam(id: "%s") { id } }' % exam["id"], user=test_user)
        assert result["data"]["deleteExam"]["id"] == exam["id"]

    def test_stranger_cannot_read_exam(self, client, db, test_user, other_user, root_user):
        category, _ = create_exam_category(db, root_user)
        result = gql(
            client, 'mutation { createExam(input: {categoryId: "%s"}) { id } }' % category.id, user=test_user
        )
        exam_id = result["data"]["createExam"]["id"]

        result = gql(client, '{ exam(id: "%s") { id } }' % exam_id, user=other_user)
        assert error_names(result) == ["ForbiddenError"]


class TestUsers:
    def test_register_login_and_me(self, client):
        result = gql(
            client,
            'mutation { createMe(input: {name: "Erin", email: "erin@example.com", password: "hunter22"}) { id } }',
        )
        user_id = result["data"]["createMe"]["id"]

        result = gql(
            client,
            'mutation { createAuthenticationToken(input: {email: "erin@example.com", password: "hunter22"}) { token } }',
        )
        token = result["data"]["createAuthenticationToken"]["token"]

        response = client.post(
            GRAPHQL,
            json={"query": "{ me { id email permissions categoryRatingMarks } }"},
            headers={"Authorization": f"Bearer {token}"},
        )
        me = response.json()["data"]["me"]
        assert me["id"] == user_id
        assert me["email"] == "erin@example.com"
        assert me["permissions"] == ["regular"]
        assert me["categoryRatingMarks"] == [[], [], [], [], []]

    def test_wrong_credentials(self, client, test_user):
        result = gql(
            client,
            'mutation { createAuthenticationToken(input: {email: "%s", password: "wrong1"}) { token } }'
            % test_user.email,
        )
        assert error_names(result) == ["ForbiddenError"]
        result = gql(
            client,
            'mutation { createAuthenticationToken(input: {email: "ghost@example.com", password: "wrong1"}) { token } }',
        )
        assert error_names(result) == ["NotFoundError"]

    def test_private_fields_are_hidden_from_others(self, client, test_user, other_user, root_user):
        query = "{ users { data { id email permissions } } }"
        assert error_names(gql(client, query, user=test_user)) == ["ForbiddenError"]

        users = {u["id"]: u for u in gql(client, query, user=root_user)["data"]["users"]["data"]}
        assert users[test_user.id]["email"] == test_user.email

        result = gql(
            client,
            'mutation { updateUser(id: "%s", input: {name: "Alice Two"}) { name email } }' % test_user.id,
            user=root_user,
        )
        assert result["data"]["updateUser"] == {"name": "Alice Two", "email": test_user.email}

    def test_update_and_delete_me(self, client, test_user):
        result = gql(client, 'mutation { updateMe(input: {name: "Ally"}) { name } }', user=test_user)
        assert result["data"]["updateMe"]["name"] == "Ally"

        result = gql(client, "mutation { deleteMe { id } }", user=test_user)
        assert result["data"]["deleteMe"]["id"] == test_user.id

        # The token now points at a deleted user
        assert error_names(gql(client, "{ me { id } }", user=test_user)) == ["AuthorizationRequiredError"]

    def test_create_and_delete_user(self, client, test_user, root_user):
        create = (
            'mutation { createUser(input: {name: "Finn", email: "finn@example.com", password: "hunter22", '
            'permissions: ["regular", "getUsers"]}) { id permissions } }'
        )
        assert error_names(gql(client, create, user=test_user)) == ["ForbiddenError"]

        created = gql(client, create, user=root_user)["data"]["createUser"]
        assert created["permissions"] == ["regular", "getUsers"]

        result = gql(client, 'mutation { deleteUser(id: "%s") { id } }' % created["id"], user=root_user)
        assert result["data"]["deleteUser"]["id"] == created["id"]


def test_permission_query(client):
    result = gql(client, "{ permission { permissions hierarchy { permission grants } } }")
    permission = result["data"]["permission"]
    assert "getQuestionChoices" in permission["permissions"]
    assert {"permission": "root", "grants": ["*"]} in permission["hierarchy"]
