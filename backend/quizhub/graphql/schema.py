"""GraphQL schema: queries and mutations over the service layer.

Every resolver that needs an identity calls ``require_user()`` first so an
anonymous request fails with AuthorizationRequiredError before any input
validation or lookup happens.
"""

from typing import Optional

import strawberry
from graphql import GraphQLError
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext, Info

from quizhub.core.errors import INTERNAL_SERVER_ERROR
from quizhub.core.logging import get_logger
from quizhub.core.permissions import all_permissions
from quizhub.graphql.context import get_context
from quizhub.graphql.errors import ErrorKindExtension, error_kind_of
from quizhub.graphql.inputs import (
    CategoryCreateInput,
    CategoryFilterInput,
    CategoryUpdateInput,
    CredentialsInput,
    ExamCreateInput,
    ExamFilterInput,
    ExamQuestionAnswerInput,
    MeCreateInput,
    MeUpdateInput,
    PaginationInput,
    QuestionCreateInput,
    QuestionFilterInput,
    QuestionUpdateInput,
    UserCreateInput,
    UserFilterInput,
    UserUpdateInput,
    pagination_params,
    to_schema,
)
from quizhub.graphql.types import (
    ActivityNode,
    AuthenticationToken,
    CategoryNode,
    ExamNode,
    ExamQuestionNode,
    PaginatedActivities,
    PaginatedCategories,
    PaginatedExams,
    PaginatedQuestions,
    PaginatedUsers,
    PaginationMeta,
    PermissionGrant,
    PermissionNode,
    QuestionNode,
    UserNode,
)
from quizhub.schemas.auth import Credentials
from quizhub.schemas.category import CategoryCreate, CategoryListQuery, CategoryUpdate
from quizhub.schemas.common import RateRequest
from quizhub.schemas.exam import ExamCreate, ExamListQuery, ExamQuestionAnswerCreate
from quizhub.schemas.question import QuestionCreate, QuestionListQuery, QuestionUpdate
from quizhub.schemas.user import MeCreate, MeUpdate, UserCreate, UserListQuery, UserUpdate

logger = get_logger(__name__)


@strawberry.type
class Query:
    @strawberry.field
    def category(self, info: Info, id: strawberry.ID) -> CategoryNode:
        return CategoryNode.from_model(info.context.services.category_provider.get_category(id))

    @strawberry.field
    async def categories(
        self,
        info: Info,
        filter: Optional[CategoryFilterInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> PaginatedCategories:
        services = info.context.services
        page = await services.categories.list_categories(
            to_schema(CategoryListQuery, filter), pagination_params(pagination), info.context.user
        )
        return PaginatedCategories(
            data=[CategoryNode.from_model(c) for c in page.items], meta=PaginationMeta.from_page(page)
        )

    @strawberry.field
    async def own_categories(self, info: Info, pagination: Optional[PaginationInput] = None) -> PaginatedCategories:
        user = info.context.require_user()
        page = await info.context.services.categories.list_own_categories(pagination_params(pagination), user)
        return PaginatedCategories(
            data=[CategoryNode.from_model(c) for c in page.items], meta=PaginationMeta.from_page(page)
        )

    @strawberry.field
    def question(self, info: Info, id: strawberry.ID) -> QuestionNode:
        return QuestionNode.from_model(info.context.services.question_provider.get_question(id))

    @strawberry.field
    async def questions(
        self,
        info: Info,
        filter: Optional[QuestionFilterInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> PaginatedQuestions:
        page = await info.context.services.questions.list_questions(
            to_schema(QuestionListQuery, filter), pagination_params(pagination)
        )
        return PaginatedQuestions(
            data=[QuestionNode.from_model(q) for q in page.items], meta=PaginationMeta.from_page(page)
        )

    @strawberry.field
    async def exam(self, info: Info, id: strawberry.ID) -> ExamNode:
        user = info.context.require_user()
        return ExamNode.from_model(await info.context.services.exams.get_exam(id, user))

    @strawberry.field
    async def exams(
        self,
        info: Info,
        filter: Optional[ExamFilterInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> PaginatedExams:
        user = info.context.require_user()
        page = await info.context.services.exams.list_exams(
            to_schema(ExamListQuery, filter), pagination_params(pagination), user
        )
        return PaginatedExams(data=[ExamNode.from_model(e) for e in page.items], meta=PaginationMeta.from_page(page))

    @strawberry.field
    async def current_exams(self, info: Info) -> list[ExamNode]:
        user = info.context.require_user()
        return [ExamNode.from_model(e) for e in await info.context.services.exams.list_current_exams(user)]

    @strawberry.field(description="Viewing a question moves the owner's exam cursor to it")
    async def exam_question(self, info: Info, exam_id: strawberry.ID, number: int) -> ExamQuestionNode:
        user = info.context.require_user()
        view = await info.context.services.exams.get_exam_question(exam_id, number, user)
        return ExamQuestionNode.from_view(view)

    @strawberry.field
    async def current_exam_question(self, info: Info, exam_id: strawberry.ID) -> ExamQuestionNode:
        user = info.context.require_user()
        return ExamQuestionNode.from_view(await info.context.services.exams.get_current_exam_question(exam_id, user))

    @strawberry.field
    def me(self, info: Info) -> UserNode:
        return UserNode.from_model(info.context.require_user())

    @strawberry.field
    async def users(
        self,
        info: Info,
        filter: Optional[UserFilterInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> PaginatedUsers:
        user = info.context.require_user()
        page = await info.context.services.users.list_users(
            to_schema(UserListQuery, filter), pagination_params(pagination), user
        )
        return PaginatedUsers(data=[UserNode.from_model(u) for u in page.items], meta=PaginationMeta.from_page(page))

    @strawberry.field
    async def activities(self, info: Info, pagination: Optional[PaginationInput] = None) -> PaginatedActivities:
        page = await info.context.services.activities.list_activities(pagination_params(pagination))
        return PaginatedActivities(
            data=[ActivityNode.from_model(a) for a in page.items], meta=PaginationMeta.from_page(page)
        )

    @strawberry.field
    def permission(self, info: Info) -> PermissionNode:
        hierarchy = info.context.services.verifier.hierarchy
        return PermissionNode(
            permissions=all_permissions(),
            hierarchy=[PermissionGrant(permission=role, grants=list(grants)) for role, grants in hierarchy.items()],
        )


@strawberry.type
class Mutation:
    # Categories

    @strawberry.mutation
    async def create_category(self, info: Info, input: CategoryCreateInput) -> CategoryNode:
        user = info.context.require_user()
        category = await info.context.services.categories.create_category(to_schema(CategoryCreate, input), user)
        return CategoryNode.from_model(category)

    @strawberry.mutation
    async def update_category(self, info: Info, id: strawberry.ID, input: CategoryUpdateInput) -> CategoryNode:
        user = info.context.require_user()
        category = await info.context.services.categories.update_category(id, to_schema(CategoryUpdate, input), user)
        return CategoryNode.from_model(category)

    @strawberry.mutation
    async def toggle_category_approve(self, info: Info, id: strawberry.ID) -> CategoryNode:
        user = info.context.require_user()
        return CategoryNode.from_model(await info.context.services.categories.toggle_category_approve(id, user))

    @strawberry.mutation
    async def delete_category(self, info: Info, id: strawberry.ID) -> CategoryNode:
        user = info.context.require_user()
        return CategoryNode.from_model(await info.context.services.categories.delete_category(id, user))

    @strawberry.mutation
    async def rate_category(self, info: Info, id: strawberry.ID, mark: int) -> CategoryNode:
        user = info.context.require_user()
        services = info.context.services
        data = RateRequest(mark=mark)
        category = services.category_provider.get_category(id)
        return CategoryNode.from_model(await services.ratings.create_rating_mark(category, data.mark, user))

    # Questions

    @strawberry.mutation
    async def create_question(self, info: Info, input: QuestionCreateInput) -> QuestionNode:
        user = info.context.require_user()
        question = await info.context.services.questions.create_question(to_schema(QuestionCreate, input), user)
        return QuestionNode.from_model(question)

    @strawberry.mutation
    async def update_question(self, info: Info, id: strawberry.ID, input: QuestionUpdateInput) -> QuestionNode:
        user = info.context.require_user()
        question = await info.context.services.questions.update_question(id, to_schema(QuestionUpdate, input), user)
        return QuestionNode.from_model(question)

    @strawberry.mutation
    async def toggle_question_approve(self, info: Info, id: strawberry.ID) -> QuestionNode:
        user = info.context.require_user()
        return QuestionNode.from_model(await info.context.services.questions.toggle_question_approve(id, user))

    @strawberry.mutation
    async def delete_question(self, info: Info, id: strawberry.ID) -> QuestionNode:
        user = info.context.require_user()
        return QuestionNode.from_model(await info.context.services.questions.delete_question(id, user))

    @strawberry.mutation
    async def rate_question(self, info: Info, id: strawberry.ID, mark: int) -> QuestionNode:
        user = info.context.require_user()
        services = info.context.services
        data = RateRequest(mark=mark)
        question = services.question_provider.get_question(id)
        return QuestionNode.from_model(await services.ratings.create_rating_mark(question, data.mark, user))

    # Exams

    @strawberry.mutation
    async def create_exam(self, info: Info, input: ExamCreateInput) -> ExamNode:
        user = info.context.require_user()
        return ExamNode.from_model(await info.context.services.exams.create_exam(to_schema(ExamCreate, input), user))

    @strawberry.mutation
    async def create_exam_question_answer(
        self, info: Info, exam_id: strawberry.ID, number: int, input: ExamQuestionAnswerInput
    ) -> ExamQuestionNode:
        user = info.context.require_user()
        view = await info.context.services.exams.create_exam_question_answer(
            exam_id, number, to_schema(ExamQuestionAnswerCreate, input), user
        )
        return ExamQuestionNode.from_view(view)

    @strawberry.mutation
    async def delete_exam_question_answer(self, info: Info, exam_id: strawberry.ID, number: int) -> ExamQuestionNode:
        user = info.context.require_user()
        view = await info.context.services.exams.delete_exam_question_answer(exam_id, number, user)
        return ExamQuestionNode.from_view(view)

    @strawberry.mutation
    async def create_exam_completion(self, info: Info, exam_id: strawberry.ID) -> ExamNode:
        user = info.context.require_user()
        return ExamNode.from_model(await info.context.services.exams.create_exam_completion(exam_id, user))

    @strawberry.mutation
    async def delete_exam(self, info: Info, id: strawberry.ID) -> ExamNode:
        user = info.context.require_user()
        return ExamNode.from_model(await info.context.services.exams.delete_exam(id, user))

    # Users and authentication

    @strawberry.mutation
    async def create_authentication_token(self, info: Info, input: CredentialsInput) -> AuthenticationToken:
        token = await info.context.services.auth.create_authentication_token(to_schema(Credentials, input))
        return AuthenticationToken(token=token)

    @strawberry.mutation
    async def create_me(self, info: Info, input: MeCreateInput) -> UserNode:
        return UserNode.from_model(await info.context.services.users.create_me(to_schema(MeCreate, input)))

    @strawberry.mutation
    async def update_me(self, info: Info, input: MeUpdateInput) -> UserNode:
        user = info.context.require_user()
        return UserNode.from_model(await info.context.services.users.update_me(to_schema(MeUpdate, input), user))

    @strawberry.mutation
    async def delete_me(self, info: Info) -> UserNode:
        user = info.context.require_user()
        return UserNode.from_model(await info.context.services.users.delete_me(user))

    @strawberry.mutation
    async def create_user(self, info: Info, input: UserCreateInput) -> UserNode:
        user = info.context.require_user()
        return UserNode.from_model(await info.context.services.users.create_user(to_schema(UserCreate, input), user))

    @strawberry.mutation
    async def update_user(self, info: Info, id: strawberry.ID, input: UserUpdateInput) -> UserNode:
        user = info.context.require_user()
        updated = await info.context.services.users.update_user(id, to_schema(UserUpdate, input), user)
        return UserNode.from_model(updated)

    @strawberry.mutation
    async def delete_user(self, info: Info, id: strawberry.ID) -> UserNode:
        user = info.context.require_user()
        return UserNode.from_model(await info.context.services.users.delete_user(id, user))


class QuizhubSchema(strawberry.Schema):
    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        # Client errors are part of the API; only unexpected ones are logged
        for error in errors:
            if error_kind_of(error) == INTERNAL_SERVER_ERROR:
                logger.error(
                    "Unhandled GraphQL error",
                    exc_info=error.original_error or error,
                    extra={"path": error.path},
                )


schema = QuizhubSchema(query=Query, mutation=Mutation, extensions=[ErrorKindExtension])

graphql_router = GraphQLRouter(schema, context_getter=get_context)
