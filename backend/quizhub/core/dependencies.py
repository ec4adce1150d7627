"""Composition root and FastAPI dependencies for authentication and services."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from quizhub.core.app_exceptions import AuthorizationRequiredError
from quizhub.core.permissions import DEFAULT_PERMISSION_HIERARCHY, PermissionHierarchy
from quizhub.db.session import get_db
from quizhub.events.dispatcher import EventDispatcher
from quizhub.events.subscribers import register_subscribers
from quizhub.models.user import User
from quizhub.services.activity import ActivityService
from quizhub.services.auth import AuthService
from quizhub.services.authorization import AuthorizationVerifier
from quizhub.services.category import CategoryProvider, CategoryService
from quizhub.services.exam import ExamProvider, ExamService
from quizhub.services.question import QuestionProvider, QuestionService
from quizhub.services.rating import RatingMarkCreator
from quizhub.services.user import UserProvider, UserService


def build_dispatcher() -> EventDispatcher:
    """Dispatcher with every subscriber registered."""
    return register_subscribers(EventDispatcher())


@dataclass
class Services:
    """Per-request service graph sharing one session, verifier and dispatcher."""

    db: Session
    verifier: AuthorizationVerifier
    dispatcher: EventDispatcher
    category_provider: CategoryProvider
    question_provider: QuestionProvider
    exam_provider: ExamProvider
    user_provider: UserProvider
    categories: CategoryService
    questions: QuestionService
    exams: ExamService
    ratings: RatingMarkCreator
    users: UserService
    auth: AuthService
    activities: ActivityService


def build_services(
    db: Session,
    dispatcher: EventDispatcher,
    hierarchy: PermissionHierarchy | None = None,
) -> Services:
    verifier = AuthorizationVerifier(hierarchy or DEFAULT_PERMISSION_HIERARCHY)
    category_provider = CategoryProvider(db)
    question_provider = QuestionProvider(db)
    exam_provider = ExamProvider(db, verifier)
    user_provider = UserProvider(db)
    return Services(
        db=db,
        verifier=verifier,
        dispatcher=dispatcher,
        category_provider=category_provider,
        question_provider=question_provider,
        exam_provider=exam_provider,
        user_provider=user_provider,
        categories=CategoryService(db, verifier, dispatcher, category_provider),
        questions=QuestionService(db, verifier, dispatcher, question_provider, category_provider),
        exams=ExamService(db, verifier, dispatcher, exam_provider, category_provider, question_provider),
        ratings=RatingMarkCreator(db, verifier, dispatcher),
        users=UserService(db, verifier, user_provider),
        auth=AuthService(db, user_provider),
        activities=ActivityService(db),
    )


def get_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.dispatcher


def get_services(
    request: Request,
    db: Session = Depends(get_db),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
) -> Services:
    """Dependency building the service graph for one request."""
    hierarchy = getattr(request.app.state, "permission_hierarchy", None)
    return build_services(db, dispatcher, hierarchy)


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from "Bearer <token>"; None when no header was sent.

    Raises:
        AuthorizationRequiredError: Malformed header
    """
    if not authorization:
        return None
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid authorization scheme")
    except ValueError:
        raise AuthorizationRequiredError(
            "Invalid authorization header format. Expected: Bearer <token>"
        ) from None
    return token


def get_optional_user(
    authorization: Annotated[str | None, Header()] = None,
    db: Session = Depends(get_db),
) -> User | None:
    """Authenticated user, or None for anonymous requests."""
    token = parse_bearer(authorization)
    if token is None:
        return None
    return AuthService(db).authenticate(token)


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """Dependency to get the current authenticated user from the bearer token."""
    if user is None:
        raise AuthorizationRequiredError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
ServicesDep = Annotated[Services, Depends(get_services)]
