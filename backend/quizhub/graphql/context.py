"""Per-request GraphQL context: services plus the lazily authenticated user."""

from functools import cached_property

from fastapi import Depends, Header
from strawberry.fastapi import BaseContext

from quizhub.core.app_exceptions import AuthorizationRequiredError
from quizhub.core.dependencies import Services, get_services, parse_bearer
from quizhub.models.user import User


class GraphQLContext(BaseContext):
    def __init__(self, services: Services, authorization: str | None = None):
        super().__init__()
        self.services = services
        self.authorization = authorization

    @cached_property
    def user(self) -> User | None:
        """Authenticated user or None; a bad token raises AuthorizationRequiredError."""
        token = parse_bearer(self.authorization)
        if token is None:
            return None
        return self.services.auth.authenticate(token)

    def require_user(self) -> User:
        """Gate for operations that need an identity; call before anything else."""
        user = self.user
        if user is None:
            raise AuthorizationRequiredError()
        return user


async def get_context(
    services: Services = Depends(get_services),
    authorization: str | None = Header(default=None),
) -> GraphQLContext:
    return GraphQLContext(services=services, authorization=authorization)
