"""Maps resolver errors onto the error taxonomy in ``extensions``."""

from typing import Iterator

from graphql import GraphQLError
from strawberry.extensions import SchemaExtension

from quizhub.core.app_exceptions import AppError
from quizhub.core.config import settings
from quizhub.core.errors import BAD_REQUEST, INTERNAL_SERVER_ERROR, KIND_STATUS, error_kind


def error_name(error: GraphQLError) -> str:
    """Type name of the original error, or the kind for GraphQL-level failures."""
    original = error.original_error
    if original is None:
        # Syntax and document validation errors
        return BAD_REQUEST
    if isinstance(original, AppError):
        return original.code
    return type(original).__name__


def error_kind_of(error: GraphQLError) -> str:
    name = error_name(error)
    return name if name in KIND_STATUS else error_kind(name)


class ErrorKindExtension(SchemaExtension):
    """Sets ``extensions.name`` (taxonomy kind) and ``extensions.code`` (HTTP status)."""

    def on_operation(self) -> Iterator[None]:
        yield
        result = self.execution_context.result
        errors = getattr(result, "errors", None)
        if not errors:
            return
        result.errors = [self._classify(error) for error in errors]

    def _classify(self, error: GraphQLError) -> GraphQLError:
        kind = error_kind_of(error)
        message = error.message
        if kind == INTERNAL_SERVER_ERROR and settings.ENV == "prod":
            message = "An internal server error occurred"
        return GraphQLError(
            message,
            nodes=error.nodes,
            source=error.source,
            positions=error.positions,
            path=error.path,
            original_error=error.original_error,
            extensions={**(error.extensions or {}), "name": kind, "code": KIND_STATUS[kind]},
        )
