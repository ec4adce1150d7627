"""Authentication: credentials -> access token, access token -> user."""

import jwt
from sqlalchemy.orm import Session

from quizhub.core.app_exceptions import (
    AuthorizationRequiredError,
    UserEmailNotFoundError,
    UserWrongCredentialsError,
)
from quizhub.core.logging import get_logger
from quizhub.core.security import (
    create_access_token,
    hash_password,
    password_needs_rehash,
    verify_access_token,
    verify_password,
)
from quizhub.models.user import User
from quizhub.schemas.auth import Credentials
from quizhub.services.user import UserProvider

logger = get_logger(__name__)


class AuthService:
    def __init__(self, db: Session, user_provider: UserProvider | None = None):
        self.db = db
        self.user_provider = user_provider or UserProvider(db)

    async def create_authentication_token(self, credentials: Credentials) -> str:
        """
        Exchange email and password for a signed access token.

        Raises:
            UserEmailNotFoundError: Unknown email
            UserWrongCredentialsError: Wrong password
        """
        user = self.user_provider.find_by_email(credentials.email)
        if user is None:
            raise UserEmailNotFoundError(credentials.email)
        if not verify_password(credentials.password, user.password_hash):
            logger.warning("Wrong credentials", extra={"user_id": user.id})
            raise UserWrongCredentialsError()
        if password_needs_rehash(user.password_hash):
            user.password_hash = hash_password(credentials.password)
            self.db.commit()
        return create_access_token(user.id)

    def authenticate(self, token: str) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            AuthorizationRequiredError: Invalid or expired token, or user gone
        """
        try:
            payload = verify_access_token(token)
        except jwt.InvalidTokenError as e:
            raise AuthorizationRequiredError(f"Invalid or expired token: {e}") from e

        user_id = payload.get("sub")
        user = self.db.get(User, user_id) if user_id else None
        if user is None or user.is_deleted:
            raise AuthorizationRequiredError("User not found")
        return user
