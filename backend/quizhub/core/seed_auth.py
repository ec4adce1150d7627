"""Seed the root account from settings."""

from sqlalchemy import select

from quizhub.common.object_id import new_object_id
from quizhub.core.config import settings
from quizhub.core.logging import get_logger
from quizhub.core.permissions import Permission
from quizhub.core.security import hash_password
from quizhub.db.session import SessionLocal
from quizhub.models.user import User

logger = get_logger(__name__)


def seed_root_user() -> User | None:
    """Create the root user when SEED_ROOT_EMAIL and SEED_ROOT_PASSWORD are set."""
    if not settings.SEED_ROOT_EMAIL or not settings.SEED_ROOT_PASSWORD:
        logger.info("Root user seeding skipped (SEED_ROOT_EMAIL or SEED_ROOT_PASSWORD not set)")
        return None

    email = settings.SEED_ROOT_EMAIL.lower().strip()
    db = SessionLocal()
    try:
        existing = db.execute(
            select(User).where(User.email == email, User.deleted_at.is_(None))
        ).scalar_one_or_none()
        if existing is not None:
            logger.info("Root user already exists, skipping seed", extra={"user_id": existing.id})
            return existing

        root_id = new_object_id()
        root = User(
            id=root_id,
            name="Root",
            email=email,
            password_hash=hash_password(settings.SEED_ROOT_PASSWORD),
            permissions=[Permission.ROOT.value],
            creator_id=root_id,
            owner_id=root_id,
        )
        db.add(root)
        db.commit()
        logger.info("Root user seeded", extra={"user_id": root.id, "email": email})
        return root
    except Exception as e:
        db.rollback()
        logger.error(f"Error seeding root user: {e}", exc_info=True)
        raise
    finally:
        db.close()
