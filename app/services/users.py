import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.database.db import transaction
from app.models.users import User
from app.services.errors import DuplicateIdentityError, InvalidInputError, StorageFailureError

logger = logging.getLogger(__name__)


def create_user(db: Session, *, name: str | None, email: str | None) -> int:
    if not (name and name.strip()) or not (email and email.strip()):
        raise InvalidInputError("Name and email are required")

    user = User(name=name, email=email)
    try:
        with transaction(db):
            db.add(user)
            db.flush()
            user_id = user.id
    except IntegrityError as e:
        logger.info("Rejected duplicate email %s", email)
        raise DuplicateIdentityError() from e
    except SQLAlchemyError as e:
        logger.exception("Failed to create user %s", email)
        raise StorageFailureError(str(e)) from e

    logger.info("Created user %s", user_id)
    return user_id


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id)))
