"""
User profile provisioning, called by trusted backends after sign-up
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wander.api.schemas import OkResponse, UserProfileUpsert
from wander.core.errors import PersistenceError
from wander.core.rate_limit import limiter, RATE_LIMIT_WRITE
from wander.core.security import require_service_role
from wander.db.crud import upsert_user_profile
from wander.db.models import UserType
from wander.db.session import get_db_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


def _user_type(raw) -> UserType:
    try:
        return UserType((raw or UserType.TRAVELER.value).strip().upper())
    except ValueError:
        return UserType.TRAVELER


def fallback_username(username, user_id) -> str:
    """Deterministic replacement used when the requested username is taken"""
    return f"{username or 'user'}_{str(user_id)[:6]}"


@router.post("", response_model=OkResponse, dependencies=[Depends(require_service_role)])
@limiter.limit(RATE_LIMIT_WRITE)
async def upsert_user_endpoint(
    request: Request,
    payload: UserProfileUpsert,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Create or update the profile row for an auth provider user.

    A unique-constraint conflict is retried exactly once with a username
    suffixed from the user id.
    """
    user_type = _user_type(payload.user_type)
    username = payload.username.strip() if payload.username and payload.username.strip() else None

    try:
        await upsert_user_profile(
            session, payload.id, payload.email, username, payload.full_name, user_type
        )
    except IntegrityError:
        safe_username = fallback_username(username, payload.id)
        logger.warning(f"Username conflict for user {payload.id}, retrying as {safe_username}")
        try:
            await upsert_user_profile(
                session, payload.id, payload.email, safe_username, payload.full_name, user_type
            )
        except SQLAlchemyError as e:
            logger.error(f"Profile upsert retry failed for user {payload.id}: {e}")
            raise PersistenceError("Failed to save user profile") from e
    except SQLAlchemyError as e:
        logger.error(f"Profile upsert failed for user {payload.id}: {e}")
        raise PersistenceError("Failed to save user profile") from e

    return OkResponse()
