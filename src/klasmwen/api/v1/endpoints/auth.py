# src/klasmwen/api/v1/endpoints/auth.py
"""Authentication endpoints for the KlasMwen API."""

import logging
import secrets

from fastapi import APIRouter, status

from klasmwen.api.v1.dependencies import SessionDep
from klasmwen.core.security import create_access_token
from klasmwen.models import Role, User
from klasmwen.schemas.user import GuestLoginResponse, UserOut
from klasmwen.services.users import random_default_avatar

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/guest",
    response_model=GuestLoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a guest account and issue its token",
)
async def guest_login(db: SessionDep) -> GuestLoginResponse:
    """Create a throwaway GUEST account so visitors can browse and interact."""
    handle = secrets.token_hex(4)
    user = User(
        username=f"guest_{handle}",
        email=f"guest_{handle}@guest.klasmwen.local",
        role=Role.GUEST,
        avatar=random_default_avatar(db),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created guest account %s", user.id)

    token = create_access_token(user.id, {"role": user.role.value})
    return GuestLoginResponse(token=token, user=UserOut.model_validate(user))
