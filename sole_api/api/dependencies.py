"""FastAPI dependencies wiring services to request-scoped resources."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.adapters.image.factory import create_image_generator
from sole_api.adapters.repositories.sqlalchemy_store import (
    SqlAlchemyDesignRepository,
    SqlAlchemyUserRepository,
)
from sole_api.core.database import get_db
from sole_api.core.errors import ValidationAppError
from sole_api.services.auth_service import AuthService
from sole_api.services.design_service import DesignService

logger = logging.getLogger(__name__)


def get_image_generator(request: Request) -> AbstractImageGenerator | None:
    """Return the app's image generator, building it on first use.

    A misconfigured provider yields None so only generation requests fail.
    """
    state = request.app.state
    generator = getattr(state, "image_generator", None)
    if generator is not None:
        return generator

    try:
        generator = create_image_generator()
    except ValidationAppError as exc:
        logger.error(
            "image.provider_misconfigured",
            extra={"error_code": exc.code, "error_message": exc.message},
        )
        return None

    state.image_generator = generator
    return generator


def get_auth_service(session: Annotated[Session, Depends(get_db)]) -> AuthService:
    return AuthService(SqlAlchemyUserRepository(session))


def get_design_service(
    session: Annotated[Session, Depends(get_db)],
    image_generator: Annotated[AbstractImageGenerator | None, Depends(get_image_generator)],
) -> DesignService:
    return DesignService(SqlAlchemyDesignRepository(session), image_generator)
