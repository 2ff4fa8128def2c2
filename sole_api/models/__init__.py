"""SQLAlchemy ORM models."""

from sole_api.models.design import DesignRecord
from sole_api.models.user import UserRecord

__all__ = ["DesignRecord", "UserRecord"]
