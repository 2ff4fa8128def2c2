"""Persistence adapters for users and designs."""

from sole_api.adapters.repositories.base import (
    AbstractDesignRepository,
    AbstractUserRepository,
    DesignFilters,
)
from sole_api.adapters.repositories.sqlalchemy_store import (
    SqlAlchemyDesignRepository,
    SqlAlchemyUserRepository,
)

__all__ = [
    "AbstractDesignRepository",
    "AbstractUserRepository",
    "DesignFilters",
    "SqlAlchemyDesignRepository",
    "SqlAlchemyUserRepository",
]
