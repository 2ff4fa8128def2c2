"""Repository interfaces.

Services depend on these abstractions so persistence can be replaced (or
faked in tests) without touching business rules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from sole_api.domain.designs import Design, DesignStyle
from sole_api.domain.users import Email, User, Username


@dataclass(frozen=True)
class DesignFilters:
    style: DesignStyle | None = None
    user_id: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None

    def is_empty(self) -> bool:
        return (
            self.style is None
            and self.user_id is None
            and self.created_after is None
            and self.created_before is None
        )


class AbstractUserRepository(ABC):
    @abstractmethod
    def save(self, user: User) -> None:
        """Insert or update ``user``.

        Raises:
            ConflictAppError: If the e-mail or username belongs to another user.
        """

    @abstractmethod
    def find_by_id(self, user_id: str) -> User | None: ...

    @abstractmethod
    def find_by_email(self, email: Email) -> User | None: ...

    @abstractmethod
    def email_exists(self, email: Email) -> bool: ...

    @abstractmethod
    def username_exists(self, username: Username) -> bool: ...


class AbstractDesignRepository(ABC):
    @abstractmethod
    def save(self, design: Design) -> None:
        """Insert or update ``design``."""

    @abstractmethod
    def find_by_id(self, design_id: str) -> Design | None: ...

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> list[Design]:
        """Designs owned by ``user_id``, newest first."""

    @abstractmethod
    def find_page(self, page: int, page_size: int) -> tuple[list[Design], int]:
        """Return one page of designs (newest first) and the total count."""

    @abstractmethod
    def find_by_filters(self, filters: DesignFilters) -> list[Design]:
        """Designs matching every provided filter, newest first."""
