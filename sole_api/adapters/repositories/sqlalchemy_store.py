"""SQLAlchemy implementations of the repository interfaces.

Rows are mapped to domain entities on the way out so callers never see ORM
objects.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sole_api.adapters.repositories.base import (
    AbstractDesignRepository,
    AbstractUserRepository,
    DesignFilters,
)
from sole_api.core.errors import ConflictAppError
from sole_api.domain.designs import ColorPalette, Design, DesignStyle, ImageUrl
from sole_api.domain.users import Email, PasswordHash, User, Username, WalletAddress
from sole_api.models.design import DesignRecord
from sole_api.models.user import UserRecord


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _user_to_domain(record: UserRecord) -> User:
    return User(
        id=record.id,
        email=Email.parse(record.email),
        username=Username.parse(record.username),
        password_hash=PasswordHash(record.password_hash),
        wallet_address=WalletAddress.parse(record.wallet_address) if record.wallet_address else None,
        created_at=_as_utc(record.created_at),
    )


def _design_to_domain(record: DesignRecord) -> Design:
    return Design(
        id=record.id,
        user_id=record.user_id,
        image_url=ImageUrl(record.image_url),
        palette=ColorPalette.of(record.colors),
        style=DesignStyle.parse(record.style),
        prompt=record.prompt,
        metadata_uri=record.metadata_uri,
        token_id=record.token_id,
        created_at=_as_utc(record.created_at),
    )


class SqlAlchemyUserRepository(AbstractUserRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, user: User) -> None:
        record = self._session.get(UserRecord, user.id)
        if record is None:
            record = UserRecord(id=user.id, created_at=user.created_at)
            self._session.add(record)

        record.email = user.email.value
        record.username = user.username.value
        record.password_hash = user.password_hash.value
        record.wallet_address = user.wallet_address.value if user.wallet_address else None
        try:
            self._session.flush()
        except IntegrityError as exc:
            # A concurrent registration won the unique email/username race
            self._session.rollback()
            raise ConflictAppError(
                code="account_exists",
                message="Email or username already in use",
            ) from exc

    def find_by_id(self, user_id: str) -> User | None:
        record = self._session.get(UserRecord, user_id)
        return _user_to_domain(record) if record else None

    def find_by_email(self, email: Email) -> User | None:
        stmt = select(UserRecord).where(UserRecord.email == email.value)
        record = self._session.execute(stmt).scalar_one_or_none()
        return _user_to_domain(record) if record else None

    def email_exists(self, email: Email) -> bool:
        stmt = select(func.count()).select_from(UserRecord).where(UserRecord.email == email.value)
        return self._session.execute(stmt).scalar_one() > 0

    def username_exists(self, username: Username) -> bool:
        stmt = (
            select(func.count())
            .select_from(UserRecord)
            .where(UserRecord.username == username.value)
        )
        return self._session.execute(stmt).scalar_one() > 0


class SqlAlchemyDesignRepository(AbstractDesignRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, design: Design) -> None:
        record = self._session.get(DesignRecord, design.id)
        if record is None:
            record = DesignRecord(id=design.id, created_at=design.created_at)
            self._session.add(record)

        record.user_id = design.user_id
        record.image_url = design.image_url.value
        record.colors = list(design.palette.colors)
        record.style = design.style.value
        record.prompt = design.prompt
        record.metadata_uri = design.metadata_uri
        record.token_id = design.token_id
        self._session.flush()

    def find_by_id(self, design_id: str) -> Design | None:
        record = self._session.get(DesignRecord, design_id)
        return _design_to_domain(record) if record else None

    def find_by_user_id(self, user_id: str) -> list[Design]:
        stmt = (
            select(DesignRecord)
            .where(DesignRecord.user_id == user_id)
            .order_by(DesignRecord.created_at.desc())
        )
        return [_design_to_domain(r) for r in self._session.execute(stmt).scalars()]

    def find_page(self, page: int, page_size: int) -> tuple[list[Design], int]:
        stmt = (
            select(DesignRecord)
            .order_by(DesignRecord.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        designs = [_design_to_domain(r) for r in self._session.execute(stmt).scalars()]
        total = self._session.execute(select(func.count()).select_from(DesignRecord)).scalar_one()
        return designs, total

    def find_by_filters(self, filters: DesignFilters) -> list[Design]:
        stmt = select(DesignRecord)
        if filters.style is not None:
            stmt = stmt.where(DesignRecord.style == filters.style.value)
        if filters.user_id is not None:
            stmt = stmt.where(DesignRecord.user_id == filters.user_id)
        if filters.created_after is not None:
            stmt = stmt.where(DesignRecord.created_at >= filters.created_after)
        if filters.created_before is not None:
            stmt = stmt.where(DesignRecord.created_at <= filters.created_before)
        stmt = stmt.order_by(DesignRecord.created_at.desc())
        return [_design_to_domain(r) for r in self._session.execute(stmt).scalars()]
