"""SQLAlchemy implementation of Profile repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, literal, select
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import BackendError
from domain.entities.profile import EDITABLE_FIELDS, Profile, ProfileValues
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        stmt = select(ProfileModel).where(ProfileModel.id == id)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise BackendError(str(exc)) from exc
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def update(
        self,
        id: UUID,
        values: ProfileValues,
        basic_info_updated_at: datetime | None = None,
    ) -> Profile | None:
        """Write every editable column; stamp basic_info_updated_at when given."""
        try:
            stmt = select(ProfileModel).where(ProfileModel.id == id)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
            if not model:
                return None

            for name, value in values.as_dict().items():
                setattr(model, name, value)
            if basic_info_updated_at is not None:
                model.basic_info_updated_at = basic_info_updated_at

            await self._session.flush()
        except SQLAlchemyError as exc:
            raise BackendError(str(exc)) from exc
        return self._to_entity(model)

    async def can_update_basic_info(self, id: UUID) -> bool:
        """Call the ``can_update_basic_info(profile_id)`` database function."""
        stmt = select(func.can_update_basic_info(literal(id, PG_UUID(as_uuid=True))))
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise BackendError(str(exc)) from exc
        return bool(result.scalar())

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            basic_info_updated_at=model.basic_info_updated_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            **{name: getattr(model, name) for name in EDITABLE_FIELDS},
        )
