"""SQLAlchemy implementation of Location repository."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import BackendError
from domain.entities.location import Location
from infrastructure.database.models import LocationModel


class SQLAlchemyLocationRepository:
    """SQLAlchemy implementation of ILocationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_all(self) -> list[Location]:
        """Get every location ordered by name."""
        stmt = select(LocationModel).order_by(LocationModel.name)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise BackendError(str(exc)) from exc
        return [
            Location(id=model.id, name=model.name, state=model.state)
            for model in result.scalars()
        ]
