"""SQLAlchemy implementation of Product repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import BackendError
from domain.entities.product import Product
from infrastructure.database.models import ProductModel


class SQLAlchemyProductRepository:
    """SQLAlchemy implementation of IProductRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_all_for_user(self, user_id: UUID) -> list[Product]:
        """Get all products owned by a user."""
        stmt = select(ProductModel).where(ProductModel.user_id == user_id)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise BackendError(str(exc)) from exc
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: ProductModel) -> Product:
        """Convert ORM model to domain entity."""
        return Product(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            description=model.description,
            price=model.price,
            image_url=model.image_url,
            location_id=model.location_id,
            created_at=model.created_at,
        )
