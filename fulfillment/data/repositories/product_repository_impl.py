"""SQLAlchemy implementation of ProductRepository."""

from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fulfillment.domain.entities import Product
from fulfillment.domain.repositories import ProductRepository

from ..mappers import ProductMapper
from ..models.order_model import ProductModel


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, product: Product) -> Product:
        model = ProductMapper.to_persistence(product)
        self._session.add(model)
        await self._session.flush()
        product.id = model.id
        return product

    async def get_many(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        result = await self._session.execute(
            select(ProductModel).where(ProductModel.id.in_(ids))
        )
        return {m.id: ProductMapper.to_domain(m) for m in result.scalars().all()}
