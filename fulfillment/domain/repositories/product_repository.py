"""Repository interface for catalog product lookups."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable

from ..entities.product import Product


class ProductRepository(ABC):
    """Products are owned by the catalog; fulfillment only reads them."""

    @abstractmethod
    async def add(self, product: Product) -> Product:
        """Insert a product (fixtures and catalog sync)."""

    @abstractmethod
    async def get_many(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Products keyed by id; unknown ids are absent."""
