"""Abstract interface for product storage."""

from abc import ABC, abstractmethod

from stockledger.core.entities.product import Product


class IProductStore(ABC):
    """Interface for product persistence.

    There is deliberately no method that writes ``stock_quantity``; the
    projection is owned by :class:`IStockLedger`.
    """

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a new product (seed loaders, imports)."""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def list_products(
        self,
        shop_id: str,
        include_inactive: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Product]:
        """List a shop's products with pagination."""
        pass

    @abstractmethod
    async def list_low_stock(
        self, shop_id: str, limit: int = 100, offset: int = 0
    ) -> list[Product]:
        """List active products whose stock is above zero and at or below their threshold."""
        pass
