"""Product reference — the only part of a product the category tree cares about."""

from collections import Counter
from datetime import datetime

from protean.fields import DateTime, Identifier, String

from hierarchy.domain import hierarchy

_BATCH_SIZE = 500


@hierarchy.aggregate
class Product:
    """A sellable item filed under one category.

    Stock, pricing and barcodes live in the inventory and POS services;
    this record only carries the category reference the delete guard and
    the per-category counts read.
    """

    sku: String(required=True, max_length=50)
    title: String(required=True, max_length=255, sanitize=False)
    category_id: Identifier()
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @classmethod
    def register(cls, sku, title, category_id=None):
        now = datetime.now()
        return cls(
            sku=sku.strip().upper(),
            title=title,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )

    def file_under(self, category_id):
        self.category_id = category_id
        self.updated_at = datetime.now()


@hierarchy.repository(part_of=Product)
class ProductRepository:
    def _fetch(self, **criteria) -> list[Product]:
        rows = []
        offset = 0
        while True:
            batch = (
                self._dao.query.filter(**criteria).order_by("id").offset(offset).limit(_BATCH_SIZE).all().items
            )
            rows.extend(batch)
            if len(batch) < _BATCH_SIZE:
                return rows
            offset += _BATCH_SIZE

    def find_by_sku(self, sku: str) -> Product | None:
        matches = self._fetch(sku=sku.strip().upper())
        return matches[0] if matches else None

    def count_in_category(self, category_id) -> int:
        return len(self._fetch(category_id=str(category_id)))

    def counts_by_category(self, category_ids) -> dict[str, int]:
        """Product count per category, one query for the whole set."""
        wanted = [str(category_id) for category_id in category_ids]
        if not wanted:
            return {}
        counts = Counter(str(product.category_id) for product in self._fetch(category_id__in=wanted))
        return {category_id: counts.get(category_id, 0) for category_id in wanted}
