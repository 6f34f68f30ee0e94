"""Category storage queries.

Every tree question is answered from indexed columns (``parent_id``,
``level``) or a path-prefix scan; nothing here walks the tree one query per
node.
"""

from collections import Counter

from hierarchy.category.category import Category
from hierarchy.category.paths import is_descendant_path
from hierarchy.domain import hierarchy

_BATCH_SIZE = 500


def sibling_order(category):
    return (category.name, category.created_at)


@hierarchy.repository(part_of=Category)
class CategoryRepository:
    """Repository for the Category aggregate.

    ``get``/``add`` come from the base repository. Writes made through
    ``add`` or ``save_all`` join the active Unit of Work, so the rows a
    command handler touches are committed together or not at all.
    """

    def _fetch(self, **criteria) -> list[Category]:
        """Every row matching ``criteria``, read in batches."""
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

    def everything(self) -> list[Category]:
        return self._fetch()

    def roots(self) -> list[Category]:
        return sorted(self._fetch(level=0), key=sibling_order)

    def children_of(self, parent_id) -> list[Category]:
        return sorted(self._fetch(parent_id=str(parent_id)), key=sibling_order)

    def count_children(self, category_id) -> int:
        return len(self._fetch(parent_id=str(category_id)))

    def child_counts(self, category_ids) -> dict[str, int]:
        """Number of direct children per category, one query for the whole set."""
        wanted = [str(category_id) for category_id in category_ids]
        if not wanted:
            return {}
        counts = Counter(str(row.parent_id) for row in self._fetch(parent_id__in=wanted))
        return {category_id: counts.get(category_id, 0) for category_id in wanted}

    def subtree(self, path) -> list[Category]:
        """The category at ``path`` and every descendant, shallowest first."""
        rows = [
            row
            for row in self._fetch(path__contains=path)
            if row.path == path or is_descendant_path(row.path, path)
        ]
        return sorted(rows, key=lambda row: (row.level, row.name))

    def at_level(self, level: int) -> list[Category]:
        return sorted(self._fetch(level=level), key=lambda row: (row.path, row.name))

    def named(self, name: str) -> list[Category]:
        return sorted(self._fetch(name=name), key=lambda row: (row.level, row.created_at))

    def sibling_named(self, parent_id, name: str, exclude_id=None) -> Category | None:
        """A category under ``parent_id`` (``None`` for roots) already called ``name``."""
        if parent_id:
            siblings = self._fetch(parent_id=str(parent_id), name=name)
        else:
            siblings = self._fetch(level=0, name=name)
        for sibling in siblings:
            if exclude_id is None or str(sibling.id) != str(exclude_id):
                return sibling
        return None

    def search(self, text: str) -> list[Category]:
        needle = text.lower()
        return sorted(
            (
                row
                for row in self._fetch()
                if needle in row.name.lower() or needle in (row.description or "").lower()
            ),
            key=lambda row: row.name,
        )

    def page(self, limit: int, offset: int) -> list[Category]:
        return sorted(self._fetch(), key=lambda row: (row.path, row.name))[offset : offset + limit]

    def save_all(self, rows) -> None:
        for row in rows:
            self.add(row)

    def discard(self, category) -> None:
        """Delete ``category`` after a versioned write of the same row.

        A child created or moved under it since it was read has bumped its
        version, so the write collides and nothing is deleted.
        """
        category.touch()
        self.add(category)
        self._dao.delete(category)
