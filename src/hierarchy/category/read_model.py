"""Read-side shapes for the category tree.

Everything here is pure: rows come in, views go out. Trees are assembled in
one pass over a flat list of rows by grouping them on ``parent_id``.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CategoryView:
    """A category row plus the counts derived from related rows."""

    id: str
    name: str
    description: str
    parent_id: str | None
    level: int
    path: str
    children_count: int = 0
    product_count: int = 0
    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def of(cls, category, children_count=0, product_count=0):
        return cls(
            id=str(category.id),
            name=category.name,
            description=category.description or "",
            parent_id=str(category.parent_id) if category.parent_id else None,
            level=category.level,
            path=category.path,
            children_count=children_count,
            product_count=product_count,
            version=getattr(category, "_version", None),
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


@dataclass
class CategoryNode:
    category: CategoryView
    children: list["CategoryNode"] = field(default_factory=list)

    def walk(self):
        """Yield this node's view and every descendant's, depth first."""
        yield self.category
        for child in self.children:
            yield from child.walk()


def _sibling_key(row):
    return (row.name, row.created_at or datetime.min)


def group_by_parent(rows) -> dict[str | None, list]:
    """Map each parent id (``None`` for roots) to its children in sibling order."""
    groups = defaultdict(list)
    for row in rows:
        groups[str(row.parent_id) if row.parent_id else None].append(row)
    for siblings in groups.values():
        siblings.sort(key=_sibling_key)
    return groups


def _attach(row, groups, product_counts) -> CategoryNode:
    children = groups.get(str(row.id), [])
    return CategoryNode(
        category=CategoryView.of(
            row,
            children_count=len(children),
            product_count=product_counts.get(str(row.id), 0),
        ),
        children=[_attach(child, groups, product_counts) for child in children],
    )


def build_tree(rows, root_id, product_counts=None) -> CategoryNode:
    """Nest ``rows`` under the row whose id is ``root_id``.

    ``rows`` must contain the root itself and may contain any rows below it;
    rows that do not hang off the root are ignored.
    """
    by_id = {str(row.id): row for row in rows}
    root = by_id.get(str(root_id))
    if root is None:
        raise KeyError(root_id)
    return _attach(root, group_by_parent(rows), product_counts or {})


def build_forest(rows, product_counts=None) -> list[CategoryNode]:
    """Nest ``rows`` under every root category they contain."""
    groups = group_by_parent(rows)
    counts = product_counts or {}
    return [_attach(root, groups, counts) for root in groups.get(None, [])]


def annotate(rows, child_counts=None, product_counts=None) -> list[CategoryView]:
    """Views for a flat list of rows, preserving order."""
    child_counts = child_counts or {}
    product_counts = product_counts or {}
    return [
        CategoryView.of(
            row,
            children_count=child_counts.get(str(row.id), 0),
            product_count=product_counts.get(str(row.id), 0),
        )
        for row in rows
    ]
