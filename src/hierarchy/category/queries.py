"""Read operations over the category tree.

Counts are computed fresh on every call from the category and product
stores; nothing is cached between calls.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from hierarchy.category.category import Category
from hierarchy.category.errors import HierarchyCorruptedError
from hierarchy.category.management import plan_move
from hierarchy.category.paths import decode
from hierarchy.category.read_model import CategoryNode, CategoryView, annotate, build_forest, build_tree
from hierarchy.product.product import Product

logger = structlog.get_logger(__name__)

MIN_SEARCH_LENGTH = 2


def _categories():
    return current_domain.repository_for(Category)


def _products():
    return current_domain.repository_for(Product)


def _views(rows) -> list[CategoryView]:
    ids = [row.id for row in rows]
    return annotate(
        rows,
        child_counts=_categories().child_counts(ids),
        product_counts=_products().counts_by_category(ids),
    )


def get_category_by_id(category_id) -> CategoryView:
    return _views([_categories().get(category_id)])[0]


def get_category_by_name(name: str) -> CategoryView:
    matches = _categories().named(name.strip())
    if not matches:
        raise ObjectNotFoundError(f"No category named '{name}'")
    return _views(matches[:1])[0]


def get_root_categories() -> list[CategoryView]:
    return _views(_categories().roots())


def get_category_children(category_id) -> list[CategoryView]:
    """Direct children of ``category_id``; an unknown id simply has none."""
    return _views(_categories().children_of(category_id))


def get_categories_by_level(level: int) -> list[CategoryView]:
    return _views(_categories().at_level(level))


def list_categories(limit: int = 20, offset: int = 0) -> list[CategoryView]:
    return _views(_categories().page(limit, offset))


def search_categories(text: str) -> list[CategoryView]:
    needle = (text or "").strip()
    if len(needle) < MIN_SEARCH_LENGTH:
        raise ValidationError({"q": [f"Search query must be at least {MIN_SEARCH_LENGTH} characters long"]})
    return _views(_categories().search(needle))


def get_category_path(category_id) -> list[CategoryView]:
    """Categories from the root down to ``category_id``, inclusive."""
    repo = _categories()
    category = repo.get(category_id)

    chain = []
    for ancestor_id in decode(category.path)[:-1]:
        try:
            chain.append(repo.get(ancestor_id))
        except ObjectNotFoundError as exc:
            logger.error(
                "Category path references a missing ancestor",
                category_id=str(category.id),
                path=category.path,
                missing_id=ancestor_id,
            )
            raise HierarchyCorruptedError(
                f"Ancestor {ancestor_id} in path of category {category.id} does not exist"
            ) from exc
    chain.append(category)
    return _views(chain)


def get_category_hierarchy(category_id=None) -> CategoryNode | list[CategoryNode]:
    """Nested tree below ``category_id``, or the whole forest when omitted.

    Rows are fetched once (the subtree, or every category) and nested in
    memory; product counts for all of them come from one grouped query.
    """
    repo = _categories()
    if category_id is not None:
        root = repo.get(category_id)
        rows = repo.subtree(root.path)
        product_counts = _products().counts_by_category([row.id for row in rows])
        return build_tree(rows, root.id, product_counts)

    rows = repo.everything()
    product_counts = _products().counts_by_category([row.id for row in rows])
    return build_forest(rows, product_counts)


def validate_category_move(category_id, new_parent_id=None) -> None:
    """Raise the error ``MoveCategory`` would raise, without writing anything."""
    repo = _categories()
    plan_move(repo, repo.get(category_id), new_parent_id)
