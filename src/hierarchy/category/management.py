"""Category management — commands and handlers.

Each handler method runs inside its own Unit of Work: every row it adds is
committed together when the method returns, and nothing is written if it
raises. A move therefore rewrites the whole subtree or none of it.
"""

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from hierarchy.category.category import MAX_CATEGORY_LEVEL, Category
from hierarchy.category.errors import (
    CategoryConflictError,
    CategoryHasChildrenError,
    CategoryHasProductsError,
    InvalidMoveError,
    ParentNotFoundError,
)
from hierarchy.category.paths import is_descendant_path
from hierarchy.domain import hierarchy
from hierarchy.product.product import Product

logger = structlog.get_logger(__name__)


@hierarchy.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=100, sanitize=False)
    description: String(max_length=500, sanitize=False)
    parent_id: Identifier()


@hierarchy.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(required=True, max_length=100, sanitize=False)
    description: String(max_length=500, sanitize=False)
    expected_version: Integer()


@hierarchy.command(part_of="Category")
class MoveCategory:
    category_id: Identifier(required=True)
    new_parent_id: Identifier()
    expected_version: Integer()


@hierarchy.command(part_of="Category")
class DeleteCategory:
    category_id: Identifier(required=True)
    expected_version: Integer()


def submit(command):
    """Process a category command synchronously.

    A version collision detected while committing means another writer
    changed one of the rows first; it is reported as a conflict the caller
    may retry.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except CategoryConflictError:
        raise
    except ExpectedVersionError as exc:
        logger.warning("Category write collided with a concurrent change", command=command.__class__.__name__)
        raise CategoryConflictError(str(exc)) from exc


def _load_parent(repo, parent_id):
    try:
        return repo.get(parent_id)
    except ObjectNotFoundError as exc:
        raise ParentNotFoundError(f"Parent category {parent_id} does not exist") from exc


def _check_version(category, expected_version):
    if expected_version is not None and category._version != expected_version:
        raise CategoryConflictError(
            f"Category {category.id} is at version {category._version}, expected {expected_version}"
        )


def _check_unique_name(repo, parent_id, name, exclude_id=None):
    cleaned = (name or "").strip()
    if repo.sibling_named(parent_id, cleaned, exclude_id=exclude_id) is not None:
        raise ValidationError({"name": [f"A category named '{cleaned}' already exists at this position"]})


def _depth_error():
    return ValidationError(
        {"level": [f"Category hierarchy cannot exceed {MAX_CATEGORY_LEVEL + 1} levels (depth 0-{MAX_CATEGORY_LEVEL})"]}
    )


def plan_move(repo, category, new_parent_id):
    """Check a move against the current tree.

    Returns ``(new_parent, descendants)``; ``new_parent`` is ``None`` when
    the category becomes a root. ``descendants`` is ``None`` when the
    category already sits under ``new_parent_id`` and nothing needs doing.
    """
    new_parent = None
    if new_parent_id:
        new_parent = _load_parent(repo, new_parent_id)
        if str(new_parent.id) == str(category.id):
            raise InvalidMoveError(f"Category {category.id} cannot be its own parent")
        if is_descendant_path(new_parent.path, category.path):
            raise InvalidMoveError(f"Category {new_parent.id} is inside the subtree of {category.id}")

    if str(category.parent_id or "") == str(new_parent_id or ""):
        return new_parent, None

    _check_unique_name(repo, new_parent_id, category.name, exclude_id=category.id)

    # Read the subtree from the current tree so the rewrite covers every
    # descendant that exists at this moment.
    descendants = [row for row in repo.subtree(category.path) if str(row.id) != str(category.id)]

    new_level = new_parent.level + 1 if new_parent is not None else 0
    deepest = max([category.level] + [row.level for row in descendants])
    if deepest + new_level - category.level > MAX_CATEGORY_LEVEL:
        raise _depth_error()

    return new_parent, descendants


@hierarchy.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)

        parent = None
        if command.parent_id:
            parent = _load_parent(repo, command.parent_id)
            if parent.level + 1 > MAX_CATEGORY_LEVEL:
                raise _depth_error()

        _check_unique_name(repo, command.parent_id, command.name)

        category = Category.create(
            name=command.name,
            description=command.description,
            parent=parent,
        )
        repo.add(category)
        if parent is not None:
            parent.touch()
            repo.add(parent)

        logger.info(
            "Category created",
            category_id=str(category.id),
            parent_id=str(category.parent_id) if category.parent_id else None,
            level=category.level,
        )
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        _check_version(category, command.expected_version)

        if (command.name or "").strip() != category.name:
            _check_unique_name(repo, category.parent_id, command.name, exclude_id=category.id)

        category.update_details(name=command.name, description=command.description)
        repo.add(category)
        return str(category.id)

    @handle(MoveCategory)
    def move_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        _check_version(category, command.expected_version)

        try:
            new_parent, descendants = plan_move(repo, category, command.new_parent_id)
        except InvalidMoveError:
            logger.warning(
                "Rejected category move",
                category_id=str(category.id),
                new_parent_id=command.new_parent_id,
            )
            raise

        if descendants is None:
            logger.debug("Category already under requested parent", category_id=str(category.id))
            return str(category.id)

        old_path = category.move_to(new_parent, subtree_size=len(descendants) + 1)
        for row in descendants:
            row.follow_ancestor(old_path, category.path)

        rows = [category, *descendants]
        if new_parent is not None:
            new_parent.touch()
            rows.append(new_parent)
        repo.save_all(rows)

        logger.info(
            "Category moved",
            category_id=str(category.id),
            previous_path=old_path,
            new_path=category.path,
            rows_rewritten=len(descendants) + 1,
        )
        return str(category.id)

    @handle(DeleteCategory)
    def delete_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        _check_version(category, command.expected_version)

        children = repo.count_children(category.id)
        if children > 0:
            raise CategoryHasChildrenError(f"Category {category.id} has {children} subcategories and cannot be deleted")

        products = current_domain.repository_for(Product).count_in_category(category.id)
        if products > 0:
            raise CategoryHasProductsError(f"Category {category.id} has {products} products and cannot be deleted")

        repo.discard(category)
        logger.info("Category deleted", category_id=str(category.id), path=category.path)
        return str(category.id)
