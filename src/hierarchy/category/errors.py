"""Failures raised by the category hierarchy.

Each error extends the Protean exception the API layer already knows how
to report, so callers can catch either the broad or the specific type.
"""

from protean.exceptions import ExpectedVersionError, InvalidOperationError, ObjectNotFoundError

from hierarchy.category.paths import EncodingError

__all__ = [
    "CategoryConflictError",
    "CategoryHasChildrenError",
    "CategoryHasProductsError",
    "EncodingError",
    "HierarchyCorruptedError",
    "InvalidMoveError",
    "ParentNotFoundError",
]


class ParentNotFoundError(ObjectNotFoundError):
    """The parent named by a create or move does not exist."""


class InvalidMoveError(InvalidOperationError):
    """The move would parent a category to itself or to one of its descendants."""


class CategoryHasChildrenError(InvalidOperationError):
    """A category with subcategories cannot be deleted."""


class CategoryHasProductsError(InvalidOperationError):
    """A category still referenced by products cannot be deleted."""


class CategoryConflictError(ExpectedVersionError):
    """A concurrent structural change collided with this one; retry from scratch."""


class HierarchyCorruptedError(RuntimeError):
    """Stored paths reference a category that no longer exists."""
