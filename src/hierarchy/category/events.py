"""Domain events for the Category aggregate."""

from protean.fields import Identifier, Integer, String, Text

from hierarchy.domain import hierarchy


@hierarchy.event(part_of="Category")
class CategoryCreated:
    """A new category was added to the tree."""

    __version__ = "v1"

    category_id: Identifier(required=True)
    name: String(required=True, sanitize=False)
    parent_id: Identifier()
    level: Integer(required=True)
    path: String(required=True)


@hierarchy.event(part_of="Category")
class CategoryDetailsUpdated:
    """A category's name or description was changed."""

    __version__ = "v1"

    category_id: Identifier(required=True)
    name: String(required=True, sanitize=False)
    description: Text(sanitize=False)


@hierarchy.event(part_of="Category")
class CategoryMoved:
    """A category and its whole subtree were re-anchored under a new parent."""

    __version__ = "v1"

    category_id: Identifier(required=True)
    previous_parent_id: Identifier()
    new_parent_id: Identifier()
    previous_path: String(required=True)
    new_path: String(required=True)
    level: Integer(required=True)
    subtree_size: Integer(required=True)
