"""Category aggregate root for the product category tree."""

from datetime import datetime
from uuid import uuid4

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from hierarchy.category.paths import child_path, decode, level_of, rebase, root_path
from hierarchy.domain import hierarchy

# Six levels, 0 (root) through 5
MAX_CATEGORY_LEVEL = 5


def _clean_name(name):
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError({"name": ["Category name cannot be blank"]})
    return cleaned


@hierarchy.aggregate
class Category:
    """A node in the store's category tree.

    ``path`` and ``level`` are derived from the parent chain and are only
    ever changed through ``create``, ``move_to`` and ``follow_ancestor``.
    Product and child counts are not stored here; the read side computes
    them on demand.
    """

    name: String(required=True, max_length=100, sanitize=False)
    description: String(max_length=500, default="", sanitize=False)
    parent_id: Identifier()
    level: Integer(default=0, min_value=0, max_value=MAX_CATEGORY_LEVEL)
    path: String(required=True, max_length=255)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def path_matches_position(self):
        segments = decode(self.path)
        if segments[-1] != str(self.id):
            raise ValidationError({"path": ["Path must end with the category's own identifier"]})
        if len(segments) != self.level + 1:
            raise ValidationError({"level": ["Level must equal the number of ancestors in the path"]})
        expected_parent = segments[-2] if len(segments) > 1 else None
        parent = str(self.parent_id) if self.parent_id else None
        if parent != expected_parent:
            raise ValidationError({"parent_id": ["Parent must be the path's second-to-last segment"]})

    @property
    def is_root(self):
        return not self.parent_id

    @classmethod
    def create(cls, name, description=None, parent=None):
        from hierarchy.category.events import CategoryCreated

        category_id = str(uuid4())
        if parent is None:
            path = root_path(category_id)
        else:
            path = child_path(parent.path, category_id)

        now = datetime.now()
        category = cls(
            id=category_id,
            name=_clean_name(name),
            description=description or "",
            parent_id=parent.id if parent is not None else None,
            level=level_of(path),
            path=path,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=category.name,
                parent_id=category.parent_id,
                level=category.level,
                path=category.path,
            )
        )
        return category

    def update_details(self, name, description=None):
        from hierarchy.category.events import CategoryDetailsUpdated

        self.name = _clean_name(name)
        self.description = description or ""
        self.updated_at = datetime.now()

        self.raise_(
            CategoryDetailsUpdated(
                category_id=self.id,
                name=self.name,
                description=self.description,
            )
        )

    def move_to(self, parent=None, subtree_size=1):
        """Re-anchor this category under ``parent``, or make it a root.

        Returns the path the category had before the move; descendants use
        it to rebase their own paths.
        """
        from hierarchy.category.events import CategoryMoved

        previous_parent_id = self.parent_id
        previous_path = self.path
        if parent is None:
            new_path = root_path(self.id)
        else:
            new_path = child_path(parent.path, self.id)

        with atomic_change(self):
            self.parent_id = parent.id if parent is not None else None
            self.path = new_path
            self.level = level_of(new_path)
            self.updated_at = datetime.now()

        self.raise_(
            CategoryMoved(
                category_id=self.id,
                previous_parent_id=previous_parent_id,
                new_parent_id=self.parent_id,
                previous_path=previous_path,
                new_path=new_path,
                level=self.level,
                subtree_size=subtree_size,
            )
        )
        return previous_path

    def touch(self):
        """Mark the row as written so its version joins the commit check.

        Called on a parent whose path a create or move builds on; a
        concurrent relocation of that parent then collides instead of
        leaving the new child under a stale prefix.
        """
        self.updated_at = datetime.now()

    def follow_ancestor(self, old_prefix, new_prefix):
        """Rewrite this descendant's path after an ancestor moved."""
        new_path = rebase(self.path, old_prefix, new_prefix)
        with atomic_change(self):
            self.path = new_path
            self.level = level_of(new_path)
            self.updated_at = datetime.now()
