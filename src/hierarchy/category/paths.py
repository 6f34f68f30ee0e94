"""Materialized path arithmetic for the category tree.

A category's path lists the identifiers of its ancestors from the root down
to the category itself, joined by ``SEPARATOR``. Identifiers are UUID
strings, which never contain the separator. Nothing here touches storage.
"""

SEPARATOR = "/"


class EncodingError(ValueError):
    """A path cannot be built or read from the given segments."""


def _check_segment(category_id) -> str:
    segment = str(category_id) if category_id is not None else ""
    if not segment:
        raise EncodingError("Category identifier cannot be blank")
    if SEPARATOR in segment:
        raise EncodingError(f"Category identifier {segment!r} contains the path separator")
    return segment


def root_path(category_id) -> str:
    """Path of a category that has no parent."""
    return _check_segment(category_id)


def child_path(parent_path: str, category_id) -> str:
    """Append ``category_id`` below ``parent_path``.

    Refuses an identifier that is already one of the parent's segments,
    since the resulting path would describe a cycle.
    """
    segment = _check_segment(category_id)
    if segment in decode(parent_path):
        raise EncodingError(f"Category {segment} already appears in path {parent_path!r}")
    return f"{parent_path}{SEPARATOR}{segment}"


def decode(path: str) -> list[str]:
    """Identifiers from the root to the leaf."""
    if not path:
        raise EncodingError("Path cannot be empty")
    segments = path.split(SEPARATOR)
    if any(not segment for segment in segments):
        raise EncodingError(f"Path {path!r} has an empty segment")
    return segments


def level_of(path: str) -> int:
    """Depth encoded by ``path``; a root path is level 0."""
    return len(decode(path)) - 1


def is_descendant_path(candidate: str, ancestor: str) -> bool:
    """True if ``candidate`` lies strictly below ``ancestor``."""
    return candidate.startswith(ancestor + SEPARATOR)


def rebase(path: str, old_prefix: str, new_prefix: str) -> str:
    """Swap the leading ``old_prefix`` of ``path`` for ``new_prefix``."""
    if path == old_prefix:
        return new_prefix
    if not is_descendant_path(path, old_prefix):
        raise EncodingError(f"Path {path!r} is not inside {old_prefix!r}")
    return new_prefix + path[len(old_prefix) :]
