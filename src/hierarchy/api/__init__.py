"""Category hierarchy HTTP API package."""

from hierarchy.api.routes import category_router, register_hierarchy_exception_handlers

__all__ = ["category_router", "register_hierarchy_exception_handlers"]
