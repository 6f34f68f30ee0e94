"""FastAPI endpoints for the category hierarchy."""

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from hierarchy.api.schemas import (
    CategoryHierarchyResponse,
    CategoryNodeResponse,
    CategoryPathResponse,
    CategoryResponse,
    CreateCategoryRequest,
    MoveCategoryRequest,
    StatusResponse,
    UpdateCategoryRequest,
)
from hierarchy.category.errors import (
    CategoryConflictError,
    CategoryHasChildrenError,
    CategoryHasProductsError,
    HierarchyCorruptedError,
    InvalidMoveError,
    ParentNotFoundError,
)
from hierarchy.category.management import (
    CreateCategory,
    DeleteCategory,
    MoveCategory,
    UpdateCategory,
    submit,
)
from hierarchy.category.queries import (
    get_categories_by_level,
    get_category_by_id,
    get_category_children,
    get_category_hierarchy,
    get_category_path,
    get_root_categories,
    list_categories,
    search_categories,
)

category_router = APIRouter(prefix="/categories", tags=["categories"])


def _listing(views) -> list[CategoryResponse]:
    return [CategoryResponse.from_view(view) for view in views]


# --- Read endpoints ---


@category_router.get("", response_model=list[CategoryResponse])
async def list_category_rows(
    level: int | None = None,
    parent_id: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[CategoryResponse]:
    if level is not None:
        return _listing(get_categories_by_level(level))
    if parent_id == "null":
        return _listing(get_root_categories())
    if parent_id:
        return _listing(get_category_children(parent_id))
    return _listing(list_categories(limit=max(limit, 1), offset=max(offset, 0)))


@category_router.get("/roots", response_model=list[CategoryResponse])
async def root_categories() -> list[CategoryResponse]:
    return _listing(get_root_categories())


@category_router.get("/search", response_model=list[CategoryResponse])
async def search(q: str = "") -> list[CategoryResponse]:
    return _listing(search_categories(q))


@category_router.get("/hierarchy", response_model=CategoryHierarchyResponse)
async def full_hierarchy() -> CategoryHierarchyResponse:
    forest = get_category_hierarchy()
    return CategoryHierarchyResponse(roots=[CategoryNodeResponse.from_node(node) for node in forest])


@category_router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: str) -> CategoryResponse:
    return CategoryResponse.from_view(get_category_by_id(category_id))


@category_router.get("/{category_id}/children", response_model=list[CategoryResponse])
async def category_children(category_id: str) -> list[CategoryResponse]:
    return _listing(get_category_children(category_id))


@category_router.get("/{category_id}/hierarchy", response_model=CategoryNodeResponse)
async def category_subtree(category_id: str) -> CategoryNodeResponse:
    return CategoryNodeResponse.from_node(get_category_hierarchy(category_id))


@category_router.get("/{category_id}/path", response_model=CategoryPathResponse)
async def category_path(category_id: str) -> CategoryPathResponse:
    return CategoryPathResponse(path=_listing(get_category_path(category_id)))


# --- Write endpoints ---


@category_router.post("", status_code=201, response_model=CategoryResponse)
async def create_category(body: CreateCategoryRequest) -> CategoryResponse:
    command = CreateCategory(
        name=body.name,
        description=body.description,
        parent_id=body.parent_id,
    )
    category_id = submit(command)
    return CategoryResponse.from_view(get_category_by_id(category_id))


@category_router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: str, body: UpdateCategoryRequest) -> CategoryResponse:
    command = UpdateCategory(
        category_id=category_id,
        name=body.name,
        description=body.description,
        expected_version=body.expected_version,
    )
    submit(command)
    return CategoryResponse.from_view(get_category_by_id(category_id))


@category_router.put("/{category_id}/move", response_model=CategoryResponse)
async def move_category(category_id: str, body: MoveCategoryRequest) -> CategoryResponse:
    command = MoveCategory(
        category_id=category_id,
        new_parent_id=body.new_parent_id,
        expected_version=body.expected_version,
    )
    submit(command)
    return CategoryResponse.from_view(get_category_by_id(category_id))


@category_router.delete("/{category_id}", response_model=StatusResponse)
async def delete_category(category_id: str, expected_version: int | None = None) -> StatusResponse:
    submit(DeleteCategory(category_id=category_id, expected_version=expected_version))
    return StatusResponse()


# --- Error mapping ---

_ERROR_STATUS = [
    (ValidationError, 400, "VALIDATION_FAILED"),
    (ObjectNotFoundError, 404, "CATEGORY_NOT_FOUND"),
    (ParentNotFoundError, 400, "INVALID_PARENT"),
    (InvalidMoveError, 400, "INVALID_MOVE"),
    (CategoryHasChildrenError, 409, "CATEGORY_HAS_CHILDREN"),
    (CategoryHasProductsError, 409, "CATEGORY_HAS_PRODUCTS"),
    (CategoryConflictError, 409, "CONCURRENT_MODIFICATION"),
    (HierarchyCorruptedError, 500, "HIERARCHY_CORRUPTED"),
]


def _error_handler(status_code: int, code: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        message = getattr(exc, "messages", None) or str(exc)
        return JSONResponse(status_code=status_code, content={"error": code, "message": message})

    return handler


def register_hierarchy_exception_handlers(app: FastAPI) -> None:
    """Map hierarchy errors to HTTP responses, overriding Protean's defaults."""
    register_exception_handlers(app)
    for exc_class, status_code, code in _ERROR_STATUS:
        app.add_exception_handler(exc_class, _error_handler(status_code, code))
