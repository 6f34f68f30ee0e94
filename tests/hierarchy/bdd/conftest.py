"""Shared BDD fixtures and step definitions for the category hierarchy."""

import pytest
from hierarchy.category.errors import (
    CategoryHasChildrenError,
    CategoryHasProductsError,
    InvalidMoveError,
    ParentNotFoundError,
)
from hierarchy.category.management import CreateCategory
from hierarchy.product.placement import RegisterProduct
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

# Map error names used in feature files to exception classes
_ERROR_CLASSES = {
    "validation": ValidationError,
    "invalid move": InvalidMoveError,
    "has children": CategoryHasChildrenError,
    "has products": CategoryHasProductsError,
    "parent not found": ParentNotFoundError,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def categories():
    """Category ids keyed by name."""
    return {}


@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a root category "{name}"'))
def root_category(categories, name):
    categories[name] = current_domain.process(CreateCategory(name=name), asynchronous=False)


@given(parsers.cfparse('a category "{name}" under "{parent}"'))
def child_category(categories, name, parent):
    categories[name] = current_domain.process(
        CreateCategory(name=name, parent_id=categories[parent]),
        asynchronous=False,
    )


@given(parsers.cfparse('a product "{sku}" filed under "{name}"'))
def product_in_category(categories, sku, name):
    current_domain.process(
        RegisterProduct(sku=sku, title=f"Product {sku}", category_id=categories[name]),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the action succeeds")
def action_succeeds(error):
    assert error["exc"] is None, f"Unexpected error: {error['exc']!r}"


@then(parsers.cfparse('the action is rejected as "{kind}"'))
def action_fails_with(error, kind):
    assert error["exc"] is not None, f"Expected a {kind} error but none was raised"
    assert isinstance(error["exc"], _ERROR_CLASSES[kind])
