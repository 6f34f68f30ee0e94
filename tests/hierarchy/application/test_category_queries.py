"""Application tests for category tree queries."""

import pytest
from hierarchy.category.category import Category
from hierarchy.category.errors import HierarchyCorruptedError
from hierarchy.category.management import CreateCategory, MoveCategory
from hierarchy.category.queries import (
    get_categories_by_level,
    get_category_by_id,
    get_category_by_name,
    get_category_children,
    get_category_hierarchy,
    get_category_path,
    get_root_categories,
    list_categories,
    search_categories,
)
from hierarchy.category.read_model import CategoryNode
from hierarchy.product.placement import RegisterProduct
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain


def _create_category(name, parent_id=None, description=None):
    return current_domain.process(
        CreateCategory(name=name, parent_id=parent_id, description=description),
        asynchronous=False,
    )


def _register_product(sku, category_id):
    return current_domain.process(
        RegisterProduct(sku=sku, title=f"Product {sku}", category_id=category_id),
        asynchronous=False,
    )


@pytest.fixture()
def tree():
    """Tools > (Saws, Drills > Bits), Garden > Hoses."""
    tools = _create_category("Tools", description="Hand and power tools")
    drills = _create_category("Drills", tools, description="Cordless and corded drills")
    saws = _create_category("Saws", tools)
    bits = _create_category("Bits", drills)
    garden = _create_category("Garden")
    hoses = _create_category("Hoses", garden)
    return {"tools": tools, "drills": drills, "saws": saws, "bits": bits, "garden": garden, "hoses": hoses}


class TestGetCategory:
    def test_by_id(self, tree):
        view = get_category_by_id(tree["drills"])
        assert view.name == "Drills"
        assert view.parent_id == tree["tools"]
        assert view.level == 1

    def test_by_id_counts_children(self, tree):
        assert get_category_by_id(tree["tools"]).children_count == 2
        assert get_category_by_id(tree["bits"]).children_count == 0

    def test_by_id_counts_products(self, tree):
        _register_product("DR-1", tree["drills"])
        _register_product("DR-2", tree["drills"])

        assert get_category_by_id(tree["drills"]).product_count == 2
        assert get_category_by_id(tree["tools"]).product_count == 0

    def test_by_unknown_id(self):
        with pytest.raises(ObjectNotFoundError):
            get_category_by_id("missing")

    def test_by_name(self, tree):
        assert get_category_by_name("Hoses").id == tree["hoses"]

    def test_by_unknown_name(self, tree):
        with pytest.raises(ObjectNotFoundError):
            get_category_by_name("Lumber")


class TestListings:
    def test_roots_sorted_by_name(self, tree):
        assert [view.name for view in get_root_categories()] == ["Garden", "Tools"]

    def test_roots_when_empty(self):
        assert get_root_categories() == []

    def test_children(self, tree):
        assert [view.name for view in get_category_children(tree["tools"])] == ["Drills", "Saws"]

    def test_children_of_leaf(self, tree):
        assert get_category_children(tree["bits"]) == []

    def test_children_of_unknown_id(self, tree):
        assert get_category_children("missing") == []

    def test_by_level(self, tree):
        names = sorted(view.name for view in get_categories_by_level(1))
        assert names == ["Drills", "Hoses", "Saws"]

    def test_list_pages(self, tree):
        first = list_categories(limit=4, offset=0)
        rest = list_categories(limit=4, offset=4)

        assert len(first) == 4
        assert len(rest) == 2
        assert {view.id for view in first + rest} == set(tree.values())


class TestSearch:
    def test_matches_name(self, tree):
        assert [view.name for view in search_categories("dril")] == ["Drills"]

    def test_case_insensitive(self, tree):
        assert [view.name for view in search_categories("HOS")] == ["Hoses"]

    def test_matches_description(self, tree):
        assert [view.name for view in search_categories("cordless")] == ["Drills"]

    def test_no_match(self, tree):
        assert search_categories("lumber") == []

    def test_query_too_short(self, tree):
        with pytest.raises(ValidationError):
            search_categories("d")

    def test_blank_query(self, tree):
        with pytest.raises(ValidationError):
            search_categories("   ")


class TestCategoryPath:
    def test_path_of_root(self, tree):
        assert [view.id for view in get_category_path(tree["tools"])] == [tree["tools"]]

    def test_path_of_deep_category(self, tree):
        path = get_category_path(tree["bits"])
        assert [view.id for view in path] == [tree["tools"], tree["drills"], tree["bits"]]
        assert [view.level for view in path] == [0, 1, 2]

    def test_path_follows_move(self, tree):
        current_domain.process(
            MoveCategory(category_id=tree["drills"], new_parent_id=tree["garden"]),
            asynchronous=False,
        )

        path = get_category_path(tree["bits"])
        assert [view.id for view in path] == [tree["garden"], tree["drills"], tree["bits"]]

    def test_path_of_unknown_category(self):
        with pytest.raises(ObjectNotFoundError):
            get_category_path("missing")

    def test_missing_ancestor_reports_corruption(self, tree):
        repo = current_domain.repository_for(Category)
        repo._dao.delete(repo.get(tree["drills"]))

        with pytest.raises(HierarchyCorruptedError) as exc:
            get_category_path(tree["bits"])
        assert tree["drills"] in str(exc.value)


class TestCategoryHierarchy:
    def test_subtree(self, tree):
        node = get_category_hierarchy(tree["tools"])

        assert isinstance(node, CategoryNode)
        assert node.category.name == "Tools"
        assert [child.category.name for child in node.children] == ["Drills", "Saws"]
        assert [view.name for view in node.walk()] == ["Tools", "Drills", "Bits", "Saws"]

    def test_subtree_of_leaf(self, tree):
        node = get_category_hierarchy(tree["bits"])
        assert node.children == []

    def test_subtree_includes_product_counts(self, tree):
        _register_product("BIT-1", tree["bits"])

        node = get_category_hierarchy(tree["tools"])
        counts = {view.name: view.product_count for view in node.walk()}
        assert counts == {"Tools": 0, "Drills": 0, "Bits": 1, "Saws": 0}

    def test_whole_forest(self, tree):
        forest = get_category_hierarchy()

        assert [node.category.name for node in forest] == ["Garden", "Tools"]
        assert sum(len(list(node.walk())) for node in forest) == len(tree)

    def test_empty_forest(self):
        assert get_category_hierarchy() == []

    def test_repeated_calls_agree(self, tree):
        assert get_category_hierarchy(tree["tools"]) == get_category_hierarchy(tree["tools"])
        assert get_category_hierarchy() == get_category_hierarchy()

    def test_unknown_root(self):
        with pytest.raises(ObjectNotFoundError):
            get_category_hierarchy("missing")


class TestMarkupCharactersInNames:
    def test_lookup_by_name_with_ampersand(self):
        category_id = _create_category("Nuts & Bolts")
        assert get_category_by_name("Nuts & Bolts").id == category_id

    def test_search_matches_ampersand(self):
        _create_category("Nuts & Bolts")
        assert [view.name for view in search_categories("& b")] == ["Nuts & Bolts"]
