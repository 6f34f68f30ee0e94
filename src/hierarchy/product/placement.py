"""Product placement — commands that file product references under categories."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from hierarchy.category.category import Category
from hierarchy.category.errors import ParentNotFoundError
from hierarchy.domain import hierarchy
from hierarchy.product.product import Product


@hierarchy.command(part_of="Product")
class RegisterProduct:
    sku: String(required=True, max_length=50)
    title: String(required=True, max_length=255, sanitize=False)
    category_id: Identifier()


@hierarchy.command(part_of="Product")
class RecategorizeProduct:
    product_id: Identifier(required=True)
    category_id: Identifier()


def _require_category(category_id):
    if not category_id:
        return
    try:
        current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError as exc:
        raise ParentNotFoundError(f"Category {category_id} does not exist") from exc


@hierarchy.command_handler(part_of=Product)
class ProductPlacementHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo.find_by_sku(command.sku) is not None:
            raise ValidationError({"sku": [f"A product with SKU {command.sku} already exists"]})

        _require_category(command.category_id)

        product = Product.register(
            sku=command.sku,
            title=command.title,
            category_id=command.category_id,
        )
        repo.add(product)
        return str(product.id)

    @handle(RecategorizeProduct)
    def recategorize_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        _require_category(command.category_id)

        product.file_under(command.category_id)
        repo.add(product)
