# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.catalog import SizeModel, VariantModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.schemas import CartIn
from storefront.repos.cart_repo import CartRepo
from storefront.repos.catalog_repo import CatalogRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger
from storefront.utils.money import D, discount_price, round_money
from storefront.utils.uploads import public_url

logger = get_logger(__name__)


def compute_line_subtotal(
    product: ProductModel,
    size: SizeModel | None,
    variant: VariantModel | None,
    amount: int,
) -> Decimal:
    """(discounted price or price + size cost + variant cost) * amount"""
    if D(product.discount_percent) > 0:
        unit_price = discount_price(product.price, product.discount_percent)
    else:
        unit_price = D(product.price)
    unit_price += D(size.size_cost if size else 0)
    unit_price += D(variant.variant_cost if variant else 0)
    return round_money(unit_price * amount)


class CartService:
    """
    Cart lines of one user.
    Subtotal is stored on the line and recomputed on every add.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.sizes = CatalogRepo(db, SizeModel)
        self.variants = CatalogRepo(db, VariantModel)

    #query
    def list_cart(self, user_id: int) -> List[Dict[str, Any]]:
        return [self._line_dict(line) for line in self.repo.get_lines(user_id)]

    #commands
    def add_to_cart(self, user_id: int, payload: CartIn) -> Dict[str, Any]:
        if payload.amount <= 0:
            raise ValidationError("Invalid amount, must be greater than 0")

        product = self.products.get_product(payload.product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product not found")

        size = self.sizes.get(payload.size_id)
        if not size:
            raise NotFoundError("Size not found")

        variant = self.variants.get(payload.variant_id)
        if not variant:
            raise NotFoundError("Variant not found")

        line = self.repo.find_line(user_id, product.id, size.id, variant.id)
        amount = payload.amount + (line.amount if line else 0)

        if amount > product.stock:
            raise ValidationError("Amount exceeds available stock")

        subtotal = compute_line_subtotal(product, size, variant, amount)

        if line:
            logger.info(f"Cart line {line.id} of user {user_id}: amount {line.amount} -> {amount}")
            line.amount = amount
            line.subtotal = subtotal
        else:
            line = self.repo.add_line(
                CartModel(
                    user_id=user_id,
                    product_id=product.id,
                    size_id=size.id,
                    variant_id=variant.id,
                    amount=amount,
                    subtotal=subtotal,
                )
            )
            logger.info(f"Added product {product.id} to cart of user {user_id}")

        self.repo.commit()
        return self._line_dict(line)

    def remove_line(self, user_id: int, line_id: int):
        line = self.repo.get_line(line_id)
        if not line or line.user_id != user_id:
            raise NotFoundError("Cart not found")

        self.repo.delete_line(line)
        self.repo.commit()
        logger.info(f"Removed cart line {line_id} of user {user_id}")

    def _line_dict(self, line: CartModel) -> Dict[str, Any]:
        product = line.product
        return {
            "id": line.id,
            "userId": line.user_id,
            "productId": line.product_id,
            "productImage": public_url(product.primary_image),
            "productName": product.name,
            "productPrice": product.price,
            "isFlashSale": product.is_flash_sale,
            "discountPercent": product.discount_percent or 0,
            "discountPrice": discount_price(product.price, product.discount_percent),
            "sizeName": line.size.name if line.size else "",
            "sizeCost": line.size.size_cost if line.size else 0,
            "variantName": line.variant.name if line.variant else "",
            "variantCost": line.variant.variant_cost if line.variant else 0,
            "amount": line.amount,
            "subtotal": line.subtotal,
        }
