# storefront/services/checkout_service.py
import random
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.transaction import TransactionModel, TransactionItemModel
from storefront.data.models.user import UserModel
from storefront.domain.constants import TransactionStatus, ADMIN_TRANSACTIONS_PATTERN, HISTORIES_PATTERN, PRODUCTS_PATTERNS
from storefront.domain.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from storefront.domain.schemas import CheckoutIn
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.transaction_repo import TransactionRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.cache_service import CacheService
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.money import D, discount_price, round_money
from storefront.utils.settings import TAX_RATE

logger = get_logger(__name__)

INVOICE_ATTEMPTS = 5


def compute_totals(subtotals: Iterable, delivery_fee, admin_fee, tax_rate=TAX_RATE) -> Dict[str, Decimal]:
    """
    itemTotal = sum of line subtotals
    tax       = itemTotal * tax rate
    total     = itemTotal + tax + delivery fee + admin fee
    """
    item_total = sum((D(s) for s in subtotals), Decimal("0"))
    tax = round_money(item_total * D(tax_rate))
    delivery_fee = D(delivery_fee)
    admin_fee = D(admin_fee)
    return {
        "item_total": item_total,
        "tax": tax,
        "delivery_fee": delivery_fee,
        "admin_fee": admin_fee,
        "total": item_total + tax + delivery_fee + admin_fee,
    }


def generate_invoice_number(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """INV-YYYYMMDD-NNNNN, random 5 digit suffix."""
    now = now or datetime.now(timezone.utc)
    suffix = (rng or random).randint(0, 99999)
    return f"INV-{now:%Y%m%d}-{suffix:05d}"


class CheckoutService:
    """
    Turns the cart of a user into a transaction.

    Transaction row, item snapshots, stock decrement and cart cleanup are
    committed together or not at all. Cache invalidation and the order
    notification run after the commit and never fail the checkout.
    """

    def __init__(
        self,
        db: Session,
        cache: CacheService,
        notification_service: NotificationService | None = None,
    ):
        self.repo = TransactionRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.cache = cache
        self.notification_service = notification_service or NotificationService()

    def checkout(self, user_id: int | None, payload: CheckoutIn) -> Dict[str, Any]:
        if not payload.payment_method_id or not payload.order_method_id:
            raise ValidationError("paymentMethodId and orderMethodId are required")

        if not user_id:
            raise UnauthorizedError("User Id not found in token")

        user = self.users.get_user(user_id)
        if not user:
            raise UnauthorizedError("User not found")

        contact = self._resolve_contact(user, payload)
        delivery_fee, admin_fee = self._get_fees(payload.order_method_id, payload.payment_method_id)

        lines = self.carts.get_lines(user_id)
        if not lines:
            raise ValidationError("Cart is empty")

        try:
            requested = self._check_stock(lines)
            totals = compute_totals((line.subtotal for line in lines), delivery_fee, admin_fee)
            now = datetime.now(timezone.utc)

            transaction = self.repo.add_transaction(
                TransactionModel(
                    user_id=user_id,
                    no_invoice=self._new_invoice_number(now),
                    date_transaction=now,
                    full_name=contact["full_name"],
                    email=contact["email"],
                    address=contact["address"],
                    phone=contact["phone"],
                    payment_method_id=payload.payment_method_id,
                    order_method_id=payload.order_method_id,
                    status_id=int(TransactionStatus.ON_PROGRESS),
                    delivery_fee=totals["delivery_fee"],
                    admin_fee=totals["admin_fee"],
                    tax=totals["tax"],
                    total_transaction=totals["total"],
                    created_by=user_id,
                    updated_by=user_id,
                )
            )

            for line in lines:
                self.repo.add_item(self._snapshot(transaction.id, line, user_id))

            for product_id, amount in requested.items():
                if self.products.decrement_stock(product_id, amount) == 0:
                    raise ValidationError(f"Stock for product {product_id} changed during checkout")

            self.carts.clear(user_id)
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            logger.error(f"Checkout of user {user_id} violated a constraint: {e.orig}")
            raise ConflictError("Transaction conflicts with existing data, please retry")
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Transaction {transaction.id} ({transaction.no_invoice}) created for user {user_id}, "
            f"{len(lines)} lines, total {totals['total']}"
        )

        self._invalidate_caches()
        self.notification_service.send_order_notification(user_id, transaction.id, transaction.no_invoice)

        return {
            "transaction_id": transaction.id,
            "no_invoice": transaction.no_invoice,
            "date_transaction": now,
            "delivery_fee": totals["delivery_fee"],
            "admin_fee": totals["admin_fee"],
            "tax": totals["tax"],
            "total_transaction": totals["total"],
        }

    # =====================================================
    # STEPS
    # =====================================================
    def _resolve_contact(self, user: UserModel, payload: CheckoutIn) -> Dict[str, str]:
        profile = user.profile
        stored = {
            "full_name": profile.full_name if profile else "",
            "email": user.email,
            "address": profile.address if profile else "",
            "phone": profile.phone_number if profile else "",
        }

        contact = {}
        for field, fallback in stored.items():
            override = (getattr(payload, field) or "").strip()
            contact[field] = override or (fallback or "").strip()

        missing = [field for field, value in contact.items() if not value]
        if missing:
            raise ValidationError(f"Contact data is incomplete, missing: {', '.join(missing)}")
        return contact

    def _get_fees(self, order_method_id: int, payment_method_id: int):
        order_method = self.repo.get_order_method(order_method_id)
        if not order_method:
            raise NotFoundError("Invalid order method id")

        payment_method = self.repo.get_payment_method(payment_method_id)
        if not payment_method:
            raise NotFoundError("Invalid payment method id")

        return D(order_method.delivery_fee), D(payment_method.admin_fee)

    def _check_stock(self, lines: List[CartModel]) -> Dict[int, int]:
        # one product can sit in several lines (different size / variant)
        requested: Dict[int, int] = {}
        for line in lines:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.amount

        products = {p.id: p for p in self.products.get_products_for_update(list(requested))}

        for product_id, amount in requested.items():
            product = products.get(product_id)
            if not product:
                raise NotFoundError("Product not found")
            if amount > product.stock:
                raise ValidationError(
                    f'Stock for product "{product.name}" is not enough. '
                    f"Available: {product.stock}, requested: {amount}"
                )
        return requested

    def _new_invoice_number(self, now: datetime) -> str:
        for _ in range(INVOICE_ATTEMPTS):
            no_invoice = generate_invoice_number(now)
            if not self.repo.invoice_exists(no_invoice):
                return no_invoice
            logger.warning(f"Invoice number {no_invoice} already used, generating another one")
        raise ConflictError("Could not generate a unique invoice number, please retry")

    def _snapshot(self, transaction_id: int, line: CartModel, user_id: int) -> TransactionItemModel:
        product = line.product
        return TransactionItemModel(
            transaction_id=transaction_id,
            product_id=line.product_id,
            product_name=product.name,
            product_price=product.price,
            discount_percent=product.discount_percent or 0,
            discount_price=discount_price(product.price, product.discount_percent),
            size=line.size.name if line.size else "",
            size_cost=line.size.size_cost if line.size else 0,
            variant=line.variant.name if line.variant else "",
            variant_cost=line.variant.variant_cost if line.variant else 0,
            amount=line.amount,
            subtotal=line.subtotal,
            created_by=user_id,
            updated_by=user_id,
        )

    def _invalidate_caches(self):
        for pattern in (ADMIN_TRANSACTIONS_PATTERN, HISTORIES_PATTERN, *PRODUCTS_PATTERNS):
            self.cache.invalidate(pattern)
