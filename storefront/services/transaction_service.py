# storefront/services/transaction_service.py
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from storefront.data.models.transaction import TransactionModel
from storefront.domain.constants import (
    ADMIN_TRANSACTIONS_PATTERN,
    HISTORIES_PATTERN,
    ORDER_METHOD_NAMES,
    OrderMethod,
    TransactionStatus,
)
from storefront.domain.errors import NotFoundError, UnauthorizedError, ValidationError
from storefront.repos.transaction_repo import TransactionRepo
from storefront.services.cache_service import CacheService
from storefront.utils.logging import get_logger
from storefront.utils.uploads import public_url

logger = get_logger(__name__)

# order methods without a shipping leg
_NO_SHIPPING = (OrderMethod.DINE_IN, OrderMethod.PICK_UP)


def validate_status_transition(order_method_id: int, new_status_id: int):
    """
    Denylist, not a full state machine: every transition is allowed except
    'Sending Goods' for Dine In and Pick Up orders.
    """
    if order_method_id in _NO_SHIPPING and new_status_id == TransactionStatus.SENDING_GOODS:
        method_name = ORDER_METHOD_NAMES[OrderMethod(order_method_id)]
        raise ValidationError(
            f"Cannot set status to 'Sending Goods' for {method_name} orders. "
            "Valid statuses are 'On Progress' or 'Finish Order'."
        )


def parse_status_id(value) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError("Status is required")
    try:
        status_id = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Status is required")
    if status_id <= 0:
        raise ValidationError("Status is required")
    return status_id


class TransactionService:
    """
    Admin side of transactions (list, detail, status update) and the
    customer histories.
    """

    def __init__(self, db: Session, cache: CacheService | None = None):
        self.repo = TransactionRepo(db)
        self.cache = cache

    # =====================================================
    # COMMANDS
    # =====================================================
    def update_status(self, transaction_id: int, status_id, user_id: int | None) -> Dict[str, Any]:
        status_id = parse_status_id(status_id)

        if not user_id:
            raise UnauthorizedError("User Id not found in token")

        transaction = self.repo.get_transaction(transaction_id)
        if not transaction:
            raise NotFoundError("Transaction not found")

        if not self.repo.get_status(status_id):
            raise ValidationError(f"Invalid status id {status_id}")

        validate_status_transition(transaction.order_method_id, status_id)

        old_status = transaction.status_id
        transaction.status_id = status_id
        transaction.updated_by = user_id
        transaction.updated_at = datetime.now(timezone.utc)
        self.repo.commit()

        logger.info(f"Transaction {transaction_id} status {old_status} -> {status_id} by user {user_id}")

        if self.cache is not None:
            self.cache.invalidate(ADMIN_TRANSACTIONS_PATTERN)
            self.cache.invalidate(HISTORIES_PATTERN)

        return {"success": True, "message": "Transaction status updated successfully"}

    # =====================================================
    # ADMIN QUERIES
    # =====================================================
    def list_transactions(
        self,
        page: int,
        limit: int,
        search: str = "",
        status: str = "",
    ) -> Tuple[List[Dict[str, Any]], int]:
        total = self.repo.count_admin(search, status)
        result = []
        for trx in self.repo.list_admin(page, limit, search, status):
            product_names = list(dict.fromkeys(item.product_name for item in trx.items))
            result.append({
                "id": trx.id,
                "noInvoice": trx.no_invoice,
                "dateTransaction": trx.date_transaction,
                "status": trx.status.name,
                "transactionItems": product_names,
                "totalTransaction": trx.total_transaction,
            })
        return result, total

    def get_transaction(self, transaction_id: int) -> Dict[str, Any]:
        trx = self.repo.get_transaction(transaction_id)
        if not trx:
            raise NotFoundError("Transaction not found")
        return self._detail(trx)

    # =====================================================
    # HISTORIES
    # =====================================================
    def list_histories(
        self,
        user_id: int,
        page: int,
        limit: int,
        day: date | None = None,
        status_id: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        total = self.repo.count_histories(user_id, day, status_id)
        histories = []
        for trx in self.repo.list_histories(user_id, page, limit, day, status_id):
            first = trx.items[0] if trx.items else None
            image = public_url(first.product.primary_image) if first is not None and first.product is not None else ""
            histories.append({
                "id": trx.id,
                "noInvoice": trx.no_invoice,
                "dateTransaction": trx.date_transaction,
                "status": trx.status.name,
                "totalTransaction": trx.total_transaction,
                "image": image,
            })
        return histories, total

    def get_history(self, user_id: int, no_invoice: str) -> Dict[str, Any]:
        if not no_invoice:
            raise ValidationError("Invoice number is required")
        trx = self.repo.get_by_invoice(user_id, no_invoice)
        if not trx:
            raise NotFoundError("History not found")
        return self._detail(trx)

    # =====================================================
    # METHODS
    # =====================================================
    def list_order_methods(self) -> List[Dict[str, Any]]:
        return [
            {"id": m.id, "name": m.name, "deliveryFee": m.delivery_fee}
            for m in self.repo.list_order_methods()
        ]

    def list_payment_methods(self) -> List[Dict[str, Any]]:
        return [
            {"id": m.id, "image": public_url(m.image), "name": m.name, "adminFee": m.admin_fee}
            for m in self.repo.list_payment_methods()
        ]

    def _detail(self, trx: TransactionModel) -> Dict[str, Any]:
        return {
            "id": trx.id,
            "userId": trx.user_id,
            "noInvoice": trx.no_invoice,
            "dateTransaction": trx.date_transaction,
            "fullName": trx.full_name,
            "email": trx.email,
            "address": trx.address,
            "phone": trx.phone,
            "paymentMethod": trx.payment_method.name,
            "orderMethod": trx.order_method.name,
            "status": trx.status.name,
            "deliveryFee": trx.delivery_fee,
            "adminFee": trx.admin_fee,
            "tax": trx.tax,
            "totalTransaction": trx.total_transaction,
            "transactionItems": [
                {
                    "id": item.id,
                    "productId": item.product_id,
                    "productName": item.product_name,
                    "productPrice": item.product_price,
                    "discountPercent": item.discount_percent,
                    "discountPrice": item.discount_price,
                    "size": item.size,
                    "sizeCost": item.size_cost,
                    "variant": item.variant,
                    "variantCost": item.variant_cost,
                    "amount": item.amount,
                    "subtotal": item.subtotal,
                }
                for item in trx.items
            ],
        }
