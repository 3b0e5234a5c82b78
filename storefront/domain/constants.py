from enum import IntEnum


class TransactionStatus(IntEnum):
    ON_PROGRESS = 1
    SENDING_GOODS = 2
    FINISH_ORDER = 3


class OrderMethod(IntEnum):
    DINE_IN = 1
    DOOR_DELIVERY = 2
    PICK_UP = 3


STATUS_NAMES = {
    TransactionStatus.ON_PROGRESS: "On Progress",
    TransactionStatus.SENDING_GOODS: "Sending Goods",
    TransactionStatus.FINISH_ORDER: "Finish Order",
}

ORDER_METHOD_NAMES = {
    OrderMethod.DINE_IN: "Dine In",
    OrderMethod.DOOR_DELIVERY: "Door Delivery",
    OrderMethod.PICK_UP: "Pick Up",
}

# cache key patterns dropped after writes
ADMIN_TRANSACTIONS_PATTERN = "/admin/transactions*"
HISTORIES_PATTERN = "/histories*"
PRODUCTS_PATTERNS = ("/products*", "/favourite-products*", "/admin/products*")
