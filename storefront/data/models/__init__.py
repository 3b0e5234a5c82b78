# all models imported here so they register in Base.metadata

from storefront.data.models.user import UserModel, ProfileModel, PasswordResetModel
from storefront.data.models.catalog import SizeModel, VariantModel, CategoryModel
from storefront.data.models.product import ProductModel, ProductImageModel
from storefront.data.models.cart import CartModel
from storefront.data.models.method import OrderMethodModel, PaymentMethodModel, StatusModel
from storefront.data.models.transaction import TransactionModel, TransactionItemModel

__all__ = [
    "UserModel",
    "ProfileModel",
    "PasswordResetModel",
    "SizeModel",
    "VariantModel",
    "CategoryModel",
    "ProductModel",
    "ProductImageModel",
    "CartModel",
    "OrderMethodModel",
    "PaymentMethodModel",
    "StatusModel",
    "TransactionModel",
    "TransactionItemModel",
]
