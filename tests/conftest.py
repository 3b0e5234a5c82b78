import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["APP_SECRET"] = "test-secret"
os.environ["BASE_UPLOAD_URL"] = "http://testserver/uploads"
os.environ["CORS_ORIGINS"] = "http://localhost:5173"

from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from storefront.data.database import Database
from storefront.data.models import (
    CartModel,
    CategoryModel,
    ProductImageModel,
    ProductModel,
    ProfileModel,
    SizeModel,
    UserModel,
    VariantModel,
)
from storefront.main import create_app
from storefront.services.cache_service import CacheService
from storefront.utils.security import create_access_token, hash_password

PASSWORD = "Secret#123"


class DownRedis:
    """Every command fails like an unreachable server."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise RedisConnectionError("connection refused")

        return fail


@pytest.fixture
def database():
    return Database("sqlite://")


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def cache(fake_redis):
    return CacheService(client=fake_redis)


@pytest.fixture
def client(database, cache):
    app = create_app(database=database, cache=cache)
    with TestClient(app) as c:
        yield c
    database.dispose()


@pytest.fixture
def make_user(database, client):
    counter = {"n": 0}

    def _make(
        email=None,
        role="customer",
        full_name="Budi Santoso",
        address="Jl. Kopi No. 1",
        phone="081234567890",
    ):
        counter["n"] += 1
        email = email or f"user{counter['n']}@mail.com"
        with database.session() as s:
            user = UserModel(
                email=email,
                password=hash_password(PASSWORD),
                role=role,
                profile=ProfileModel(full_name=full_name, address=address, phone_number=phone),
            )
            s.add(user)
            s.commit()
            return user.id

    return _make


@pytest.fixture
def auth_header():
    def _header(user_id, role="customer"):
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return _header


@pytest.fixture
def make_size(database, client):
    def _make(name="Regular", cost=0):
        with database.session() as s:
            size = SizeModel(name=name, size_cost=Decimal(str(cost)))
            s.add(size)
            s.commit()
            return size.id

    return _make


@pytest.fixture
def make_variant(database, client):
    def _make(name="Hot", cost=0):
        with database.session() as s:
            variant = VariantModel(name=name, variant_cost=Decimal(str(cost)))
            s.add(variant)
            s.commit()
            return variant.id

    return _make


@pytest.fixture
def make_category(database, client):
    def _make(name="Coffee"):
        with database.session() as s:
            category = CategoryModel(name=name)
            s.add(category)
            s.commit()
            return category.id

    return _make


@pytest.fixture
def make_product(database, client):
    def _make(
        name="Espresso",
        price=25000,
        stock=10,
        discount_percent=0,
        is_favourite=False,
        is_active=True,
        category_ids=(),
        images=(),
    ):
        with database.session() as s:
            product = ProductModel(
                name=name,
                price=Decimal(str(price)),
                stock=stock,
                discount_percent=Decimal(str(discount_percent)),
                is_favourite=is_favourite,
                is_active=is_active,
            )
            product.categories = [s.get(CategoryModel, cid) for cid in category_ids]
            product.images = [
                ProductImageModel(product_image=url, is_primary=(i == 0)) for i, url in enumerate(images)
            ]
            s.add(product)
            s.commit()
            return product.id

    return _make


@pytest.fixture
def make_cart_line(database, client):
    def _make(user_id, product_id, size_id, variant_id, amount, subtotal):
        with database.session() as s:
            line = CartModel(
                user_id=user_id,
                product_id=product_id,
                size_id=size_id,
                variant_id=variant_id,
                amount=amount,
                subtotal=Decimal(str(subtotal)),
            )
            s.add(line)
            s.commit()
            return line.id

    return _make
