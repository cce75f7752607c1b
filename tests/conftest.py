"""Shared pytest fixtures and configuration for all tests."""

import os

# Entry point modules skip building the real application in test mode
os.environ["ENVIRONMENT"] = "test"

from datetime import UTC, datetime  # noqa: E402

import pytest  # noqa: E402

from koperasi_storefront.models.auth_models import Actor  # noqa: E402
from koperasi_storefront.models.catalog_models import Product, ProductCategory  # noqa: E402
from koperasi_storefront.models.order_models import (  # noqa: E402
    CheckoutForm,
    DeliveryMethod,
    Order,
    OrderStatus,
)


@pytest.fixture
def student() -> Actor:
    """Fixture providing an authenticated student."""
    return Actor(id="user_student", email="siti@kampus.ac.id", name="Siti Aminah")


@pytest.fixture
def admin() -> Actor:
    """Fixture providing an authenticated admin."""
    return Actor(id="user_admin", email="admin@koperasi.ac.id", name="Koperasi Admin")


@pytest.fixture
def nasi_goreng() -> Product:
    """Fixture providing an available heavy meal."""
    return Product(
        id="p1",
        name="Nasi Goreng",
        description="Fried rice with egg",
        price=15000,
        category=ProductCategory.HEAVY_MEAL,
        is_available=True,
        image_file_id="img_p1.jpg",
        image_url="https://cdn.example.com/img_p1.jpg",
    )


@pytest.fixture
def es_teh() -> Product:
    """Fixture providing an available beverage without an image."""
    return Product(
        id="p2",
        name="Es Teh",
        price=8000,
        category=ProductCategory.BEVERAGE,
        is_available=True,
    )


@pytest.fixture
def checkout_form() -> CheckoutForm:
    """Fixture providing a valid pickup checkout form."""
    return CheckoutForm(
        student_name="Siti Aminah",
        student_dorm="Khodijah",
        room_number="204",
        phone="081234567890",
        delivery_method=DeliveryMethod.PICKUP,
    )


@pytest.fixture
def pending_order() -> Order:
    """Fixture providing a stored pending order owned by the student."""
    return Order(
        id="order_1",
        user_id="user_student",
        created_at=datetime(2024, 3, 1, 10, 30, tzinfo=UTC),
        status=OrderStatus.PENDING,
        delivery_method=DeliveryMethod.PICKUP,
        student_name="Siti Aminah",
        student_dorm="Khodijah",
        room_number="204",
        phone="081234567890",
        total_amount=38000,
    )
