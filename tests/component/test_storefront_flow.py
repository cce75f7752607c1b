"""Component tests for the storefront: real services and repositories over in-memory tables."""

import copy
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from koperasi_storefront.backend.session_client import SessionClient
from koperasi_storefront.bootstrap import create_backend_client, create_storefront_app
from koperasi_storefront.config import StorefrontSettings
from koperasi_storefront.models.auth_models import Actor

STUDENT = {"Authorization": "Bearer student-secret"}
OTHER_STUDENT = {"Authorization": "Bearer other-secret"}
ADMIN = {"Authorization": "Bearer admin-secret"}

CHECKOUT_FORM = {
    "student_name": "Siti Aminah",
    "student_dorm": "Aisyah",
    "room_number": "101",
    "phone": "081234567890",
}


class InMemoryTable:
    """Subset of the DynamoDB Table API used by the document store."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.items: dict[str, dict[str, Any]] = {}
        self.fail_put: Callable[[dict[str, Any]], bool] = lambda item: False

    def put_item(self, Item: dict[str, Any], ConditionExpression: str | None = None) -> dict:
        if self.fail_put(Item):
            raise ClientError({"Error": {"Code": "InternalServerError", "Message": "down"}}, "PutItem")
        if ConditionExpression == "attribute_not_exists(id)" and Item["id"] in self.items:
            raise ClientError(
                {"Error": {"Code": "ConditionalCheckFailedException", "Message": "exists"}}, "PutItem"
            )
        self.items[Item["id"]] = copy.deepcopy(Item)
        return {}

    def get_item(self, Key: dict[str, str]) -> dict:
        item = self.items.get(Key["id"])
        return {"Item": copy.deepcopy(item)} if item is not None else {}

    def delete_item(self, Key: dict[str, str]) -> dict:
        self.items.pop(Key["id"], None)
        return {}

    def update_item(
        self,
        Key: dict[str, str],
        UpdateExpression: str,
        ExpressionAttributeNames: dict[str, str],
        ExpressionAttributeValues: dict[str, Any] | None = None,
        ConditionExpression: str | None = None,
        ReturnValues: str | None = None,
    ) -> dict:
        item = self.items.get(Key["id"])
        if item is None:
            raise ClientError(
                {"Error": {"Code": "ConditionalCheckFailedException", "Message": "missing"}},
                "UpdateItem",
            )

        set_part, _, remove_part = UpdateExpression.partition(" REMOVE ")
        if set_part.startswith("REMOVE "):
            set_part, remove_part = "", set_part[len("REMOVE ") :]

        if set_part:
            for assignment in set_part[len("SET ") :].split(", "):
                name, value = assignment.split(" = ")
                item[ExpressionAttributeNames[name]] = (ExpressionAttributeValues or {})[value]
        if remove_part:
            for name in remove_part.split(", "):
                item.pop(ExpressionAttributeNames[name], None)

        return {"Attributes": copy.deepcopy(item)}

    def scan(self, FilterExpression: Any = None, ExclusiveStartKey: Any = None) -> dict:
        items = [
            copy.deepcopy(item)
            for item in self.items.values()
            if FilterExpression is None or _matches(FilterExpression, item)
        ]
        return {"Items": items}


def _matches(condition: Any, item: dict[str, Any]) -> bool:
    expression = condition.get_expression()
    if expression["operator"] == "AND":
        return all(_matches(part, item) for part in expression["values"])
    attribute, value = expression["values"]
    return item.get(attribute.name) == value


class InMemoryDynamoDB:
    """DynamoDB resource double handing out one in-memory table per name."""

    def __init__(self) -> None:
        self.tables: dict[str, InMemoryTable] = {}

    def Table(self, name: str) -> InMemoryTable:
        return self.tables.setdefault(name, InMemoryTable(name))


def _product(product_id: str, name: str, price: int, category: str, **extra: Any) -> dict[str, Any]:
    return {
        "id": product_id,
        "name": name,
        "price": price,
        "category": category,
        "is_available": True,
        **extra,
    }


@pytest.mark.component
class TestStorefrontFlow:
    """Checkout, tracking and admin flows through the HTTP API."""

    @pytest.fixture
    def dynamodb(self) -> InMemoryDynamoDB:
        """In-memory tables seeded with a catalog and one admin role assignment."""
        dynamodb = InMemoryDynamoDB()
        products = dynamodb.Table("products")
        for record in [
            _product("p1", "Nasi Goreng", 15000, "makanan_berat", image_file_id="p1.jpg"),
            _product("p2", "Es Teh", 8000, "minuman"),
            _product("p3", "Keripik", 5000, "makanan_ringan", is_available=False),
        ]:
            products.put_item(Item=record)

        dynamodb.Table("user_roles").put_item(Item={"id": "r1", "user_id": "user_admin", "role": "admin"})
        return dynamodb

    @pytest.fixture
    def s3(self) -> MagicMock:
        """S3 client double."""
        return MagicMock()

    @pytest.fixture
    def client(self, dynamodb: InMemoryDynamoDB, s3: MagicMock) -> TestClient:
        """Application wired with real services over the in-memory backend."""
        settings = StorefrontSettings(
            backend_endpoint="https://backend.test/v1", backend_project_id="koperasi"
        )
        backend = create_backend_client(settings, dynamodb, s3)

        actors = {
            "student-secret": Actor(id="user_student", name="Siti Aminah"),
            "other-secret": Actor(id="user_other", name="Budi"),
            "admin-secret": Actor(id="user_admin", name="Admin"),
        }
        sessions = MagicMock(spec=SessionClient)
        sessions.get_current_session = AsyncMock(side_effect=lambda token: actors.get(token))
        backend.sessions = sessions

        return TestClient(create_storefront_app(settings, backend))

    def _checkout(self, client: TestClient) -> dict[str, Any]:
        response = client.post(
            "/orders",
            headers=STUDENT,
            json={
                "lines": [
                    {"id": "p1", "name": "Nasi Goreng", "price": 15000, "quantity": 2},
                    {"id": "p2", "name": "Es Teh", "price": 8000, "quantity": 1},
                ],
                "form": CHECKOUT_FORM,
            },
        )
        assert response.status_code == 201
        result: dict[str, Any] = response.json()
        return result

    def test_menu_shows_only_available_products(self, client: TestClient) -> None:
        """Test the grouped menu."""
        response = client.get("/products")

        groups = {g["category"]: [p["id"] for p in g["products"]] for g in response.json()["categories"]}
        assert groups == {"makanan_berat": ["p1"], "makanan_ringan": [], "minuman": ["p2"]}

    def test_checkout_snapshots_prices(self, client: TestClient, dynamodb: InMemoryDynamoDB) -> None:
        """Test that an order keeps its total and item prices after a catalog edit."""
        result = self._checkout(client)
        order_id = result["order"]["id"]

        assert result["order"]["total_amount"] == 38000
        assert result["redirect_to"] == f"/orders/{order_id}"
        assert len(dynamodb.Table("order_items").items) == 2

        edit = client.put(
            "/admin/products/p1",
            headers=ADMIN,
            data={"name": "Nasi Goreng", "price": "20000", "category": "makanan_berat"},
        )
        assert edit.status_code == 200
        assert edit.json()["price"] == 20000
        assert edit.json()["image_file_id"] == "p1.jpg"

        detail = client.get(f"/orders/{order_id}", headers=STUDENT).json()
        assert detail["order"]["total_amount"] == 38000
        prices = {item["product_id"]: (item["price"], item["quantity"]) for item in detail["items"]}
        assert prices == {"p1": (15000, 2), "p2": (8000, 1)}

    def test_orders_are_private(self, client: TestClient) -> None:
        """Test that other students cannot see an order but admins can."""
        order_id = self._checkout(client)["order"]["id"]

        assert client.get(f"/orders/{order_id}", headers=OTHER_STUDENT).status_code == 404
        assert client.get("/orders", headers=OTHER_STUDENT).json() == []
        assert client.get(f"/orders/{order_id}", headers=ADMIN).status_code == 200

    def test_admin_completes_pending_order(self, client: TestClient) -> None:
        """Test that pending can go straight to completed and the student sees it."""
        order_id = self._checkout(client)["order"]["id"]

        response = client.patch(
            f"/admin/orders/{order_id}/status", headers=ADMIN, json={"status": "completed"}
        )
        assert response.status_code == 200

        orders = client.get("/orders", headers=STUDENT).json()
        assert [(o["id"], o["status"]) for o in orders] == [(order_id, "completed")]

    def test_failed_item_write_leaves_no_order(
        self, client: TestClient, dynamodb: InMemoryDynamoDB
    ) -> None:
        """Test that a failed item write rolls back the whole submission."""
        dynamodb.Table("order_items").fail_put = lambda item: item["product_id"] == "p2"

        response = client.post(
            "/orders",
            headers=STUDENT,
            json={
                "lines": [
                    {"id": "p1", "name": "Nasi Goreng", "price": 15000, "quantity": 2},
                    {"id": "p2", "name": "Es Teh", "price": 8000, "quantity": 1},
                ],
                "form": CHECKOUT_FORM,
            },
        )

        assert response.status_code == 502
        assert response.json() == {"detail": "Failed to create order"}
        assert dynamodb.Table("orders").items == {}
        assert dynamodb.Table("order_items").items == {}

    def test_access_control(self, client: TestClient) -> None:
        """Test the redirects for anonymous and non-admin actors."""
        anonymous = client.get("/orders")
        assert anonymous.status_code == 401
        assert anonymous.json()["redirect_to"] == "/auth"

        student = client.get("/admin/orders", headers=STUDENT)
        assert student.status_code == 403
        assert student.json() == {"detail": "Access denied. You are not an admin.", "redirect_to": "/"}

    def test_delete_product_when_image_delete_fails(
        self, client: TestClient, dynamodb: InMemoryDynamoDB, s3: MagicMock
    ) -> None:
        """Test that the product is removed even if its image cannot be deleted."""
        s3.delete_object.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "error"}}, "DeleteObject"
        )

        response = client.delete("/admin/products/p1", headers=ADMIN)

        assert response.status_code == 200
        assert "p1" not in dynamodb.Table("products").items
        s3.delete_object.assert_called_once_with(Bucket="product-images", Key="p1.jpg")

    def test_admin_creates_and_toggles_product(
        self, client: TestClient, dynamodb: InMemoryDynamoDB, s3: MagicMock
    ) -> None:
        """Test creating a product with an image and hiding it from the menu."""
        created = client.post(
            "/admin/products",
            headers=ADMIN,
            data={"name": "Pisang Goreng", "price": "3000", "category": "makanan_ringan"},
            files={"image": ("pisang.jpg", b"jpegdata", "image/jpeg")},
        )
        assert created.status_code == 201
        product = created.json()
        assert product["image_url"].startswith("https://product-images.s3.us-east-1.amazonaws.com/")
        assert s3.put_object.call_args.kwargs["Body"] == b"jpegdata"

        toggled = client.post(f"/admin/products/{product['id']}/availability", headers=ADMIN)
        assert toggled.json()["is_available"] is False

        menu = client.get("/products").json()["categories"]
        assert all(p["id"] != product["id"] for group in menu for p in group["products"])
        assert len(client.get("/admin/products", headers=ADMIN).json()) == 4
