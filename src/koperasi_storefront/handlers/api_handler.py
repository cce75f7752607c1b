"""FastAPI application for the storefront: menu, checkout, orders and admin."""

import logging
from typing import Annotated, cast

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from koperasi_storefront.auth.access_guard import AccessGuard
from koperasi_storefront.auth.api_dependencies import (
    get_session_token_from_header,
    require_actor,
    require_admin,
)
from koperasi_storefront.cart.cart_store import CartStore
from koperasi_storefront.exceptions import (
    BackendError,
    PartialWriteError,
    StorefrontError,
    ValidationError,
)
from koperasi_storefront.models.auth_models import Actor
from koperasi_storefront.models.cart_models import CartLine
from koperasi_storefront.models.catalog_models import Product, ProductCategory, ProductInput
from koperasi_storefront.models.order_models import (
    CheckoutForm,
    Order,
    OrderDetail,
    OrderItem,
    OrderStatus,
)
from koperasi_storefront.services.admin_catalog_service import AdminCatalogManager, ImageUpload
from koperasi_storefront.services.auth_service import AuthService, LoginResult
from koperasi_storefront.services.catalog_service import CatalogReader
from koperasi_storefront.services.order_service import OrderService
from koperasi_storefront.services.order_status import (
    NOMINAL_TRANSITIONS,
    STATUS_LABELS,
    is_terminal,
)
from koperasi_storefront.services.order_submitter import OrderSubmitter

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class LoginRequest(BaseModel):
    """Credentials for creating a session."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """New student account."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1)
    phone: str | None = None


class SessionResponse(BaseModel):
    """Session created by login or registration."""

    session_token: str
    user_id: str
    is_admin: bool
    redirect_to: str

    @classmethod
    def from_result(cls, result: LoginResult) -> "SessionResponse":
        return cls(
            session_token=result.session.secret,
            user_id=result.actor.id,
            is_admin=result.is_admin,
            redirect_to=result.redirect_to,
        )


class LogoutResponse(BaseModel):
    """Logout outcome."""

    success: bool


class CategoryGroup(BaseModel):
    """Products of one category on the menu."""

    category: ProductCategory
    label: str
    products: list[Product]


class CatalogResponse(BaseModel):
    """Menu grouped by category, in display order."""

    categories: list[CategoryGroup]


class CheckoutRequest(BaseModel):
    """Cart snapshot and checkout form submitted together."""

    lines: list[CartLine]
    form: CheckoutForm


class CheckoutResponse(BaseModel):
    """Confirmation of a placed order."""

    order: Order
    items: list[OrderItem]
    redirect_to: str
    message: str


class StatusUpdateRequest(BaseModel):
    """Admin request to change an order's status."""

    status: OrderStatus


class ProductDeleteResponse(BaseModel):
    """Product delete confirmation."""

    product_id: str
    message: str


class StatusInfo(BaseModel):
    """Display information about one order status."""

    status: OrderStatus
    label: str
    terminal: bool
    next_statuses: list[OrderStatus]


def create_app(
    access_guard: AccessGuard,
    auth_service: AuthService,
    catalog_reader: CatalogReader,
    order_submitter: OrderSubmitter,
    order_service: OrderService,
    admin_catalog: AdminCatalogManager,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        access_guard: Session and admin role checks
        auth_service: Login, logout and registration
        catalog_reader: Menu reads
        order_submitter: Checkout
        order_service: Order reads and status changes
        admin_catalog: Product management

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Koperasi Storefront API",
        description="Campus cooperative food ordering: menu, checkout, order tracking and admin",
        version="1.0.0",
    )

    # Store services in app state for access in route handlers
    app.state.access_guard = access_guard
    app.state.auth_service = auth_service
    app.state.catalog_reader = catalog_reader
    app.state.order_submitter = order_submitter
    app.state.order_service = order_service
    app.state.admin_catalog = admin_catalog

    @app.exception_handler(StorefrontError)
    async def handle_storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
        """Convert service errors to a JSON notice."""
        if isinstance(exc, PartialWriteError):
            logger.error(f"Orphaned order {exc.order_id} after {request.method} {request.url.path}")
        elif isinstance(exc, BackendError):
            logger.error(f"{request.method} {request.url.path} failed: {exc}")

        # The orphaned order id stays in the logs
        content: dict[str, str] = {
            "detail": exc.notice if isinstance(exc, PartialWriteError) else exc.message
        }
        redirect_to = getattr(exc, "redirect_to", None)
        if redirect_to:
            content["redirect_to"] = redirect_to

        return JSONResponse(status_code=exc.status_code, content=content)

    SessionToken = Annotated[str | None, Depends(get_session_token_from_header)]

    async def current_actor(session_token: SessionToken) -> Actor:
        """Dependency for authenticated endpoints."""
        return await require_actor(app.state.access_guard, session_token)

    async def current_admin(session_token: SessionToken) -> Actor:
        """Dependency for admin endpoints."""
        return await require_admin(app.state.access_guard, session_token)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.post("/auth/login", response_model=SessionResponse, tags=["Auth"])
    async def login(request: LoginRequest) -> SessionResponse:
        """Log in and report where the actor should land."""
        result = await app.state.auth_service.login(request.email, request.password)
        return SessionResponse.from_result(result)

    @app.post("/auth/register", response_model=SessionResponse, status_code=201, tags=["Auth"])
    async def register(request: RegisterRequest) -> SessionResponse:
        """Create a student account and log it in."""
        result = await app.state.auth_service.register(
            request.email, request.password, request.full_name, request.phone
        )
        return SessionResponse.from_result(result)

    @app.post("/auth/logout", response_model=LogoutResponse, tags=["Auth"])
    async def logout(
        session_token: SessionToken,
        _actor: Actor = Depends(current_actor),
    ) -> LogoutResponse:
        """Revoke the current session."""
        success = await app.state.auth_service.logout(cast(str, session_token))
        return LogoutResponse(success=success)

    @app.get("/products", response_model=CatalogResponse, tags=["Catalog"])
    async def list_products() -> CatalogResponse:
        """Available products grouped by category."""
        grouped = await app.state.catalog_reader.list_available_by_category()
        return CatalogResponse(
            categories=[
                CategoryGroup(category=category, label=category.label, products=products)
                for category, products in grouped.items()
            ]
        )

    @app.post("/orders", response_model=CheckoutResponse, status_code=201, tags=["Orders"])
    async def submit_order(request: CheckoutRequest, session_token: SessionToken) -> CheckoutResponse:
        """Place an order from the submitted cart snapshot."""
        cart = CartStore.from_lines(request.lines)
        result = await app.state.order_submitter.submit(cart, request.form, session_token)
        return CheckoutResponse(
            order=result.order,
            items=result.items,
            redirect_to=result.redirect_to,
            message=result.message,
        )

    @app.get("/orders", response_model=list[Order], tags=["Orders"])
    async def list_my_orders(actor: Actor = Depends(current_actor)) -> list[Order]:
        """The actor's orders, newest first."""
        orders: list[Order] = await app.state.order_service.list_orders_for_actor(actor)
        return orders

    @app.get("/orders/{order_id}", response_model=OrderDetail, tags=["Orders"])
    async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderDetail:
        """One order with its items."""
        detail: OrderDetail = await app.state.order_service.get_order_detail(actor, order_id)
        return detail

    @app.get("/order-statuses", response_model=list[StatusInfo], tags=["Orders"])
    async def list_order_statuses() -> list[StatusInfo]:
        """Status labels and the nominal next statuses, in lifecycle order."""
        return [
            StatusInfo(
                status=status,
                label=STATUS_LABELS[status],
                terminal=is_terminal(status),
                next_statuses=[s for s in OrderStatus if s in NOMINAL_TRANSITIONS[status]],
            )
            for status in OrderStatus
        ]

    @app.get("/admin/orders", response_model=list[Order], tags=["Admin Orders"])
    async def list_all_orders(_admin: Actor = Depends(current_admin)) -> list[Order]:
        """Every order, newest first."""
        orders: list[Order] = await app.state.order_service.list_all_orders()
        return orders

    @app.patch("/admin/orders/{order_id}/status", response_model=Order, tags=["Admin Orders"])
    async def update_order_status(
        order_id: str,
        request: StatusUpdateRequest,
        admin: Actor = Depends(current_admin),
    ) -> Order:
        """Set an order's status."""
        logger.info(f"Admin {admin.id} setting order {order_id} to {request.status.value}")
        order: Order = await app.state.order_service.update_status(order_id, request.status)
        return order

    @app.get("/admin/products", response_model=list[Product], tags=["Admin Catalog"])
    async def list_all_products(_admin: Actor = Depends(current_admin)) -> list[Product]:
        """Every product, including unavailable ones."""
        products: list[Product] = await app.state.admin_catalog.list_products()
        return products

    @app.post("/admin/products", response_model=Product, status_code=201, tags=["Admin Catalog"])
    async def create_product(
        name: Annotated[str, Form()],
        price: Annotated[int, Form()],
        category: Annotated[ProductCategory, Form()],
        description: Annotated[str | None, Form()] = None,
        is_available: Annotated[bool, Form()] = True,
        image: Annotated[UploadFile | None, File()] = None,
        _admin: Actor = Depends(current_admin),
    ) -> Product:
        """Create a product, optionally with an image."""
        product_input = _product_input(name, description, price, category, is_available)
        product: Product = await app.state.admin_catalog.save(
            product_input, image=await _image_upload(image)
        )
        return product

    @app.put("/admin/products/{product_id}", response_model=Product, tags=["Admin Catalog"])
    async def update_product(
        product_id: str,
        name: Annotated[str, Form()],
        price: Annotated[int, Form()],
        category: Annotated[ProductCategory, Form()],
        description: Annotated[str | None, Form()] = None,
        is_available: Annotated[bool, Form()] = True,
        image: Annotated[UploadFile | None, File()] = None,
        _admin: Actor = Depends(current_admin),
    ) -> Product:
        """Update a product; without a new image the current one is kept."""
        product_input = _product_input(name, description, price, category, is_available)
        product: Product = await app.state.admin_catalog.save(
            product_input, image=await _image_upload(image), product_id=product_id
        )
        return product

    @app.delete(
        "/admin/products/{product_id}",
        response_model=ProductDeleteResponse,
        tags=["Admin Catalog"],
    )
    async def delete_product(
        product_id: str, _admin: Actor = Depends(current_admin)
    ) -> ProductDeleteResponse:
        """Delete a product and its image."""
        await app.state.admin_catalog.delete(product_id)
        return ProductDeleteResponse(product_id=product_id, message="Product deleted")

    @app.post(
        "/admin/products/{product_id}/availability",
        response_model=Product,
        tags=["Admin Catalog"],
    )
    async def toggle_product_availability(
        product_id: str, _admin: Actor = Depends(current_admin)
    ) -> Product:
        """Flip whether a product can be ordered."""
        product: Product = await app.state.admin_catalog.toggle_availability(product_id)
        return product

    return app


def _product_input(
    name: str,
    description: str | None,
    price: int,
    category: ProductCategory,
    is_available: bool,
) -> ProductInput:
    try:
        return ProductInput(
            name=name,
            description=description or None,
            price=price,
            category=category,
            is_available=is_available,
        )
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e


async def _image_upload(image: UploadFile | None) -> ImageUpload | None:
    if image is None or not image.filename:
        return None
    data = await image.read()
    if not data:
        return None
    return ImageUpload(data=data, filename=image.filename, content_type=image.content_type)
