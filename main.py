import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pymongo import MongoClient

import database
from config import Settings
from errors import register_exception_handlers
from schemas import LoginPayload, OrderPayload, Product, RegisterPayload, Review, TokenClaims
from security import get_current_claims
from services import AuthService, CatalogService, OrderService, ReviewService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
MAX_PAGE_SIZE = 1000


def envelope(message: str, data=None) -> dict:
    return {"success": True, "message": message, "data": data}


# Service dependencies
def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def create_app(settings: Optional[Settings] = None, client: Optional[MongoClient] = None) -> FastAPI:
    """Build the API. Pass `client` to reuse an existing MongoClient instead of connecting."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # a connection failure here aborts startup
        mongo = client if client is not None else database.connect(settings)
        db = mongo[settings.database_name]
        database.ensure_indexes(db)
        app.state.db = db
        app.state.auth_service = AuthService(db, settings)
        app.state.catalog_service = CatalogService(db)
        app.state.review_service = ReviewService(db)
        app.state.order_service = OrderService(db)
        logger.info("StyleSync API ready")
        try:
            yield
        finally:
            if client is None:
                mongo.close()

    app = FastAPI(title="StyleSync API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Health checks
    @app.get("/")
    def root():
        return {"message": "Server is running smoothly", "timestamp": datetime.now(timezone.utc)}

    @app.get("/test")
    def test_database(request: Request):
        response = {
            "backend": "Running",
            "database": "Not Available",
            "database_name": None,
            "collections": [],
        }
        db = getattr(request.app.state, "db", None)
        if db is not None:
            response["database_name"] = db.name
            try:
                response["collections"] = db.list_collection_names()
                response["database"] = "Connected"
            except Exception as e:
                response["database"] = f"Error: {str(e)[:100]}"
        return response

    # Auth
    @app.post(f"{API_PREFIX}/register", status_code=201)
    def register(payload: RegisterPayload, auth: AuthService = Depends(get_auth_service)):
        auth.register(payload.name, payload.email, payload.password, payload.role)
        return {"success": True, "message": "User registered successfully"}

    @app.post(f"{API_PREFIX}/login")
    def login(payload: LoginPayload, auth: AuthService = Depends(get_auth_service)):
        token = auth.login(payload.email, payload.password)
        return {"success": True, "message": "Login successful", "token": token}

    @app.get(f"{API_PREFIX}/me")
    def me(claims: TokenClaims = Depends(get_current_claims), auth: AuthService = Depends(get_auth_service)):
        return envelope("User retrieved successfully", auth.get_user(claims.userId))

    # Products
    @app.post(f"{API_PREFIX}/products", status_code=201)
    def create_product(payload: Product, catalog: CatalogService = Depends(get_catalog_service)):
        return envelope("Products created successfully", catalog.create_product(payload.model_dump()))

    @app.get(f"{API_PREFIX}/products")
    def list_products(
        category: Optional[str] = None,
        skip: int = Query(0, ge=0),
        limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
        catalog: CatalogService = Depends(get_catalog_service),
    ):
        return envelope("Products retrieved successfully", catalog.list_products(category, skip, limit))

    @app.get(f"{API_PREFIX}/products/{{product_id}}")
    def get_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
        return envelope("Products retrieved successfully", catalog.get_product(product_id))

    # Reviews
    @app.post(f"{API_PREFIX}/reviews")
    def create_review(payload: Review, reviews: ReviewService = Depends(get_review_service)):
        data = reviews.create_review(payload.review, payload.productId, payload.userName)
        return envelope("Review posted successfully", data)

    @app.get(f"{API_PREFIX}/reviews/{{product_id}}", status_code=201)
    def list_reviews(product_id: str, reviews: ReviewService = Depends(get_review_service)):
        return envelope("Reviews retrieved successfully", reviews.list_reviews(product_id))

    # Orders
    @app.post(f"{API_PREFIX}/orders")
    def create_order(payload: OrderPayload, orders: OrderService = Depends(get_order_service)):
        data = orders.create_order(payload.model_dump(exclude_unset=True))
        return envelope("Order placed successfully", data)

    @app.get(f"{API_PREFIX}/orders")
    def list_orders(
        skip: int = Query(0, ge=0),
        limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
        orders: OrderService = Depends(get_order_service),
    ):
        return envelope("Order retrieved successfully", orders.list_orders(skip, limit))

    @app.get(f"{API_PREFIX}/orders/{{user_id}}")
    def list_user_orders(
        user_id: str,
        skip: int = Query(0, ge=0),
        limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
        orders: OrderService = Depends(get_order_service),
    ):
        return envelope("Order retrieved successfully", orders.list_orders_by_user(user_id, skip, limit))

    @app.patch(f"{API_PREFIX}/orders/{{order_id}}")
    def update_order_status(order_id: str, orders: OrderService = Depends(get_order_service)):
        return envelope("Status updated successfully", orders.mark_delivered(order_id))

    return app


settings = Settings.from_env()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
