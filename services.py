"""
Services behind the API routes.

Each service is built with the database handle it needs and talks to a
single collection. Services never call each other.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from config import Settings
from database import (
    ORDERS, PRODUCTS, REVIEWS, USERS,
    insert_result, paginate, serialize, to_object_id, update_result,
)
from errors import BadRequest, Conflict, Unauthorized
from schemas import User
from security import create_access_token, dummy_verify, hash_password, verify_password

logger = logging.getLogger(__name__)

DELIVERED = "delivered"


class AuthService:
    def __init__(self, db: Database, settings: Settings):
        self.users = db[USERS]
        self.settings = settings

    def register(self, name: str, email: str, password: str, role: str = "user") -> str:
        """Create a user; the unique email index rejects duplicates. Returns the new id."""
        user = User(name=name, email=email, password=hash_password(password), role=role)
        try:
            res = self.users.insert_one(user.model_dump())
        except DuplicateKeyError:
            logger.warning("Registration refused, email already exists: %s", email)
            raise Conflict("User already exists")
        logger.info("Registered user %s (%s)", email, role)
        return str(res.inserted_id)

    def login(self, email: str, password: str) -> str:
        user = self.users.find_one({"email": email})
        if not user:
            dummy_verify()
            logger.warning("Login failed, unknown email: %s", email)
            raise Unauthorized("Invalid email or password")
        if not verify_password(password, user.get("password", "")):
            logger.warning("Login failed, wrong password: %s", email)
            raise Unauthorized("Invalid email or password")
        return create_access_token(
            {"email": user["email"], "role": user.get("role"), "userId": str(user["_id"])},
            self.settings,
        )

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        user = self.users.find_one({"_id": to_object_id(user_id)}, {"password": 0})
        return serialize(user)


class CatalogService:
    def __init__(self, db: Database):
        self.products = db[PRODUCTS]

    def create_product(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return insert_result(self.products.insert_one(dict(fields)))

    def list_products(self, category: Optional[str] = None, skip: int = 0,
                      limit: Optional[int] = None) -> List[Dict[str, Any]]:
        filter_q = {}
        if category:
            filter_q["category"] = category
        return [serialize(p) for p in paginate(self.products.find(filter_q), skip, limit)]

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        # a malformed id cannot match anything, so it reads as "not found"
        try:
            oid = to_object_id(product_id)
        except BadRequest:
            return None
        return serialize(self.products.find_one({"_id": oid}))


class ReviewService:
    def __init__(self, db: Database):
        self.reviews = db[REVIEWS]

    def create_review(self, review: str, product_id: str, user_name: str) -> Dict[str, Any]:
        res = self.reviews.insert_one({"review": review, "productId": product_id, "userName": user_name})
        return insert_result(res)

    def list_reviews(self, product_id: str) -> List[Dict[str, Any]]:
        return [serialize(r) for r in self.reviews.find({"productId": product_id})]


class OrderService:
    def __init__(self, db: Database):
        self.orders = db[ORDERS]

    def create_order(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        order = {k: v for k, v in fields.items() if k not in ("_id", "status", "createdAt")}
        order["createdAt"] = datetime.now(timezone.utc)
        return insert_result(self.orders.insert_one(order))

    def list_orders(self, skip: int = 0, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return [serialize(o) for o in paginate(self.orders.find(), skip, limit)]

    def list_orders_by_user(self, user_id: str, skip: int = 0,
                            limit: Optional[int] = None) -> List[Dict[str, Any]]:
        cursor = self.orders.find({"userId": user_id})
        return [serialize(o) for o in paginate(cursor, skip, limit)]

    def mark_delivered(self, order_id: str) -> Dict[str, Any]:
        """Set status to delivered whatever the current status is."""
        res = self.orders.update_one({"_id": to_object_id(order_id)}, {"$set": {"status": DELIVERED}})
        logger.info("Order %s marked delivered (matched=%s)", order_id, res.matched_count)
        return update_result(res)
