"""
Database Schemas and request bodies for StyleSync

Each collection model mirrors one MongoDB collection:
- users: registered accounts (name, email, bcrypt hash, role)
- products: catalog entries
- reviews: free-text reviews keyed by productId
- orders: caller-shaped orders, stamped with createdAt by the server
"""
from typing import Optional, List, Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# Users collection
class User(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(..., description="BCrypt hash of password")
    role: str = "user"

# Products collection
class Product(BaseModel):
    image: Optional[str] = None
    title: str
    rating: Optional[float] = None
    price: float = Field(..., ge=0)
    brand: Optional[str] = None
    description: Optional[str] = None
    sale: bool = False
    salePrice: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None

# Reviews collection
class Review(BaseModel):
    review: str
    productId: str
    userName: str

# Orders collection: any extra caller fields are kept as-is.
# status and createdAt are owned by the server and dropped from input.
class OrderPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    userId: Optional[str] = None
    items: Optional[List[Any]] = None

# Request payloads
class RegisterPayload(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: str = "user"


class LoginPayload(BaseModel):
    email: EmailStr
    password: str


# Signed token contents; not persisted
class TokenClaims(BaseModel):
    email: str
    role: Optional[str] = None
    userId: str
    iat: Optional[int] = None
    exp: Optional[int] = None
