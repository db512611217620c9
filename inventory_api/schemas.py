"""
Database Schemas

MongoDB collection schemas as Pydantic models. Field names are snake_case
in Python and stored under their camelCase alias (first_name -> "firstName").
Timestamps are added by `database.create_document`.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List

from bson import ObjectId


class Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class User(Document):
    """
    Users collection schema
    Collection name: "users"
    """
    first_name: str = Field(..., min_length=2, description="First name")
    last_name: str = Field(..., min_length=2, description="Last name")
    full_name: str = Field(..., description="First and last name joined by a space")
    email: str = Field(..., description="Email (unique)")
    password_hash: str = Field(..., description="BCrypt hashed password")


class Product(Document):
    """
    Products collection schema
    Collection name: "products"
    """
    name: str = Field(..., description="Product name (unique)")
    price: float = Field(..., ge=0, allow_inf_nan=False, description="Unit price")
    description: str
    image_url: str
    stocks: List[ObjectId] = Field(default_factory=list, description="Stock batch ids, oldest first")


class Stock(Document):
    """
    Stocks collection schema
    Collection name: "stocks"
    """
    batch_id: str = Field(..., min_length=6, max_length=6, description="Uppercase alphanumeric batch code")
    quantity: int = Field(..., ge=1)


def full_name(first_name: str, last_name: str) -> str:
    return first_name + " " + last_name
