"""Request payloads for the write operations.

Every payload is validated with `parse_payload`, which reports only the
first violated rule. Each model maps its camelCase field names to the message
returned when that field is missing or has the wrong type; rules implemented
as validators carry their own message.
"""

import re
from typing import Any, ClassVar, Dict, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .errors import ValidationFailed

PASSWORD_PATTERN = re.compile(r"^(?=\S*[a-z])(?=\S*[A-Z])(?=\S*\d)(?=\S*[^\w\s])\S{8,30}$")
PASSWORD_MESSAGE = (
    "Password must have a capital letter, small letter, number, "
    "a special character and be more than 8 in length"
)
PASSWORDS_DO_NOT_MATCH = "Passwords do not match"

P = TypeVar("P", bound="Payload")


def check_password(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(PASSWORD_MESSAGE)
    return value


class Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    messages: ClassVar[Dict[str, str]] = {}


def first_error_message(model: Type[Payload], exc: ValidationError) -> str:
    error = exc.errors(include_url=False)[0]
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else ""
    if error["type"] == "extra_forbidden":
        return f'"{field}" is not allowed'
    ctx = error.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    if field in model.messages:
        return model.messages[field]
    return f"{field}: {error['msg']}" if field else error["msg"]


def parse_payload(model: Type[P], body: Any) -> P:
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise ValidationFailed(first_error_message(model, exc))


# Users

class CreateUser(Payload):
    messages: ClassVar[Dict[str, str]] = {
        "firstName": "First name must be up to 2 characters",
        "lastName": "Last name must be up to 2 characters",
        "email": "Invalid email format",
        "password": PASSWORD_MESSAGE,
        "confirmPassword": PASSWORDS_DO_NOT_MATCH,
    }

    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        return check_password(value)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password != self.password:
            raise ValueError(PASSWORDS_DO_NOT_MATCH)
        return self


class Login(Payload):
    messages: ClassVar[Dict[str, str]] = {
        "email": "Invalid email format",
        "password": "Password must be provided",
    }

    email: EmailStr
    password: str


class UpdateUser(Payload):
    messages: ClassVar[Dict[str, str]] = {
        "firstName": "First name must be up to 2 characters",
        "lastName": "Last name must be up to 2 characters",
    }

    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)


class ChangePassword(Payload):
    messages: ClassVar[Dict[str, str]] = {
        "oldPassword": "Your old password is required",
        "newPassword": PASSWORD_MESSAGE,
        "confirmPassword": PASSWORDS_DO_NOT_MATCH,
    }

    old_password: str
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        return check_password(value)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password != self.new_password:
            raise ValueError(PASSWORDS_DO_NOT_MATCH)
        return self


# Products

class CreateProduct(Payload):
    messages: ClassVar[Dict[str, str]] = {
        "name": "Product name must be provided",
        "price": "Product price must be provided",
        "description": "Product description must be provided",
        "imageUrl": "Product imageUrl must be provided",
    }

    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    description: str
    image_url: str


class UpdateProduct(CreateProduct):
    messages: ClassVar[Dict[str, str]] = {
        "name": "Product name must not be empty or null",
        "price": "Product price must not be empty or null",
        "description": "Product description must not be empty or null",
        "imageUrl": "Product imageUrl must not be empty or null",
    }


# Stocks

class AddStock(Payload):
    messages: ClassVar[Dict[str, str]] = {
        "quantity": "Quantity must be at least 1",
        "productId": "Product id must be provided",
    }

    quantity: int = Field(..., ge=1)
    product_id: str


class DeleteStock(Payload):
    messages: ClassVar[Dict[str, str]] = {
        "productId": "Product id must be provided",
        "stockId": "Stock id must be provided",
    }

    product_id: str
    stock_id: str
