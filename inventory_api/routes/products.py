from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..database import serialize_doc
from ..errors import NotFound
from ..payloads import CreateProduct, UpdateProduct, parse_payload
from ..repositories import ProductRepository, contains, get_product_repository
from ..schemas import Product as ProductSchema
from ..security import get_current_user

router = APIRouter(tags=["products"])


@router.get("/products")
def get_products(
    name: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(5, ge=1, alias="perPage"),
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
):
    query: Dict[str, Any] = {}
    name_filter = contains(name)
    if name_filter:
        query["name"] = name_filter
    result = products.paginate(query, page, per_page)
    result["data"] = [serialize_doc(doc) for doc in result["data"]]
    return {"success": True, "message": "Products fetched successfully", **result}


@router.get("/product/{product_id}")
def get_product(
    product_id: str,
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
):
    product = products.get(product_id)
    return {"success": True, "message": "Product fetched successfully", "data": serialize_doc(product)}


@router.post("/product")
def create_product(
    body: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
):
    payload = parse_payload(CreateProduct, body)
    product = products.create(ProductSchema(**payload.model_dump()))
    return {"success": True, "message": "Product created", "data": serialize_doc(product)}


@router.put("/product/update/{product_id}")
def update_product(
    product_id: str,
    body: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
):
    payload = parse_payload(UpdateProduct, body)
    product = products.update(product_id, payload.model_dump(by_alias=True))
    if not product:
        raise NotFound("Product not found")
    return {"success": True, "message": "Product update successful", "data": serialize_doc(product)}


@router.delete("/product/delete/{product_id}")
def delete_product(
    product_id: str,
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
):
    products.delete(product_id)
    return {"success": True, "message": "Product deleted!"}
