import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..database import serialize_doc
from ..errors import NotFound
from ..payloads import AddStock, DeleteStock, parse_payload
from ..repositories import (
    ProductRepository,
    StockRepository,
    contains,
    get_product_repository,
    get_stock_repository,
    to_object_id,
)
from ..security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stocks"])


@router.get("/stocks")
def get_stocks(
    batch_id: Optional[str] = Query(None, alias="batchId"),
    page: int = Query(1, ge=1),
    per_page: int = Query(5, ge=1, alias="perPage"),
    current_user: dict = Depends(get_current_user),
    stocks: StockRepository = Depends(get_stock_repository),
):
    query: Dict[str, Any] = {}
    batch_filter = contains(batch_id)
    if batch_filter:
        query["batchId"] = batch_filter
    result = stocks.paginate(query, page, per_page)
    result["data"] = [serialize_doc(doc) for doc in result["data"]]
    return {"success": True, "message": "Stocks fetched successfully", **result}


@router.get("/product/stocks/{product_id}")
def get_product_stocks(
    product_id: str,
    min_quantity: Optional[int] = Query(None, alias="minQuantity"),
    max_quantity: Optional[int] = Query(None, alias="maxQuantity"),
    page: int = Query(1, ge=1),
    per_page: int = Query(5, ge=1, alias="perPage"),
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
    stocks: StockRepository = Depends(get_stock_repository),
):
    product = products.get(product_id)
    query: Dict[str, Any] = {"_id": {"$in": product.get("stocks", [])}}
    quantity: Dict[str, int] = {}
    if min_quantity is not None:
        quantity["$gte"] = min_quantity
    if max_quantity is not None:
        quantity["$lte"] = max_quantity
    if quantity:
        query["quantity"] = quantity
    result = stocks.paginate(query, page, per_page)
    result["data"] = [serialize_doc(doc) for doc in result["data"]]
    return {"success": True, "message": "Product stocks fetched successfully", **result}


@router.post("/product/stock")
def add_stock(
    body: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
    stocks: StockRepository = Depends(get_stock_repository),
):
    payload = parse_payload(AddStock, body)
    product = products.get(payload.product_id)
    stock = stocks.create_batch(payload.quantity)
    product = products.attach_stock(product["_id"], stock["_id"])
    if not product:
        # Product vanished between the lookup and the push
        stocks.delete(stock["_id"])
        raise NotFound("Product not found")
    logger.info("Added stock batch %s (%d) to product %s", stock["batchId"], stock["quantity"], product["_id"])
    return {"success": True, "message": "Stock added", "data": serialize_doc(product)}


@router.delete("/product/stock/delete/")
def delete_stock(
    body: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    products: ProductRepository = Depends(get_product_repository),
    stocks: StockRepository = Depends(get_stock_repository),
):
    payload = parse_payload(DeleteStock, body)
    product = products.get(payload.product_id)
    stock_id = to_object_id(payload.stock_id)
    if stock_id not in product.get("stocks", []):
        raise NotFound("Stock does not belong to this product")
    stocks.delete(stock_id)
    product = products.detach_stock(product["_id"], stock_id)
    if not product:
        raise NotFound("Product not found")
    return {"success": True, "message": "Stock deleted", "data": serialize_doc(product)}
