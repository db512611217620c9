import re

from bson import ObjectId

from inventory_api.repositories import generate_batch_id


def add_stock(client, auth, product_id, quantity):
    return client.post("/v1/product/stock", json={"productId": product_id, "quantity": quantity}, headers=auth)


def delete_stock(client, auth, product_id, stock_id):
    return client.request(
        "DELETE",
        "/v1/product/stock/delete/",
        json={"productId": product_id, "stockId": stock_id},
        headers=auth,
    )


def test_generate_batch_id():
    for _ in range(20):
        assert re.fullmatch(r"[A-Z0-9]{6}", generate_batch_id())


def test_add_stock(client, auth, product, db):
    response = add_stock(client, auth, product["id"], 10)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Stock added"
    assert body["data"]["id"] == product["id"]
    assert len(body["data"]["stocks"]) == 1

    stock = db["stocks"].find_one({"_id": ObjectId(body["data"]["stocks"][0])})
    assert stock["quantity"] == 10
    assert re.fullmatch(r"[A-Z0-9]{6}", stock["batchId"])


def test_add_stock_keeps_order(client, auth, product):
    first = add_stock(client, auth, product["id"], 1).json()["data"]["stocks"]
    second = add_stock(client, auth, product["id"], 2).json()["data"]["stocks"]
    assert len(second) == 2
    assert second[0] == first[0]

    stored = client.get(f"/v1/product/{product['id']}", headers=auth).json()["data"]
    assert stored["stocks"] == second


def test_add_stock_validation(client, auth, product, db):
    response = add_stock(client, auth, product["id"], 0)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Quantity must be at least 1"}
    assert db["stocks"].count_documents({}) == 0


def test_add_stock_to_missing_product(client, auth, db):
    response = add_stock(client, auth, str(ObjectId()), 3)
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Product not found"}
    assert db["stocks"].count_documents({}) == 0


def test_product_stocks_quantity_range(client, auth, product):
    add_stock(client, auth, product["id"], 5)
    url = f"/v1/product/stocks/{product['id']}"

    inside = client.get(url, headers=auth, params={"minQuantity": 1, "maxQuantity": 10}).json()
    assert [s["quantity"] for s in inside["data"]] == [5]
    assert inside["totalResults"] == 1

    edges = client.get(url, headers=auth, params={"minQuantity": 5, "maxQuantity": 5}).json()
    assert [s["quantity"] for s in edges["data"]] == [5]

    above = client.get(url, headers=auth, params={"minQuantity": 6}).json()
    assert above["data"] == []
    assert above["totalResults"] == 0

    below = client.get(url, headers=auth, params={"maxQuantity": 4}).json()
    assert below["data"] == []


def test_product_stocks_only_lists_own_batches(client, auth, product):
    other = client.post(
        "/v1/product", json={"name": "Salt", "price": 1, "description": "Sea salt", "imageUrl": "x"}, headers=auth
    ).json()["data"]
    add_stock(client, auth, product["id"], 3)
    add_stock(client, auth, other["id"], 4)

    body = client.get(f"/v1/product/stocks/{product['id']}", headers=auth).json()
    assert body["message"] == "Product stocks fetched successfully"
    assert [s["quantity"] for s in body["data"]] == [3]


def test_product_stocks_for_missing_product(client, auth):
    response = client.get(f"/v1/product/stocks/{ObjectId()}", headers=auth)
    assert response.status_code == 404
    assert response.json()["message"] == "Product not found"


def test_list_stocks(client, auth, product, db):
    for quantity in range(1, 8):
        add_stock(client, auth, product["id"], quantity)

    body = client.get("/v1/stocks", headers=auth, params={"page": 2}).json()
    assert body["message"] == "Stocks fetched successfully"
    assert body["totalResults"] == 7
    assert body["totalPages"] == 2
    assert [s["quantity"] for s in body["data"]] == [6, 7]

    batch_id = db["stocks"].find_one({"quantity": 4})["batchId"]
    body = client.get("/v1/stocks", headers=auth, params={"batchId": batch_id.lower()}).json()
    assert batch_id in [s["batchId"] for s in body["data"]]
    assert all(batch_id.lower() in s["batchId"].lower() for s in body["data"])


def test_delete_stock(client, auth, product, db):
    stocks = add_stock(client, auth, product["id"], 2).json()["data"]["stocks"]
    stocks = add_stock(client, auth, product["id"], 3).json()["data"]["stocks"]

    response = delete_stock(client, auth, product["id"], stocks[0])
    assert response.status_code == 200
    assert response.json()["message"] == "Stock deleted"
    assert response.json()["data"]["stocks"] == [stocks[1]]
    assert db["stocks"].find_one({"_id": ObjectId(stocks[0])}) is None

    stored = client.get(f"/v1/product/{product['id']}", headers=auth).json()["data"]
    assert stored["stocks"] == [stocks[1]]


def test_delete_stock_of_other_product(client, auth, product, db):
    other = client.post(
        "/v1/product", json={"name": "Salt", "price": 1, "description": "Sea salt", "imageUrl": "x"}, headers=auth
    ).json()["data"]
    stock_id = add_stock(client, auth, other["id"], 4).json()["data"]["stocks"][0]

    response = delete_stock(client, auth, product["id"], stock_id)
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Stock does not belong to this product"}
    assert db["stocks"].find_one({"_id": ObjectId(stock_id)}) is not None
    assert db["products"].find_one({"_id": ObjectId(other["id"])})["stocks"] == [ObjectId(stock_id)]


def test_delete_stock_validation(client, auth, product):
    response = client.request(
        "DELETE", "/v1/product/stock/delete/", json={"productId": product["id"]}, headers=auth
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Stock id must be provided"


def test_delete_stock_from_missing_product(client, auth):
    response = delete_stock(client, auth, str(ObjectId()), str(ObjectId()))
    assert response.status_code == 404
    assert response.json()["message"] == "Product not found"
