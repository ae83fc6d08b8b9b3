from bson import ObjectId

from database import SUPPLIES


def create(client, **fields):
    body = {"title": "Water", "amount": 10, **fields}
    resp = client.post("/create-supply", json=body)
    assert resp.status_code == 201
    return resp.json()["insertedId"]


def test_create_supply_stores_document(client, db):
    resp = client.post("/create-supply", json={
        "title": "Tents",
        "category": "Shelter",
        "amount": 120.5,
        "quantity": "12 tents",
        "donatedBy": "a@x.com",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["acknowledged"] is True

    doc = db[SUPPLIES].find_one({"_id": ObjectId(body["insertedId"])})
    assert doc["title"] == "Tents"
    assert doc["amount"] == 120.5
    assert doc["post"] == []
    assert "created_at" in doc


def test_create_supply_rejects_bad_shapes(client):
    assert client.post("/create-supply", json={"title": "X", "amount": -1}).status_code == 422
    assert client.post("/create-supply", json={"title": "X", "amount": "lots"}).status_code == 422
    assert client.post("/create-supply", json={"title": "X", "colour": "red"}).status_code == 422
    assert client.post("/create-supply", json={"amount": 5}).status_code == 201


def test_list_supplies_with_optional_limit(client):
    for i in range(4):
        create(client, title=f"Item {i}")

    assert len(client.get("/supplies").json()) == 4
    assert len(client.get("/supplies", params={"limit": 2}).json()) == 2
    assert len(client.get("/supplies", params={"limit": 0}).json()) == 4
    assert client.get("/supplies", params={"limit": -1}).status_code == 422


def test_get_supply_by_id_on_both_paths(client):
    supply_id = create(client, title="Blankets")
    for path in (f"/supply/{supply_id}", f"/supplies/{supply_id}"):
        resp = client.get(path)
        assert resp.status_code == 200
        assert resp.json()["_id"] == supply_id
        assert resp.json()["title"] == "Blankets"


def test_get_supply_bad_and_missing_ids(client):
    resp = client.get("/supply/not-an-id")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid supply id"
    assert client.get(f"/supply/{ObjectId()}").status_code == 404


def test_patch_appends_one_post(client, db):
    supply_id = create(client)
    created_at = db[SUPPLIES].find_one({"_id": ObjectId(supply_id)})["created_at"]
    client.patch(f"/supply/{supply_id}", json={"content": "Delivered to shelter A"})

    resp = client.patch(f"/supply/{supply_id}", json={"content": "Second truck", "author": "Sam"})
    assert resp.status_code == 200
    assert resp.json()["matchedCount"] == 1
    assert resp.json()["modifiedCount"] == 1

    posts = db[SUPPLIES].find_one({"_id": ObjectId(supply_id)})["post"]
    assert [p["content"] for p in posts] == ["Delivered to shelter A", "Second truck"]
    assert posts[1]["author"] == "Sam"
    assert "postedAt" in posts[1]
    assert db[SUPPLIES].find_one({"_id": ObjectId(supply_id)})["created_at"] == created_at


def test_patch_upserts_missing_supply(client, db):
    missing = ObjectId()
    resp = client.patch(f"/supply/{missing}", json={"content": "First word"})
    assert resp.status_code == 200
    assert resp.json()["upsertedId"] == str(missing)
    doc = db[SUPPLIES].find_one({"_id": missing})
    assert len(doc["post"]) == 1
    assert "created_at" in doc
    assert "updated_at" in doc


def test_patch_validates_id_and_body(client):
    supply_id = create(client)
    assert client.patch("/supply/xyz", json={"content": "hi"}).status_code == 400
    assert client.patch(f"/supply/{supply_id}", json={"text": "hi"}).status_code == 422


def test_delete_supply(client, db):
    supply_id = create(client)
    resp = client.delete(f"/delete-supply/{supply_id}")
    assert resp.json() == {"acknowledged": True, "deletedCount": 1}
    assert db[SUPPLIES].count_documents({}) == 0


def test_delete_unknown_supply_affects_nothing(client):
    resp = client.delete(f"/delete-supply/{ObjectId()}")
    assert resp.status_code == 200
    assert resp.json() == {"acknowledged": True, "deletedCount": 0}


def test_delete_bad_id(client):
    assert client.delete("/delete-supply/123").status_code == 400
