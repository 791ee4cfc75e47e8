import pytest
from bson import ObjectId

def test_register_user_defaults_to_user_role(client, mongo_db):
    response = client.post("/users", json={"name": "Sam", "email": "sam@gmail.com"})

    assert response.status_code == 201
    assert response.json()["success"] is True
    stored = mongo_db["users"].find_one({"_id": ObjectId(response.json()["insertedId"])})
    assert stored["role"] == "user"
    assert stored["email"] == "sam@gmail.com"
    assert "createdAt" in stored

def test_register_user_lowercases_role(client, mongo_db):
    client.post("/users", json={"name": "Ada", "email": "ada@gmail.com", "role": "Admin"})
    assert mongo_db["users"].find_one({"email": "ada@gmail.com"})["role"] == "admin"

def test_register_same_email_twice(client, mongo_db):
    first = client.post("/users", json={"name": "Sam", "email": "sam@gmail.com"})
    second = client.post("/users", json={"name": "Samuel", "email": "sam@gmail.com"})

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {"success": False, "message": "User already exists"}
    assert mongo_db["users"].count_documents({"email": "sam@gmail.com"}) == 1

@pytest.mark.parametrize("payload", [
    {"email": "sam@gmail.com"},
    {"name": "Sam"},
    {"name": "Sam", "email": "not-an-email"},
    {"name": "", "email": "sam@gmail.com"},
])
def test_register_user_requires_name_and_email(client, mongo_db, payload):
    response = client.post("/users", json=payload)
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert mongo_db["users"].count_documents({}) == 0

def test_list_and_lookup_users(client):
    client.post("/users", json={"name": "Sam", "email": "sam@gmail.com"})
    client.post("/users", json={"name": "Ada", "email": "ada@gmail.com", "role": "admin"})

    users = client.get("/users").json()
    assert sorted(user["email"] for user in users) == ["ada@gmail.com", "sam@gmail.com"]

    response = client.get("/users/ada@gmail.com")
    assert response.status_code == 200
    assert response.json()["name"] == "Ada"
    assert response.json()["role"] == "admin"

def test_lookup_unknown_email_is_404(client):
    response = client.get("/users/ghost@gmail.com")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}

def test_update_role(client, mongo_db):
    user_id = client.post("/users", json={"name": "Sam", "email": "sam@gmail.com"}).json()["insertedId"]

    response = client.patch(f"/users/{user_id}", json={"role": "TUTOR"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert mongo_db["users"].find_one({"_id": ObjectId(user_id)})["role"] == "tutor"

def test_update_role_errors(client):
    user_id = client.post("/users", json={"name": "Sam", "email": "sam@gmail.com"}).json()["insertedId"]

    # Missing role
    assert client.patch(f"/users/{user_id}", json={}).status_code == 400
    assert client.patch(f"/users/{user_id}", json={"role": "  "}).status_code == 400
    # Malformed id
    response = client.patch("/users/12345", json={"role": "admin"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid ID format"}
    # Unknown user
    assert client.patch(f"/users/{ObjectId()}", json={"role": "admin"}).status_code == 404

def test_delete_user(client, mongo_db):
    user_id = client.post("/users", json={"name": "Sam", "email": "sam@gmail.com"}).json()["insertedId"]

    response = client.delete(f"/users/{user_id}")

    assert response.status_code == 200
    assert response.json()["deletedCount"] == 1
    assert mongo_db["users"].count_documents({}) == 0
    assert client.delete(f"/users/{user_id}").json()["deletedCount"] == 0
    assert client.delete("/users/xyz").status_code == 400

def test_user_storage_failures(broken_client):
    response = broken_client.post("/users", json={"name": "Sam", "email": "sam@gmail.com"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to create user"}
    assert broken_client.get("/users").status_code == 500
    assert broken_client.get("/users/sam@gmail.com").status_code == 500

def test_lookup_with_mixed_case_email(client):
    client.post("/users", json={"name": "Sam", "email": "Sam@Gmail.COM"})

    response = client.get("/users/Sam@Gmail.COM")

    assert response.status_code == 200
    assert response.json()["name"] == "Sam"
    # The same address in another case is still one registration
    assert client.post("/users", json={"name": "Sam", "email": "Sam@gmail.com"}).status_code == 409
