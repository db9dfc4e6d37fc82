from conftest import API, create_category, create_transaction, register_and_login


async def test_create_category_scoped_to_caller(client, auth_headers):
    me = (await client.get(f"{API}/users/me", headers=auth_headers)).json()

    response = await client.post(
        f"{API}/categories",
        json={"name": "Groceries", "type": "expense", "user_id": "00000000-0000-0000-0000-000000000000"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["name"] == "Groceries"
    assert body["type"] == "expense"
    assert body["description"] == ""
    assert body["user_id"] == me["id"]


async def test_type_defaults_to_expense(client, auth_headers):
    response = await client.post(f"{API}/categories", json={"name": "Rent"}, headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["type"] == "expense"


async def test_create_requires_name(client, auth_headers):
    for payload in ({}, {"name": ""}, {"name": "   "}):
        response = await client.post(f"{API}/categories", json=payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"message": "Category name is required"}


async def test_create_rejects_unknown_type(client, auth_headers):
    response = await client.post(
        f"{API}/categories", json={"name": "Salary", "type": "transfer"}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Category type must be income or expense"}


async def test_duplicate_name_conflicts_only_for_same_user(client, auth_headers, other_headers):
    await create_category(client, auth_headers, "Groceries")

    duplicate = await client.post(f"{API}/categories", json={"name": "Groceries"}, headers=auth_headers)
    assert duplicate.status_code == 409
    assert duplicate.json() == {"message": "Category name already exists"}

    other = await client.post(f"{API}/categories", json={"name": "Groceries"}, headers=other_headers)
    assert other.status_code == 201


async def test_list_returns_only_own_categories(client, auth_headers, other_headers):
    await create_category(client, auth_headers, "Groceries")
    await create_category(client, auth_headers, "Salary", type="income")
    await create_category(client, other_headers, "Travel")

    response = await client.get(f"{API}/categories", headers=auth_headers)

    assert response.status_code == 200
    assert sorted(c["name"] for c in response.json()) == ["Groceries", "Salary"]


async def test_update_category(client, auth_headers):
    category = await create_category(client, auth_headers, "Food")

    payload = {"name": "Dining", "description": "Restaurants", "type": "expense"}
    first = await client.put(f"{API}/categories/{category['id']}", json=payload, headers=auth_headers)
    second = await client.put(f"{API}/categories/{category['id']}", json=payload, headers=auth_headers)

    assert first.status_code == second.status_code == 200
    assert first.json()["name"] == "Dining"
    assert first.json()["description"] == "Restaurants"
    assert {k: v for k, v in first.json().items() if k != "updated_at"} == {
        k: v for k, v in second.json().items() if k != "updated_at"
    }


async def test_update_validates_before_lookup(client, auth_headers):
    response = await client.put(
        f"{API}/categories/00000000-0000-0000-0000-000000000000",
        json={"name": ""},
        headers=auth_headers,
    )
    assert response.status_code == 400


async def test_update_to_existing_name_conflicts(client, auth_headers):
    await create_category(client, auth_headers, "Food")
    travel = await create_category(client, auth_headers, "Travel")

    response = await client.put(
        f"{API}/categories/{travel['id']}", json={"name": "Food"}, headers=auth_headers
    )
    assert response.status_code == 409


async def test_other_users_category_is_not_found(client, auth_headers, other_headers):
    category = await create_category(client, other_headers, "Private")

    get = await client.get(f"{API}/categories/{category['id']}", headers=auth_headers)
    put = await client.put(f"{API}/categories/{category['id']}", json={"name": "Mine"}, headers=auth_headers)
    delete = await client.delete(f"{API}/categories/{category['id']}", headers=auth_headers)

    assert get.status_code == put.status_code == delete.status_code == 404
    assert delete.json() == {"message": "Category not found"}

    still_there = await client.get(f"{API}/categories/{category['id']}", headers=other_headers)
    assert still_there.json()["name"] == "Private"


async def test_delete_category_detaches_transactions(client, auth_headers):
    category = await create_category(client, auth_headers, "Groceries")
    tx = await create_transaction(
        client, auth_headers, 42.5, description="Weekly shop", category_id=category["id"]
    )
    assert tx["category_name"] == "Groceries"

    response = await client.delete(f"{API}/categories/{category['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Category deleted successfully"}

    after = (await client.get(f"{API}/transactions/{tx['id']}", headers=auth_headers)).json()
    assert after["category_id"] is None
    assert after["category_name"] is None
    for field in ("amount", "description", "date", "type", "user_id"):
        assert after[field] == tx[field]


async def test_categories_require_authentication(client):
    response = await client.get(f"{API}/categories")
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}

    bad = await client.get(f"{API}/categories", headers={"Authorization": "Bearer nonsense"})
    assert bad.status_code == 401
    assert bad.json() == {"message": "Invalid token"}


async def test_registered_users_are_independent(client):
    first = await register_and_login(client, "carol@example.com")
    second = await register_and_login(client, "dave@example.com")
    await create_category(client, first, "Books")

    assert (await client.get(f"{API}/categories", headers=second)).json() == []


async def test_name_and_description_length_limits(client, auth_headers):
    assert (await create_category(client, auth_headers, "n" * 100))["name"] == "n" * 100

    long_name = await client.post(f"{API}/categories", json={"name": "n" * 101}, headers=auth_headers)
    assert long_name.status_code == 400
    assert long_name.json() == {"message": "Category name is too long"}

    long_description = await client.post(
        f"{API}/categories", json={"name": "Misc", "description": "d" * 256}, headers=auth_headers
    )
    assert long_description.status_code == 400
    assert long_description.json() == {"message": "Description is too long"}


async def test_duplicate_after_rollback_keeps_session_usable(client, auth_headers):
    await create_category(client, auth_headers, "Fuel")
    assert (await client.post(f"{API}/categories", json={"name": "Fuel"}, headers=auth_headers)).status_code == 409

    # a fresh request on the same connection still works
    assert (await create_category(client, auth_headers, "Parking"))["name"] == "Parking"
