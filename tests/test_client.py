import pytest
import pytest_asyncio
from httpx import ASGITransport

from expense_tracker.client import ApiError, AuthenticationError, ExpenseTrackerClient, UNREACHABLE_MESSAGE

from conftest import PASSWORD


@pytest_asyncio.fixture
async def api(app):
    async with ExpenseTrackerClient("http://test/api/v1", transport=ASGITransport(app=app)) as api:
        yield api


async def test_register_login_and_crud(api):
    user = await api.register("erin@example.com", PASSWORD, username="erin")
    assert user["username"] == "erin"
    assert not api.is_authenticated

    await api.login("erin@example.com", PASSWORD)
    assert api.is_authenticated
    assert (await api.me())["email"] == "erin@example.com"

    category = await api.create_category("Groceries")
    tx = await api.create_transaction(amount=50, date="2025-03-01", type="expense", category_id=category["id"])
    assert tx["category_name"] == "Groceries"

    page = await api.list_transactions(q="groc", sort_by="amount", type=None)
    assert page["pagination"]["total"] == 1

    updated = await api.update_transaction(tx["id"], amount=60, date="2025-03-01", type="expense")
    assert updated["amount"] == 60
    assert updated["category_id"] is None

    summary = await api.summary()
    assert summary["total_expense"] == 60

    await api.delete_transaction(tx["id"])
    assert (await api.delete_category(category["id"]))["message"] == "Category deleted successfully"
    assert await api.list_categories() == []


async def test_error_message_is_surfaced(api):
    await api.register("frank@example.com", PASSWORD)
    await api.login("frank@example.com", PASSWORD)
    await api.create_category("Rent")

    with pytest.raises(ApiError) as excinfo:
        await api.create_category("Rent")
    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "Category name already exists"

    with pytest.raises(ApiError) as excinfo:
        await api.list_transactions(sort_by="foo")
    assert excinfo.value.status_code == 400


async def test_unauthorized_discards_token(app):
    async with ExpenseTrackerClient("http://test/api/v1", token="stale", transport=ASGITransport(app=app)) as api:
        with pytest.raises(AuthenticationError):
            await api.list_categories()
        assert api.token is None


async def test_unreachable_server():
    async with ExpenseTrackerClient("http://127.0.0.1:9/api/v1", timeout=1.0) as api:
        with pytest.raises(ApiError) as excinfo:
            await api.list_categories()
    assert excinfo.value.message == UNREACHABLE_MESSAGE
    assert excinfo.value.status_code is None
