import datetime as dt
import uuid

from expense_tracker.crud.transaction import build_transaction_filters, build_transaction_queries
from expense_tracker.schemas.transaction import Pagination, TransactionListParams

USER_ID = uuid.uuid4()


def test_owner_predicate_only_by_default():
    filters = build_transaction_filters(USER_ID, TransactionListParams())
    assert len(filters) == 1
    assert "transactions.user_id" in str(filters[0])


def test_all_filters_in_order():
    params = TransactionListParams(
        q="rent",
        type="expense",
        category_id=uuid.uuid4(),
        start_date=dt.date(2025, 1, 1),
        end_date=dt.date(2025, 1, 31),
    )
    rendered = [str(f) for f in build_transaction_filters(USER_ID, params)]

    assert len(rendered) == 6
    assert "categories.name" in rendered[1]
    assert "transactions.type" in rendered[2]
    assert "transactions.category_id" in rendered[3]
    assert ">=" in rendered[4]
    assert "<=" in rendered[5]


def test_type_outside_enumeration_adds_no_predicate():
    filters = build_transaction_filters(USER_ID, TransactionListParams(type="transfer"))
    assert len(filters) == 1


def test_data_and_count_share_predicates():
    params = TransactionListParams(q="food", type="income", sort_by="amount", sort_order="asc", page=3, limit=10)
    data_query, count_query = build_transaction_queries(USER_ID, params)

    assert data_query.whereclause.compare(count_query.whereclause)
    assert "LEFT OUTER JOIN categories" in str(count_query)
    assert "ORDER BY transactions.amount ASC, transactions.id ASC" in str(data_query)
    assert "LIMIT" in str(data_query)
    assert "LIMIT" not in str(count_query)
    assert params.offset == 20


def test_pagination_envelope():
    assert Pagination.build(1, 50, 0).pages == 0
    assert Pagination.build(1, 3, 7).pages == 3
    assert Pagination.build(2, 5, 10).pages == 2


def test_different_filters_are_not_equal_predicates():
    first, _ = build_transaction_queries(USER_ID, TransactionListParams(type="income"))
    _, second = build_transaction_queries(USER_ID, TransactionListParams(type="expense"))
    assert not first.whereclause.compare(second.whereclause)
