from shop_api.repository import ProductRepository, UserRepository
from shop_api.schemas import ProductQuery
from shop_api.seed import seed_products


def ids(page):
    return [p.id for p in page.items]


def test_pagination_second_page(products):
    page = products.query(ProductQuery(page=2, limit=2))
    assert ids(page) == [3, 4]
    assert page.total == 5
    assert page.total_pages == 3
    assert page.has_next is True
    assert page.has_prev is True


def test_last_and_first_page_flags(products):
    last = products.query(ProductQuery(page=3, limit=2))
    assert ids(last) == [5]
    assert last.has_next is False
    first = products.query(ProductQuery())
    assert ids(first) == [1, 2, 3, 4, 5]
    assert first.has_prev is False
    assert first.total_pages == 1


def test_invalid_paging_falls_back_to_defaults():
    q = ProductQuery(page="abc", limit="-3")
    assert (q.page, q.limit) == (1, 10)
    assert ProductQuery(page=None, limit="0").limit == 10


def test_filters(products):
    assert ids(products.query(ProductQuery(category="electronics"))) == [1, 2, 5]
    assert ids(products.query(ProductQuery(in_stock="false"))) == [4]
    assert ids(products.query(ProductQuery(in_stock="true"))) == [1, 2, 3, 5]
    assert ids(products.query(ProductQuery(search="HEADPHONES"))) == [5]
    # description is searched as well
    assert ids(products.query(ProductQuery(search="apple"))) == [2]
    assert ids(products.query(ProductQuery(category="electronics", search="dell"))) == [1]


def test_sorting(products):
    assert ids(products.query(ProductQuery(sort="price_asc"))) == [4, 3, 5, 1, 2]
    assert ids(products.query(ProductQuery(sort="price_desc"))) == [2, 1, 5, 3, 4]
    assert ids(products.query(ProductQuery(sort="newest"))) == [5, 4, 3, 2, 1]
    assert ids(products.query(ProductQuery(sort="oldest"))) == [1, 2, 3, 4, 5]
    assert ids(products.query(ProductQuery(sort="bogus"))) == [1, 2, 3, 4, 5]


def test_filter_then_sort_then_page(products):
    page = products.query(ProductQuery(category="electronics", sort="price_asc", page=2, limit=2))
    assert ids(page) == [2]
    assert page.total == 3
    assert page.total_pages == 2


def test_ids_are_not_reused_after_delete():
    repo = seed_products(ProductRepository())
    assert repo.delete(5) is True
    created = repo.create(name="n", description="d", price=1, category="other",
                          in_stock=True, quantity=1, created_by=1)
    assert created.id == 6


def test_update_is_shallow_merge(products):
    updated = products.update(1, price=1.5, id=99)
    assert updated.id == 1
    assert updated.price == 1.5
    assert updated.name == products.get(1).name
    assert products.get(1).price == 1.5
    assert products.update(999, price=1) is None


def test_delete_missing_is_repeatable(products):
    assert products.delete(999) is False
    assert products.delete(999) is False
    assert products.count() == 5


def test_by_owner(products):
    assert [p.id for p in products.by_owner(2)] == [2, 5]
    assert products.by_owner(42) == []


def test_user_lookup_and_projection(users):
    assert users.find_by_email("ADMIN@example.com").id == 1
    assert users.find_by_email("nobody@example.com") is None
    assert users.find_by_username("User1").id == 2

    public = UserRepository.public(users.get(1))
    dumped = public.model_dump(by_alias=True)
    assert "password_hash" not in dumped
    assert "password" not in dumped
    assert dumped["createdAt"] is not None
    assert [u.username for u in users.list_public()] == ["admin", "user1", "user2"]
