"""
Tests for the catalog snapshot reader.
"""

from sqlalchemy import update

from rest_api.models import Product
from rest_api.repositories import ProductRepository


class TestProductRepository:
    def test_get_product_sees_latest_committed_values(self, db_session, make_product):
        product = make_product(price_cents=700, stock_quantity=4)
        reader = ProductRepository(db_session)
        assert reader.get_product(product.id).stock_quantity == 4

        # Change the row behind the ORM's back, as another process would
        db_session.execute(
            update(Product)
            .where(Product.id == product.id)
            .values(stock_quantity=9, price_cents=650)
            .execution_options(synchronize_session=False)
        )
        db_session.commit()

        fresh = reader.get_product(product.id)
        assert fresh.stock_quantity == 9
        assert fresh.price_cents == 650

    def test_get_missing_product(self, db_session):
        assert ProductRepository(db_session).get_product(404) is None

    def test_get_products_for_update_skips_missing(self, db_session, make_product):
        a = make_product("A")
        b = make_product("B")

        found = ProductRepository(db_session).get_products_for_update([b.id, 999, a.id, b.id])

        assert set(found) == {a.id, b.id}
        assert found[a.id].name == "A"
        db_session.rollback()

    def test_list_low_stock(self, db_session, make_product):
        make_product("Plenty", stock_quantity=50)
        low = make_product("Low", stock_quantity=3)
        empty = make_product("Empty", stock_quantity=0)
        make_product("Retired", stock_quantity=1, is_active=False)

        products = ProductRepository(db_session).list_low_stock(threshold=10)

        assert [p.id for p in products] == [empty.id, low.id]
