# cart_api/repos/cart_repo.py
from typing import Any, Dict, List

from sqlalchemy import select, update, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from cart_api.data.models.cart import CartModel
from cart_api.data.models.cart_item import CartItemModel
from cart_api.utils.settings import DB_INT_MAX

# dialekty z INSERT .. ON CONFLICT
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CartRepo:
    """
    Dostep do tabel carts / cart_items.
    Repo nie robi commit, granice transakcji ustala serwis (commit/rollback).
    """

    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Upsert not supported for dialect {dialect}")

    # =====================================================
    # CART
    # =====================================================
    def get_cart(self, cart_id: str) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_or_create_cart(self, cart_id: str) -> CartModel:
        # ON CONFLICT DO NOTHING - dwa rownolegle requesty z tym samym id nie wywala unique
        stmt = self._insert()(CartModel).values(id=cart_id).on_conflict_do_nothing(index_elements=["id"])
        self.db.execute(stmt)
        return self.db.get(CartModel, cart_id)

    # =====================================================
    # CART ITEMS
    # =====================================================
    def get_cart_items(self, cart_id: str) -> List[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.pk)
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_quantity(self, cart_id: str, item_id: str) -> int | None:
        stmt = select(CartItemModel.quantity).where(
            CartItemModel.cart_id == cart_id,
            CartItemModel.item_id == item_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert_item(self, cart_id: str, item_id: str, fields: Dict[str, Any], quantity: int) -> int:
        """
        Nowy klucz (cart_id, item_id) -> insert.
        Istniejacy -> tylko quantity += quantity, reszta pol bez zmian.
        Zwraca 0 gdy suma przekroczylaby DB_INT_MAX (wiersz bez zmian).
        """
        stmt = self._insert()(CartItemModel).values(
            cart_id=cart_id,
            item_id=item_id,
            quantity=quantity,
            **fields,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["cart_id", "item_id"],
            set_={"quantity": CartItemModel.quantity + quantity},
            where=CartItemModel.quantity <= DB_INT_MAX - quantity,
        )
        return self.db.execute(stmt).rowcount

    def _change_quantity(self, cart_id: str, item_id: str, delta: int) -> int:
        conditions = [
            CartItemModel.cart_id == cart_id,
            CartItemModel.item_id == item_id,
        ]
        if delta > 0:
            conditions.append(CartItemModel.quantity <= DB_INT_MAX - delta)

        stmt = (
            update(CartItemModel)
            .where(*conditions)
            .values(quantity=CartItemModel.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def increment_quantity(self, cart_id: str, item_id: str) -> int:
        return self._change_quantity(cart_id, item_id, 1)

    def decrement_quantity(self, cart_id: str, item_id: str) -> int:
        return self._change_quantity(cart_id, item_id, -1)

    def delete_item(self, cart_id: str, item_id: str) -> int:
        stmt = (
            delete(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.item_id == item_id,
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
