# cart_api/services/cart_service.py
from typing import Dict, Any, List
from sqlalchemy.orm import Session

from cart_api.data.models.cart_item import CartItemModel
from cart_api.domain.errors import InvalidInputError, NotFoundError
from cart_api.repos.cart_repo import CartRepo
from cart_api.services.money import MoneyFormatter
from cart_api.utils.settings import CART_ID_MAX_LENGTH, DB_INT_MAX
from cart_api.utils.logging import get_logger

logger = get_logger(__name__)

QUANTITY_LIMIT_MESSAGE = f"Cart item quantity cannot exceed {DB_INT_MAX}"


def quantity_or_default(quantity) -> int:
    """
    Ilosc przy addItem: dodatnia liczba calkowita albo 1.
    Brak, 0 i wartosci ujemne daja 1.
    """
    if isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0:
        return quantity
    return 1


def validate_cart_id(cart_id: str) -> str:
    if not isinstance(cart_id, str) or not cart_id.strip():
        raise InvalidInputError("Cart id must be a non-empty string")
    if len(cart_id) > CART_ID_MAX_LENGTH:
        raise InvalidInputError(f"Cart id must be at most {CART_ID_MAX_LENGTH} characters")
    return cart_id


class CartService:
    """
    Use case'y dla domeny cart:
    query (get_or_create_cart) tylko odczyt + ewentualne utworzenie pustego koszyka,
    commands (add, remove, increase, decrease) modyfikuja stan i zwracaja odswiezony koszyk.
    """

    def __init__(self, db: Session, money: MoneyFormatter):
        self.repo = CartRepo(db)
        self.money = money

    # pola wyliczane przy kazdym odczycie, nic nie jest cache'owane
    def _item_out(self, item: CartItemModel) -> Dict[str, Any]:
        return {
            "id": item.item_id,
            "name": item.name,
            "description": item.description,
            "image": item.image,
            "quantity": item.quantity,
            "unit_price": self.money.money(item.price),
            "total_price": self.money.money(item.price * item.quantity),
        }

    def _cart_out(self, cart_id: str) -> Dict[str, Any]:
        items: List[CartItemModel] = self.repo.get_cart_items(cart_id)
        return {
            "id": cart_id,
            "items": [self._item_out(i) for i in items],
            "total_items": sum(i.quantity for i in items),
            "sub_total": self.money.money(sum(i.price * i.quantity for i in items)),
        }

    #query
    def get_or_create_cart(self, cart_id: str) -> Dict[str, Any]:
        validate_cart_id(cart_id)

        existing = self.repo.get_cart(cart_id)
        if not existing:
            self.repo.get_or_create_cart(cart_id)
            self.repo.commit()
            logger.info(f"Utworzono nowy koszyk {cart_id}")

        return self._cart_out(cart_id)

    #commands
    def add_item(self, cart_id: str, item: Dict[str, Any]) -> Dict[str, Any]:
        validate_cart_id(cart_id)
        quantity = quantity_or_default(item.get("quantity"))
        if quantity > DB_INT_MAX:
            raise InvalidInputError(QUANTITY_LIMIT_MESSAGE)
        if not 0 <= item["price"] <= DB_INT_MAX:
            raise InvalidInputError(f"Price must be between 0 and {DB_INT_MAX}")

        try:
            self.repo.get_or_create_cart(cart_id)
            written = self.repo.upsert_item(
                cart_id=cart_id,
                item_id=item["id"],
                fields={
                    "name": item["name"],
                    "description": item.get("description"),
                    "image": item.get("image"),
                    "price": item["price"],
                },
                quantity=quantity,
            )
            if written == 0:
                logger.warning(f"Produkt {item['id']} w koszyku {cart_id}: limit ilosci")
                raise InvalidInputError(QUANTITY_LIMIT_MESSAGE)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Produkt {item['id']} (+{quantity}) dodany do koszyka {cart_id}")
        return self._cart_out(cart_id)

    def remove_item(self, cart_id: str, item_id: str) -> Dict[str, Any]:
        try:
            deleted = self.repo.delete_item(cart_id, item_id)
            if deleted == 0:
                logger.warning(f"Brak produktu {item_id} w koszyku {cart_id}")
                raise NotFoundError("Cart item not found")

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Produkt {item_id} usuniety z koszyka {cart_id}")
        return self._cart_out(cart_id)

    def increase_cart_item(self, cart_id: str, item_id: str) -> Dict[str, Any]:
        try:
            updated = self.repo.increment_quantity(cart_id, item_id)
            if updated == 0:
                # 0 wierszy: brak produktu albo ilosc juz na limicie kolumny
                if self.repo.get_quantity(cart_id, item_id) is not None:
                    logger.warning(f"Produkt {item_id} w koszyku {cart_id}: limit ilosci")
                    raise InvalidInputError(QUANTITY_LIMIT_MESSAGE)
                logger.warning(f"Brak produktu {item_id} w koszyku {cart_id}")
                raise NotFoundError("Cart item not found")

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Produkt {item_id} w koszyku {cart_id}: ilosc +1")
        return self._cart_out(cart_id)

    def decrease_cart_item(self, cart_id: str, item_id: str) -> Dict[str, Any]:
        # decrement + odczyt + ewentualny delete w jednej transakcji
        try:
            updated = self.repo.decrement_quantity(cart_id, item_id)
            if updated == 0:
                logger.warning(f"Brak produktu {item_id} w koszyku {cart_id}")
                raise NotFoundError("Cart item not found")

            quantity = self.repo.get_quantity(cart_id, item_id)
            if quantity is not None and quantity <= 0:
                self.repo.delete_item(cart_id, item_id)
                logger.info(f"Produkt {item_id} usuniety z koszyka {cart_id} (ilosc 0)")
            else:
                logger.info(f"Produkt {item_id} w koszyku {cart_id}: ilosc -1")

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return self._cart_out(cart_id)
