# cart_api/services/checkout_service.py
from typing import Dict, Any
from sqlalchemy.orm import Session

from cart_api.domain.errors import InvalidStateError, NotFoundError
from cart_api.domain.schemas import LineItem
from cart_api.repos.cart_repo import CartRepo
from cart_api.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Serwis odpowiedzialny za rozpoczecie platnosci (hosted checkout).
    Nie tworzy koszyka, nie zmienia jego zawartosci.
    """

    def __init__(
        self,
        db: Session,
        payment_client,
        currency_code: str,
        success_url: str,
        cancel_url: str,
    ):
        self.repo = CartRepo(db)
        self.payment_client = payment_client
        self.currency_code = currency_code
        self.success_url = success_url
        self.cancel_url = cancel_url

    def create_checkout_session(self, cart_id: str) -> Dict[str, Any]:
        """
        Use Case: sesja checkout z aktualnej zawartosci koszyka.

        1. Koszyk musi istniec
        2. Koszyk nie moze byc pusty
        3. Jedna pozycja na kazdy CartItem
        4. Wywolanie dostawcy platnosci, wynik zwracany bez zmian
        """
        cart = self.repo.get_cart(cart_id)
        if not cart:
            logger.warning(f"Checkout: koszyk {cart_id} nie istnieje")
            raise NotFoundError("Cart not found")

        items = self.repo.get_cart_items(cart_id)
        if not items:
            logger.warning(f"Checkout: koszyk {cart_id} jest pusty")
            raise InvalidStateError("Cart is empty")

        line_items = [
            LineItem(
                quantity=i.quantity,
                unit_amount=i.price,
                currency=self.currency_code,
                product_name=i.name,
                product_description=i.description or None,
                product_images=[i.image] if i.image else None,
            )
            for i in items
        ]

        session = self.payment_client.create_checkout_session(
            line_items=line_items,
            success_url=self.success_url,
            cancel_url=self.cancel_url,
            metadata={"cartId": cart.id},
        )

        logger.info(f"Checkout session {session['id']} utworzona dla koszyka {cart_id}")

        return {"id": session["id"], "url": session.get("url")}
