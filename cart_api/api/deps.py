# cart_api/api/deps.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from cart_api.data.database import get_db
from cart_api.services.cart_service import CartService
from cart_api.services.checkout_service import CheckoutService
from cart_api.services.money import MoneyFormatter
from cart_api.utils.settings import CHECKOUT_CANCEL_URL, CHECKOUT_SUCCESS_URL


# formatter i klient platnosci tworzone raz w create_app, trzymane w app.state
def get_money_formatter(request: Request) -> MoneyFormatter:
    return request.app.state.money


def get_payment_client(request: Request):
    return request.app.state.payment_client


def get_cart_service(
    db: Session = Depends(get_db),
    money: MoneyFormatter = Depends(get_money_formatter),
) -> CartService:
    return CartService(db=db, money=money)


def get_checkout_service(
    db: Session = Depends(get_db),
    money: MoneyFormatter = Depends(get_money_formatter),
    payment_client=Depends(get_payment_client),
) -> CheckoutService:
    return CheckoutService(
        db=db,
        payment_client=payment_client,
        currency_code=money.currency_code,
        success_url=CHECKOUT_SUCCESS_URL,
        cancel_url=CHECKOUT_CANCEL_URL,
    )
