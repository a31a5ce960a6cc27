#cart_api/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException

from cart_api.api.deps import get_cart_service, get_checkout_service
from cart_api.domain.errors import (
    CartError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    PaymentProviderError,
)
from cart_api.domain.schemas import CartItemAddIn, CartOut, CheckoutSessionOut
from cart_api.services.cart_service import CartService
from cart_api.services.checkout_service import CheckoutService

router = APIRouter(prefix="/carts", tags=["carts"])

STATUS_CODES = {
    NotFoundError: 404,
    InvalidStateError: 409,
    InvalidInputError: 422,
    PaymentProviderError: 502,
}


def to_http(e: CartError) -> HTTPException:
    return HTTPException(status_code=STATUS_CODES.get(type(e), 400), detail=e.message)


@router.get("/{cart_id}", response_model=CartOut)
def get_cart(cart_id: str, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.get_or_create_cart(cart_id)
    except CartError as e:
        raise to_http(e)


@router.post("/{cart_id}/items", response_model=CartOut)
def add_item(
    cart_id: str,
    payload: CartItemAddIn,
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.add_item(cart_id, payload.model_dump())
    except CartError as e:
        raise to_http(e)


@router.delete("/{cart_id}/items/{item_id}", response_model=CartOut)
def remove_item(cart_id: str, item_id: str, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.remove_item(cart_id, item_id)
    except CartError as e:
        raise to_http(e)


@router.post("/{cart_id}/items/{item_id}/increase", response_model=CartOut)
def increase_item(cart_id: str, item_id: str, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.increase_cart_item(cart_id, item_id)
    except CartError as e:
        raise to_http(e)


@router.post("/{cart_id}/items/{item_id}/decrease", response_model=CartOut)
def decrease_item(cart_id: str, item_id: str, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.decrease_cart_item(cart_id, item_id)
    except CartError as e:
        raise to_http(e)


@router.post("/{cart_id}/checkout", response_model=CheckoutSessionOut)
def create_checkout_session(
    cart_id: str,
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Tworzy sesje hosted checkout dla koszyka.
    Kazde wywolanie to nowa sesja u dostawcy platnosci.
    """
    try:
        return svc.create_checkout_session(cart_id)
    except CartError as e:
        raise to_http(e)
