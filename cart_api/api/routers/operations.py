# cart_api/api/routers/operations.py
# Jeden endpoint dla wszystkich operacji: {"operation": "...", "variables": {...}}
import json
from typing import Any, Callable, Dict, NamedTuple, Optional, Type

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from cart_api.api.deps import get_cart_service, get_checkout_service
from cart_api.domain.errors import CartError
from cart_api.domain.schemas import (
    AddToCartInput,
    CartOut,
    CartQueryInput,
    CheckoutSessionOut,
    CreateCheckoutSessionInput,
    DecreaseCartItemInput,
    IncreaseCartItemInput,
    OperationError,
    OperationRequest,
    RemoveFromCartInput,
)
from cart_api.services.cart_service import CartService
from cart_api.services.checkout_service import CheckoutService
from cart_api.utils.settings import API_PATH
from cart_api.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix=API_PATH, tags=["api"])

ALLOWED_METHODS = "GET, POST, OPTIONS"


class Operation(NamedTuple):
    kind: str  # "query" albo "mutation"
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    resolve: Callable[[CartService, CheckoutService, Any], Dict[str, Any]]


OPERATIONS: Dict[str, Operation] = {
    "cart": Operation(
        "query",
        CartQueryInput,
        CartOut,
        lambda carts, checkout, i: carts.get_or_create_cart(i.id),
    ),
    "addItem": Operation(
        "mutation",
        AddToCartInput,
        CartOut,
        lambda carts, checkout, i: carts.add_item(i.cart_id, i.model_dump(exclude={"cart_id"})),
    ),
    "removeItem": Operation(
        "mutation",
        RemoveFromCartInput,
        CartOut,
        lambda carts, checkout, i: carts.remove_item(i.cart_id, i.id),
    ),
    "increaseCartItem": Operation(
        "mutation",
        IncreaseCartItemInput,
        CartOut,
        lambda carts, checkout, i: carts.increase_cart_item(i.cart_id, i.id),
    ),
    "decreaseCartItem": Operation(
        "mutation",
        DecreaseCartItemInput,
        CartOut,
        lambda carts, checkout, i: carts.decrease_cart_item(i.cart_id, i.id),
    ),
    "createCheckoutSession": Operation(
        "mutation",
        CreateCheckoutSessionInput,
        CheckoutSessionOut,
        lambda carts, checkout, i: checkout.create_checkout_session(i.cart_id),
    ),
}


def _error_body(operation: Optional[str], message: str, code: str) -> Dict[str, Any]:
    error = OperationError(message=message, extensions={"code": code}).model_dump()
    data = {operation: None} if operation in OPERATIONS else None
    return {"data": data, "errors": [error]}


def _validation_message(e) -> str:
    # pydantic ValidationError albo RequestValidationError, ten sam format errors()
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Body POST /api, ktore nie jest poprawnym dokumentem operacji -> 400 w kopercie errors."""
    if request.url.path.rstrip("/") == API_PATH.rstrip("/"):
        return JSONResponse(
            status_code=400,
            content=_error_body(None, _validation_message(exc), "BAD_REQUEST"),
        )
    return await request_validation_exception_handler(request, exc)


def execute_operation(
    name: str,
    variables: Dict[str, Any],
    carts: CartService,
    checkout: CheckoutService,
    method: str,
) -> JSONResponse:
    op = OPERATIONS.get(name)
    if op is None:
        return JSONResponse(
            status_code=400,
            content=_error_body(name, f"Unknown operation '{name}'", "BAD_REQUEST"),
        )

    if method == "GET" and op.kind != "query":
        return JSONResponse(
            status_code=405,
            headers={"Allow": "POST"},
            content=_error_body(name, "Mutations must be sent with POST", "METHOD_NOT_ALLOWED"),
        )

    try:
        payload = op.input_model.model_validate(variables)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content=_error_body(name, _validation_message(e), "BAD_USER_INPUT"),
        )

    try:
        result = op.resolve(carts, checkout, payload)
    except CartError as e:
        logger.warning(f"Operation {name} failed: {e.code} {e.message}")
        return JSONResponse(status_code=200, content=_error_body(name, e.message, e.code))

    out = op.output_model.model_validate(result).model_dump(by_alias=True)
    return JSONResponse(status_code=200, content={"data": {name: out}})


@router.post("")
def post_operation(
    body: OperationRequest,
    carts: CartService = Depends(get_cart_service),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    return execute_operation(body.operation, body.variables, carts, checkout, "POST")


@router.get("")
def get_operation(
    operation: str = Query(...),
    variables: Optional[str] = Query(None, description="Zmienne jako JSON"),
    carts: CartService = Depends(get_cart_service),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        parsed = json.loads(variables) if variables else {}
    except json.JSONDecodeError:
        return JSONResponse(
            status_code=400,
            content=_error_body(operation, "Variables are not valid JSON", "BAD_REQUEST"),
        )
    if not isinstance(parsed, dict):
        return JSONResponse(
            status_code=400,
            content=_error_body(operation, "Variables must be a JSON object", "BAD_REQUEST"),
        )

    return execute_operation(operation, parsed, carts, checkout, "GET")


@router.options("")
def options_operation():
    return Response(status_code=204, headers={"Allow": ALLOWED_METHODS})
