# cart_api/domain/errors.py


class CartError(Exception):
    """Bazowy blad domeny koszyka; `code` trafia do odpowiedzi API."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CartError):
    code = "NOT_FOUND"


class InvalidStateError(CartError):
    code = "INVALID_STATE"


class InvalidInputError(CartError):
    code = "BAD_USER_INPUT"


class PaymentProviderError(CartError):
    code = "PAYMENT_PROVIDER_ERROR"
