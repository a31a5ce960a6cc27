# cart_api/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, Dict, List, Optional

from cart_api.utils.settings import CART_ID_MAX_LENGTH, DB_INT_MAX


class CamelModel(BaseModel):
    """Pola snake_case w Pythonie, camelCase na wire (cartId, subTotal, ...)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


CartId = Annotated[str, Field(min_length=1, max_length=CART_ID_MAX_LENGTH, description="ID koszyka wybrane przez klienta")]


# =====================================================
# INPUT
# =====================================================
class CartQueryInput(CamelModel):
    id: CartId


class AddToCartInput(CamelModel):
    """Schema dla dodawania produktu do koszyka."""

    cart_id: CartId
    id: str = Field(..., min_length=1, max_length=255, description="ID produktu")
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=1024)
    price: int = Field(..., ge=0, le=DB_INT_MAX, description="Cena w minor units (centy)")
    # bez walidacji gt=0: 0 i brak wartosci zamieniane sa na 1 w serwisie
    quantity: Optional[int] = Field(None, le=DB_INT_MAX)


class CartItemAddIn(CamelModel):
    """To samo co AddToCartInput, ale cartId pochodzi ze sciezki."""

    id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=1024)
    price: int = Field(..., ge=0, le=DB_INT_MAX)
    quantity: Optional[int] = Field(None, le=DB_INT_MAX)


class CartItemKeyInput(CamelModel):
    cart_id: CartId
    id: str = Field(..., min_length=1, max_length=255)


class RemoveFromCartInput(CartItemKeyInput):
    pass


class IncreaseCartItemInput(CartItemKeyInput):
    pass


class DecreaseCartItemInput(CartItemKeyInput):
    pass


class CreateCheckoutSessionInput(CamelModel):
    cart_id: CartId


class OperationRequest(BaseModel):
    """Dokument operacji dla pojedynczego endpointu /api."""

    operation: str = Field(..., min_length=1)
    variables: Dict[str, Any] = Field(default_factory=dict)


# =====================================================
# OUTPUT
# =====================================================
class MoneyOut(CamelModel):
    amount: int
    formatted: str


class CartItemOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    quantity: int
    unit_price: MoneyOut
    total_price: MoneyOut


class CartOut(CamelModel):
    """Schema dla koszyka (response)."""

    id: str
    items: List[CartItemOut]
    total_items: int
    sub_total: MoneyOut


class CheckoutSessionOut(CamelModel):
    id: str
    url: Optional[str] = None


class OperationError(BaseModel):
    message: str
    extensions: Dict[str, Any] = Field(default_factory=dict)


class LineItem(BaseModel):
    """Pozycja przekazywana do dostawcy platnosci (niezalezna od Stripe)."""

    quantity: int
    unit_amount: int
    currency: str
    product_name: str
    product_description: Optional[str] = None
    product_images: Optional[List[str]] = None
