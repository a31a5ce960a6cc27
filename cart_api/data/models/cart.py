#cart_api/data/models/cart.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from cart_api.data.database import Base
from cart_api.utils.settings import CART_ID_MAX_LENGTH


class CartModel(Base):
    __tablename__ = "carts"

    # id wybiera klient (np. token z localStorage), serwer go nie generuje
    id = Column(String(CART_ID_MAX_LENGTH), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.pk",
    )
