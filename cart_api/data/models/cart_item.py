from sqlalchemy import Column, Integer, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from cart_api.data.database import Base
from cart_api.utils.settings import CART_ID_MAX_LENGTH


class CartItemModel(Base):
    __tablename__ = "cart_items"

    # klucz techniczny, tylko do kolejnosci dodania
    pk = Column(Integer, primary_key=True, autoincrement=True)
    cart_id = Column(
        String(CART_ID_MAX_LENGTH),
        ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id = Column(String(255), nullable=False)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(1024), nullable=True)
    price = Column(Integer, nullable=False)  # minor units (centy)
    quantity = Column(Integer, nullable=False)

    cart = relationship("CartModel", back_populates="items")

    __table_args__ = (UniqueConstraint("cart_id", "item_id", name="u_cart_item"),)
