# cart_api/services/money.py
from decimal import Decimal
from typing import Dict, Any

from babel.numbers import format_currency


class MoneyFormatter:
    """
    Kwoty trzymamy jako int w minor units (centy).
    Waluta i locale ustawiane raz przy starcie aplikacji.
    """

    def __init__(self, currency_code: str, locale: str):
        self.currency_code = currency_code.upper()
        self.locale = locale

    def format(self, amount: int) -> str:
        # Decimal, nie float: duze kwoty bez utraty groszy
        return format_currency(Decimal(amount).scaleb(-2), self.currency_code, locale=self.locale)

    def money(self, amount: int) -> Dict[str, Any]:
        return {"amount": amount, "formatted": self.format(amount)}
