# cart_api/services/payment_client.py
import uuid
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from cart_api.domain.errors import PaymentProviderError
from cart_api.domain.schemas import LineItem
from cart_api.utils.settings import STRIPE_API_BASE, STRIPE_SECRET_KEY, STRIPE_TIMEOUT_SECONDS
from cart_api.utils.logging import get_logger

logger = get_logger(__name__)


def http_retry():
    # tylko bledy transportu; odpowiedz 4xx/5xx od Stripe nie jest ponawiana
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    )


def encode_params(value: Any, prefix: str = "") -> List[tuple]:
    """
    Stripe przyjmuje form-encoded z nawiasami:
    line_items[0][price_data][product_data][name]=Mug
    """
    pairs = []
    if isinstance(value, dict):
        for key, sub in value.items():
            if sub is None:
                continue
            pairs.extend(encode_params(sub, f"{prefix}[{key}]" if prefix else str(key)))
    elif isinstance(value, (list, tuple)):
        for index, sub in enumerate(value):
            pairs.extend(encode_params(sub, f"{prefix}[{index}]"))
    elif isinstance(value, bool):
        pairs.append((prefix, "true" if value else "false"))
    else:
        pairs.append((prefix, str(value)))
    return pairs


def to_stripe_line_item(item: LineItem) -> Dict[str, Any]:
    return {
        "quantity": item.quantity,
        "price_data": {
            "currency": item.currency.lower(),
            "unit_amount": item.unit_amount,
            "product_data": {
                "name": item.product_name,
                "description": item.product_description,
                "images": item.product_images,
            },
        },
    }


class StripeClient:
    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = STRIPE_TIMEOUT_SECONDS,
    ):
        self.secret_key = secret_key if secret_key is not None else STRIPE_SECRET_KEY
        self.base_url = (base_url or STRIPE_API_BASE).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _post(self, path: str, params: List[tuple], idempotency_key: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"StripeClient POST {url}")

        return requests.post(
            url,
            data=params,
            auth=(self.secret_key, ""),
            headers={"Idempotency-Key": idempotency_key},
            timeout=self.timeout,
        )

    def create_checkout_session(
        self,
        line_items: List[LineItem],
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
    ) -> Dict[str, Any]:
        if not self.secret_key:
            raise PaymentProviderError("Payment provider is not configured")

        params = encode_params(
            {
                "mode": "payment",
                "line_items": [to_stripe_line_item(i) for i in line_items],
                "metadata": metadata,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )

        # jeden klucz na wywolanie: retry nie tworzy drugiej sesji,
        # kolejne wywolanie create_checkout_session juz tak
        idempotency_key = str(uuid.uuid4())

        try:
            resp = self._post("/v1/checkout/sessions", params, idempotency_key)
        except requests.RequestException as e:
            logger.error(f"Stripe request failed: {e}")
            raise PaymentProviderError("Payment provider unavailable") from e

        if not resp.ok:
            try:
                message = resp.json().get("error", {}).get("message") or resp.text
            except ValueError:
                message = resp.text
            logger.error(f"Stripe returned {resp.status_code}: {message}")
            raise PaymentProviderError(f"Payment provider error: {message}")

        try:
            session = resp.json()
            return {"id": session["id"], "url": session.get("url")}
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Stripe returned an unreadable session: {resp.text}")
            raise PaymentProviderError("Payment provider returned an invalid response") from e
