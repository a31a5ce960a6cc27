"""
Tests for the single operation endpoint (/api).

Requests go through the full stack: FastAPI route -> services -> repository
-> SQLite; only the payment provider is faked.
"""
import json

import pytest

from cart_api.domain.errors import PaymentProviderError


def run(client, operation, **variables):
    return client.post("/api", json={"operation": operation, "variables": variables})


def data(response, operation):
    assert response.status_code == 200
    body = response.json()
    assert "errors" not in body
    return body["data"][operation]


def error(response, operation):
    body = response.json()
    assert body["data"] == {operation: None}
    assert len(body["errors"]) == 1
    return body["errors"][0]


class TestCartQuery:
    def test_unknown_cart_is_created_empty(self, client):
        cart = data(run(client, "cart", id="c1"), "cart")

        assert cart == {
            "id": "c1",
            "items": [],
            "totalItems": 0,
            "subTotal": {"amount": 0, "formatted": "€0.00"},
        }

    def test_query_over_get(self, client):
        run(client, "addItem", cartId="c1", id="p1", name="Mug", price=500, quantity=2)

        response = client.get(
            "/api",
            params={"operation": "cart", "variables": json.dumps({"id": "c1"})},
        )

        cart = data(response, "cart")
        assert cart["totalItems"] == 2

    def test_get_rejects_bad_json(self, client):
        response = client.get("/api", params={"operation": "cart", "variables": "{oops"})

        assert response.status_code == 400
        assert error(response, "cart")["extensions"]["code"] == "BAD_REQUEST"

    def test_get_rejects_mutations(self, client):
        response = client.get(
            "/api",
            params={"operation": "increaseCartItem", "variables": json.dumps({"cartId": "c1", "id": "p1"})},
        )

        assert response.status_code == 405
        assert error(response, "increaseCartItem")["extensions"]["code"] == "METHOD_NOT_ALLOWED"


class TestMutations:
    def test_add_item_returns_camel_case_cart(self, client):
        cart = data(
            run(client, "addItem", cartId="c1", id="p1", name="Mug", price=500, quantity=2),
            "addItem",
        )

        assert cart["totalItems"] == 2
        assert cart["subTotal"] == {"amount": 1000, "formatted": "€10.00"}
        item = cart["items"][0]
        assert item["id"] == "p1"
        assert item["unitPrice"] == {"amount": 500, "formatted": "€5.00"}
        assert item["totalPrice"] == {"amount": 1000, "formatted": "€10.00"}

    def test_add_item_with_zero_quantity_adds_one(self, client):
        cart = data(
            run(client, "addItem", cartId="c1", id="p1", name="Mug", price=500, quantity=0),
            "addItem",
        )

        assert cart["items"][0]["quantity"] == 1

    def test_mug_walkthrough(self, client):
        run(client, "cart", id="c1")
        run(client, "addItem", cartId="c1", id="p1", name="Mug", price=500, quantity=2)

        cart = data(run(client, "cart", id="c1"), "cart")
        assert (cart["totalItems"], cart["subTotal"]["amount"]) == (2, 1000)

        cart = data(run(client, "increaseCartItem", cartId="c1", id="p1"), "increaseCartItem")
        assert (cart["totalItems"], cart["subTotal"]["amount"]) == (3, 1500)

        run(client, "decreaseCartItem", cartId="c1", id="p1")
        cart = data(run(client, "decreaseCartItem", cartId="c1", id="p1"), "decreaseCartItem")
        assert cart["totalItems"] == 1
        assert cart["items"][0]["quantity"] == 1

        cart = data(run(client, "decreaseCartItem", cartId="c1", id="p1"), "decreaseCartItem")
        assert cart["items"] == []
        assert cart["totalItems"] == 0

    def test_remove_item(self, client):
        run(client, "addItem", cartId="c1", id="p1", name="Mug", price=500)

        cart = data(run(client, "removeItem", cartId="c1", id="p1"), "removeItem")

        assert cart["items"] == []

    @pytest.mark.parametrize("operation", ["removeItem", "increaseCartItem", "decreaseCartItem"])
    def test_missing_item_reports_not_found(self, client, operation):
        run(client, "cart", id="c1")

        response = run(client, operation, cartId="c1", id="nope")

        assert response.status_code == 200
        err = error(response, operation)
        assert err["message"] == "Cart item not found"
        assert err["extensions"]["code"] == "NOT_FOUND"


class TestCheckout:
    def test_unknown_cart(self, client, payment_client):
        response = run(client, "createCheckoutSession", cartId="ghost")

        err = error(response, "createCheckoutSession")
        assert err["message"] == "Cart not found"
        assert err["extensions"]["code"] == "NOT_FOUND"
        assert payment_client.calls == []

    def test_empty_cart(self, client):
        run(client, "cart", id="c1")

        response = run(client, "createCheckoutSession", cartId="c1")

        err = error(response, "createCheckoutSession")
        assert err["message"] == "Cart is empty"
        assert err["extensions"]["code"] == "INVALID_STATE"

    def test_returns_provider_session(self, client, payment_client):
        run(client, "addItem", cartId="c1", id="p1", name="Mug", price=500, quantity=2)

        session = data(run(client, "createCheckoutSession", cartId="c1"), "createCheckoutSession")

        assert session == {"id": "cs_test_1", "url": "https://checkout.stripe.test/pay/cs_test_1"}
        assert payment_client.calls[0]["metadata"] == {"cartId": "c1"}

    def test_provider_failure_is_reported(self, client, payment_client):
        run(client, "addItem", cartId="c1", id="p1", name="Mug", price=500)
        payment_client.error = PaymentProviderError("Payment provider unavailable")

        response = run(client, "createCheckoutSession", cartId="c1")

        assert error(response, "createCheckoutSession")["extensions"]["code"] == "PAYMENT_PROVIDER_ERROR"


class TestProtocolErrors:
    def test_unknown_operation(self, client):
        response = run(client, "deleteEverything")

        assert response.status_code == 400
        body = response.json()
        assert body["data"] is None
        assert body["errors"][0]["extensions"]["code"] == "BAD_REQUEST"

    def test_invalid_variables(self, client):
        response = run(client, "addItem", cartId="c1", id="p1", price=500)

        assert response.status_code == 400
        err = error(response, "addItem")
        assert err["extensions"]["code"] == "BAD_USER_INPUT"
        assert "name" in err["message"]

    def test_blank_cart_id_is_rejected(self, client):
        response = run(client, "cart", id="   ")

        assert error(response, "cart")["extensions"]["code"] == "BAD_USER_INPUT"

    def test_options_lists_allowed_methods(self, client):
        response = client.options("/api")

        assert response.status_code == 204
        assert response.headers["allow"] == "GET, POST, OPTIONS"

    def test_cors_preflight(self, client):
        response = client.options(
            "/api",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_malformed_json_body(self, client):
        response = client.post(
            "/api",
            content=b"{oops",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["data"] is None
        assert body["errors"][0]["extensions"]["code"] == "BAD_REQUEST"

    def test_variables_must_be_an_object(self, client):
        response = client.post("/api", json={"operation": "cart", "variables": [1]})

        assert response.status_code == 400
        body = response.json()
        assert body["data"] is None
        assert body["errors"][0]["extensions"]["code"] == "BAD_REQUEST"

    def test_cart_id_longer_than_limit_is_rejected(self, client):
        response = run(client, "cart", id="x" * 65)

        assert response.status_code == 400
        assert error(response, "cart")["extensions"]["code"] == "BAD_USER_INPUT"

    @pytest.mark.parametrize(
        "field, value",
        [("quantity", 2**63), ("price", 2**31), ("price", 2**63)],
    )
    def test_numbers_beyond_column_range_are_rejected(self, client, field, value):
        variables = {"cartId": "c1", "id": "p1", "name": "Mug", "price": 500, field: value}

        response = run(client, "addItem", **variables)

        assert response.status_code == 400
        assert error(response, "addItem")["extensions"]["code"] == "BAD_USER_INPUT"
        assert data(run(client, "cart", id="c1"), "cart")["items"] == []
