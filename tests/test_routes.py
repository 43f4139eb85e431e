"""HTTP route tests."""

from __future__ import annotations

from conftest import shipment_payload, space_payload


def _register(client, username: str, role: str = "user", **extra) -> dict:
    resp = client.post(
        "/auth/register",
        json={
            "username": username,
            "password": "secret",
            "email": f"{username}@example.com",
            "role": role,
            **extra,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _setup(client) -> tuple[dict, dict, dict]:
    shipper = _register(client, "shipper", wallet_address="0xshipper")
    carrier = _register(client, "carrier", role="logistics")
    resp = client.post("/spaces", json=space_payload(carrier["id"]))
    assert resp.status_code == 201, resp.text
    return shipper, carrier, resp.json()


def _book(client, space: dict, shipper: dict, **overrides) -> dict:
    resp = client.post(
        "/shipments",
        json=shipment_payload(space["id"], shipper["id"], **overrides),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _pay(client, shipment: dict, amount: float = 1380.5) -> dict:
    resp = client.post(
        "/transactions",
        json={
            "shipment_id": shipment["id"],
            "amount": amount,
            "payment_method": "metamask",
            "payment_details": {"walletAddress": "0xshipper"},
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client) -> None:
    with client:
        resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


class TestAuth:
    def test_register_hides_password(self, client) -> None:
        with client:
            user = _register(client, "ann")
        assert "password" not in user
        assert user["role"] == "user"
        assert user["wallet_address"] is None

    def test_register_duplicate_email(self, client) -> None:
        with client:
            _register(client, "ann")
            resp = client.post(
                "/auth/register",
                json={
                    "username": "other",
                    "password": "x",
                    "email": "ann@example.com",
                },
            )
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Email already exists"

    def test_register_missing_field(self, client) -> None:
        with client:
            resp = client.post(
                "/auth/register", json={"username": "ann", "password": "x"}
            )
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_input"
        assert "email" in resp.json()["detail"]

    def test_register_password_over_bcrypt_limit(self, client) -> None:
        with client:
            resp = client.post(
                "/auth/register",
                json={
                    "username": "ann",
                    "password": "x" * 80,
                    "email": "ann@example.com",
                },
            )
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_input"
        assert "72 bytes" in resp.json()["detail"]

    def test_login_paths(self, client) -> None:
        with client:
            shipper = _register(client, "ann", wallet_address="0xann")
            by_password = client.post(
                "/auth/login", json={"username": "ann", "password": "secret"}
            )
            by_wallet = client.post(
                "/auth/login",
                json={"wallet_address": "0xann", "wallet_signature": "sig"},
            )
            bad = client.post(
                "/auth/login", json={"username": "ann", "password": "no"}
            )
        assert by_password.json()["id"] == shipper["id"]
        assert by_wallet.json()["id"] == shipper["id"]
        assert bad.status_code == 401
        assert bad.json()["code"] == "unauthorized"

    def test_list_users_by_role(self, client) -> None:
        with client:
            _setup(client)
            resp = client.get("/users", params={"role": "logistics"})
        assert [u["username"] for u in resp.json()] == ["carrier"]


class TestSpaces:
    def test_create_and_get(self, client) -> None:
        with client:
            _, carrier, space = _setup(client)
            resp = client.get(f"/spaces/{space['id']}")
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_id"].startswith("T-0x")
        assert body["status"] == "available"
        assert body["price"] == 1250.0
        assert body["owner_user_id"] == carrier["id"]

    def test_get_missing_space(self, client) -> None:
        with client:
            resp = client.get("/spaces/42")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Logistics space 42 not found"

    def test_search(self, client) -> None:
        with client:
            _setup(client)
            hits = client.get(
                "/spaces", params={"source": "new york", "destination": "chi"}
            )
            misses = client.get("/spaces", params={"source": "Boston"})
        assert len(hits.json()) == 1
        assert misses.json() == []

    def test_list_by_owner(self, client) -> None:
        with client:
            _, carrier, space = _setup(client)
            client.patch(
                f"/spaces/{space['id']}/status", json={"status": "booked"}
            )
            resp = client.get("/spaces", params={"user_id": carrier["id"]})
        assert [s["status"] for s in resp.json()] == ["booked"]

    def test_create_rejects_non_positive_price(self, client) -> None:
        with client:
            carrier = _register(client, "carrier", role="logistics")
            resp = client.post(
                "/spaces", json=space_payload(carrier["id"], price=0)
            )
        assert resp.status_code == 400

    def test_create_by_shipper_rejected(self, client) -> None:
        with client:
            shipper = _register(client, "shipper")
            resp = client.post("/spaces", json=space_payload(shipper["id"]))
        assert resp.status_code == 400

    def test_status_update_rejects_unknown_value(self, client) -> None:
        with client:
            _, _, space = _setup(client)
            resp = client.patch(
                f"/spaces/{space['id']}/status", json={"status": "gone"}
            )
        assert resp.status_code == 400

    def test_quote(self, client) -> None:
        with client:
            _, _, space = _setup(client)
            resp = client.post(
                f"/spaces/{space['id']}/quote",
                json={"additional_services": ["temperature-controlled"]},
            )
        assert resp.status_code == 200
        assert resp.json() == {
            "space_id": space["id"],
            "base_price": 1250.0,
            "service_fees": {"temperature-controlled": 150.0},
            "total": 1400.0,
            "currency": "USD",
        }


class TestShipments:
    def test_book_space(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(
                client, space, shipper, additional_services=["insurance"]
            )
            space_after = client.get(f"/spaces/{space['id']}").json()
        assert shipment["status"] == "pending"
        assert shipment["additional_services"] == ["insurance"]
        assert shipment["transaction_id"] is None
        assert space_after["status"] == "booked"

    def test_double_booking_conflicts(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            _book(client, space, shipper)
            resp = client.post(
                "/shipments",
                json=shipment_payload(space["id"], shipper["id"]),
            )
        assert resp.status_code == 409
        assert resp.json()["retryable"] is True

    def test_overweight_rejected(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            resp = client.post(
                "/shipments",
                json=shipment_payload(
                    space["id"], shipper["id"], weight=25000
                ),
            )
        assert resp.status_code == 400
        assert "24000" in resp.json()["detail"]

    def test_list_filters(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            _book(client, space, shipper)
            mine = client.get("/shipments", params={"user_id": shipper["id"]})
            none = client.get("/shipments", params={"user_id": 999})
        assert len(mine.json()) == 1
        assert none.json() == []

    def test_status_regression_conflicts(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            transaction = _pay(client, shipment)
            client.patch(
                f"/transactions/{transaction['id']}/confirm",
                json={"blockchain_tx_hash": "0xabc"},
            )
            forward = client.patch(
                f"/shipments/{shipment['id']}/status",
                json={"status": "in_transit"},
            )
            backward = client.patch(
                f"/shipments/{shipment['id']}/status",
                json={"status": "confirmed"},
            )
        assert forward.json()["status"] == "in_transit"
        assert backward.status_code == 409
        assert backward.json()["code"] == "invalid_transition"

    def test_manual_confirmation_conflicts(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            resp = client.patch(
                f"/shipments/{shipment['id']}/status",
                json={"status": "confirmed"},
            )
            after = client.get(f"/shipments/{shipment['id']}")
        assert resp.status_code == 409
        assert resp.json()["code"] == "invalid_transition"
        assert after.json()["status"] == "pending"

    def test_missing_transaction(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            resp = client.get(f"/shipments/{shipment['id']}/transaction")
        assert resp.status_code == 404

    def test_tracking_of_unknown_shipment(self, client) -> None:
        with client:
            resp = client.get("/shipments/9/tracking")
            current = client.get("/shipments/9/tracking/current")
        assert resp.status_code == 404
        assert current.status_code == 404


class TestTransactions:
    def test_create_and_fetch(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            transaction = _pay(client, shipment)
            by_shipment = client.get(
                f"/shipments/{shipment['id']}/transaction"
            )
            refreshed = client.get(f"/shipments/{shipment['id']}").json()
            listed = client.get("/transactions").json()
        assert transaction["status"] == "pending"
        assert transaction["currency"] == "USD"
        assert transaction["amount"] == 1380.5
        assert by_shipment.json()["id"] == transaction["id"]
        assert refreshed["transaction_id"] == transaction["id"]
        assert [t["id"] for t in listed] == [transaction["id"]]

    def test_second_transaction_conflicts(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            _pay(client, shipment)
            resp = client.post(
                "/transactions",
                json={
                    "shipment_id": shipment["id"],
                    "amount": 5,
                    "payment_method": "card",
                },
            )
        assert resp.status_code == 409

    def test_confirm_cascade(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            transaction = _pay(client, shipment)
            confirmed = client.patch(
                f"/transactions/{transaction['id']}/confirm",
                json={"blockchain_tx_hash": "0xabc"},
            )
            shipment_after = client.get(f"/shipments/{shipment['id']}")
            current = client.get(
                f"/shipments/{shipment['id']}/tracking/current"
            )
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "completed"
        assert confirmed.json()["blockchain_tx_hash"] == "0xabc"
        assert shipment_after.json()["status"] == "confirmed"
        assert current.json()["event_type"] == "payment"
        assert current.json()["message"] == "Payment confirmed via blockchain"

    def test_confirm_without_hash(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            transaction = _pay(client, _book(client, space, shipper))
            resp = client.patch(
                f"/transactions/{transaction['id']}/confirm", json={}
            )
        assert resp.status_code == 400

    def test_rejected_payment(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            transaction = _pay(client, _book(client, space, shipper))
            resp = client.patch(
                f"/transactions/{transaction['id']}/confirm",
                json={"blockchain_tx_hash": "0xrejected"},
            )
            after = client.get(f"/transactions/{transaction['id']}")
        assert resp.status_code == 402
        assert after.json()["status"] == "failed"

    def test_fail(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            transaction = _pay(client, _book(client, space, shipper))
            failed = client.patch(
                f"/transactions/{transaction['id']}/fail",
                json={"reason": "cancelled"},
            )
            again = client.patch(
                f"/transactions/{transaction['id']}/confirm",
                json={"blockchain_tx_hash": "0xabc"},
            )
        assert failed.json()["status"] == "failed"
        assert again.status_code == 409

    def test_unknown_transaction(self, client) -> None:
        with client:
            resp = client.get("/transactions/77")
        assert resp.status_code == 404


class TestTracking:
    def test_append_and_list(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            late = client.post(
                "/tracking",
                json={
                    "shipment_id": shipment["id"],
                    "event_type": "checkpoint",
                    "location": "Cleveland, OH",
                    "latitude": 41.4993,
                    "longitude": -81.6944,
                    "timestamp": "2024-03-01T18:00:00Z",
                },
            )
            early = client.post(
                "/tracking",
                json={
                    "shipment_id": shipment["id"],
                    "event_type": "order_confirmed",
                    "location": "New York, NY",
                    "timestamp": "2024-03-01T06:00:00",
                },
            )
            history = client.get(f"/shipments/{shipment['id']}/tracking")
            current = client.get(
                f"/shipments/{shipment['id']}/tracking/current"
            )
        assert late.status_code == 201
        assert early.json()["status"] == "update"
        assert [e["event_type"] for e in history.json()] == [
            "order_confirmed",
            "checkpoint",
        ]
        assert current.json()["location"] == "Cleveland, OH"

    def test_pickup_moves_shipment(self, client) -> None:
        with client:
            shipper, _, space = _setup(client)
            shipment = _book(client, space, shipper)
            transaction = _pay(client, shipment)
            client.patch(
                f"/transactions/{transaction['id']}/confirm",
                json={"blockchain_tx_hash": "0xabc"},
            )
            client.post(
                "/tracking",
                json={"shipment_id": shipment["id"], "event_type": "pickup"},
            )
            resp = client.get(f"/shipments/{shipment['id']}")
        assert resp.json()["status"] == "in_transit"

    def test_append_to_unknown_shipment(self, client) -> None:
        with client:
            resp = client.post(
                "/tracking", json={"shipment_id": 5, "event_type": "x"}
            )
        assert resp.status_code == 404
