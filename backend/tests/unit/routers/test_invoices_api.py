"""
Invoice endpoints: payments, derived overdue status, deposits, signatures and photos.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from bizworx.timeutils import utcnow


@pytest.fixture
def invoice(client: TestClient, auth_headers, customer, line_items):
    response = client.post("/api/invoices", json={
        "client_id": customer.id,
        "title": "Spring clean",
        "line_items": line_items,
    }, headers=auth_headers)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def deposit_invoice(client: TestClient, auth_headers, customer, line_items):
    response = client.post("/api/invoices", json={
        "client_id": customer.id,
        "title": "Kitchen remodel clean",
        "line_items": line_items,
        "deposit_required": True,
        "deposit_type": "percentage",
        "deposit_percentage": "20",
    }, headers=auth_headers)
    return response.json()


class TestPayments:

    def test_partial_then_full_payment(self, client: TestClient, auth_headers, invoice):
        url = f"/api/invoices/{invoice['id']}/payment"

        first = client.post(url, json={"amount": "100.00", "payment_method": "cash"}, headers=auth_headers).json()
        assert first["status"] == "draft"
        assert Decimal(first["amount_paid"]) == Decimal("100.00")
        assert Decimal(first["balance_due"]) == Decimal("50.00")

        second = client.post(url, json={"amount": "50.00"}, headers=auth_headers).json()
        assert second["status"] == "paid"
        assert second["paid_at"] is not None

    def test_overpayment_is_rejected(self, client: TestClient, auth_headers, invoice):
        response = client.post(f"/api/invoices/{invoice['id']}/payment", json={"amount": "150.01"}, headers=auth_headers)
        assert response.status_code == 400
        assert Decimal(response.json()["details"]["balance_due"]) == Decimal("150.00")

    def test_non_positive_payment(self, client: TestClient, auth_headers, invoice):
        response = client.post(f"/api/invoices/{invoice['id']}/payment", json={"amount": "0"}, headers=auth_headers)
        assert response.status_code == 400

    def test_total_cannot_drop_below_paid(self, client: TestClient, auth_headers, invoice):
        client.post(f"/api/invoices/{invoice['id']}/payment", json={"amount": "100"}, headers=auth_headers)
        response = client.put(f"/api/invoices/{invoice['id']}", json={
            "line_items": [{"description": "Small job", "quantity": "1", "rate": "10"}],
        }, headers=auth_headers)
        assert response.status_code == 400


class TestStatus:

    def test_send_issues_share_link(self, client: TestClient, auth_headers, invoice):
        sent = client.post(f"/api/invoices/{invoice['id']}/send", headers=auth_headers).json()
        assert sent["status"] == "sent"

        public = client.get(f"/api/public/invoices/{sent['share_token']}")
        assert public.status_code == 200
        assert public.json()["invoice"]["invoice_number"] == invoice["invoice_number"]

    def test_past_due_invoice_reads_as_overdue(self, client: TestClient, auth_headers, invoice):
        past = (utcnow() - timedelta(days=3)).isoformat()
        client.put(f"/api/invoices/{invoice['id']}", json={"due_date": past}, headers=auth_headers)
        client.post(f"/api/invoices/{invoice['id']}/send", headers=auth_headers)

        fetched = client.get(f"/api/invoices/{invoice['id']}", headers=auth_headers).json()
        assert fetched["status"] == "overdue"

        overdue = client.get("/api/invoices", params={"status": "overdue"}, headers=auth_headers).json()
        assert [i["id"] for i in overdue] == [invoice["id"]]
        assert client.get("/api/invoices", params={"status": "sent"}, headers=auth_headers).json() == []

    def test_cancelled_invoice_takes_no_payment(self, client: TestClient, auth_headers, invoice):
        client.post(f"/api/invoices/{invoice['id']}/cancel", headers=auth_headers)
        response = client.post(f"/api/invoices/{invoice['id']}/payment", json={"amount": "10"}, headers=auth_headers)
        assert response.status_code == 400


class TestDeposits:

    def test_percentage_deposit_amount(self, deposit_invoice):
        assert Decimal(deposit_invoice["deposit_amount"]) == Decimal("30.00")
        assert Decimal(deposit_invoice["remaining_after_deposit"]) == Decimal("120.00")

    def test_manual_collection(self, client: TestClient, auth_headers, deposit_invoice):
        response = client.post(
            f"/api/invoices/{deposit_invoice['id']}/collect-deposit", json={"method": "manual"}, headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["payment_url"] is None
        assert data["invoice"]["deposit_paid"] is True
        assert Decimal(data["invoice"]["amount_paid"]) == Decimal("0")

        again = client.post(
            f"/api/invoices/{deposit_invoice['id']}/collect-deposit", json={"method": "manual"}, headers=auth_headers,
        )
        assert again.status_code == 400

    def test_payment_link_without_provider_configured(self, client: TestClient, auth_headers, deposit_invoice):
        response = client.post(
            f"/api/invoices/{deposit_invoice['id']}/collect-deposit",
            json={"method": "payment_link"},
            headers=auth_headers,
        )
        assert response.status_code == 502
        assert response.json()["success"] is False

    def test_no_deposit_required(self, client: TestClient, auth_headers, invoice):
        response = client.post(
            f"/api/invoices/{invoice['id']}/collect-deposit", json={"method": "manual"}, headers=auth_headers,
        )
        assert response.status_code == 400


class TestSignatureAndPhotos:

    def test_signature(self, client: TestClient, auth_headers, invoice):
        response = client.patch(
            f"/api/invoices/{invoice['id']}/signature", json={"signature": "data:image/png;base64,BBBB"}, headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["signed_at"] is not None

    def test_empty_signature(self, client: TestClient, auth_headers, invoice):
        response = client.patch(f"/api/invoices/{invoice['id']}/signature", json={"signature": ""}, headers=auth_headers)
        assert response.status_code == 422

    def test_add_and_remove_photo(self, client: TestClient, auth_headers, invoice):
        url = f"/api/invoices/{invoice['id']}/photos"
        client.post(url, json={"image": "https://cdn.example.test/before.jpg", "caption": "Before"}, headers=auth_headers)
        after = client.post(url, json={"image": "https://cdn.example.test/after.jpg"}, headers=auth_headers).json()
        assert [p["caption"] for p in after["photos"]] == ["Before", None]

        trimmed = client.delete(f"{url}/0", headers=auth_headers).json()
        assert [p["image"] for p in trimmed["photos"]] == ["https://cdn.example.test/after.jpg"]
        assert client.delete(f"{url}/5", headers=auth_headers).status_code == 404
