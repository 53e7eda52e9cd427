"""
Endpoint tests for clients and the service catalog: CRUD and business scoping.
"""
from decimal import Decimal

from fastapi.testclient import TestClient

from bizworx import models


class TestClientEndpoints:

    def test_create_and_list(self, client: TestClient, auth_headers):
        response = client.post("/api/clients", json={"name": "ACME Corp", "phone": "555-0100"}, headers=auth_headers)
        assert response.status_code == 200
        created = response.json()
        assert created["name"] == "ACME Corp"

        listed = client.get("/api/clients", headers=auth_headers).json()
        assert [c["id"] for c in listed] == [created["id"]]

    def test_update(self, client: TestClient, auth_headers, customer):
        response = client.put(f"/api/clients/{customer.id}", json={"notes": "Gate code 4411"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["notes"] == "Gate code 4411"
        assert response.json()["name"] == "Acme Homes"

    def test_delete(self, client: TestClient, auth_headers, customer):
        response = client.delete(f"/api/clients/{customer.id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/clients/{customer.id}", headers=auth_headers).status_code == 404

    def test_delete_client_with_invoices(self, client: TestClient, auth_headers, customer):
        client.post("/api/invoices", json={"client_id": customer.id, "title": "Spring clean"}, headers=auth_headers)
        response = client.delete(f"/api/clients/{customer.id}", headers=auth_headers)
        assert response.status_code == 409

    def test_list_only_shows_own_clients(self, client: TestClient, auth_headers, customer, other_customer):
        names = [c["name"] for c in client.get("/api/clients", headers=auth_headers).json()]
        assert names == ["Acme Homes"]

    def test_other_business_client_is_forbidden(self, client: TestClient, auth_headers, other_customer, db_session):
        assert client.get(f"/api/clients/{other_customer.id}", headers=auth_headers).status_code == 403
        assert client.put(
            f"/api/clients/{other_customer.id}", json={"name": "Hijacked"}, headers=auth_headers,
        ).status_code == 403
        assert client.delete(f"/api/clients/{other_customer.id}", headers=auth_headers).status_code == 403

        db_session.refresh(other_customer)
        assert other_customer.name == "Other Customer"

    def test_unknown_client(self, client: TestClient, auth_headers):
        response = client.get("/api/clients/99999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestServiceCatalogEndpoints:

    def test_create_and_update(self, client: TestClient, auth_headers):
        created = client.post(
            "/api/services", json={"name": "Carpet clean", "rate": "120.00"}, headers=auth_headers,
        ).json()
        updated = client.put(
            f"/api/services/{created['id']}", json={"rate": "135.50"}, headers=auth_headers,
        ).json()
        assert updated["name"] == "Carpet clean"
        assert Decimal(updated["rate"]) == Decimal("135.50")

    def test_services_are_scoped(self, client: TestClient, auth_headers, other_business, db_session):
        theirs = models.Service(business_id=other_business.id, name="Their service")
        db_session.add(theirs)
        db_session.commit()

        assert client.get("/api/services", headers=auth_headers).json() == []
        assert client.get(f"/api/services/{theirs.id}", headers=auth_headers).status_code == 403
