"""Service tests for the estimate lifecycle against a real SQLite session."""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from bizworx import models
from bizworx.core.settings import Settings
from bizworx.enums import DepositType, EstimateStatus, InvoiceStatus
from bizworx.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from bizworx.schemas import EstimateCreate, EstimateUpdate
from bizworx.services.estimate_service import EstimateService
from bizworx.timeutils import ensure_utc, utcnow


@pytest.fixture
def estimate(storage, customer, line_items):
    request = EstimateCreate(
        client_id=customer.id,
        title="Spring clean",
        line_items=line_items,
        tax_rate=Decimal("8.25"),
    )
    return EstimateService.create_estimate(storage, request)


@pytest.fixture
def sent_estimate(storage, estimate):
    return EstimateService.share_estimate(storage, estimate.id)


class TestCreateAndUpdate:

    def test_create_computes_totals(self, estimate):
        assert estimate.status == EstimateStatus.DRAFT
        assert estimate.subtotal == Decimal("150.00")
        assert estimate.tax_amount == Decimal("12.38")
        assert estimate.total == Decimal("162.38")
        assert [item["amount"] for item in estimate.line_items] == ["100.00", "50.00"]
        assert estimate.estimate_number.startswith("EST-")

    def test_numbers_are_unique(self, storage, customer, estimate):
        second = EstimateService.create_estimate(storage, EstimateCreate(client_id=customer.id, title="Again"))
        assert second.estimate_number != estimate.estimate_number

    def test_percentage_deposit_is_stored(self, storage, customer):
        estimate = EstimateService.create_estimate(storage, EstimateCreate(
            client_id=customer.id,
            title="Remodel",
            line_items=[{"description": "Work", "quantity": 1, "rate": 500}],
            deposit_required=True,
            deposit_type=DepositType.PERCENTAGE,
            deposit_percentage=Decimal("25"),
        ))
        assert estimate.deposit_amount == Decimal("125.00")
        assert estimate.total - estimate.deposit_amount == Decimal("375.00")

    def test_create_rejects_deposit_over_total(self, storage, customer):
        with pytest.raises(ValidationError):
            EstimateService.create_estimate(storage, EstimateCreate(
                client_id=customer.id,
                title="Tiny job",
                line_items=[{"description": "Work", "quantity": 1, "rate": 10}],
                deposit_required=True,
                deposit_amount=Decimal("20"),
            ))

    def test_create_for_other_tenants_client_is_forbidden(self, storage, other_customer):
        with pytest.raises(AuthorizationError):
            EstimateService.create_estimate(storage, EstimateCreate(client_id=other_customer.id, title="Nope"))

    def test_update_recomputes_totals_without_touching_status(self, storage, sent_estimate):
        updated = EstimateService.update_estimate(storage, sent_estimate.id, EstimateUpdate(
            line_items=[{"description": "Labor", "quantity": 2, "rate": "75.00"}],
        ))
        assert updated.status == EstimateStatus.SENT
        assert updated.subtotal == Decimal("150.00")
        assert updated.total == Decimal("162.38")

    def test_update_of_title_keeps_totals(self, storage, estimate):
        updated = EstimateService.update_estimate(storage, estimate.id, EstimateUpdate(title="Renamed"))
        assert updated.title == "Renamed"
        assert updated.total == Decimal("162.38")

    def test_other_tenant_cannot_read(self, other_storage, estimate):
        with pytest.raises(AuthorizationError):
            EstimateService.get_estimate(other_storage, estimate.id)

    def test_unknown_estimate(self, storage):
        with pytest.raises(NotFoundError):
            EstimateService.get_estimate(storage, 9999)


class TestShare:

    def test_share_issues_token_and_sends(self, sent_estimate):
        assert sent_estimate.status == EstimateStatus.SENT
        assert sent_estimate.share_token
        assert sent_estimate.share_token_expires_at is None

    def test_share_reuses_token(self, storage, sent_estimate):
        again = EstimateService.share_estimate(storage, sent_estimate.id)
        assert again.share_token == sent_estimate.share_token

    def test_share_sets_expiry_when_ttl_configured(self, storage, estimate):
        with patch("bizworx.services.documents.get_settings", return_value=Settings(share_token_ttl_days=7)):
            shared = EstimateService.share_estimate(storage, estimate.id)
        expires = ensure_utc(shared.share_token_expires_at)
        assert utcnow() + timedelta(days=6) < expires <= utcnow() + timedelta(days=7)


class TestRespond:

    def test_approve_requires_signature(self, db_session, sent_estimate):
        with pytest.raises(ValidationError):
            EstimateService.respond_to_estimate(db_session, sent_estimate.share_token, "approved", signature="")

    def test_reject_requires_response(self, db_session, sent_estimate):
        with pytest.raises(ValidationError):
            EstimateService.respond_to_estimate(db_session, sent_estimate.share_token, "rejected", response="  ")

    def test_approve(self, db_session, sent_estimate):
        estimate = EstimateService.respond_to_estimate(
            db_session, sent_estimate.share_token, "approved", response="Looks good", signature="data:image/png;base64,AAA"
        )
        assert estimate.status == EstimateStatus.APPROVED
        assert estimate.client_signature == "data:image/png;base64,AAA"
        assert estimate.client_responded_at is not None

    def test_reject(self, db_session, sent_estimate):
        estimate = EstimateService.respond_to_estimate(
            db_session, sent_estimate.share_token, "rejected", response="Too expensive"
        )
        assert estimate.status == EstimateStatus.REJECTED
        assert estimate.client_response == "Too expensive"

    def test_only_sent_estimates_accept_responses(self, db_session, storage, sent_estimate):
        EstimateService.respond_to_estimate(db_session, sent_estimate.share_token, "rejected", response="No")
        with pytest.raises(ValidationError):
            EstimateService.respond_to_estimate(db_session, sent_estimate.share_token, "approved", signature="sig")

    def test_unknown_token(self, db_session):
        with pytest.raises(NotFoundError):
            EstimateService.respond_to_estimate(db_session, "missing", "rejected", response="No")

    def test_expired_token(self, db_session, sent_estimate):
        sent_estimate.share_token_expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()
        with pytest.raises(NotFoundError):
            EstimateService.respond_to_estimate(db_session, sent_estimate.share_token, "rejected", response="No")


class TestConvert:

    @pytest.fixture
    def approved_estimate(self, db_session, sent_estimate):
        return EstimateService.respond_to_estimate(db_session, sent_estimate.share_token, "approved", signature="sig")

    @pytest.mark.parametrize("status", [EstimateStatus.DRAFT, EstimateStatus.SENT, EstimateStatus.REJECTED])
    def test_convert_requires_approved(self, db_session, storage, estimate, status):
        estimate.status = status
        db_session.commit()
        with pytest.raises(ValidationError):
            EstimateService.convert_to_invoice(storage, estimate.id)
        assert db_session.query(models.Invoice).count() == 0

    def test_convert_creates_invoice(self, storage, approved_estimate):
        invoice = EstimateService.convert_to_invoice(storage, approved_estimate.id)

        assert invoice.estimate_id == approved_estimate.id
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.client_id == approved_estimate.client_id
        assert invoice.total == Decimal("162.38")
        assert invoice.line_items == approved_estimate.line_items
        assert invoice.invoice_number.startswith("INV-")
        assert ensure_utc(invoice.due_date) > utcnow() + timedelta(days=29)

        converted = storage.get_estimate(approved_estimate.id)
        assert converted.status == EstimateStatus.CONVERTED

    def test_convert_twice_fails(self, storage, approved_estimate):
        EstimateService.convert_to_invoice(storage, approved_estimate.id)
        with pytest.raises(ValidationError):
            EstimateService.convert_to_invoice(storage, approved_estimate.id)

    def test_convert_rolls_back_on_failure(self, db_session, storage, approved_estimate):
        with patch(
            "bizworx.services.estimate_service.next_document_number",
            side_effect=RuntimeError("numbering unavailable"),
        ):
            with pytest.raises(RuntimeError):
                EstimateService.convert_to_invoice(storage, approved_estimate.id)

        assert db_session.query(models.Invoice).count() == 0
        assert storage.get_estimate(approved_estimate.id).status == EstimateStatus.APPROVED

    def test_converted_estimate_cannot_be_deleted(self, storage, approved_estimate):
        EstimateService.convert_to_invoice(storage, approved_estimate.id)
        with pytest.raises(ConflictError):
            EstimateService.delete_estimate(storage, approved_estimate.id)

    def test_editing_converted_estimate_is_logged(self, storage, approved_estimate, caplog):
        EstimateService.convert_to_invoice(storage, approved_estimate.id)
        with caplog.at_level("WARNING", logger="bizworx.services.estimate_service"):
            updated = EstimateService.update_estimate(storage, approved_estimate.id, EstimateUpdate(notes="late edit"))
        assert updated.status == EstimateStatus.CONVERTED
        assert "after it was converted" in caplog.text
