"""Service tests for invoices: payments, deposits, signatures, photos and overdue status."""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy.orm.exc import StaleDataError

from bizworx import models
from bizworx.enums import DepositCollectionMethod, DepositType, InvoiceStatus
from bizworx.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from bizworx.schemas import Invoice as InvoiceSchema
from bizworx.schemas import InvoiceCreate, InvoiceUpdate
from bizworx.services.invoice_service import InvoiceService, effective_status
from bizworx.timeutils import utcnow


def make_invoice(storage, customer, rate="100.00", **fields):
    request = InvoiceCreate(
        client_id=customer.id,
        title="Gutter cleaning",
        line_items=[{"description": "Gutters", "quantity": 1, "rate": rate}],
        **fields,
    )
    return InvoiceService.create_invoice(storage, request)


@pytest.fixture
def invoice(storage, customer):
    return make_invoice(storage, customer)


@pytest.fixture
def deposit_invoice(storage, customer):
    return make_invoice(
        storage, customer, rate="500.00",
        deposit_required=True, deposit_type=DepositType.PERCENTAGE, deposit_percentage=Decimal("25"),
    )


class TestCreateAndUpdate:

    def test_create_defaults(self, invoice):
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.total == Decimal("100.00")
        assert invoice.amount_paid == Decimal("0.00")
        assert invoice.photos == []
        assert invoice.version == 1

    def test_percentage_deposit(self, deposit_invoice):
        assert deposit_invoice.deposit_amount == Decimal("125.00")
        assert InvoiceSchema.model_validate(deposit_invoice).remaining_after_deposit == Decimal("375.00")

    def test_update_cannot_drop_total_below_amount_paid(self, storage, invoice):
        InvoiceService.record_payment(storage, invoice.id, "80")
        with pytest.raises(ValidationError):
            InvoiceService.update_invoice(storage, invoice.id, InvoiceUpdate(
                line_items=[{"description": "Gutters", "quantity": 1, "rate": "50"}],
            ))

    def test_raising_total_on_paid_invoice_reopens_it(self, storage, invoice):
        paid = InvoiceService.record_payment(storage, invoice.id, "100.00")
        assert paid.status == InvoiceStatus.PAID

        updated = InvoiceService.update_invoice(storage, invoice.id, InvoiceUpdate(
            line_items=[{"description": "Gutters", "quantity": 1, "rate": "300"}],
        ))

        assert updated.total == Decimal("300.00")
        assert updated.amount_paid == Decimal("100.00")
        assert updated.status == InvoiceStatus.SENT
        assert updated.paid_at is None

        settled = InvoiceService.record_payment(storage, invoice.id, "200.00")
        assert settled.status == InvoiceStatus.PAID
        assert settled.paid_at is not None

    def test_tax_rate_is_stored_to_cents(self, storage, customer):
        taxed = make_invoice(storage, customer, rate="1000.00", tax_rate=Decimal("8.125"))
        assert taxed.tax_rate == Decimal("8.13")
        assert taxed.tax_amount == Decimal("81.30")

        retitled = InvoiceService.update_invoice(storage, taxed.id, InvoiceUpdate(title="Gutters again"))
        assert retitled.tax_amount == Decimal("81.30")

    def test_update_keeps_payment_state(self, storage, invoice):
        InvoiceService.record_payment(storage, invoice.id, "30")
        updated = InvoiceService.update_invoice(storage, invoice.id, InvoiceUpdate(title="Gutters + roof"))
        assert updated.amount_paid == Decimal("30.00")
        assert updated.status == InvoiceStatus.DRAFT

    def test_job_from_other_tenant_is_rejected(self, db_session, storage, customer, other_business, other_customer):
        foreign_job = models.Job(business_id=other_business.id, client_id=other_customer.id, title="Theirs")
        db_session.add(foreign_job)
        db_session.commit()
        with pytest.raises(AuthorizationError):
            make_invoice(storage, customer, job_id=foreign_job.id)


class TestPayments:

    def test_partial_payments_accumulate_until_paid(self, storage, invoice):
        first = InvoiceService.record_payment(storage, invoice.id, "60.00", payment_method="cash")
        assert first.amount_paid == Decimal("60.00")
        assert first.status == InvoiceStatus.DRAFT
        assert first.paid_at is None

        second = InvoiceService.record_payment(storage, invoice.id, "40.00", payment_method="check")
        assert second.amount_paid == Decimal("100.00")
        assert second.status == InvoiceStatus.PAID
        assert second.paid_at is not None
        assert second.payment_method == "check"

        with pytest.raises(ValidationError):
            InvoiceService.record_payment(storage, invoice.id, "0.01")

    def test_overpayment_is_rejected(self, storage, invoice):
        with pytest.raises(ValidationError) as exc_info:
            InvoiceService.record_payment(storage, invoice.id, "100.01")
        assert exc_info.value.details["balance_due"] == "100.00"

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_amount_must_be_positive(self, storage, invoice, amount):
        with pytest.raises(ValidationError):
            InvoiceService.record_payment(storage, invoice.id, amount)

    def test_cancelled_invoice_rejects_payment(self, storage, invoice):
        InvoiceService.cancel_invoice(storage, invoice.id)
        with pytest.raises(ValidationError):
            InvoiceService.record_payment(storage, invoice.id, "10")

    def test_payment_with_signature(self, storage, invoice):
        paid = InvoiceService.record_payment(storage, invoice.id, "100", signature="data:image/png;base64,SIG")
        assert paid.client_signature == "data:image/png;base64,SIG"
        assert paid.signed_at is not None

    def test_version_is_bumped_on_each_write(self, storage, invoice):
        updated = InvoiceService.record_payment(storage, invoice.id, "10")
        assert updated.version == 2

    def test_stale_write_becomes_conflict(self, storage, invoice):
        storage.save = Mock(side_effect=StaleDataError("version mismatch"))
        storage.rollback = Mock()
        with pytest.raises(ConflictError):
            InvoiceService.record_payment(storage, invoice.id, "10")
        storage.rollback.assert_called_once()


class TestStatusChanges:

    def test_send_issues_token(self, storage, invoice):
        sent = InvoiceService.send_invoice(storage, invoice.id)
        assert sent.status == InvoiceStatus.SENT
        assert sent.share_token

    def test_paid_invoice_cannot_be_cancelled(self, storage, invoice):
        InvoiceService.record_payment(storage, invoice.id, "100")
        with pytest.raises(ValidationError):
            InvoiceService.cancel_invoice(storage, invoice.id)

    def test_cancelled_invoice_cannot_be_sent(self, storage, invoice):
        InvoiceService.cancel_invoice(storage, invoice.id)
        with pytest.raises(ValidationError):
            InvoiceService.send_invoice(storage, invoice.id)

    def test_overdue_is_derived(self, db_session, storage, invoice):
        invoice.due_date = utcnow() - timedelta(days=1)
        db_session.commit()

        assert effective_status(invoice) == InvoiceStatus.OVERDUE
        assert InvoiceSchema.model_validate(invoice).status == InvoiceStatus.OVERDUE
        # never stored
        assert storage.get_invoice(invoice.id).status == InvoiceStatus.DRAFT

    def test_paid_invoice_is_never_overdue(self, db_session, storage, invoice):
        InvoiceService.record_payment(storage, invoice.id, "100")
        invoice.due_date = utcnow() - timedelta(days=1)
        db_session.commit()
        assert effective_status(invoice) == InvoiceStatus.PAID

    def test_list_filters_on_effective_status(self, db_session, storage, customer, invoice):
        late = make_invoice(storage, customer, due_date=utcnow() - timedelta(days=3))
        overdue = InvoiceService.list_invoices(storage, status=InvoiceStatus.OVERDUE)
        drafts = InvoiceService.list_invoices(storage, status=InvoiceStatus.DRAFT)
        assert [i.id for i in overdue] == [late.id]
        assert [i.id for i in drafts] == [invoice.id]


class TestDeposits:

    def test_manual_deposit(self, storage, deposit_invoice):
        invoice, url = InvoiceService.collect_deposit(storage, deposit_invoice.id, DepositCollectionMethod.MANUAL)
        assert url is None
        assert invoice.deposit_paid is True
        assert invoice.deposit_paid_at is not None
        assert invoice.amount_paid == Decimal("0.00")

    def test_deposit_cannot_be_collected_twice(self, storage, deposit_invoice):
        InvoiceService.collect_deposit(storage, deposit_invoice.id, DepositCollectionMethod.MANUAL)
        with pytest.raises(ValidationError):
            InvoiceService.collect_deposit(storage, deposit_invoice.id, DepositCollectionMethod.MANUAL)

    def test_deposit_requires_configuration(self, storage, invoice):
        with pytest.raises(ValidationError):
            InvoiceService.collect_deposit(storage, invoice.id, DepositCollectionMethod.MANUAL)

    def test_payment_link_uses_provider(self, storage, deposit_invoice):
        provider = Mock()
        provider.create_deposit_link.return_value = "https://checkout.stripe.test/c/pay_123"

        invoice, url = InvoiceService.collect_deposit(
            storage, deposit_invoice.id, DepositCollectionMethod.PAYMENT_LINK, payment_service=provider
        )

        assert url == "https://checkout.stripe.test/c/pay_123"
        assert invoice.deposit_paid is False
        called_invoice, called_business = provider.create_deposit_link.call_args[0]
        assert called_invoice.id == deposit_invoice.id
        assert called_business.id == storage.business_id


class TestSignatureAndPhotos:

    def test_signature_overwrites(self, storage, invoice):
        InvoiceService.collect_signature(storage, invoice.id, "first")
        signed = InvoiceService.collect_signature(storage, invoice.id, "second")
        assert signed.client_signature == "second"
        assert signed.signed_at is not None

    def test_add_and_remove_photos(self, storage, invoice):
        InvoiceService.add_photo(storage, invoice.id, "https://img.test/1.jpg", "before")
        InvoiceService.add_photo(storage, invoice.id, "https://img.test/2.jpg", "after")
        updated = InvoiceService.remove_photo(storage, invoice.id, 0)
        assert [p["caption"] for p in updated.photos] == ["after"]

    def test_remove_missing_photo(self, storage, invoice):
        with pytest.raises(NotFoundError):
            InvoiceService.remove_photo(storage, invoice.id, 3)
