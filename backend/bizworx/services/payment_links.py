"""
Stripe Checkout links for invoice deposits.
"""
import logging
from decimal import Decimal
from typing import Optional

import httpx

from .. import models
from ..core.settings import Settings, get_settings
from ..exceptions import PaymentProviderError
from .totals import round2

logger = logging.getLogger(__name__)


def to_cents(amount) -> int:
    return int(round2(amount) * 100)


class StripePaymentLinkService:
    """
    Creates a Checkout Session for the deposit amount and returns its hosted
    URL. Pass ``client`` to reuse a configured httpx.Client (tests pass one
    backed by httpx.MockTransport).
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or get_settings()
        self.client = client

    def _post(self, path: str, data: dict) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.settings.stripe_secret_key}"}
        url = f"{self.settings.stripe_api_base}{path}"
        if self.client is not None:
            return self.client.post(url, data=data, headers=headers)
        with httpx.Client(timeout=30.0) as http_client:
            return http_client.post(url, data=data, headers=headers)

    def create_deposit_link(self, invoice: models.Invoice, business: models.Business) -> str:
        if not self.settings.payments_enabled:
            raise PaymentProviderError("Online deposit payments are not configured")

        amount = Decimal(invoice.deposit_amount or 0)
        if amount <= 0:
            raise PaymentProviderError("Invoice has no deposit amount to collect")

        base_url = self.settings.public_base_url.rstrip("/")
        share_path = f"/invoice/{invoice.share_token}" if invoice.share_token else "/invoices"
        data = {
            "mode": "payment",
            "success_url": f"{base_url}{share_path}?deposit=success",
            "cancel_url": f"{base_url}{share_path}?deposit=cancelled",
            "line_items[0][quantity]": "1",
            "line_items[0][price_data][currency]": self.settings.payment_currency,
            "line_items[0][price_data][unit_amount]": str(to_cents(amount)),
            "line_items[0][price_data][product_data][name]": f"Deposit for {invoice.invoice_number}",
            "metadata[invoice_id]": str(invoice.id),
            "metadata[business_id]": str(business.id),
            "metadata[purpose]": "deposit",
        }
        if invoice.client is not None and invoice.client.email:
            data["customer_email"] = invoice.client.email

        try:
            response = self._post("/checkout/sessions", data)
        except httpx.HTTPError as e:
            logger.error(f"Payment provider request failed for invoice {invoice.id}: {e}")
            raise PaymentProviderError("Payment provider is unavailable")

        if response.status_code >= 300:
            logger.error(
                f"Payment provider rejected deposit link for invoice {invoice.id}: "
                f"{response.status_code} {response.text}"
            )
            raise PaymentProviderError("Payment provider rejected the request")

        url = response.json().get("url")
        if not url:
            raise PaymentProviderError("Payment provider returned no payment URL")

        logger.info(f"Created deposit payment link for invoice {invoice.id}")
        return url
