from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..dependencies import get_db
from ..schemas import (
    Estimate,
    EstimateRespondRequest,
    Invoice,
    PublicBusiness,
    PublicClient,
    PublicEstimate,
    PublicInvoice,
)
from ..services.estimate_service import EstimateService
from ..services.invoice_service import InvoiceService
from ..services.storage import get_estimate_by_share_token

router = APIRouter(prefix="/public", tags=["Public"])


def present_estimate(estimate) -> PublicEstimate:
    return PublicEstimate(
        estimate=Estimate.model_validate(estimate),
        business=PublicBusiness.model_validate(estimate.business),
        client=PublicClient.model_validate(estimate.client),
    )


@router.get("/estimates/{token}", response_model=PublicEstimate)
def get_shared_estimate(token: str, db: Session = Depends(get_db)):
    """Client-facing view of a shared estimate. The token is the only credential."""
    return present_estimate(get_estimate_by_share_token(db, token))


@router.post("/estimates/{token}/respond", response_model=PublicEstimate)
def respond_to_estimate(token: str, request: EstimateRespondRequest, db: Session = Depends(get_db)):
    estimate = EstimateService.respond_to_estimate(
        db, token, request.status, response=request.response, signature=request.signature
    )
    return present_estimate(estimate)


@router.get("/invoices/{token}", response_model=PublicInvoice)
def get_shared_invoice(token: str, db: Session = Depends(get_db)):
    invoice = InvoiceService.get_public_invoice(db, token)
    return PublicInvoice(
        invoice=Invoice.model_validate(invoice),
        business=PublicBusiness.model_validate(invoice.business),
        client=PublicClient.model_validate(invoice.client),
    )
