"""
One set of entity routes, mounted twice.

Each entity router module exposes ``build_router(surface)``. The session
surface (JWT, mounted at /api) returns plain schemas; the API-key surface
(mounted at /api/gpt and /api/external) wraps the same payloads in a
``GptEnvelope`` with business verification.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..auth import get_api_key_tenant, get_current_tenant
from ..schemas import BusinessVerification, GptEnvelope
from ..services.storage import TenantContext
from ..timeutils import utcnow


@dataclass(frozen=True)
class Surface:
    name: str
    tenant: Callable[..., TenantContext]
    envelope: bool = False

    def response_model(self, model):
        if self.envelope:
            return GptEnvelope[model]
        return model

    def respond(self, ctx: TenantContext, data: Any, message: Optional[str] = None):
        if not self.envelope:
            return data
        return GptEnvelope(
            success=True,
            data=data,
            message=message,
            business_verification=BusinessVerification(
                business_name=ctx.business.name,
                business_id=ctx.business.id,
                timestamp=utcnow(),
            ),
        )


SESSION_SURFACE = Surface(name="session", tenant=get_current_tenant)
API_KEY_SURFACE = Surface(name="api_key", tenant=get_api_key_tenant, envelope=True)
