# Auth schemas
from .auth import (
    BusinessRegisterRequest,
    LoginRequest,
    UserLoginRequest,
    Token,
    BusinessResponse,
    TeamMemberResponse,
    AuthResponse,
    MeResponse,
    ApiKeyResponse,
)

# Business and team schemas
from .business import BusinessSettingsUpdate
from .team import TeamMemberCreate, TeamMemberUpdate

# Catalog and scheduling schemas
from .client import ClientCreate, ClientUpdate, Client
from .service import ServiceCreate, ServiceUpdate, Service
from .job import JobCreate, JobUpdate, Job

# Billing document schemas
from .document import LineItemInput, LineItem, PricingInput, PricingUpdate, BillingDocument
from .estimate import EstimateCreate, EstimateUpdate, Estimate, EstimateRespondRequest
from .invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoicePhoto,
    Invoice,
    PaymentRequest,
    CollectDepositRequest,
    CollectDepositResponse,
    SignatureRequest,
    PhotoCreate,
)
from .public import PublicBusiness, PublicClient, PublicEstimate, PublicInvoice

# Time clock and payroll schemas
from .time_entry import (
    ClockInRequest,
    ClockOutRequest,
    TimeEntryUpdate,
    TimeEntry,
    TimeStatus,
    TeamMemberHours,
    TeamHoursResponse,
)
from .payroll import PayrollSettingsUpdate, PayrollSettings, EmployeeHours, PayrollSummary

# Dashboard and response wrappers
from .dashboard import RevenueStats, DashboardStats
from .envelope import BusinessVerification, GptEnvelope, MessageResponse

__all__ = [
    # Auth
    "BusinessRegisterRequest",
    "LoginRequest",
    "UserLoginRequest",
    "Token",
    "BusinessResponse",
    "TeamMemberResponse",
    "AuthResponse",
    "MeResponse",
    "ApiKeyResponse",
    # Business and team
    "BusinessSettingsUpdate",
    "TeamMemberCreate",
    "TeamMemberUpdate",
    # Catalog and scheduling
    "ClientCreate",
    "ClientUpdate",
    "Client",
    "ServiceCreate",
    "ServiceUpdate",
    "Service",
    "JobCreate",
    "JobUpdate",
    "Job",
    # Billing documents
    "LineItemInput",
    "LineItem",
    "PricingInput",
    "PricingUpdate",
    "BillingDocument",
    "EstimateCreate",
    "EstimateUpdate",
    "Estimate",
    "EstimateRespondRequest",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoicePhoto",
    "Invoice",
    "PaymentRequest",
    "CollectDepositRequest",
    "CollectDepositResponse",
    "SignatureRequest",
    "PhotoCreate",
    "PublicBusiness",
    "PublicClient",
    "PublicEstimate",
    "PublicInvoice",
    # Time clock and payroll
    "ClockInRequest",
    "ClockOutRequest",
    "TimeEntryUpdate",
    "TimeEntry",
    "TimeStatus",
    "TeamMemberHours",
    "TeamHoursResponse",
    "PayrollSettingsUpdate",
    "PayrollSettings",
    "EmployeeHours",
    "PayrollSummary",
    # Dashboard and wrappers
    "RevenueStats",
    "DashboardStats",
    "BusinessVerification",
    "GptEnvelope",
    "MessageResponse",
]
