from .surface import API_KEY_SURFACE, SESSION_SURFACE, Surface

# Entity routers registered on both the session and the API-key surface
from . import clients, dashboard, estimates, invoices, jobs, services

ENTITY_ROUTER_MODULES = (clients, services, jobs, estimates, invoices, dashboard)

__all__ = ["API_KEY_SURFACE", "SESSION_SURFACE", "Surface", "ENTITY_ROUTER_MODULES"]
