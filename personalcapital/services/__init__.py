"""Service layer."""

from personalcapital.services.auth_service import AuthService

__all__ = ["AuthService"]
