"""Service layer for difflearn."""
from difflearn.services.diff_service import DiffService
from difflearn.services.factory import ServiceFactory, get_service_factory

__all__ = ["DiffService", "ServiceFactory", "get_service_factory"]
