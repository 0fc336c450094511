from __future__ import annotations

from abc import ABC, abstractmethod

from booking_engine.domain.entities.service import Service
from booking_engine.domain.entities.tenant import Tenant


class TenantDirectoryPort(ABC):
    @abstractmethod
    def resolve_tenant_by_routing_key(self, routing_key: str | None) -> Tenant:
        """Tenant owning the inbound phone number id. Falls back to the default tenant."""
        raise NotImplementedError

    @abstractmethod
    def get_tenant(self, tenant_key: str) -> Tenant | None:
        raise NotImplementedError

    @abstractmethod
    def resolve_service_by_id(self, tenant: Tenant, service_id: str | None) -> Service | None:
        raise NotImplementedError

    @abstractmethod
    def resolve_service_by_free_text(self, tenant: Tenant, text: str | None) -> Service | None:
        raise NotImplementedError

    @abstractmethod
    def resolve_default_service(self, tenant: Tenant) -> Service | None:
        raise NotImplementedError
