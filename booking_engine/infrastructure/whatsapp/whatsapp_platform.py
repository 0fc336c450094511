from __future__ import annotations

from booking_engine.application.ports.message_platform import MessagePlatformPort
from booking_engine.application.ports.tenant_directory import TenantDirectoryPort
from booking_engine.domain.entities.message import OutboundOption
from booking_engine.domain.entities.tenant import Tenant
from booking_engine.infrastructure.whatsapp.whatsapp_client import WhatsAppClient


class WhatsAppPlatform(MessagePlatformPort):
    def __init__(
        self,
        client: WhatsAppClient,
        tenants: TenantDirectoryPort,
        default_access_token: str | None,
        default_graph_version: str,
    ) -> None:
        self._client = client
        self._tenants = tenants
        self._default_access_token = default_access_token
        self._default_graph_version = default_graph_version

    def send_text(self, tenant_key: str, customer_id: str, body: str) -> None:
        tenant = self._tenant(tenant_key)
        self._client.send_text(
            self._access_token(tenant),
            tenant.graph_version or self._default_graph_version,
            tenant.phone_number_id,
            customer_id,
            body,
        )

    def send_options(self, tenant_key: str, customer_id: str, prompt: str, options: list[OutboundOption]) -> None:
        tenant = self._tenant(tenant_key)
        self._client.send_options(
            self._access_token(tenant),
            tenant.graph_version or self._default_graph_version,
            tenant.phone_number_id,
            customer_id,
            prompt,
            options,
        )

    def _tenant(self, tenant_key: str) -> Tenant:
        tenant = self._tenants.get_tenant(tenant_key)
        if tenant is None:
            raise ValueError(f"Unknown tenant {tenant_key!r}")
        return tenant

    def _access_token(self, tenant: Tenant) -> str:
        token = tenant.access_token or self._default_access_token
        if not token:
            raise ValueError(f"No WhatsApp access token for tenant {tenant.key!r}")
        return token
