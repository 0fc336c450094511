from __future__ import annotations

import json
import logging
from datetime import time
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from booking_engine.application.exceptions import TenantConfigError, TenantNotFoundError
from booking_engine.application.ports.tenant_directory import TenantDirectoryPort
from booking_engine.domain.entities.service import Service
from booking_engine.domain.entities.tenant import CalendarConfig, Tenant, WorkingHours
from booking_engine.infrastructure.tenants.tenant_records import ServiceRecord, TenantRecord

DEFAULT_TENANT_KEY = "default"

DEFAULT_WORKING_HOURS = (
    WorkingHours(day=1, start=time(9, 0), end=time(17, 0)),
    WorkingHours(day=2, start=time(9, 0), end=time(17, 0)),
    WorkingHours(day=3, start=time(9, 0), end=time(17, 0)),
    WorkingHours(day=4, start=time(9, 0), end=time(17, 0)),
    WorkingHours(day=5, start=time(9, 0), end=time(17, 0)),
    WorkingHours(day=6, start=time(10, 0), end=time(14, 0)),
)

DEFAULT_SERVICES = (
    Service(
        id="haircut",
        name="Haircut",
        min_minutes=30,
        max_minutes=45,
        price=45,
        description="Wash, cut, and style",
        keywords=frozenset({"haircut", "cut", "trim"}),
    ),
    Service(
        id="color",
        name="Hair Color",
        min_minutes=60,
        max_minutes=90,
        price=120,
        description="Full color application",
        keywords=frozenset({"color", "dye", "highlights"}),
    ),
    Service(
        id="mani",
        name="Manicure",
        min_minutes=40,
        max_minutes=60,
        price=35,
        description="Manicure with polish",
        keywords=frozenset({"mani", "manicure", "nails"}),
    ),
)


class StaticTenantDirectory(TenantDirectoryPort):
    def __init__(self, tenants: Iterable[Tenant], default_key: str = DEFAULT_TENANT_KEY) -> None:
        self._tenants = {tenant.key: tenant for tenant in tenants}
        self._default_key = default_key

    def resolve_tenant_by_routing_key(self, routing_key: str | None) -> Tenant:
        if routing_key:
            for tenant in self._tenants.values():
                if tenant.phone_number_id == routing_key:
                    return tenant
        default = self._tenants.get(self._default_key)
        if default is None:
            raise TenantNotFoundError(f"No tenant for routing key {routing_key!r} and no default tenant")
        return default

    def get_tenant(self, tenant_key: str) -> Tenant | None:
        if not tenant_key:
            return None
        return self._tenants.get(tenant_key)

    def resolve_service_by_id(self, tenant: Tenant, service_id: str | None) -> Service | None:
        if not service_id:
            return None
        return next((s for s in tenant.services if s.id == service_id), None)

    def resolve_service_by_free_text(self, tenant: Tenant, text: str | None) -> Service | None:
        if not text:
            return None
        return next((s for s in tenant.services if s.matches_text(text)), None)

    def resolve_default_service(self, tenant: Tenant) -> Service | None:
        return tenant.services[0] if tenant.services else None


class JsonTenantDirectory(StaticTenantDirectory):
    """Tenants loaded once from a JSON object keyed by tenant key."""

    def __init__(self, path: str, default_phone_number_id: str = "") -> None:
        self._path = Path(path)
        self._logger = logging.getLogger(__name__)
        raw: dict[str, Any] = {}
        if self._path.exists():
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            except json.JSONDecodeError as e:
                raise TenantConfigError(f"Tenants file {self._path} is not valid JSON: {e}") from e
            if not isinstance(raw, dict):
                raise TenantConfigError(f"Tenants file {self._path} must hold an object keyed by tenant key")
        else:
            self._logger.warning("Tenants file not found; using demo tenant", extra={"path": str(self._path)})
        super().__init__(load_tenants(raw, default_phone_number_id=default_phone_number_id))


def load_tenants(raw: dict[str, Any], default_phone_number_id: str = "") -> list[Tenant]:
    tenants = [build_tenant(key, value) for key, value in raw.items()]
    if not any(tenant.key == DEFAULT_TENANT_KEY for tenant in tenants):
        tenants.append(
            Tenant(
                key=DEFAULT_TENANT_KEY,
                display_name="Demo Salon",
                phone_number_id=default_phone_number_id,
                services=DEFAULT_SERVICES,
                calendar=CalendarConfig(timezone="America/New_York", working_hours=DEFAULT_WORKING_HOURS),
            )
        )
    return tenants


def build_tenant(key: str, data: Any) -> Tenant:
    try:
        record = TenantRecord.model_validate(data)
    except ValidationError as e:
        raise TenantConfigError(f"Invalid tenant {key!r}: {e}") from e

    calendar = record.calendar
    if calendar.working_hours is None:
        working_hours = DEFAULT_WORKING_HOURS
    else:
        working_hours = tuple(
            WorkingHours(day=wh.day, start=time.fromisoformat(wh.start), end=time.fromisoformat(wh.end))
            for wh in calendar.working_hours
        )

    services = tuple(_build_service(s) for s in record.services) or DEFAULT_SERVICES
    return Tenant(
        key=key,
        display_name=record.display_name or key,
        phone_number_id=record.phone_number_id,
        services=services,
        calendar=CalendarConfig(
            enabled=calendar.enabled,
            timezone=calendar.timezone,
            calendar_id=calendar.calendar_id or "primary",
            slot_duration_minutes=calendar.slot_duration_minutes,
            working_hours=working_hours,
        ),
        access_token=record.waba_token or None,
        graph_version=record.graph_version or None,
    )


def _build_service(record: ServiceRecord) -> Service:
    min_minutes, max_minutes = record.minutes()
    return Service(
        id=record.slug(),
        name=record.name or "Service",
        min_minutes=min_minutes,
        max_minutes=max_minutes,
        price=record.price,
        currency=record.currency or "USD",
        description=record.description,
        keywords=frozenset(record.keywords),
    )
