from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from booking_engine.application.ports.booking_store import PendingBookingStorePort
from booking_engine.application.utils.keyed_lock import KeyedLocks
from booking_engine.domain.entities.pending_booking import PendingBooking

_VERSION = 1


class JsonPendingBookingStore(PendingBookingStorePort):
    """One JSON file per customer (named by the SHA-256 of the id), written atomically through a temp file."""

    def __init__(self, data_dir: str = "./data/pending_bookings") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks = KeyedLocks()
        self._logger = logging.getLogger(__name__)

    def _get_file_path(self, customer_id: str) -> Path:
        # Distinct ids map to distinct files, always inside data_dir.
        digest = hashlib.sha256(customer_id.encode("utf-8")).hexdigest()
        return self._data_dir / f"{digest}.json"

    def _load(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self._logger.warning("Unreadable pending booking record", extra={"path": str(path), "reason": str(e)})
            return None

    def _save(self, path: Path, data: dict[str, Any]) -> None:
        temp_path = path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def get(self, customer_id: str) -> PendingBooking | None:
        with self._locks.hold(customer_id):
            data = self._load(self._get_file_path(customer_id))
        if not data or data.get("customer_id") != customer_id:
            return None
        return _deserialize_booking(data.get("booking") or {})

    def put(self, customer_id: str, booking: PendingBooking) -> None:
        if not customer_id:
            raise ValueError("customer_id is required to save a pending booking")
        booking_dict = _serialize_booking(booking)
        booking_dict["updated_at"] = datetime.now(timezone.utc).isoformat()
        with self._locks.hold(customer_id):
            self._save(
                self._get_file_path(customer_id),
                {"customer_id": customer_id, "booking": booking_dict, "version": _VERSION},
            )

    def delete(self, customer_id: str) -> None:
        with self._locks.hold(customer_id):
            self._get_file_path(customer_id).unlink(missing_ok=True)

    def list_all(self) -> dict[str, PendingBooking]:
        result: dict[str, PendingBooking] = {}
        for path in sorted(self._data_dir.glob("*.json")):
            data = self._load(path)
            if not data or not data.get("customer_id"):
                continue
            booking = _deserialize_booking(data.get("booking") or {})
            if booking is not None:
                result[data["customer_id"]] = booking
        return result


def _serialize_booking(booking: PendingBooking) -> dict[str, Any]:
    return {
        "tenant_key": booking.tenant_key,
        "remote_event_id": booking.remote_event_id,
        "start": booking.start.isoformat(),
        "end": booking.end.isoformat(),
        "service_id": booking.service_id,
        "service_name": booking.service_name,
        "price": booking.price,
        "currency": booking.currency,
        "duration_minutes": booking.duration_minutes,
        "timezone": booking.timezone,
        "display_label": booking.display_label,
        "language": booking.language,
        "updated_at": booking.updated_at.isoformat() if booking.updated_at else None,
    }


def _deserialize_booking(data: dict[str, Any]) -> PendingBooking | None:
    try:
        return PendingBooking(
            tenant_key=data["tenant_key"],
            remote_event_id=data["remote_event_id"],
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
            service_id=data.get("service_id"),
            service_name=data.get("service_name") or "Service",
            price=data.get("price"),
            currency=data.get("currency") or "USD",
            duration_minutes=int(data["duration_minutes"]),
            timezone=data.get("timezone") or "UTC",
            display_label=data.get("display_label") or "",
            language=data.get("language") or "en",
            updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else None,
        )
    except (KeyError, TypeError, ValueError):
        return None
