from __future__ import annotations

import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WorkingHoursRecord(_Record):
    day: int = Field(ge=0, le=6)
    start: str = Field(pattern=TIME_PATTERN)
    end: str = Field(pattern=TIME_PATTERN)

    @model_validator(mode="after")
    def _end_after_start(self) -> "WorkingHoursRecord":
        if self.end <= self.start:
            raise ValueError(f"end {self.end} must be after start {self.start}")
        return self


class ServiceRecord(_Record):
    id: str = ""
    name: str = "Service"
    min_minutes: int | None = Field(default=None, alias="minMinutes", gt=0)
    max_minutes: int | None = Field(default=None, alias="maxMinutes", gt=0)
    duration_minutes: int | None = Field(default=None, alias="durationMinutes", gt=0)
    price: float = Field(default=0, ge=0)
    currency: str = "USD"
    description: str = ""
    keywords: list[str] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def _split_keywords(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return value.split(",")
        return value

    @field_validator("keywords")
    @classmethod
    def _normalize_keywords(cls, value: list[str]) -> list[str]:
        return [kw.strip().lower() for kw in value if kw and kw.strip()]

    @field_validator("name", "currency", "description", "id", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    def slug(self) -> str:
        if self.id:
            return self.id
        return re.sub(r"\W+", "-", self.name.lower()).strip("-") or "service"

    def minutes(self) -> tuple[int, int]:
        low = self.min_minutes or self.duration_minutes or 30
        high = self.max_minutes or self.duration_minutes or self.min_minutes or 45
        return low, max(high, low)


class CalendarRecord(_Record):
    enabled: bool = False
    timezone: str = "America/New_York"
    calendar_id: str = Field(default="primary", alias="calendarId")
    slot_duration_minutes: int = Field(default=45, alias="slotDurationMinutes", ge=5, le=480)
    working_hours: list[WorkingHoursRecord] | None = Field(default=None, alias="workingHours")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        value = value.strip() or "UTC"
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone {value!r}") from e
        return value


class TenantRecord(_Record):
    display_name: str = Field(default="", alias="displayName")
    phone_number_id: str = Field(default="", alias="phoneNumberId")
    waba_token: str | None = Field(default=None, alias="wabaToken")
    graph_version: str | None = Field(default=None, alias="graphVersion")
    services: list[ServiceRecord] = Field(default_factory=list)
    calendar: CalendarRecord = Field(default_factory=CalendarRecord)
