"""Pydantic view models for API payloads.

The backend owns the authoritative records; these are read-only projections
built from its JSON, normalized so both appointment views share one type.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Any, Dict

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from medibook import config


class Role(str, Enum):
    """Account roles, one login tab each."""
    PATIENT = "patient"
    DOCTOR = "doctor"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class AppointmentStatus(str, Enum):
    """
    Closed set of appointment statuses.

    The patient API spells the completed state COMPLETE while the doctor API
    spells it COMPLETED; both parse to COMPLETED here.
    """
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: Any) -> "AppointmentStatus":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        if normalized == "COMPLETE":
            return cls.COMPLETED
        return cls(normalized)

    @property
    def is_terminal(self) -> bool:
        return self is not AppointmentStatus.PENDING

    def patient_wire(self) -> str:
        """Spelling the patient endpoints expect."""
        if self is AppointmentStatus.COMPLETED:
            return config.PATIENT_COMPLETED_STATUS
        return self.value

    def doctor_wire(self) -> str:
        """Spelling the doctor endpoints expect."""
        if self is AppointmentStatus.COMPLETED:
            return config.DOCTOR_COMPLETED_STATUS
        return self.value


def is_terminal(status: AppointmentStatus) -> bool:
    """No client-initiated transition is offered out of a terminal status."""
    return AppointmentStatus.parse(status).is_terminal


def _lift_mongo_id(data: Any) -> Any:
    """Accept `_id` where the API sends Mongo-style identifiers."""
    if isinstance(data, dict) and "id" not in data and "_id" in data:
        data = {**data, "id": data["_id"]}
    return data


class User(BaseModel):
    """Authenticated identity as returned by /auth/login."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    role: Role
    email: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_id(cls, data):
        return _lift_mongo_id(data)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v)

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, v):
        return Role.parse(v)


class Doctor(BaseModel):
    """Doctor directory entry."""
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str
    specialization: str = ""
    photo_url: Optional[str] = None
    rating: Optional[float] = None
    experience: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_id(cls, data):
        return _lift_mongo_id(data)

    @field_validator("id", "experience", mode="before")
    @classmethod
    def coerce_str(cls, v):
        return "" if v is None else str(v)


def _parse_instant(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None


def _local(instant: datetime) -> datetime:
    return instant.astimezone() if instant.tzinfo else instant


def format_time(value: str) -> str:
    """Local clock time of an ISO instant, e.g. '02:30 PM'."""
    instant = _parse_instant(value)
    if instant is None:
        return ""
    return _local(instant).strftime("%I:%M %p")


def format_date(value: Optional[str]) -> str:
    """Local calendar date of an ISO instant, or '' if it cannot be parsed."""
    instant = _parse_instant(value) if value else None
    if instant is None:
        return ""
    return _local(instant).strftime("%Y-%m-%d")


class Appointment(BaseModel):
    """Appointment card as seen by either the patient or the doctor."""
    model_config = ConfigDict(extra="ignore")

    id: str
    counterparty_name: str
    counterparty_detail: str
    date: str
    time: str
    reason: str
    status: AppointmentStatus
    booked_at: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v):
        return AppointmentStatus.parse(v)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def with_status(self, status: AppointmentStatus) -> "Appointment":
        """Copy with a new status; the original entry is left untouched."""
        return self.model_copy(update={"status": AppointmentStatus.parse(status)})

    @classmethod
    def from_patient_row(cls, row: Dict[str, Any]) -> "Appointment":
        """Map a /appointments/patient row (doctor is the counterparty)."""
        doctor = row.get("doctor") or {}
        raw_date = row.get("date") or ""
        return cls(
            id=str(row.get("_id") or row.get("id") or ""),
            counterparty_name=doctor.get("name") or "Unknown Doctor",
            counterparty_detail=doctor.get("specialization") or "N/A",
            date=raw_date.split("T")[0],
            time=format_time(raw_date),
            reason=row.get("reason") or "",
            status=row.get("status"),
            booked_at=row.get("createdAt"),
        )

    @classmethod
    def from_doctor_row(cls, row: Dict[str, Any]) -> "Appointment":
        """Map a /appointments/doctor row (patient is the counterparty)."""
        patient = row.get("patient") or {}
        raw_date = row.get("date") or ""
        return cls(
            id=str(row.get("id") or row.get("_id") or ""),
            counterparty_name=patient.get("name") or "Unknown",
            counterparty_detail=(
                f"Age: {patient.get('age') or 0} • {patient.get('phone') or 'N/A'}"
            ),
            date=format_date(raw_date) or raw_date.split("T")[0],
            time=format_time(raw_date),
            reason=row.get("reason") or "N/A",
            status=str(row.get("status", "")).upper(),
            booked_at=row.get("createdAt"),
        )
