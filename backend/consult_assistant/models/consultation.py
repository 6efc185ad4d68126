"""Consultation records as read from the system of record."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ConsultationRecord(BaseModel):
    """One consultation, read-only from the assistant's point of view.

    Accepts both snake_case and the document store's camelCase field names
    (``doctorName``, ``scheduledTime``, ...). Only ``id`` is required here;
    the record serializer enforces the remaining identity fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    patient_id: str | None = None
    patient_name: str | None = None
    patient_age: int | None = None
    doctor_id: str | None = None
    doctor_name: str | None = None
    doctor_specialization: str | None = None
    scheduled_time: datetime.datetime | None = None
    duration: int | None = None
    status: str | None = None
    payment_status: str | None = None
    payment_method: str | None = None
    consultation_fee: float | None = None
    google_meet_link: str | None = None
    symptoms: str | None = None
    notes: str | None = None
    diagnosis: str | None = None
    prescription: str | None = None
    doctor_notes: str | None = None
    cancellation_reason: str | None = None
