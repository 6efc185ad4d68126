"""Render a consultation record as a compact passage for embedding."""

from __future__ import annotations

import datetime

from consult_assistant.errors import ValidationError
from consult_assistant.models.consultation import ConsultationRecord

SEGMENT_SEPARATOR = ". "


def _present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _format_time(value: datetime.datetime) -> str:
    # e.g. "Dec 24, 2025 04:00 PM"
    return value.strftime("%b %d, %Y %I:%M %p")


def _format_fee(amount: float, currency_symbol: str) -> str:
    if float(amount).is_integer():
        return f"{currency_symbol}{int(amount)}"
    return f"{currency_symbol}{amount:.2f}"


def serialize_record(record: ConsultationRecord, currency_symbol: str = "₹") -> str:
    """Render ``record`` as ``"Label: value"`` segments joined by ``". "``.

    Deterministic: the same record always yields the same string. Absent or
    blank fields are omitted. Segment order is fixed so the most identifying
    content comes first:

    1. identity: doctor, specialization, patient
    2. scheduling: scheduled time, duration, status
    3. billing: payment status, payment method, fee
    4. video-call link
    5. clinical: symptoms, diagnosis, prescription, doctor notes,
       patient notes, cancellation reason

    Raises:
        ValidationError: if ``id`` or ``doctor_name`` is missing.
    """
    if not _present(record.id):
        raise ValidationError("Consultation record has no id")
    if not _present(record.doctor_name):
        raise ValidationError(f"Consultation {record.id} has no doctor name")

    segments: list[tuple[str, object]] = [
        ("Doctor", record.doctor_name),
        ("Specialization", record.doctor_specialization),
        ("Patient", record.patient_name),
        (
            "Scheduled",
            _format_time(record.scheduled_time) if record.scheduled_time else None,
        ),
        ("Duration", f"{record.duration} minutes" if record.duration else None),
        ("Status", record.status),
        ("Payment Status", record.payment_status),
        ("Payment Method", record.payment_method),
        (
            "Fee",
            _format_fee(record.consultation_fee, currency_symbol)
            if record.consultation_fee is not None
            else None,
        ),
        ("Video Call Link", record.google_meet_link),
        ("Symptoms", record.symptoms),
        ("Diagnosis", record.diagnosis),
        ("Prescription", record.prescription),
        ("Doctor Notes", record.doctor_notes),
        ("Patient Notes", record.notes),
        ("Cancellation Reason", record.cancellation_reason),
    ]
    return SEGMENT_SEPARATOR.join(
        f"{label}: {str(value).strip()}" for label, value in segments if _present(value)
    )
