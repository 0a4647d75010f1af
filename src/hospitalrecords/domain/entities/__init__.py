"""Record types for the stored document kinds."""

from .records import (
    AppointmentRecord,
    DepartmentRecord,
    DoctorRecord,
    DocumentRecord,
    PatientRecord,
)

__all__ = [
    "DocumentRecord",
    "PatientRecord",
    "DoctorRecord",
    "DepartmentRecord",
    "AppointmentRecord",
]
