"""
Field rules for the four entity kinds.
"""

from typing import Dict

from .resource_handler import ResourcePolicy

PATIENTS = ResourcePolicy(
    name="patient",
    plural="patients",
    collection="patients",
    required=("firstName", "lastName", "age", "phoneNumber"),
    optional_defaults={"ailment": "", "address": ""},
    reference_fields=("doctorId",),
    created_message="Patient created",
)

DOCTORS = ResourcePolicy(
    name="doctor",
    plural="doctors",
    collection="doctors",
    required=("name", "specialization", "phoneNumber"),
    optional_defaults={"department": ""},
    created_message="Doctor created",
)

DEPARTMENTS = ResourcePolicy(
    name="department",
    plural="departments",
    collection="departments",
    required=("name", "description", "floor", "headDoctor"),
    numeric_fields=("floor",),
    timestamps=True,
    created_message="Department created successfully",
)

APPOINTMENTS = ResourcePolicy(
    name="appointment",
    plural="appointments",
    collection="appointments",
    required=("appointmentDate", "appointmentTime", "reason", "status"),
    timestamps=True,
    created_message="Appointment created successfully",
)

POLICIES: Dict[str, ResourcePolicy] = {
    policy.plural: policy for policy in (PATIENTS, DOCTORS, DEPARTMENTS, APPOINTMENTS)
}