"""
Record types for the four document kinds.

Documents are schema-less in the store, so the records allow extra fields.
They describe the fields each entity names and are used for request and
response documentation.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class DocumentRecord(BaseModel):
    """Fields every stored document has."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id", description="Store-assigned identifier")


class PatientRecord(DocumentRecord):
    firstName: str = Field(..., examples=["Ada"])
    lastName: str = Field(..., examples=["Obi"])
    age: Union[int, str] = Field(..., examples=[34])
    phoneNumber: str = Field(..., examples=["+2348012345678"])
    doctorId: Optional[str] = Field(None, description="Identifier of the attending doctor")
    ailment: str = Field("", examples=["Hypertension"])
    address: str = Field("", examples=["12 Marina Road, Lagos"])


class DoctorRecord(DocumentRecord):
    name: str = Field(..., examples=["Dr. Sarah Olu"])
    specialization: str = Field(..., examples=["Cardiology"])
    phoneNumber: str = Field(..., examples=["+2348098765432"])
    department: str = Field("", examples=["Cardiology"])


class DepartmentRecord(DocumentRecord):
    name: str = Field(..., examples=["Cardiology"])
    description: str = Field(..., examples=["Handles heart-related illnesses and treatments"])
    floor: Union[int, float] = Field(..., examples=[2])
    headDoctor: str = Field(..., examples=["Dr. Sarah Olu"])
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class AppointmentRecord(DocumentRecord):
    appointmentDate: str = Field(..., examples=["2025-03-14"])
    appointmentTime: str = Field(..., examples=["09:30"])
    reason: str = Field(..., examples=["Follow-up consultation"])
    status: str = Field(..., examples=["scheduled"])
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
