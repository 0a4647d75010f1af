"""
Unit tests for the generic resource handler and its field rules.
"""

import asyncio

import pytest
from bson import ObjectId

from hospitalrecords.application.resource_handler import (
    ResourceHandler,
    coerce_number,
    invalid_keys,
    is_missing,
    strip_fields,
)
from hospitalrecords.application.resources import APPOINTMENTS, DEPARTMENTS, DOCTORS, PATIENTS, POLICIES
from hospitalrecords.domain.errors import (
    DocumentNotFoundError,
    EmptyUpdateError,
    InvalidIdentifierError,
    StoreError,
    ValidationFailedError,
)

PATIENT = {"firstName": "Ada", "lastName": "Obi", "age": 34, "phoneNumber": "08012345678"}
DEPARTMENT = {"name": "Radiology", "description": "Imaging", "floor": 1, "headDoctor": "Dr. Eze"}


def run(coroutine):
    return asyncio.run(coroutine)


def test_policies_cover_every_collection():
    assert set(POLICIES) == {"patients", "doctors", "departments", "appointments"}
    assert PATIENTS.immutable_fields == {"_id"}
    assert DOCTORS.immutable_fields == {"_id"}
    assert DEPARTMENTS.immutable_fields == {"_id", "createdAt", "updatedAt"}
    assert APPOINTMENTS.immutable_fields == {"_id", "createdAt", "updatedAt"}


def test_strip_fields_leaves_input_untouched():
    payload = {"_id": "x", "createdAt": "y", "name": "z"}
    assert strip_fields(payload, DEPARTMENTS.immutable_fields) == {"name": "z"}
    assert strip_fields(payload, PATIENTS.immutable_fields) == {"createdAt": "y", "name": "z"}
    assert "_id" in payload


@pytest.mark.parametrize("value", [None, "", "   "])
def test_is_missing(value):
    assert is_missing(value)


@pytest.mark.parametrize("value", [0, False, "0", [], "x"])
def test_is_not_missing(value):
    assert not is_missing(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (3, 3),
        ("3", 3),
        ("3.0", 3),
        (2.5, 2.5),
        ("-1", -1),
        (0, 0),
        ("9007199254740993", 9007199254740993),
        (2 ** 63 - 1, 2 ** 63 - 1),
        (1e300, 1e300),
        (2.0 ** 63, 2.0 ** 63),
    ],
)
def test_coerce_number(value, expected):
    result = coerce_number(value)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize(
    "value", ["ground", "", None, True, "nan", "inf", [1], 2 ** 63, "-9223372036854775809"]
)
def test_coerce_number_rejects(value):
    with pytest.raises((TypeError, ValueError)):
        coerce_number(value)


def test_create_keeps_only_declared_fields(store, database):
    handler = ResourceHandler(PATIENTS, store)
    inserted = run(handler.create({**PATIENT, "ailment": "  ", "insurance": "gold"}))

    stored = database["patients"].documents[0]
    assert stored["_id"] == inserted
    assert set(stored) == {"_id", *PATIENT, "ailment", "address", "doctorId"}
    assert stored["ailment"] == ""
    assert stored["doctorId"] is None


def test_create_accepts_zero_as_present(store):
    handler = ResourceHandler(PATIENTS, store)
    document_id = run(handler.create({**PATIENT, "age": 0}))
    assert run(handler.get(str(document_id)))["age"] == 0


def test_create_reports_missing_fields(store, database):
    handler = ResourceHandler(PATIENTS, store)
    with pytest.raises(ValidationFailedError) as exc_info:
        run(handler.create({"firstName": "Ada", "lastName": "", "age": None}))

    assert exc_info.value.details["fields"] == ["lastName", "age", "phoneNumber"]
    assert exc_info.value.message == "firstName, lastName, age, phoneNumber are required"
    assert database["patients"].documents == []


def test_create_converts_doctor_reference(store, database):
    handler = ResourceHandler(PATIENTS, store)
    doctor_id = str(ObjectId())
    run(handler.create({**PATIENT, "doctorId": doctor_id}))
    assert database["patients"].documents[0]["doctorId"] == ObjectId(doctor_id)


def test_create_rejects_malformed_doctor_reference(store, database):
    handler = ResourceHandler(PATIENTS, store)
    with pytest.raises(InvalidIdentifierError) as exc_info:
        run(handler.create({**PATIENT, "doctorId": "12345"}))
    assert exc_info.value.message == "Invalid doctorId format"
    assert database["patients"].documents == []


def test_create_stamps_timestamps(store, database):
    handler = ResourceHandler(DEPARTMENTS, store)
    run(handler.create({**DEPARTMENT, "floor": "1"}))
    stored = database["departments"].documents[0]
    assert stored["floor"] == 1
    assert stored["createdAt"] == stored["updatedAt"]
    assert stored["createdAt"].tzinfo is not None
    assert stored["createdAt"].microsecond % 1000 == 0


def test_update_refreshes_updated_at_only(store, database):
    handler = ResourceHandler(DEPARTMENTS, store)
    document_id = str(run(handler.create(DEPARTMENT)))
    created_at = database["departments"].documents[0]["createdAt"]

    run(handler.update(document_id, {"floor": 2.5, "createdAt": "forged"}))

    stored = database["departments"].documents[0]
    assert stored["floor"] == 2.5
    assert stored["createdAt"] == created_at
    assert stored["updatedAt"] >= created_at


def test_update_without_timestamps_leaves_them_absent(store, database):
    handler = ResourceHandler(DOCTORS, store)
    document_id = str(run(handler.create({"name": "Dr. Ibe", "specialization": "ENT", "phoneNumber": "1"})))
    run(handler.update(document_id, {"department": "Surgery"}))
    assert "updatedAt" not in database["doctors"].documents[0]


def test_update_rejects_empty_patch(store):
    handler = ResourceHandler(APPOINTMENTS, store)
    with pytest.raises(EmptyUpdateError):
        run(handler.update(str(ObjectId()), {"_id": "x", "updatedAt": "y"}))


def test_update_checks_identifier_first(store):
    handler = ResourceHandler(DOCTORS, store)
    with pytest.raises(InvalidIdentifierError) as exc_info:
        run(handler.update("nope", {}))
    assert exc_info.value.message == "Invalid doctor ID format"


def test_missing_documents_raise_not_found(store):
    handler = ResourceHandler(APPOINTMENTS, store)
    unknown = str(ObjectId())
    for operation in (handler.get(unknown), handler.update(unknown, {"status": "done"}), handler.delete(unknown)):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            run(operation)
        assert exc_info.value.message == "Appointment not found"
        assert exc_info.value.http_status == 404


def test_store_failures_are_wrapped(broken_store, caplog):
    handler = ResourceHandler(DOCTORS, broken_store)

    with pytest.raises(StoreError) as exc_info:
        run(handler.list())
    assert exc_info.value.message == "Failed to fetch doctors"
    assert exc_info.value.http_status == 500
    assert "No servers available" in caplog.text

    with pytest.raises(StoreError) as exc_info:
        run(handler.delete(str(ObjectId())))
    assert exc_info.value.message == "Failed to delete doctor"


def test_invalid_keys():
    patch = {"": 1, "$inc": 2, "a.b": 3, "_id.x": 4, "nul\0": 5, "status": 6, "doctor_id": 7}
    assert invalid_keys(patch) == ["", "$inc", "a.b", "_id.x", "nul\0"]


def test_update_rejects_operator_keys_before_store(store, database):
    handler = ResourceHandler(DOCTORS, store)
    document_id = str(run(handler.create({"name": "Dr. Ibe", "specialization": "ENT", "phoneNumber": "1"})))

    with pytest.raises(ValidationFailedError) as exc_info:
        run(handler.update(document_id, {"$where": "1", "_id": document_id}))
    assert exc_info.value.details["fields"] == ["$where"]
    assert "$where" not in database["doctors"].documents[0]


def test_create_stores_large_float_floor(store, database):
    handler = ResourceHandler(DEPARTMENTS, store)
    run(handler.create({**DEPARTMENT, "floor": 1e300}))
    assert database["departments"].documents[0]["floor"] == 1e300


def test_create_rejects_values_beyond_int64(store, database):
    handler = ResourceHandler(PATIENTS, store)
    with pytest.raises(ValidationFailedError) as exc_info:
        run(handler.create({**PATIENT, "age": 2 ** 64}))
    assert exc_info.value.details["fields"] == ["age"]
    assert database["patients"].documents == []
