"""
CRUD routers for the four record collections.

Every collection gets the same five routes from ``build_resource_router``.
Reads are public; create, update and delete require a logged-in session.
"""

from typing import List, Type

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ...application.resource_handler import ResourceHandler, ResourcePolicy
from ...application.resources import APPOINTMENTS, DEPARTMENTS, DOCTORS, PATIENTS
from ...domain.entities.records import (
    AppointmentRecord,
    DepartmentRecord,
    DoctorRecord,
    DocumentRecord,
    PatientRecord,
)
from ..deps import DocumentStoreDep, JSONPayloadDep, get_current_user
from ..schemas.common import CreatedResponse, ErrorResponse, MessageResponse
from ..utils.responses import to_json

ID_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid ID format"},
    404: {"model": ErrorResponse, "description": "Not found"},
    500: {"model": ErrorResponse, "description": "Server error"},
}
AUTH_ERRORS = {401: {"model": ErrorResponse, "description": "Login required"}}


def _handler_provider(policy: ResourcePolicy):
    def get_handler(store: DocumentStoreDep) -> ResourceHandler:
        return ResourceHandler(policy, store)

    return get_handler


def build_resource_router(policy: ResourcePolicy, record: Type[DocumentRecord]) -> APIRouter:
    """Create the list/get/create/update/delete routes for one collection."""
    tag = policy.plural.capitalize()
    router = APIRouter(prefix=f"/{policy.plural}", tags=[tag])
    get_handler = _handler_provider(policy)
    gated = [Depends(get_current_user)]

    @router.get(
        "",
        summary=f"Get all {policy.plural}",
        responses={200: {"model": List[record]}, 500: ID_ERRORS[500]},
    )
    async def list_documents(handler: ResourceHandler = Depends(get_handler)):
        documents = await handler.list()
        return JSONResponse(status_code=status.HTTP_200_OK, content=to_json(documents))

    @router.get(
        "/{document_id}",
        summary=f"Get a {policy.name} by ID",
        responses={200: {"model": record}, **ID_ERRORS},
    )
    async def get_document(document_id: str, handler: ResourceHandler = Depends(get_handler)):
        document = await handler.get(document_id)
        return JSONResponse(status_code=status.HTTP_200_OK, content=to_json(document))

    @router.post(
        "",
        summary=f"Create a new {policy.name}",
        status_code=status.HTTP_201_CREATED,
        response_model=CreatedResponse,
        dependencies=gated,
        responses={
            400: {"model": ErrorResponse, "description": "Missing required fields"},
            **AUTH_ERRORS,
            500: ID_ERRORS[500],
        },
        openapi_extra={"requestBody": {"content": {"application/json": {"schema": record.model_json_schema(by_alias=True)}}}},
    )
    async def create_document(
        payload: JSONPayloadDep,
        handler: ResourceHandler = Depends(get_handler),
    ):
        inserted_id = await handler.create(payload)
        message = policy.created_message or f"{policy.label} created"
        return CreatedResponse(message=message, id=str(inserted_id))

    @router.put(
        "/{document_id}",
        summary=f"Update a {policy.name}",
        response_model=MessageResponse,
        dependencies=gated,
        responses={**ID_ERRORS, **AUTH_ERRORS},
        openapi_extra={"requestBody": {"content": {"application/json": {"schema": {"type": "object", "title": f"{policy.label} fields to change"}}}}},
    )
    async def update_document(
        document_id: str,
        payload: JSONPayloadDep,
        handler: ResourceHandler = Depends(get_handler),
    ):
        await handler.update(document_id, payload)
        return MessageResponse(message=f"{policy.label} updated successfully")

    @router.delete(
        "/{document_id}",
        summary=f"Delete a {policy.name}",
        response_model=MessageResponse,
        dependencies=gated,
        responses={**ID_ERRORS, **AUTH_ERRORS},
    )
    async def delete_document(document_id: str, handler: ResourceHandler = Depends(get_handler)):
        await handler.delete(document_id)
        return MessageResponse(message=f"{policy.label} deleted successfully")

    return router


patients = build_resource_router(PATIENTS, PatientRecord)
doctors = build_resource_router(DOCTORS, DoctorRecord)
departments = build_resource_router(DEPARTMENTS, DepartmentRecord)
appointments = build_resource_router(APPOINTMENTS, AppointmentRecord)

routers = [patients, doctors, departments, appointments]
