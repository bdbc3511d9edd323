"""
Employee Dashboard Backend — Employee Route Handlers
=====================================================

What:  The five /employees endpoints.
Why:   Entry point for the form/list UI.
How:   Extract parameters, delegate to EmployeeService, wrap the result in
       the {success, message, data} envelope. Errors are raised, never
       caught here; main.py renders them.

Authentication is not declared per route: BearerTokenMiddleware guards the
whole /employees prefix before any handler runs.

Route Inventory:
    GET    /employees            list + search + paginate
    GET    /employees/{id}       single active employee
    POST   /employees            create (201)
    PUT    /employees/{id}       partial update
    DELETE /employees/{id}       soft delete

The collection routes also answer on /employees/ directly instead of
redirecting. Path ids outside 1..2^31-1 are rejected with 400 before they
reach the INTEGER column.
"""

import logging

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.employee import (
    EmployeeCreate,
    EmployeeEnvelope,
    EmployeeListResponse,
    EmployeeUpdate,
    ErrorResponse,
    MessageResponse,
)
from app.services.employee_service import EmployeeService

logger = logging.getLogger(__name__)

# Largest value the employees.id INTEGER column can hold
MAX_EMPLOYEE_ID = 2_147_483_647

router = APIRouter(
    prefix="/employees",
    tags=["Employees"],
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
)


def get_employee_service(request: Request) -> EmployeeService:
    return request.app.state.employee_service


@router.get("/", response_model=EmployeeListResponse, include_in_schema=False)
@router.get(
    "",
    response_model=EmployeeListResponse,
    summary="List active employees",
    description=(
        "Returns active employees ordered by id descending. `search` matches "
        "name, email, position or department case-insensitively. Invalid or "
        "non-positive `page`/`limit` fall back to their defaults."
    ),
)
async def list_employees(
    # Plain strings: "abc" or "0" must fall back to defaults, not fail with 400
    page: str | None = Query(default=None, description="Page number, 1-based"),
    limit: str | None = Query(default=None, description="Page size (capped at MAX_PAGE_SIZE)"),
    search: str = Query(default="", description="Case-insensitive substring filter"),
    db: AsyncSession = Depends(get_db_session),
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeListResponse:
    return await service.list_employees(
        db=db, page=page, limit=limit, search=search
    )


@router.get(
    "/{employee_id}",
    response_model=EmployeeEnvelope,
    responses={404: {"description": "Employee not found", "model": ErrorResponse}},
    summary="Get an active employee by id",
)
async def get_employee(
    employee_id: int = Path(ge=1, le=MAX_EMPLOYEE_ID, description="Employee id"),
    db: AsyncSession = Depends(get_db_session),
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeEnvelope:
    employee = await service.get_employee(db=db, employee_id=employee_id)
    return EmployeeEnvelope(data=employee)


@router.post(
    "/",
    response_model=EmployeeEnvelope,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
@router.post(
    "",
    response_model=EmployeeEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Name or email missing, or malformed body", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Create an employee",
)
async def create_employee(
    payload: EmployeeCreate,
    db: AsyncSession = Depends(get_db_session),
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeEnvelope:
    """
    Create an employee. `name` and `email` are required; `position`,
    `department` and `salary` are optional and stored as null when absent.
    """
    employee = await service.create_employee(db=db, payload=payload)
    return EmployeeEnvelope(message="Employee created successfully", data=employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeEnvelope,
    responses={
        400: {"description": "No fields to update, or malformed body", "model": ErrorResponse},
        404: {"description": "Employee not found", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Partially update an employee",
)
async def update_employee(
    payload: EmployeeUpdate,
    employee_id: int = Path(ge=1, le=MAX_EMPLOYEE_ID, description="Employee id"),
    db: AsyncSession = Depends(get_db_session),
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeEnvelope:
    """
    Only supplied fields change. Sending `"position": null` clears the
    position; omitting it leaves it untouched. Blank `name`/`email` are ignored.
    """
    employee = await service.update_employee(
        db=db, employee_id=employee_id, payload=payload
    )
    return EmployeeEnvelope(message="Employee updated successfully", data=employee)


@router.delete(
    "/{employee_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Employee already deleted", "model": ErrorResponse},
        404: {"description": "Employee not found", "model": ErrorResponse},
    },
    summary="Soft-delete an employee",
)
async def delete_employee(
    employee_id: int = Path(ge=1, le=MAX_EMPLOYEE_ID, description="Employee id"),
    db: AsyncSession = Depends(get_db_session),
    service: EmployeeService = Depends(get_employee_service),
) -> MessageResponse:
    await service.delete_employee(db=db, employee_id=employee_id)
    return MessageResponse(message="Employee deleted successfully")
