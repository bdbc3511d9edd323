"""
Employee Dashboard Backend — Employee Service (Business Logic)
===============================================================

What:  The five record operations: list/search/paginate, get, create,
       partial update and soft delete.
Why:   Keeps validation, uniqueness and soft-delete rules out of the routes,
       so they can be tested against a mocked session.
How:   Every statement is a SQLAlchemy expression with bound parameters;
       user input never becomes SQL text. Each mutation commits as one unit.
Who:   Called by app/routes/employees.py.

Visibility rules:
    - list, get and update only see rows with is_active = true
    - delete reads regardless of the flag so it can report "already deleted"
      instead of "not found"

Concurrency:
    The duplicate-email pre-check and the following write are separate
    statements. Two concurrent creates can both pass the pre-check; the
    UNIQUE constraint on employees.email rejects the second write, which is
    reported as a ConflictError like the pre-check would have been.
"""

import logging
import math
from typing import Any, List, Optional, Tuple, Union

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Update

from app.exceptions import (
    AlreadyDeletedError,
    ConflictError,
    DatabaseError,
    EmployeeDashboardError,
    NotFoundError,
    ValidationError,
)
from app.models.employee import Employee, utcnow
from app.schemas.employee import (
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeUpdate,
    PaginationMeta,
)

logger = logging.getLogger(__name__)

# Columns the search term is matched against (OR-ed together)
SEARCH_COLUMNS = (Employee.name, Employee.email, Employee.position, Employee.department)

# Optional columns updated whenever their key is present, even when null
NULLABLE_UPDATE_FIELDS = ("position", "department", "salary")


def parse_positive_int(value: Union[int, str, None], default: int) -> int:
    """
    Parse-or-default for pagination parameters.

    Anything that is not an integer >= 1 ("abc", "0", "-3", None) yields
    `default`.
    """
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def resolve_pagination(
    page: Union[int, str, None],
    limit: Union[int, str, None],
    default_limit: int,
    max_limit: int,
) -> Tuple[int, int]:
    """Returns a (page, limit) pair with page >= 1 and 1 <= limit <= max_limit."""
    resolved_page = parse_positive_int(page, 1)
    resolved_limit = min(parse_positive_int(limit, default_limit), max_limit)
    return resolved_page, resolved_limit


class EmployeeService:
    """
    Business logic layer for employee records.

    Stateless apart from pagination settings; the session is passed into
    every call so each request keeps its own transaction. create_app()
    builds one instance per app from its Settings.
    """

    def __init__(self, default_page_size: int = 10, max_page_size: int = 100):
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    # ── List ──────────────────────────────────────────────────────────────

    async def list_employees(
        self,
        db: AsyncSession,
        page: Union[int, str, None] = None,
        limit: Union[int, str, None] = None,
        search: Optional[str] = None,
    ) -> EmployeeListResponse:
        """
        Return one page of active employees, newest id first.

        Query plan:
            SELECT count(*) FROM employees WHERE is_active [AND (<search>)]
            SELECT ... WHERE is_active [AND (<search>)]
                ORDER BY id DESC LIMIT :limit OFFSET :offset

        A non-empty `search` matches rows whose name, email, position or
        department contains it, case-insensitively. LIKE wildcards in the
        term are escaped, so "50%" means the literal text.
        """
        page, limit = resolve_pagination(
            page, limit, self.default_page_size, self.max_page_size
        )
        offset = (page - 1) * limit

        filters = [Employee.is_active.is_(True)]
        if search:
            filters.append(
                or_(*(column.icontains(search, autoescape=True) for column in SEARCH_COLUMNS))
            )

        try:
            count_result = await db.execute(
                select(func.count()).select_from(Employee).where(*filters)
            )
            total_records = count_result.scalar() or 0

            result = await db.execute(
                select(Employee)
                .where(*filters)
                .order_by(Employee.id.desc())
                .limit(limit)
                .offset(offset)
            )
            employees = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing employees: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve employees. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return EmployeeListResponse(
            data=[EmployeeResponse.model_validate(e) for e in employees],
            pagination=PaginationMeta(
                current_page=page,
                total_pages=math.ceil(total_records / limit),
                total_records=total_records,
                limit=limit,
            ),
        )

    # ── Get ───────────────────────────────────────────────────────────────

    async def get_employee(self, db: AsyncSession, employee_id: int) -> EmployeeResponse:
        """
        Fetch one active employee.

        Raises:
            NotFoundError: id unknown or soft-deleted (the caller cannot tell which)
        """
        try:
            employee = await self._get_active(db, employee_id)
        except EmployeeDashboardError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching employee %s: %s", employee_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the employee. Please try again.",
                context={"employee_id": employee_id},
            )
        return EmployeeResponse.model_validate(employee)

    # ── Create ────────────────────────────────────────────────────────────

    async def create_employee(
        self, db: AsyncSession, payload: EmployeeCreate
    ) -> EmployeeResponse:
        """
        Insert a new active employee.

        Workflow:
            1. name and email must be non-blank after trimming → else 400
            2. email must not be used by ANY row, active or not → else 409
            3. INSERT, commit, reload the stored row

        Empty optional strings are stored as NULL.

        Raises:
            ValidationError, ConflictError, DatabaseError
        """
        name = (payload.name or "").strip()
        email = (payload.email or "").strip()
        if not name or not email:
            raise ValidationError(message="Name and email are required")

        try:
            existing = await db.execute(select(Employee.id).where(Employee.email == email))
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(context={"email": email})

            employee = Employee(
                name=name,
                email=email,
                position=payload.position or None,
                department=payload.department or None,
                salary=payload.salary,
                is_active=True,
            )
            db.add(employee)
            await db.flush()
            await db.commit()
            await db.refresh(employee)

        except EmployeeDashboardError:
            raise
        except IntegrityError:
            # Lost the race against a concurrent create with the same email
            await db.rollback()
            logger.warning("Unique constraint rejected email on create")
            raise ConflictError(context={"email": email})
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating employee: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the employee. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Employee %s created", employee.id)
        return EmployeeResponse.model_validate(employee)

    # ── Update ────────────────────────────────────────────────────────────

    async def update_employee(
        self, db: AsyncSession, employee_id: int, payload: EmployeeUpdate
    ) -> EmployeeResponse:
        """
        Apply a partial update to an active employee.

        Field rules:
            name, email                    → applied when non-blank
            position, department, salary   → applied when the key is present,
                                             so an explicit null clears them

        Order of checks: the row must exist and be active (404), a supplied
        email must not belong to another id (409), and at least one field
        must be applicable (400).
        """
        try:
            await self._get_active(db, employee_id)

            changes = self._collect_changes(payload)
            email = dict(changes).get("email")
            if email is not None:
                clash = await db.execute(
                    select(Employee.id).where(
                        Employee.email == email, Employee.id != employee_id
                    )
                )
                if clash.scalar_one_or_none() is not None:
                    raise ConflictError(context={"email": email})

            if not changes:
                raise ValidationError(message="No fields to update")

            await db.execute(self._build_update(employee_id, changes))
            await db.commit()
            employee = await self._get_active(db, employee_id, populate_existing=True)

        except EmployeeDashboardError:
            raise
        except IntegrityError:
            await db.rollback()
            logger.warning("Unique constraint rejected email on update of %s", employee_id)
            raise ConflictError()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Database error updating employee %s: %s", employee_id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not update the employee. Please try again.",
                context={"employee_id": employee_id},
            )

        logger.info(
            "Employee %s updated (%s)", employee_id, ", ".join(field for field, _ in changes)
        )
        return EmployeeResponse.model_validate(employee)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_employee(self, db: AsyncSession, employee_id: int) -> None:
        """
        Soft-delete an employee.

        Raises:
            NotFoundError:       no row with this id at all
            AlreadyDeletedError: the row exists but is already inactive
        """
        try:
            result = await db.execute(
                select(Employee.id, Employee.is_active).where(Employee.id == employee_id)
            )
            row = result.one_or_none()
            if row is None:
                raise NotFoundError(resource_id=employee_id)
            if not row.is_active:
                raise AlreadyDeletedError(context={"employee_id": employee_id})

            await db.execute(
                update(Employee)
                .where(Employee.id == employee_id)
                .values(is_active=False, updated_at=utcnow())
            )
            await db.commit()

        except EmployeeDashboardError:
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Database error deleting employee %s: %s", employee_id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not delete the employee. Please try again.",
                context={"employee_id": employee_id},
            )

        logger.info("Employee %s soft-deleted", employee_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_active(
        self, db: AsyncSession, employee_id: int, populate_existing: bool = False
    ) -> Employee:
        stmt = select(Employee).where(
            Employee.id == employee_id, Employee.is_active.is_(True)
        )
        if populate_existing:
            stmt = stmt.execution_options(populate_existing=True)
        result = await db.execute(stmt)
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundError(resource_id=employee_id)
        return employee

    @staticmethod
    def _collect_changes(payload: EmployeeUpdate) -> List[Tuple[str, Any]]:
        """Accumulates (column, value) pairs from explicit presence checks."""
        changes: List[Tuple[str, Any]] = []

        name = (payload.name or "").strip()
        if name:
            changes.append(("name", name))
        email = (payload.email or "").strip()
        if email:
            changes.append(("email", email))

        supplied = payload.model_fields_set
        for field in NULLABLE_UPDATE_FIELDS:
            if field in supplied:
                changes.append((field, getattr(payload, field)))
        return changes

    @staticmethod
    def _build_update(employee_id: int, changes: List[Tuple[str, Any]]) -> Update:
        """Renders the collected changes as a single parameterized UPDATE."""
        values = dict(changes)
        values["updated_at"] = utcnow()
        return (
            update(Employee)
            .where(Employee.id == employee_id, Employee.is_active.is_(True))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
