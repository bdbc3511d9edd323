"""
Employee Dashboard Backend — Employee SQLAlchemy Model
=======================================================

What:  ORM model representing the `employees` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by EmployeeService for CRUD operations and by Alembic for schema management.

Table Design:
    - Integer surrogate key assigned by the store, never reused
    - email carries a UNIQUE constraint; the service pre-checks as well,
      but only the constraint closes the concurrent-create window
    - is_active implements soft delete; rows are never physically removed
    - Timestamps are timezone-aware and set from Python so that every
      mutation, including soft delete, moves updated_at forward
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    """
    An employee record.

    Lifecycle:
        1. Created active by POST /employees (store assigns id)
        2. Patched field-by-field by PUT /employees/{id}
        3. Soft-deleted by DELETE /employees/{id} (is_active = false), terminal

    Query Patterns:
        - List: WHERE is_active ORDER BY id DESC LIMIT/OFFSET
        - Duplicate check: WHERE email = :email → unique index lookup
    """

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Unique across all rows, including soft-deleted ones",
    )

    position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # NUMERIC(12, 2): exact money arithmetic, no float rounding
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_employees_is_active", "is_active"),
        CheckConstraint("salary IS NULL OR salary >= 0", name="ck_employees_salary_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<Employee(id={self.id}, email='{self.email}', "
            f"is_active={self.is_active})>"
        )
