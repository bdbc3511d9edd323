"""
Employee Dashboard Backend — Employee Service Unit Tests
=========================================================

What:  Tests for EmployeeService business rules without a database.
How:   Mock AsyncSession; each test scripts the Result objects the service
       will see, in order.

What we test:
    ✅ Pagination parse-or-default and clamping
    ✅ get: active row found / not found
    ✅ create: required fields, duplicate email, constraint race, success
    ✅ update: presence semantics, duplicate email, nothing to update
    ✅ delete: not found vs already deleted vs success
    ✅ store failures wrapped in DatabaseError
"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions import (
    AlreadyDeletedError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.schemas.employee import EmployeeCreate, EmployeeUpdate
from app.services.employee_service import (
    EmployeeService,
    parse_positive_int,
    resolve_pagination,
)


def result_with(scalar=None, row=None, scalars=None):
    """A MagicMock shaped like a SQLAlchemy Result."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar.return_value = scalar
    result.one_or_none.return_value = row
    result.scalars.return_value.all.return_value = scalars or []
    return result


class TestPagination:
    """parse-or-default and clamping of page/limit."""

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 7), ("3", 3), (4, 4), ("abc", 7), ("0", 7), ("-2", 7), ("", 7)],
    )
    def test_parse_positive_int(self, raw, expected):
        assert parse_positive_int(raw, 7) == expected

    def test_limit_capped_at_max(self):
        assert resolve_pagination("2", "500", 10, 100) == (2, 100)

    def test_defaults(self):
        assert resolve_pagination(None, None, 10, 100) == (1, 10)


class TestEmployeeServiceList:

    def setup_method(self):
        self.service = EmployeeService(default_page_size=10, max_page_size=100)

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=[result_with(scalar=0), result_with(scalars=[])]
        )

        result = await self.service.list_employees(mock_db_session)

        assert result.data == []
        assert result.pagination.total_records == 0
        assert result.pagination.total_pages == 0
        assert result.pagination.current_page == 1
        assert result.pagination.limit == 10

    @pytest.mark.asyncio
    async def test_list_total_pages_rounds_up(self, mock_db_session, make_employee):
        rows = [make_employee(id=i, email=f"e{i}@acme.io") for i in (7, 6, 5)]
        mock_db_session.execute = AsyncMock(
            side_effect=[result_with(scalar=7), result_with(scalars=rows)]
        )

        result = await self.service.list_employees(mock_db_session, page="1", limit="3")

        assert [e.id for e in result.data] == [7, 6, 5]
        assert result.pagination.total_pages == 3
        assert result.pagination.total_records == 7

    @pytest.mark.asyncio
    async def test_list_search_is_parameterized(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=[result_with(scalar=0), result_with(scalars=[])]
        )

        await self.service.list_employees(mock_db_session, search="o'brien%")

        data_stmt = mock_db_session.execute.call_args_list[1].args[0]
        compiled = data_stmt.compile()
        assert "o'brien" not in str(compiled)
        assert any("o'brien" in str(v) for v in compiled.params.values())

    @pytest.mark.asyncio
    async def test_list_database_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(DatabaseError):
            await self.service.list_employees(mock_db_session)


class TestEmployeeServiceGet:

    def setup_method(self):
        self.service = EmployeeService()

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db_session, make_employee):
        mock_db_session.execute.return_value = result_with(scalar=make_employee(id=4))

        result = await self.service.get_employee(mock_db_session, 4)

        assert result.id == 4
        assert result.email == "ada@acme.io"
        assert result.is_active is True

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(scalar=None)

        with pytest.raises(NotFoundError):
            await self.service.get_employee(mock_db_session, 99)


class TestEmployeeServiceCreate:

    def setup_method(self):
        self.service = EmployeeService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "a@acme.io"},
            {"name": "Ada"},
            {"name": "   ", "email": "a@acme.io"},
            {"name": "Ada", "email": ""},
        ],
    )
    async def test_create_requires_name_and_email(self, mock_db_session, payload):
        with pytest.raises(ValidationError, match="Name and email are required"):
            await self.service.create_employee(mock_db_session, EmployeeCreate(**payload))

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_duplicate_email(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(scalar=12)

        with pytest.raises(ConflictError, match="Email already exists"):
            await self.service.create_employee(
                mock_db_session, EmployeeCreate(name="Ada", email="ada@acme.io")
            )

        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(scalar=None)

        async def fake_refresh(employee):
            employee.id = 42
            employee.created_at = datetime.now(timezone.utc)
            employee.updated_at = employee.created_at

        mock_db_session.refresh = AsyncMock(side_effect=fake_refresh)

        result = await self.service.create_employee(
            mock_db_session,
            EmployeeCreate(name="  Ada  ", email=" ada@acme.io ", position="", salary=Decimal("10")),
        )

        assert result.id == 42
        assert result.name == "Ada"
        assert result.email == "ada@acme.io"
        assert result.position is None
        assert result.department is None
        assert result.salary == Decimal("10")
        assert result.is_active is True
        mock_db_session.add.assert_called_once()
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_constraint_race_is_conflict(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(scalar=None)
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        )

        with pytest.raises(ConflictError):
            await self.service.create_employee(
                mock_db_session, EmployeeCreate(name="Ada", email="ada@acme.io")
            )

        mock_db_session.rollback.assert_awaited_once()


class TestEmployeeServiceUpdate:

    def setup_method(self):
        self.service = EmployeeService()

    def test_collect_changes_uses_presence_for_optional_fields(self):
        payload = EmployeeUpdate(name="", department=None, salary=Decimal("5"))

        changes = EmployeeService._collect_changes(payload)

        assert changes == [("department", None), ("salary", Decimal("5"))]

    def test_collect_changes_ignores_omitted_fields(self):
        changes = EmployeeService._collect_changes(EmployeeUpdate(position="Lead"))

        assert changes == [("position", "Lead")]

    def test_build_update_only_touches_supplied_columns(self):
        stmt = EmployeeService._build_update(5, [("position", "Lead")])

        params = stmt.compile().params
        assert params["position"] == "Lead"
        assert "updated_at" in params
        assert "name" not in params
        assert "email" not in params
        assert "salary" not in params

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(scalar=None)

        with pytest.raises(NotFoundError):
            await self.service.update_employee(
                mock_db_session, 3, EmployeeUpdate(position="Lead")
            )

    @pytest.mark.asyncio
    async def test_update_nothing_to_update(self, mock_db_session, make_employee):
        mock_db_session.execute.return_value = result_with(scalar=make_employee())

        with pytest.raises(ValidationError, match="No fields to update"):
            await self.service.update_employee(mock_db_session, 1, EmployeeUpdate())

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_email_taken_by_other_id(self, mock_db_session, make_employee):
        mock_db_session.execute = AsyncMock(
            side_effect=[result_with(scalar=make_employee()), result_with(scalar=2)]
        )

        with pytest.raises(ConflictError):
            await self.service.update_employee(
                mock_db_session, 1, EmployeeUpdate(email="taken@acme.io")
            )

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_success(self, mock_db_session, make_employee):
        updated = make_employee(position="Lead")
        mock_db_session.execute = AsyncMock(
            side_effect=[
                result_with(scalar=make_employee()),
                MagicMock(),
                result_with(scalar=updated),
            ]
        )

        result = await self.service.update_employee(
            mock_db_session, 1, EmployeeUpdate(position="Lead")
        )

        assert result.position == "Lead"
        assert result.name == "Ada Lovelace"
        mock_db_session.commit.assert_awaited_once()


class TestEmployeeServiceDelete:

    def setup_method(self):
        self.service = EmployeeService()

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(row=None)

        with pytest.raises(NotFoundError):
            await self.service.delete_employee(mock_db_session, 8)

    @pytest.mark.asyncio
    async def test_delete_already_deleted(self, mock_db_session):
        row = MagicMock(id=8, is_active=False)
        mock_db_session.execute.return_value = result_with(row=row)

        with pytest.raises(AlreadyDeletedError, match="already deleted"):
            await self.service.delete_employee(mock_db_session, 8)

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_success(self, mock_db_session):
        row = MagicMock(id=8, is_active=True)
        mock_db_session.execute = AsyncMock(side_effect=[result_with(row=row), MagicMock()])

        await self.service.delete_employee(mock_db_session, 8)

        assert mock_db_session.execute.await_count == 2
        update_params = mock_db_session.execute.call_args_list[1].args[0].compile().params
        assert update_params["is_active"] is False
        assert "updated_at" in update_params
        mock_db_session.commit.assert_awaited_once()
