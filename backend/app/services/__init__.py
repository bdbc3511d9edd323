# Services package init
"""
Employee Dashboard Backend — Services Layer
============================================

Business logic between routes (HTTP) and the database.

Service Inventory:
    - EmployeeService: list/search/paginate, get, create, partial update,
      soft delete over the employees table

Services receive the AsyncSession per call and raise typed exceptions from
app.exceptions; they never build HTTP responses.
"""
