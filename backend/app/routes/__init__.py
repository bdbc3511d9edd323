# Routes package init
"""
Employee Dashboard Backend — API Routes Package
================================================

Route Inventory:
    - health.py:     GET /                  (service identity, public)
                     GET /health            (database probe, public)
    - employees.py:  /employees CRUD        (bearer token required)

Routes stay thin: extract parameters, call EmployeeService, wrap the result.
"""
