"""Routers package: HTTP endpoint definitions.

Files:
  auth.py          /auth/login, /auth/refresh
  integrations.py  /integrations/google/sync
  contracts.py     /contracts CRUD and /contracts/{id}/pdf
  employees.py     /employees (admin)
"""
