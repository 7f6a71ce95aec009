"""Pydantic schemas package.

Folder intent:
  common.py    CamelModel / RecordModel bases + HealthResponse
  auth.py      login, refresh and session payloads
  contract.py  contract record DTOs
  employee.py  admin employee listing
  sync.py      Google sync request/response
"""
