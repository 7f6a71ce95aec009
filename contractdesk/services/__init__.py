"""Services package: all business logic lives here, never in routers.

Files:
  auth.py              Credential bridge (PIN login, session refresh, caller resolution)
  identity.py          Identity-provider (GoTrue) REST client
  contracts.py         Contract records under owner/admin rules
  document_sync.py     Contract to Sheet row and PDF on Drive
  google_auth.py       Google access-token acquisition
  google_workspace.py  Drive / Docs / Sheets REST client
  templates.py         Template plan resolver
  placeholders.py      Placeholder map builder
  pdf.py               PDF merge (PyMuPDF)

Rule: routers call services, services call repositories and upstream clients.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
