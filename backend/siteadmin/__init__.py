"""
SiteAdmin Backend - Application Package
=======================================

What: Content API for a small company website. Page content (home services,
      staff, services, projects, contact details) lives in flat JSON files that
      an admin UI reads and overwrites; the API also accepts image uploads,
      forwards contact-form mail and checks the shared admin password.
Who:  Imported by uvicorn (`siteadmin.main:app`), `python -m siteadmin`,
      the scripts/ directory and the test suite.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Validation + Request Schemas      │  ← shape checks before any side effect
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← store, upload, mail, auth
    ├─────────────────────────────────────┤
    │      Flat JSON files on disk        │  ← one file per resource
    └─────────────────────────────────────┘

    Routes never touch the filesystem or SMTP directly; they resolve the
    services built by create_app() through siteadmin.dependencies.
"""

__version__ = "1.0.0"
