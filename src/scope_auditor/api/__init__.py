"""HTTP API for scope-auditor.

Contains:
- router.py   FastAPI routes over the audit core
- schemas.py  response schemas combining core results
"""

__all__: list[str] = []
