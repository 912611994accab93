"""
Background Tasks Package

Contains Celery tasks for async processing:
- audit_tasks: SEO audit submission and execution
"""

from app.tasks.audit_tasks import run_audit, submit_audit

__all__ = ["run_audit", "submit_audit"]
