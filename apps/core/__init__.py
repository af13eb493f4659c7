"""
Core app - Shared abstractions and utilities.

This app provides platform-agnostic pieces used by every other app:
- Background dispatch (TaskService)
- The service error taxonomy and the response envelope
- The mail gateway

The dispatch abstraction allows switching between:
- Local development and tests (sync execution)
- Celery + Redis (production)
"""
