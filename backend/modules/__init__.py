"""
Feature modules for Mira backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- exceptions.py: Module-specific exceptions
- service.py / repository.py: Implementations behind the interfaces
- routes.py: FastAPI route handlers (modules with an HTTP surface)

Modules communicate through interfaces, not concrete implementations.
"""
