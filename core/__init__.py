"""
CORE LAYER CONTRACT

This package contains core application components and abstractions.

RULES:
- Contains fundamental building blocks for all layers
- Defines domain models, validators, and interfaces
- Pure validation, no I/O outside core.database
- No HTTP concerns

LAYER RESPONSIBILITY:
- BoardAppError hierarchy
- Connection pool and transaction helper
- Store interfaces and contracts
- Domain dataclasses

CROSS-LAYER RESTRICTIONS:
- No imports from api
- Only dependency_injection imports services, to wire the repositories

If you need entity-specific SQL: you are in the wrong layer.
"""
