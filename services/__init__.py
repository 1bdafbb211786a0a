"""
SERVICES LAYER CONTRACT

This package contains the repositories that implement the board, hold and
problem use cases.

RULES:
- Implements validation-then-write use cases
- Opens exactly one transaction per logical operation
- Detects validation and not-found conditions before a transaction begins
- No HTTP or JSON handling

LAYER RESPONSIBILITY:
- Board existence preconditions
- Hold batch writes and reads
- Problem lifecycle and membership replacement

CROSS-LAYER RESTRICTIONS:
- No request/response objects
- Raise core.exceptions types only

If you need to turn an error into a status code: you are in the wrong layer.
"""
