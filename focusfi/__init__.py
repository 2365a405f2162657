"""
FocusFi - Source Package

A personal-finance companion that records income and expenses locally
and keeps them in step with a remote finance backend.

DESIGN PRINCIPLES:
1. Local data is always readable, even when the backend is not
2. Remote records are matched by their remote identifier, never by content
3. User-owned flags (favorite, include in total) survive every sync
4. Failures are reported to the user, never swallowed
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FocusFi Team"
