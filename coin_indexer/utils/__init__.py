from __future__ import annotations

from .startup import (
    check_python_requirements,
    ping_database,
)

__all__ = [
    "check_python_requirements",
    "ping_database",
]
