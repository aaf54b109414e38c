"""Helper modules for the Quick Order application."""

__all__ = [
    "pricing",
    "validator",
]
