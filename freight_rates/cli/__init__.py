from .main import EXIT_FATAL, EXIT_NO_MATCH, EXIT_SUCCESS, main

__all__ = [
    "EXIT_FATAL",
    "EXIT_NO_MATCH",
    "EXIT_SUCCESS",
    "main",
]
