from .reader import SheetReadError, read_rate_rows
from .template import TEMPLATE_ROWS, write_template

__all__ = [
    "SheetReadError",
    "read_rate_rows",
    "TEMPLATE_ROWS",
    "write_template",
]
