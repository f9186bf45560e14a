"""Terminal rendering for verdicts and content inspection."""

from ui.components import (
    VerdictPanel,
    DetailTable,
    BlockListTable,
    ErrorPanel,
    detail_rows,
)
from ui.styles import (
    ACCENT_TEAL,
    ACCENT_GOLD,
    SUCCESS_GREEN,
    ERROR_RED,
    INFO_BLUE,
    MUTED_GRAY,
)

__all__ = [
    "VerdictPanel",
    "DetailTable",
    "BlockListTable",
    "ErrorPanel",
    "detail_rows",
    "ACCENT_TEAL",
    "ACCENT_GOLD",
    "SUCCESS_GREEN",
    "ERROR_RED",
    "INFO_BLUE",
    "MUTED_GRAY",
]
