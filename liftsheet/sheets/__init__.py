"""Google Sheets layer: column layouts, row codec and API gateway."""

from .codec import CellUpdate
from .gateway import SaveSummary, SheetsGateway
from .schema import CARDIO_LOG, SESSION_LOG, CardioRow, SessionRow, column_letter

__all__ = [
    "CARDIO_LOG",
    "SESSION_LOG",
    "CardioRow",
    "SessionRow",
    "CellUpdate",
    "SaveSummary",
    "SheetsGateway",
    "column_letter",
]
