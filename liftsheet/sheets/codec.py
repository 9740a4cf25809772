"""Conversion between domain records and fixed-column sheet rows.

Decoding never raises: the sheets are filled in by hand, so missing or
malformed cells fall back to zero/empty values.
"""

import logging
import math
import re
from typing import NamedTuple

from ..dates import matches
from ..models import CardioSession, ExerciseEntry, SetEntry
from .schema import CARDIO_LOG, SESSION_LOG, CardioRow, SessionRow, cell_range

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class CellUpdate(NamedTuple):
    """A positional single-cell write."""

    range: str
    value: str


def is_numeric(text: str | None) -> bool:
    """True if the whole cell parses as a finite number."""
    # float() accepts digit separators ("1_000"); sheet numbers never have them
    if text is None or not text.strip() or "_" in text:
        return False
    try:
        return math.isfinite(float(text))
    except ValueError:
        return False


def parse_int(text: str | None) -> int:
    """Leading integer of a cell, 0 when absent. Negatives clamp to 0."""
    match = _INT_PREFIX.match(text or "")
    if not match:
        return 0
    return max(0, int(match.group()))


def parse_float(text: str | None) -> float:
    """Leading decimal of a cell, 0.0 when absent. Negatives clamp to 0."""
    match = _FLOAT_PREFIX.match(text or "")
    if not match:
        return 0.0
    value = float(match.group())
    if not math.isfinite(value):
        return 0.0
    return max(0.0, value)


def format_number(value: int | float) -> str:
    """Render a number the way it is typed into the sheet ("100", "102.5")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# Session log


def decode_exercise(row: SessionRow) -> ExerciseEntry | None:
    """Decode one session-log row. Rows without an exercise name yield None."""
    name = row.exercise.strip()
    if not name:
        return None

    sets = []
    for slot in range(SESSION_LOG.set_slots):
        reps, weight, rir = row.triplet(slot)
        if not is_numeric(reps):
            continue
        sets.append(
            SetEntry(reps=parse_int(reps), weight=parse_float(weight), rir=parse_int(rir))
        )

    return ExerciseEntry(name=name, sets=sets, notes=row.notes)


def encode_exercise_row(date_key: str, exercise: ExerciseEntry) -> SessionRow:
    """Build a full-width session-log row for appending."""
    row = SessionRow.blank()
    row.date = date_key
    row.exercise = exercise.name
    row.set_count = str(len(exercise.sets))
    for slot, entry in enumerate(exercise.sets):
        row.set_triplet(
            slot,
            (format_number(entry.reps), format_number(entry.weight), format_number(entry.rir)),
        )
    row.notes = exercise.notes or ""
    return row


def plan_exercise_update(
    row_number: int,
    exercise: ExerciseEntry,
    sheet: str = SESSION_LOG.title,
) -> list[CellUpdate]:
    """Single-cell writes that bring an existing row in line with ``exercise``.

    The set count and every triplet slot are rewritten, so slots dropped by
    the edit are cleared. Notes are only written when the exercise has
    some, so an empty edit never wipes notes typed directly into the sheet.
    """
    updates = [
        CellUpdate(
            cell_range(sheet, SESSION_LOG.index("set_count"), row_number),
            str(len(exercise.sets)),
        )
    ]
    for slot in range(SESSION_LOG.set_slots):
        if slot < len(exercise.sets):
            entry = exercise.sets[slot]
            values = (
                format_number(entry.reps),
                format_number(entry.weight),
                format_number(entry.rir),
            )
        else:
            values = ("", "", "")
        for column, value in zip(SESSION_LOG.set_columns(slot), values):
            updates.append(CellUpdate(cell_range(sheet, column, row_number), value))

    if exercise.notes:
        updates.append(
            CellUpdate(
                cell_range(sheet, SESSION_LOG.index("notes"), row_number), exercise.notes
            )
        )
    return updates


def session_rows(grid: list[list[str]]) -> list[SessionRow]:
    return [SessionRow(cells, number=i) for i, cells in enumerate(grid, start=1)]


def decode_session_grid(grid: list[list[str]], date_key: str) -> list[ExerciseEntry]:
    """All exercises logged for ``date_key``, in sheet order."""
    exercises = []
    for row in session_rows(grid):
        if not matches(row.date, date_key):
            continue
        exercise = decode_exercise(row)
        if exercise is not None:
            exercises.append(exercise)
    return exercises


def find_exercise_rows(grid: list[list[str]], date_key: str) -> dict[str, int]:
    """Map lowercased exercise name to 1-based row number for ``date_key``.

    When an exercise appears twice on the same date the later row wins.
    """
    found = {}
    for row in session_rows(grid):
        name = row.exercise.strip().lower()
        if name and matches(row.date, date_key):
            found[name] = row.number
    return found


# Cardio log


def decode_cardio(row: CardioRow) -> CardioSession:
    return CardioSession(
        modality=row.modality,
        minutes=parse_int(row.minutes),
        seconds=parse_int(row.seconds),
        rpe=parse_int(row.rpe),
        work_rest=row.work_rest,
        watts=parse_int(row.watts),
        notes=row.notes,
    )


def _cardio_values(cardio: CardioSession) -> dict[str, str]:
    return {
        "modality": cardio.modality,
        "minutes": format_number(cardio.minutes),
        "seconds": format_number(cardio.seconds),
        "rpe": format_number(cardio.rpe),
        "work_rest": cardio.work_rest,
        "watts": format_number(cardio.watts),
        "notes": cardio.notes,
    }


def encode_cardio_row(date_key: str, cardio: CardioSession) -> CardioRow:
    """Build a full-width cardio-log row for appending."""
    row = CardioRow.blank()
    row.date = date_key
    for name, value in _cardio_values(cardio).items():
        setattr(row, name, value)
    return row


def plan_cardio_update(
    row_number: int,
    cardio: CardioSession,
    sheet: str = CARDIO_LOG.title,
) -> list[CellUpdate]:
    return [
        CellUpdate(cell_range(sheet, CARDIO_LOG.index(name), row_number), value)
        for name, value in _cardio_values(cardio).items()
    ]


def find_cardio_row(grid: list[list[str]], date_key: str) -> CardioRow | None:
    """The first cardio row for ``date_key``; later ones are ignored."""
    for i, cells in enumerate(grid, start=1):
        row = CardioRow(cells, number=i)
        if matches(row.date, date_key):
            return row
    return None


def decode_cardio_grid(grid: list[list[str]], date_key: str) -> CardioSession | None:
    row = find_cardio_row(grid, date_key)
    if row is None:
        logger.debug(f"No cardio row for {date_key}")
        return None
    return decode_cardio(row)
