"""Tests for the sheet layouts and the row codec."""

import pytest

from liftsheet.errors import CodecError
from liftsheet.models import CardioSession, ExerciseEntry, SetEntry
from liftsheet.sheets.codec import (
    CellUpdate,
    decode_cardio,
    decode_cardio_grid,
    decode_exercise,
    decode_session_grid,
    encode_cardio_row,
    encode_exercise_row,
    find_cardio_row,
    find_exercise_rows,
    format_number,
    is_numeric,
    parse_float,
    parse_int,
    plan_cardio_update,
    plan_exercise_update,
)
from liftsheet.sheets.schema import (
    CARDIO_LOG,
    SESSION_LOG,
    CardioRow,
    SessionRow,
    cell_range,
    column_letter,
)


def session_cells(date="3/14", name="Squat", triplets=(), notes=""):
    """Build raw session-log cells the way the API returns them."""
    cells = [""] * 38
    cells[6] = date
    cells[8] = name
    for slot, (reps, weight, rir) in enumerate(triplets):
        cells[14 + 3 * slot: 17 + 3 * slot] = [reps, weight, rir]
    cells[37] = notes
    # The API drops trailing empty cells
    while cells and cells[-1] == "":
        cells.pop()
    return cells


class TestColumnLetter:
    """Tests for column index to letter translation."""

    @pytest.mark.parametrize(
        "index,letter",
        [(0, "A"), (25, "Z"), (26, "AA"), (37, "AL"), (63, "BL"), (64, "BM"), (701, "ZZ"), (702, "AAA")],
    )
    def test_letters(self, index, letter):
        assert column_letter(index) == letter

    def test_negative_index(self):
        with pytest.raises(CodecError):
            column_letter(-1)

    def test_cell_range_quotes_sheet(self):
        assert cell_range("workout log", 14, 5) == "'workout log'!O5"
        assert cell_range("Bob's log", 0, 1) == "'Bob''s log'!A1"


class TestSchema:
    """Tests for the offset tables and typed rows."""

    def test_full_ranges(self):
        assert SESSION_LOG.full_range() == "'workout log'!A:AL"
        assert CARDIO_LOG.full_range() == "'cardio log'!A:BM"

    def test_set_columns(self):
        assert SESSION_LOG.set_columns(0) == (14, 15, 16)
        assert SESSION_LOG.set_columns(2) == (20, 21, 22)

    def test_set_slot_out_of_range(self):
        with pytest.raises(CodecError):
            SESSION_LOG.set_columns(3)
        with pytest.raises(CodecError):
            CARDIO_LOG.set_columns(0)

    def test_named_accessors(self):
        """Test attributes are generated from the offset table."""
        row = SessionRow(session_cells(date="Thu 3/14", name="Bench", notes="easy"))
        assert row.date == "Thu 3/14"
        assert row.exercise == "Bench"
        assert row.notes == "easy"

    def test_short_row_reads_empty(self):
        """Test reading past the end of a short row does not raise."""
        row = CardioRow(["", "", "", "", "", "3/14"])
        assert row.date == "3/14"
        assert row.notes == ""
        assert row.watts == ""

    def test_setter_pads_row(self):
        row = CardioRow([])
        row.notes = "hard"
        assert len(row.cells) == 65
        assert row.cells[64] == "hard"

    def test_blank_rows_have_full_width(self):
        assert len(SessionRow.blank().cells) == 38
        assert len(CardioRow.blank().cells) == 65

    def test_none_cells_become_empty(self):
        row = SessionRow([None, 5])
        assert row.cells == ["", "5"]


class TestNumberParsing:
    """Tests for tolerant cell parsing."""

    @pytest.mark.parametrize("text", ["12", "12.5", " 8 ", "0"])
    def test_numeric(self, text):
        assert is_numeric(text)

    @pytest.mark.parametrize(
        "text", [None, "", "  ", "abc", "10 reps", "nan", "inf", "1_000", "5_"]
    )
    def test_not_numeric(self, text):
        assert not is_numeric(text)

    def test_underscore_reps_omit_the_set(self):
        """Test a reps cell with digit separators is not read as a partial number."""
        row = SessionRow(session_cells(triplets=[("1_000", "100", "2"), ("5", "100", "2")]))
        assert decode_exercise(row).sets == [SetEntry(5, 100.0, 2)]

    def test_parse_int(self):
        assert parse_int("12") == 12
        assert parse_int("12.7") == 12
        assert parse_int("8 reps") == 8
        assert parse_int("abc") == 0
        assert parse_int(None) == 0
        assert parse_int("-3") == 0

    def test_parse_float(self):
        assert parse_float("102.5") == 102.5
        assert parse_float("60kg") == 60.0
        assert parse_float("") == 0.0
        assert parse_float("heavy") == 0.0
        assert parse_float("-5") == 0.0

    def test_format_number(self):
        assert format_number(100.0) == "100"
        assert format_number(102.5) == "102.5"
        assert format_number(8) == "8"


class TestDecodeExercise:
    """Tests for decoding session-log rows."""

    def test_decode_full_row(self):
        row = SessionRow(
            session_cells(
                triplets=[("5", "100", "2"), ("5", "102.5", "1"), ("4", "105", "0")],
                notes="felt strong",
            )
        )
        exercise = decode_exercise(row)

        assert exercise.name == "Squat"
        assert exercise.sets == [
            SetEntry(5, 100.0, 2),
            SetEntry(5, 102.5, 1),
            SetEntry(4, 105.0, 0),
        ]
        assert exercise.notes == "felt strong"

    def test_empty_name_yields_nothing(self):
        """Test a row with an empty exercise-name cell decodes to None."""
        row = SessionRow(session_cells(name="", triplets=[("5", "100", "2")]))
        assert decode_exercise(row) is None

    def test_whitespace_name_yields_nothing(self):
        row = SessionRow(session_cells(name="   ", triplets=[("5", "100", "2")]))
        assert decode_exercise(row) is None

    def test_blank_or_non_numeric_reps_omits_set(self):
        """Test a triplet is dropped when its reps cell is unusable."""
        row = SessionRow(
            session_cells(
                triplets=[("", "100", "2"), ("x", "100", "2"), ("6", "90", "3")],
            )
        )
        exercise = decode_exercise(row)
        assert exercise.sets == [SetEntry(6, 90.0, 3)]

    def test_malformed_weight_and_rir_default_to_zero(self):
        row = SessionRow(session_cells(triplets=[("5", "bar", "?")]))
        assert decode_exercise(row).sets == [SetEntry(5, 0.0, 0)]

    def test_truncated_row(self):
        """Test a row cut off before the set columns still decodes."""
        row = SessionRow(["", "", "", "", "", "", "3/14", "", "Deadlift"])
        exercise = decode_exercise(row)
        assert exercise.name == "Deadlift"
        assert exercise.sets == []
        assert exercise.notes == ""

    def test_name_is_trimmed(self):
        row = SessionRow(session_cells(name="  Row  "))
        assert decode_exercise(row).name == "Row"


class TestEncodeExercise:
    """Tests for building append rows and cell updates."""

    def test_encode_then_decode_returns_same_sets(self):
        exercise = ExerciseEntry(
            name="Press",
            sets=[SetEntry(8, 40, 2), SetEntry(7, 42.5, 1)],
            notes="paused",
        )
        row = encode_exercise_row("3/14", exercise)
        decoded = decode_exercise(SessionRow(row.cells))

        assert decoded.sets == exercise.sets
        assert decoded.notes == "paused"

    def test_append_row_layout(self):
        exercise = ExerciseEntry(name="Press", sets=[SetEntry(8, 40, 2)], notes="n")
        cells = encode_exercise_row("3/14", exercise).cells

        assert len(cells) == 38
        assert cells[6] == "3/14"
        assert cells[8] == "Press"
        assert cells[13] == "1"
        assert cells[14:17] == ["8", "40", "2"]
        assert cells[17:23] == [""] * 6
        assert cells[37] == "n"
        filled = {6, 8, 13, 14, 15, 16, 37}
        assert all(cells[i] == "" for i in range(38) if i not in filled)

    def test_plan_update_targets_triplet_columns(self):
        exercise = ExerciseEntry(name="Squat", sets=[SetEntry(5, 100, 2), SetEntry(5, 105, 1)])
        updates = plan_exercise_update(12, exercise)

        assert updates == [
            CellUpdate("'workout log'!N12", "2"),
            CellUpdate("'workout log'!O12", "5"),
            CellUpdate("'workout log'!P12", "100"),
            CellUpdate("'workout log'!Q12", "2"),
            CellUpdate("'workout log'!R12", "5"),
            CellUpdate("'workout log'!S12", "105"),
            CellUpdate("'workout log'!T12", "1"),
            CellUpdate("'workout log'!U12", ""),
            CellUpdate("'workout log'!V12", ""),
            CellUpdate("'workout log'!W12", ""),
        ]

    def test_shrinking_set_list_clears_dropped_slots(self):
        """Test going from three sets to one leaves the row decoding to one set."""
        row = SessionRow(
            session_cells(triplets=[("5", "100", "2"), ("5", "102.5", "1"), ("4", "105", "0")])
        )
        row.set_count = "3"
        exercise = ExerciseEntry(name="Squat", sets=[SetEntry(6, 100, 1)])

        for update in plan_exercise_update(1, exercise):
            column = update.range.split("!")[1].rstrip("0123456789")
            index = next(i for i in range(38) if column_letter(i) == column)
            row.set_cell(index, update.value)

        assert row.set_count == "1"
        assert decode_exercise(row).sets == [SetEntry(6, 100.0, 1)]

    def test_plan_update_writes_notes_only_when_present(self):
        exercise = ExerciseEntry(name="Squat", sets=[], notes="belt")
        updates = plan_exercise_update(3, exercise, sheet="lifts")
        assert updates[0] == CellUpdate("'lifts'!N3", "0")
        assert updates[-1] == CellUpdate("'lifts'!AL3", "belt")
        assert len(updates) == 11

        plain = plan_exercise_update(3, ExerciseEntry(name="Squat"))
        assert len(plain) == 10
        assert all(not u.range.endswith("AL3") for u in plain)


class TestSessionGrid:
    """Tests for row discovery in the session log."""

    @pytest.fixture
    def grid(self):
        return [
            ["Week", "", "", "", "", "", "Date", "", "Exercise"],
            session_cells(date="Wed 3/13/2024", name="Squat", triplets=[("5", "95", "2")]),
            session_cells(date="Thu 3/14/2024", name="Squat", triplets=[("5", "100", "2")]),
            session_cells(date="3/14", name="", triplets=[("1", "1", "1")]),
            session_cells(date="03/14", name="Bench Press", triplets=[("8", "60", "1")]),
            [],
        ]

    def test_decode_session_grid(self, grid):
        exercises = decode_session_grid(grid, "3/14")
        assert [e.name for e in exercises] == ["Squat", "Bench Press"]

    def test_find_exercise_rows(self, grid):
        """Test rows are found by date and lowercased name, 1-based."""
        assert find_exercise_rows(grid, "3/14") == {"squat": 3, "bench press": 5}

    def test_no_rows_for_date(self, grid):
        assert decode_session_grid(grid, "4/1") == []
        assert find_exercise_rows(grid, "4/1") == {}

    def test_later_duplicate_wins(self):
        grid = [
            session_cells(date="3/14", name="Squat"),
            session_cells(date="3/14", name="squat"),
        ]
        assert find_exercise_rows(grid, "3/14") == {"squat": 2}


class TestCardio:
    """Tests for the cardio log codec."""

    @staticmethod
    def cardio_cells(date="3/14"):
        cells = [""] * 65
        cells[5] = date
        cells[8] = "Rower"
        cells[11] = "20"
        cells[12] = "30"
        cells[16] = "7"
        cells[17] = "30/30"
        cells[24] = "180"
        cells[64] = "steady"
        return cells

    def test_decode(self):
        session = decode_cardio(CardioRow(self.cardio_cells()))
        assert session == CardioSession(
            modality="Rower",
            minutes=20,
            seconds=30,
            rpe=7,
            work_rest="30/30",
            watts=180,
            notes="steady",
        )

    def test_decode_short_row_defaults(self):
        session = decode_cardio(CardioRow(["", "", "", "", "", "3/14", "", "", "Bike"]))
        assert session == CardioSession(modality="Bike")

    def test_encode_round_trip(self):
        session = CardioSession("Bike", 45, 0, 6, "", 200, "zone 2")
        cells = encode_cardio_row("3/14", session).cells
        assert len(cells) == 65
        assert cells[5] == "3/14"
        assert decode_cardio(CardioRow(cells)) == session

    def test_first_matching_row_wins(self):
        second = self.cardio_cells()
        second[8] = "Bike"
        grid = [["Date"], self.cardio_cells(), second]

        row = find_cardio_row(grid, "3/14")
        assert row.number == 2
        assert decode_cardio_grid(grid, "3/14").modality == "Rower"

    def test_missing_cardio(self):
        assert find_cardio_row([self.cardio_cells("3/15")], "3/14") is None
        assert decode_cardio_grid([], "3/14") is None

    def test_plan_update(self):
        session = CardioSession("Bike", 45, 0, 6, "", 200, "")
        updates = plan_cardio_update(4, session)
        assert updates == [
            CellUpdate("'cardio log'!I4", "Bike"),
            CellUpdate("'cardio log'!L4", "45"),
            CellUpdate("'cardio log'!M4", "0"),
            CellUpdate("'cardio log'!Q4", "6"),
            CellUpdate("'cardio log'!R4", ""),
            CellUpdate("'cardio log'!Y4", "200"),
            CellUpdate("'cardio log'!BM4", ""),
        ]
