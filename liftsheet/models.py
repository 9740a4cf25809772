"""Domain records exchanged between the cache, the queue and the sheet."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import CodecError

# The session log reserves exactly three (reps, weight, rir) triplets per row
MAX_SETS = 3


@dataclass
class SetEntry:
    """One working set."""

    reps: int = 0
    weight: float = 0.0
    rir: int = 0

    def __post_init__(self) -> None:
        if self.reps < 0 or self.weight < 0 or self.rir < 0:
            raise CodecError(
                f"Set values must be non-negative: reps={self.reps}, "
                f"weight={self.weight}, rir={self.rir}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {"reps": self.reps, "weight": self.weight, "rir": self.rir}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SetEntry":
        return cls(
            reps=int(data.get("reps", 0)),
            weight=float(data.get("weight", 0.0)),
            rir=int(data.get("rir", 0)),
        )


@dataclass
class ExerciseEntry:
    """An exercise performed on a date, with up to three sets."""

    name: str
    sets: list[SetEntry] = field(default_factory=list)
    notes: str = ""

    def __post_init__(self) -> None:
        if len(self.sets) > MAX_SETS:
            raise CodecError(
                f"Exercise {self.name!r} has {len(self.sets)} sets, "
                f"at most {MAX_SETS} fit in a row"
            )

    @property
    def match_name(self) -> str:
        """Name used for case-insensitive row matching."""
        return self.name.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "sets": [s.to_dict() for s in self.sets],
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExerciseEntry":
        return cls(
            name=data["name"],
            sets=[SetEntry.from_dict(s) for s in data.get("sets", [])],
            notes=data.get("notes") or "",
        )


@dataclass
class CardioSession:
    """The single cardio session logged for a date."""

    modality: str = ""
    minutes: int = 0
    seconds: int = 0
    rpe: int = 0
    work_rest: str = ""
    watts: int = 0
    notes: str = ""

    def is_empty(self) -> bool:
        """True when nothing has been filled in."""
        return not any(
            (
                self.modality,
                self.minutes,
                self.seconds,
                self.rpe,
                self.work_rest,
                self.watts,
                self.notes,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "modality": self.modality,
            "minutes": self.minutes,
            "seconds": self.seconds,
            "rpe": self.rpe,
            "work_rest": self.work_rest,
            "watts": self.watts,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CardioSession":
        return cls(
            modality=data.get("modality") or "",
            minutes=int(data.get("minutes", 0)),
            seconds=int(data.get("seconds", 0)),
            rpe=int(data.get("rpe", 0)),
            work_rest=data.get("work_rest") or "",
            watts=int(data.get("watts", 0)),
            notes=data.get("notes") or "",
        )


@dataclass
class WorkoutRecord:
    """Everything logged for one canonical date key."""

    date: str
    exercises: list[ExerciseEntry] = field(default_factory=list)
    cardio: CardioSession | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "exercises": [e.to_dict() for e in self.exercises],
            "cardio": self.cardio.to_dict() if self.cardio else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkoutRecord":
        return cls(
            date=data["date"],
            exercises=[ExerciseEntry.from_dict(e) for e in data.get("exercises", [])],
            cardio=(
                CardioSession.from_dict(data["cardio"]) if data.get("cardio") else None
            ),
        )


@dataclass(frozen=True)
class PendingChange:
    """A write deferred while offline. Immutable once enqueued."""

    id: str
    date: str
    payload: WorkoutRecord
    enqueued_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "payload": self.payload.to_dict(),
            "enqueued_at": self.enqueued_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingChange":
        return cls(
            id=data["id"],
            date=data["date"],
            payload=WorkoutRecord.from_dict(data["payload"]),
            enqueued_at=datetime.fromisoformat(data["enqueued_at"]),
        )
