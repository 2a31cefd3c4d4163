from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core import constants
from .repository import SequenceRepository


@dataclass(frozen=True)
class LocatorNumber:
    seq_date: date
    seq_no: int
    text: str


class ReferenceNumberGenerator:
    """Day-scoped reference numbers: `YYMMDD` + tag + `-` + sequence.

    e.g. the 7th locator created on 2025-09-17 is `250917LE-007`. The day is
    the creation day, not the authorization date.

    Past 999 the sequence widens (`250917LE-1000`), so the text no longer
    sorts in creation order; order by `(seq_date, seq_no)` instead.
    """

    def __init__(self, *, type_tag: str = constants.LOCATOR_TYPE_TAG, width: int = constants.LOCATOR_SEQUENCE_WIDTH):
        tag = (type_tag or "").strip().upper()
        if len(tag) != 2 or not tag.isalpha():
            raise ValueError(f"type tag must be two letters, got {type_tag!r}")
        self._tag = tag
        self._width = int(width)

    def format(self, seq_date: date, seq_no: int) -> str:
        return f"{seq_date.strftime('%y%m%d')}{self._tag}-{int(seq_no):0{self._width}d}"

    def next_number(self, sequences: SequenceRepository, created_at: datetime) -> LocatorNumber:
        seq_date = created_at.date()
        seq_no = sequences.allocate(seq_date)
        return LocatorNumber(seq_date=seq_date, seq_no=seq_no, text=self.format(seq_date, seq_no))
