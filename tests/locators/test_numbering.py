from datetime import date, datetime

import pytest

from src.dtr_locator.dtr_locator.locators.numbering import ReferenceNumberGenerator


class CountingSequences:
    def __init__(self):
        self.calls = []
        self.counters = {}

    def allocate(self, seq_date):
        self.calls.append(seq_date)
        self.counters[seq_date] = self.counters.get(seq_date, 0) + 1
        return self.counters[seq_date]


def test_format_seventh_of_the_day():
    gen = ReferenceNumberGenerator()
    assert gen.format(date(2025, 9, 17), 7) == "250917LE-007"


def test_format_keeps_growing_past_three_digits():
    gen = ReferenceNumberGenerator()
    assert gen.format(date(2025, 9, 17), 1000) == "250917LE-1000"


def test_custom_tag_is_upper_cased():
    gen = ReferenceNumberGenerator(type_tag="ob")
    assert gen.format(date(2024, 1, 2), 1) == "240102OB-001"


@pytest.mark.parametrize("tag", ["", "L", "LEX", "L1"])
def test_rejects_bad_tags(tag):
    with pytest.raises(ValueError):
        ReferenceNumberGenerator(type_tag=tag)


def test_next_number_is_scoped_to_creation_day():
    seqs = CountingSequences()
    gen = ReferenceNumberGenerator()

    first = gen.next_number(seqs, datetime(2025, 9, 17, 23, 59, 59))
    second = gen.next_number(seqs, datetime(2025, 9, 17, 8, 0, 0))
    next_day = gen.next_number(seqs, datetime(2025, 9, 18, 0, 0, 1))

    assert [first.text, second.text, next_day.text] == ["250917LE-001", "250917LE-002", "250918LE-001"]
    assert first.seq_date == date(2025, 9, 17)
    assert next_day.seq_no == 1


def test_widened_number_does_not_sort_as_text():
    gen = ReferenceNumberGenerator()
    day = date(2025, 9, 17)
    # listings must order by seq_no, not by the formatted text
    assert gen.format(day, 1000) < gen.format(day, 999)
