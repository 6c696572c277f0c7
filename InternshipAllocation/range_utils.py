'''
Student ID ranges.

A student ID is ``<2-digit cohort year><2-letter department><3-digit sequence>``
(e.g. ``22cs078``) and a range joins two of them with a dash, inclusive on
both ends: ``22cs078-22cs082``.
'''
import re
from typing import List, NamedTuple

from .exceptions import MalformedRangeError, RangeMismatchError, RangeOrderError

SEQUENCE_WIDTH = 3

STUDENT_ID_PATTERN = re.compile(r"^(\d{2})([a-z]{2})(\d{1,3})$")


class StudentIdRange(NamedTuple):
    cohort_year: str
    department: str
    start_seq: int
    end_seq: int

    def student_ids(self) -> List[str]:
        return generate_student_ids(*self)

    @property
    def student_count(self) -> int:
        return self.end_seq - self.start_seq + 1

    def __str__(self):
        return format_student_id_range(*self)


def _split_student_id(student_id: str):
    match = STUDENT_ID_PATTERN.match(student_id)
    if not match:
        raise MalformedRangeError(
            f"Invalid student ID '{student_id}'. Expected format: 22cs078"
        )
    year, dept, digits = match.groups()
    return year, dept, int(digits)


def parse_student_id_range(range_value: str) -> StudentIdRange:
    """
    Parses "22cs078-22cs082" into ("22", "cs", 78, 82).

    Raises MalformedRangeError, RangeMismatchError or RangeOrderError.
    """
    if not isinstance(range_value, str):
        raise MalformedRangeError()

    parts = [part.strip() for part in range_value.strip().lower().split("-")]
    if len(parts) != 2 or not all(parts):
        raise MalformedRangeError()

    start_year, start_dept, start_seq = _split_student_id(parts[0])
    end_year, end_dept, end_seq = _split_student_id(parts[1])

    if start_year != end_year or start_dept != end_dept:
        raise RangeMismatchError()

    if start_seq > end_seq:
        raise RangeOrderError()

    return StudentIdRange(start_year, start_dept, start_seq, end_seq)


def generate_student_ids(cohort_year: str, department: str, start_seq: int, end_seq: int) -> List[str]:
    return [
        f"{cohort_year}{department}{seq:0{SEQUENCE_WIDTH}d}"
        for seq in range(start_seq, end_seq + 1)
    ]


def format_student_id_range(cohort_year: str, department: str, start_seq: int, end_seq: int) -> str:
    prefix = f"{cohort_year}{department}".lower()
    return f"{prefix}{start_seq:0{SEQUENCE_WIDTH}d}-{prefix}{end_seq:0{SEQUENCE_WIDTH}d}"


def normalize_range(range_value: str) -> str:
    """Canonical spelling of a range, e.g. " 22CS78-22cs082" -> "22cs078-22cs082"."""
    return str(parse_student_id_range(range_value))


def range_contains(range_value: str, student_id: str) -> bool:
    parsed = parse_student_id_range(range_value)
    try:
        year, dept, seq = _split_student_id(student_id.strip().lower())
    except MalformedRangeError:
        return False

    return (
        year == parsed.cohort_year
        and dept == parsed.department
        and parsed.start_seq <= seq <= parsed.end_seq
    )
