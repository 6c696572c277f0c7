'''
Errors raised by the guide allocation services.

Every error carries the HTTP status the API layer answers with, so views
only need a single ``except AllocationError`` branch.
'''


class AllocationError(Exception):
    status_code = 400
    default_message = "Guide allocation failed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =====================================================
# INPUT ERRORS (400)
# =====================================================

class InvalidRangeError(AllocationError):
    default_message = "Invalid student ID range."


class MalformedRangeError(InvalidRangeError):
    default_message = "Invalid range format. Expected format: 22cs078-22cs082"


class RangeMismatchError(InvalidRangeError):
    default_message = "Year and department must be the same in the range."


class RangeOrderError(InvalidRangeError):
    default_message = "Start digits must be less than or equal to end digits."


class InvalidSemesterError(AllocationError):
    default_message = "Semester must be one of 5 or 7."


# =====================================================
# NOT FOUND (404)
# =====================================================

class GuideNotFoundError(AllocationError):
    status_code = 404
    default_message = "Guide not found."


class AllocationNotFoundError(AllocationError):
    status_code = 404
    default_message = "Guide allocation not found."


class InternshipNotFoundError(AllocationError):
    status_code = 404
    default_message = "Student internship record not found."


# =====================================================
# CONFLICTS
# =====================================================

class RangeOverlapError(AllocationError):
    default_message = "Range overlaps with existing allocations."

    def __init__(self, student_ids, message=None):
        self.student_ids = list(student_ids)
        super().__init__(message)
