import logging
import uuid
from typing import List, NamedTuple, Optional

from django.db import transaction
from django.utils import timezone

from UserDataManagement.models import Guide, Student, ALLOWED_SEMESTERS
from .exceptions import (
    AllocationNotFoundError,
    GuideNotFoundError,
    InternshipNotFoundError,
    InvalidSemesterError,
    RangeOverlapError,
)
from .models import GuideAllocation, StudentInternship
from .range_utils import StudentIdRange, parse_student_id_range, range_contains

logger = logging.getLogger(__name__)


class AllocationResult(NamedTuple):
    allocation: GuideAllocation
    missing_student_ids: List[str]
    skipped_student_ids: List[str]


# =====================================================
# LOOKUPS
# =====================================================

def validate_semester(semester) -> int:
    if isinstance(semester, bool):
        raise InvalidSemesterError()

    if isinstance(semester, str) and semester.strip().isdigit():
        semester = int(semester.strip())

    if not isinstance(semester, int) or semester not in ALLOWED_SEMESTERS:
        raise InvalidSemesterError(
            f"Invalid semester '{semester}'. Allowed: {list(ALLOWED_SEMESTERS)}"
        )
    return semester


def _as_uuid(value, error_class):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise error_class()


def get_active_guide(guide_id) -> Guide:
    guide_pk = _as_uuid(guide_id, GuideNotFoundError)
    try:
        return Guide.objects.get(pk=guide_pk)
    except Guide.DoesNotExist:
        raise GuideNotFoundError()


def resolve_students(parsed: StudentIdRange, semester: int):
    """
    Returns (students, missing_student_ids) for every ID the range denotes.
    IDs without an active Student record for the semester are reported, not
    treated as errors.
    """
    student_ids = parsed.student_ids()
    students = list(
        Student.objects.filter(student_id__in=student_ids, semester=semester)
    )

    found = {student.student_id for student in students}
    missing = [student_id for student_id in student_ids if student_id not in found]
    return students, missing


# =====================================================
# OVERLAP CHECK
# =====================================================

def _lock_students(students):
    """
    Row-locks the students being allocated, in primary key order, so
    allocations sharing a student commit one after the other. SQLite has
    no row locks and ignores this.
    """
    if not students:
        return
    locked = Student.objects.select_for_update().filter(
        pk__in=[student.pk for student in students]
    ).order_by('pk')
    list(locked.values_list('pk', flat=True))


def _ensure_no_overlap(students, semester, exclude_guide_id=None):
    if not students:
        return

    conflicts = StudentInternship.objects.filter(
        student__in=students,
        semester=semester,
        guide__isnull=False,
        is_guide_manually_assigned=False,
    )
    if exclude_guide_id is not None:
        conflicts = conflicts.exclude(guide_id=exclude_guide_id)

    conflicting_pks = {internship.student_id for internship in conflicts}
    if conflicting_pks:
        overlapping = sorted(
            student.student_id for student in students
            if student.pk in conflicting_pks
        )
        logger.warning(
            "Range overlap for semester %s: %s already allocated to another guide",
            semester, ", ".join(overlapping)
        )
        raise RangeOverlapError(overlapping)


def validate_range_overlap(range_value, semester, exclude_guide_id=None):
    """
    Raises RangeOverlapError if any student in the range already has an
    active internship bound to a guide other than ``exclude_guide_id``.
    """
    semester = validate_semester(semester)
    parsed = parse_student_id_range(range_value)
    if exclude_guide_id is not None:
        exclude_guide_id = _as_uuid(exclude_guide_id, GuideNotFoundError)

    students, _ = resolve_students(parsed, semester)
    _ensure_no_overlap(students, semester, exclude_guide_id)


# =====================================================
# ALLOCATION
# =====================================================

def _upsert_internships(students, semester, guide):
    """
    Points every student's internship for the semester at ``guide`` in one
    batch. Manually assigned internships are left untouched and returned.
    """
    existing = {
        internship.student_id: internship
        for internship in StudentInternship.all_objects.filter(
            student__in=students,
            semester=semester
        )
    }

    to_create = []
    update_pks = []
    revive_pks = []
    skipped = []

    for student in students:
        internship = existing.get(student.pk)
        if internship is None:
            to_create.append(StudentInternship(student=student, guide=guide, semester=semester))
        elif internship.is_deleted:
            revive_pks.append(internship.pk)
        elif internship.is_guide_manually_assigned:
            skipped.append(student.student_id)
        else:
            update_pks.append(internship.pk)

    now = timezone.now()

    if to_create:
        StudentInternship.all_objects.bulk_create(to_create)

    if update_pks:
        StudentInternship.all_objects.filter(
            pk__in=update_pks,
            is_guide_manually_assigned=False
        ).update(guide=guide, updated_at=now)

    if revive_pks:
        StudentInternship.all_objects.filter(pk__in=revive_pks).update(
            guide=guide,
            is_guide_manually_assigned=False,
            is_deleted=False,
            deleted_at=None,
            updated_at=now,
        )

    if skipped:
        logger.info(
            "Kept manually assigned guide for %s (semester %s)",
            ", ".join(skipped), semester
        )

    return skipped


def _upsert_allocation(guide, semester, range_value):
    allocation, created = GuideAllocation.all_objects.get_or_create(
        guide=guide,
        semester=semester,
        range=range_value,
    )
    if not created and allocation.is_deleted:
        allocation.restore()
    return allocation


def allocate_guide_to_range(range_value, guide_id, semester) -> AllocationResult:
    """
    Allocates ``guide_id`` to every existing student in ``range_value`` for
    ``semester``.

    All-or-nothing: when any student is already bound to a different guide
    the call raises RangeOverlapError before writing anything. Calling it
    again with the same arguments leaves the same end state.
    """
    semester = validate_semester(semester)
    parsed = parse_student_id_range(range_value)
    canonical_range = str(parsed)

    students, missing = resolve_students(parsed, semester)
    guide = get_active_guide(guide_id)

    with transaction.atomic():
        _lock_students(students)
        _ensure_no_overlap(students, semester, guide.pk)
        skipped = _upsert_internships(students, semester, guide)
        allocation = _upsert_allocation(guide, semester, canonical_range)

    logger.info(
        "Allocated guide %s to %s (semester %s): %d students, %d missing",
        guide.username, canonical_range, semester, len(students), len(missing)
    )
    return AllocationResult(allocation, missing, skipped)


def delete_guide_allocation(range_value, semester, guide_id=None) -> GuideAllocation:
    """
    Soft deletes the allocation for (range, semester) together with the
    internships of every student in the range. ``guide_id`` narrows the
    match when several guides registered the same range string.
    """
    semester = validate_semester(semester)
    parsed = parse_student_id_range(range_value)

    allocations = GuideAllocation.objects.filter(range=str(parsed), semester=semester)
    if guide_id is not None:
        allocations = allocations.filter(guide_id=_as_uuid(guide_id, AllocationNotFoundError))

    allocations = list(allocations.select_related('guide'))
    if not allocations:
        raise AllocationNotFoundError()

    students, _ = resolve_students(parsed, semester)

    with transaction.atomic():
        StudentInternship.objects.filter(
            student__in=students,
            semester=semester
        ).soft_delete()
        GuideAllocation.objects.filter(
            pk__in=[allocation.pk for allocation in allocations]
        ).soft_delete()

    for allocation in allocations:
        allocation.refresh_from_db()

    logger.info(
        "Deleted guide allocation %s (semester %s) for %s",
        parsed, semester, ", ".join(a.guide.username for a in allocations)
    )
    return allocations[0]


def get_all_guide_allocations(semester=None):
    allocations = GuideAllocation.objects.select_related('guide')
    if semester is not None:
        allocations = allocations.filter(semester=validate_semester(semester))
    return allocations


# =====================================================
# PROVISIONING / MANUAL ASSIGNMENT
# =====================================================

def find_covering_allocation(student_id, semester) -> Optional[GuideAllocation]:
    """Newest active allocation whose range contains ``student_id``."""
    student_id = student_id.strip().lower()
    candidates = GuideAllocation.objects.filter(
        semester=semester,
        range__startswith=student_id[:4],
        guide__is_deleted=False,
    ).select_related('guide')

    for allocation in candidates:
        if range_contains(allocation.range, student_id):
            return allocation
    return None


def provision_student_internship(student) -> StudentInternship:
    """
    Ensures ``student`` has an internship record for its semester and, if an
    existing allocation covers its ID, points it at that guide.
    """
    with transaction.atomic():
        internship, created = StudentInternship.all_objects.get_or_create(
            student=student,
            semester=student.semester,
        )
        if internship.is_deleted:
            internship.is_deleted = False
            internship.deleted_at = None
            internship.guide = None
            internship.is_guide_manually_assigned = False
            internship.save()

        if internship.guide_id is None:
            allocation = find_covering_allocation(student.student_id, student.semester)
            if allocation is not None:
                internship.guide = allocation.guide
                internship.save(update_fields=['guide', 'updated_at'])
                logger.info(
                    "Auto-assigned guide %s to %s from allocation %s",
                    allocation.guide.username, student.student_id, allocation.range
                )

    return internship


def reprovision_student_internship(student) -> StudentInternship:
    """
    Re-derives the internship after the student's ID or semester changed.
    The previous record is soft deleted, manual guide included.
    """
    with transaction.atomic():
        StudentInternship.objects.filter(student=student).soft_delete()
        internship = provision_student_internship(student)

    logger.info(
        "Re-provisioned internship for %s (semester %s)", student.student_id, student.semester
    )
    return internship


def assign_guide_manually(internship_id, guide_id) -> StudentInternship:
    guide = get_active_guide(guide_id)
    internship_pk = _as_uuid(internship_id, InternshipNotFoundError)

    try:
        internship = StudentInternship.objects.select_related('student').get(pk=internship_pk)
    except StudentInternship.DoesNotExist:
        raise InternshipNotFoundError()

    internship.guide = guide
    internship.is_guide_manually_assigned = True
    internship.save(update_fields=['guide', 'is_guide_manually_assigned', 'updated_at'])

    logger.info(
        "Manually assigned guide %s to %s (semester %s)",
        guide.username, internship.student.student_id, internship.semester
    )
    return internship


def get_student_internship(student_id, semester) -> StudentInternship:
    semester = validate_semester(semester)
    internship = StudentInternship.objects.select_related('student', 'guide').filter(
        student__student_id=str(student_id).strip().lower(),
        student__is_deleted=False,
        semester=semester,
    ).first()

    if internship is None:
        raise InternshipNotFoundError()
    return internship


def get_guide_students(guide, semester=None):
    internships = StudentInternship.objects.select_related('student').filter(
        guide=guide,
        student__is_deleted=False,
    )
    if semester is not None:
        internships = internships.filter(semester=validate_semester(semester))
    return internships


def get_student_internships_for_user(user):
    return StudentInternship.objects.select_related('student', 'guide').filter(
        student__user=user,
        student__is_deleted=False,
    )
