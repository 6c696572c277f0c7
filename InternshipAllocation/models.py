import uuid
from django.db import models

from UserDataManagement.models import SoftDeleteModel, SEMESTER_CHOICES


# =====================================================
# GUIDE ALLOCATION
# =====================================================

class GuideAllocation(SoftDeleteModel):
    """
    Declarative record that a guide was asked to take a range of students
    for a semester. The per-student effect lives on StudentInternship.
    """
    allocation_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    guide = models.ForeignKey(
        'UserDataManagement.Guide',
        on_delete=models.CASCADE,
        related_name='allocations'
    )

    # Canonical form, e.g. 22cs078-22cs082
    range = models.CharField(max_length=40)

    semester = models.PositiveSmallIntegerField(choices=SEMESTER_CHOICES)

    class Meta:
        # Upsert target: revived on re-allocation, never duplicated
        unique_together = ('guide', 'semester', 'range')
        indexes = [
            models.Index(fields=['range', 'semester'], name='allocation_range_sem_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.guide.guide_name} -> {self.range} (Sem {self.semester})"


# =====================================================
# STUDENT INTERNSHIP
# =====================================================

class StudentInternship(SoftDeleteModel):
    """
    One record per student per semester, carrying the guide the student
    actually reports to.
    """
    internship_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    student = models.ForeignKey(
        'UserDataManagement.Student',
        on_delete=models.CASCADE,
        related_name='internships'
    )

    guide = models.ForeignKey(
        'UserDataManagement.Guide',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='internships'
    )

    semester = models.PositiveSmallIntegerField(choices=SEMESTER_CHOICES)

    # Set by the admin "update guide" action; range allocation never overrides it
    is_guide_manually_assigned = models.BooleanField(default=False)

    class Meta:
        unique_together = ('student', 'semester')
        indexes = [
            models.Index(fields=['guide'], name='internship_guide_idx'),
        ]
        ordering = ['student__student_id']

    def __str__(self):
        guide = self.guide.guide_name if self.guide else "Unassigned"
        return f"{self.student.student_id} (Sem {self.semester}) -> {guide}"
