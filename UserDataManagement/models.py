import uuid
from django.db import models
from django.conf import settings
from django.utils import timezone

SEMESTER_CHOICES = [
    (5, 'Semester 5'),
    (7, 'Semester 7'),
]

ALLOWED_SEMESTERS = tuple(value for value, _ in SEMESTER_CHOICES)


def current_academic_year():
    """e.g. "2025-2026" for any date in 2025."""
    year = timezone.now().year
    return f"{year}-{year + 1}"


'''
----------------------------------------------------------------------------------------------------------------------------
                                    Soft delete
----------------------------------------------------------------------------------------------------------------------------
'''


class ActiveQuerySet(models.QuerySet):

    def soft_delete(self):
        now = timezone.now()
        return self.update(is_deleted=True, deleted_at=now, updated_at=now)


class ActiveManager(models.Manager.from_queryset(ActiveQuerySet)):
    """Hides soft-deleted rows from every query."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class AllObjectsManager(models.Manager.from_queryset(ActiveQuerySet)):
    pass


class SoftDeleteModel(models.Model):
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        abstract = True

    def soft_delete(self):
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])

    def restore(self):
        self.is_deleted = False
        self.deleted_at = None
        self.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])


'''
----------------------------------------------------------------------------------------------------------------------------
                                    Guide creation
----------------------------------------------------------------------------------------------------------------------------
'''


class Guide(SoftDeleteModel):
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='guide_profile',
        null=True,
        blank=True
    )

    username = models.CharField(max_length=150, unique=True)
    guide_name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)

    class Meta:
        ordering = ['guide_name']

    def save(self, *args, **kwargs):
        self.username = self.username.strip().lower()
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.guide_name} ({self.username})"


'''
--------------------------------------------------------------------------------------------------------------------------------
                                                Student creation
--------------------------------------------------------------------------------------------------------------------------------
'''


class Student(SoftDeleteModel):
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    # One login may own a student record per semester (5 and 7)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='student_profiles',
        null=True,
        blank=True
    )

    # e.g. 22cs078
    student_id = models.CharField(max_length=20)
    student_name = models.CharField(max_length=255, blank=True, default="")
    is_onboarded = models.BooleanField(default=False)

    # Derived from student_id on save
    email = models.EmailField(blank=True)

    semester = models.PositiveSmallIntegerField(choices=SEMESTER_CHOICES)
    year = models.CharField(max_length=9, blank=True, help_text="Academic year, e.g. 2025-2026")

    class Meta:
        unique_together = [
            ('student_id', 'semester', 'year')
        ]
        ordering = ['student_id']

    def save(self, *args, **kwargs):
        self.student_id = self.student_id.strip().lower()
        self.email = f"{self.student_id}@{settings.STUDENT_EMAIL_DOMAIN}"
        if not self.year:
            self.year = current_academic_year()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.student_id} - {self.student_name}"
