from django.db import models
from django.contrib.auth.models import AbstractUser

# =====================================================
# ROLE DEFINITIONS
# =====================================================
ROLE_ADMIN = "ADMIN"
ROLE_GUIDE = "GUIDE"
ROLE_STUDENT = "STUDENT"

ROLE_CHOICES = (
    (ROLE_ADMIN, "Admin"),
    (ROLE_GUIDE, "Guide"),
    (ROLE_STUDENT, "Student"),
)


# =====================================================
# USER MODEL
# =====================================================
class User(AbstractUser):
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STUDENT)

    @property
    def is_portal_admin(self):
        return str(self.role).upper() == ROLE_ADMIN

    @property
    def is_guide(self):
        return str(self.role).upper() == ROLE_GUIDE

    @property
    def is_student(self):
        return str(self.role).upper() == ROLE_STUDENT

    def __str__(self):
        return f"{self.username} ({self.role})"
