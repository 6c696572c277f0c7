from django.apps import AppConfig


class InternshipAllocationConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'InternshipAllocation'
    verbose_name = 'Internship Allocation'
