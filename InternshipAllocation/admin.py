from django.contrib import admin
from .models import GuideAllocation, StudentInternship


@admin.register(GuideAllocation)
class GuideAllocationAdmin(admin.ModelAdmin):
    list_display = ['range', 'semester', 'guide', 'is_deleted', 'created_at']
    list_filter = ['semester', 'is_deleted']
    search_fields = ['range', 'guide__username', 'guide__guide_name']

    def get_queryset(self, request):
        return GuideAllocation.all_objects.select_related('guide')


@admin.register(StudentInternship)
class StudentInternshipAdmin(admin.ModelAdmin):
    list_display = ['student', 'semester', 'guide', 'is_guide_manually_assigned', 'is_deleted']
    list_filter = ['semester', 'is_guide_manually_assigned', 'is_deleted']
    search_fields = ['student__student_id', 'guide__username']

    def get_queryset(self, request):
        return StudentInternship.all_objects.select_related('student', 'guide')
