from django.contrib import admin
from .models import Guide, Student


@admin.register(Guide)
class GuideAdmin(admin.ModelAdmin):
    list_display = ['username', 'guide_name', 'email', 'is_deleted']
    search_fields = ['username', 'guide_name', 'email']
    list_filter = ['is_deleted']


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ['student_id', 'student_name', 'semester', 'year', 'is_onboarded', 'is_deleted']
    search_fields = ['student_id', 'student_name', 'email']
    list_filter = ['semester', 'year', 'is_deleted']
