from rest_framework import serializers

from UserDataManagement.models import Guide, Student, SEMESTER_CHOICES
from .models import GuideAllocation, StudentInternship


# =====================================================
# REQUEST PAYLOADS
# =====================================================

class AllocateGuideSerializer(serializers.Serializer):
    """Validates {range, guideId, semester}; range semantics are checked by the service."""

    range = serializers.CharField(max_length=40)
    guideId = serializers.CharField()
    semester = serializers.IntegerField()


class RangeOverlapCheckSerializer(serializers.Serializer):
    range = serializers.CharField(max_length=40)
    semester = serializers.IntegerField()
    guideId = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class DeleteGuideAllocationSerializer(serializers.Serializer):
    range = serializers.CharField(max_length=40)
    semester = serializers.IntegerField()
    guideId = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class UpdateGuideSerializer(serializers.Serializer):
    guideId = serializers.CharField()


# =====================================================
# RESPONSES
# =====================================================

class AllocationGuideSerializer(serializers.ModelSerializer):
    class Meta:
        model = Guide
        fields = ['id', 'username', 'guide_name', 'email']


class GuideAllocationSerializer(serializers.ModelSerializer):
    guide = AllocationGuideSerializer(read_only=True)

    class Meta:
        model = GuideAllocation
        fields = [
            'allocation_id',
            'guide',
            'range',
            'semester',
            'is_deleted',
            'deleted_at',
            'created_at',
            'updated_at',
        ]


class InternshipStudentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Student
        fields = ['id', 'student_id', 'student_name', 'email', 'semester', 'year']


class StudentInternshipSerializer(serializers.ModelSerializer):
    student = InternshipStudentSerializer(read_only=True)
    guide = AllocationGuideSerializer(read_only=True)

    class Meta:
        model = StudentInternship
        fields = [
            'internship_id',
            'student',
            'guide',
            'semester',
            'is_guide_manually_assigned',
            'is_deleted',
            'deleted_at',
            'created_at',
            'updated_at',
        ]


class SemesterQuerySerializer(serializers.Serializer):
    semester = serializers.ChoiceField(choices=SEMESTER_CHOICES, required=False)
