import logging

from django.db import transaction
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from custom_auth.models import ROLE_ADMIN
from custom_auth.permissions import RoleBasedPermission
from InternshipAllocation.services import provision_student_internship, reprovision_student_internship
from .models import Guide, Student
from .serializers import GuideSerializer, StudentSerializer

logger = logging.getLogger(__name__)


def not_found(label):
    return Response(
        {"success": False, "message": f"{label} not found"},
        status=status.HTTP_404_NOT_FOUND,
    )


'''
-------------------------------------------------------------------------------------------------------------------------------
                                                Guide creation
-------------------------------------------------------------------------------------------------------------------------------
'''


class GuideListAPIView(APIView):
    permission_classes = [IsAuthenticated, RoleBasedPermission]
    allowed_roles = [ROLE_ADMIN]

    def get(self, request):
        guides = Guide.objects.all()
        return Response(
            {
                "success": True,
                "count": guides.count(),
                "data": GuideSerializer(guides, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        serializer = GuideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        guide = serializer.save()

        logger.info("Created guide %s", guide.username)
        return Response(
            {"success": True, "data": GuideSerializer(guide).data},
            status=status.HTTP_201_CREATED,
        )


class GuideDetailAPIView(APIView):
    permission_classes = [IsAuthenticated, RoleBasedPermission]
    allowed_roles = [ROLE_ADMIN]

    def get(self, request, guide_id):
        guide = Guide.objects.filter(pk=guide_id).first()
        if not guide:
            return not_found("Guide")
        return Response({"success": True, "data": GuideSerializer(guide).data})

    def put(self, request, guide_id):
        guide = Guide.objects.filter(pk=guide_id).first()
        if not guide:
            return not_found("Guide")

        serializer = GuideSerializer(guide, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        guide = serializer.save()
        return Response({"success": True, "data": GuideSerializer(guide).data})

    def delete(self, request, guide_id):
        guide = Guide.objects.filter(pk=guide_id).first()
        if not guide:
            return not_found("Guide")

        # Allocations and internships keep pointing at the guide; lookups skip deleted guides
        guide.soft_delete()
        logger.info("Soft deleted guide %s", guide.username)
        return Response({"success": True, "message": "Guide deleted successfully"})


'''
--------------------------------------------------------------------------------------------------------------------------------
                                                Student creation
--------------------------------------------------------------------------------------------------------------------------------
'''


class StudentListAPIView(APIView):
    permission_classes = [IsAuthenticated, RoleBasedPermission]
    allowed_roles = [ROLE_ADMIN]

    def get(self, request):
        students = Student.objects.all()

        semester = request.query_params.get("semester")
        if semester:
            if not semester.isdigit():
                return Response(
                    {"success": False, "message": "semester must be a number"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            students = students.filter(semester=int(semester))

        return Response(
            {
                "success": True,
                "count": students.count(),
                "data": StudentSerializer(students, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        serializer = StudentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        student = serializer.save()

        internship = provision_student_internship(student)
        logger.info(
            "Created student %s (semester %s), guide=%s",
            student.student_id, student.semester,
            internship.guide.username if internship.guide else None
        )

        return Response(
            {
                "success": True,
                "data": StudentSerializer(student).data,
                "internshipId": str(internship.pk),
                "guideId": str(internship.guide_id) if internship.guide_id else None,
            },
            status=status.HTTP_201_CREATED,
        )


class StudentDetailAPIView(APIView):
    permission_classes = [IsAuthenticated, RoleBasedPermission]
    allowed_roles = [ROLE_ADMIN]

    def get(self, request, pk):
        student = Student.objects.filter(pk=pk).first()
        if not student:
            return not_found("Student")
        return Response({"success": True, "data": StudentSerializer(student).data})

    def put(self, request, pk):
        student = Student.objects.filter(pk=pk).first()
        if not student:
            return not_found("Student")

        previous = (student.student_id, student.semester)
        serializer = StudentSerializer(student, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            student = serializer.save()
            # The internship is keyed on the student's ID range and semester
            if (student.student_id, student.semester) != previous:
                reprovision_student_internship(student)

        return Response({"success": True, "data": StudentSerializer(student).data})

    def delete(self, request, pk):
        student = Student.objects.filter(pk=pk).first()
        if not student:
            return not_found("Student")

        student.soft_delete()
        student.internships.all().soft_delete()
        logger.info("Soft deleted student %s (semester %s)", student.student_id, student.semester)
        return Response({"success": True, "message": "Student deleted successfully"})
