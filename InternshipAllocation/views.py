from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from custom_auth.permissions import IsAdmin, IsGuide, IsStudent
from .exceptions import AllocationError, RangeOverlapError
from .exports import build_allocations_workbook
from .serializers import (
    AllocateGuideSerializer,
    DeleteGuideAllocationSerializer,
    GuideAllocationSerializer,
    RangeOverlapCheckSerializer,
    SemesterQuerySerializer,
    StudentInternshipSerializer,
    UpdateGuideSerializer,
)
from . import services


def error_response(exc):
    body = {"success": False, "message": exc.message}
    if isinstance(exc, RangeOverlapError):
        body["overlappingStudents"] = exc.student_ids
    return Response(body, status=exc.status_code)


def invalid_payload(serializer):
    return Response(
        {"success": False, "message": "Invalid request data.", "errors": serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


def semester_from_query(request):
    """Returns (semester, error_response)."""
    query = SemesterQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return None, invalid_payload(query)
    return query.validated_data.get("semester"), None


'''
------------------------------------------------------------------------------------------------------------------------------
                                        Guide allocation views
------------------------------------------------------------------------------------------------------------------------------
'''


class AllocateGuideAPIView(APIView):
    """
    Allocates a guide to a range of student IDs for a semester.

    Payload:
        - range: e.g. 22cs078-22cs082
        - guideId: UUID of the guide
        - semester: 5 or 7

    Response carries the allocation plus the IDs in the range that have no
    student record yet (missingStudents).
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        serializer = AllocateGuideSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_payload(serializer)

        data = serializer.validated_data
        try:
            result = services.allocate_guide_to_range(
                data["range"], data["guideId"], data["semester"]
            )
        except AllocationError as exc:
            return error_response(exc)

        return Response({
            "success": True,
            "data": GuideAllocationSerializer(result.allocation).data,
            "missingStudents": result.missing_student_ids,
            "skippedStudents": result.skipped_student_ids,
        }, status=status.HTTP_200_OK)


class RangeOverlapCheckAPIView(APIView):
    """Dry run of the overlap check, used by the allocation form before submitting."""
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        serializer = RangeOverlapCheckSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_payload(serializer)

        data = serializer.validated_data
        try:
            services.validate_range_overlap(
                data["range"], data["semester"], data.get("guideId") or None
            )
        except AllocationError as exc:
            return error_response(exc)

        return Response({"success": True, "overlappingStudents": []})


class GuideAllocationAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        semester, error = semester_from_query(request)
        if error:
            return error

        allocations = services.get_all_guide_allocations(semester)
        return Response({
            "success": True,
            "data": GuideAllocationSerializer(allocations, many=True).data,
        })

    def delete(self, request):
        serializer = DeleteGuideAllocationSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_payload(serializer)

        data = serializer.validated_data
        try:
            allocation = services.delete_guide_allocation(
                data["range"], data["semester"], data.get("guideId") or None
            )
        except AllocationError as exc:
            return error_response(exc)

        return Response({
            "success": True,
            "data": GuideAllocationSerializer(allocation).data,
        })


class GuideAllocationExportAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        semester, error = semester_from_query(request)
        if error:
            return error

        allocations = services.get_all_guide_allocations(semester)
        buffer = build_allocations_workbook(allocations, semester)

        response = HttpResponse(
            buffer.read(),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        response["Content-Disposition"] = "attachment; filename=Guide_Allocations.xlsx"

        return response


'''
------------------------------------------------------------------------------------------------------------------------------
                                        Student internship views
------------------------------------------------------------------------------------------------------------------------------
'''


class UpdateInternshipGuideAPIView(APIView):
    """Admin override: the chosen guide sticks even when ranges are re-allocated."""
    permission_classes = [IsAuthenticated, IsAdmin]

    def put(self, request, internship_id):
        serializer = UpdateGuideSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_payload(serializer)

        try:
            internship = services.assign_guide_manually(
                internship_id, serializer.validated_data["guideId"]
            )
        except AllocationError as exc:
            return error_response(exc)

        return Response({
            "success": True,
            "data": StudentInternshipSerializer(internship).data,
        })


class StudentInternshipLookupAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request, student_id):
        semester = request.query_params.get("semester")
        if not semester:
            return Response(
                {"success": False, "message": "semester is required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            internship = services.get_student_internship(student_id, semester)
        except AllocationError as exc:
            return error_response(exc)

        return Response({
            "success": True,
            "data": StudentInternshipSerializer(internship).data,
        })


class GuideStudentsAPIView(APIView):
    permission_classes = [IsAuthenticated, IsGuide]

    def get(self, request):
        semester, error = semester_from_query(request)
        if error:
            return error

        internships = services.get_guide_students(request.user.guide_profile, semester)
        return Response({
            "success": True,
            "data": StudentInternshipSerializer(internships, many=True).data,
        })


class MyInternshipAPIView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        internships = services.get_student_internships_for_user(request.user)
        return Response({
            "success": True,
            "data": StudentInternshipSerializer(internships, many=True).data,
        })
