from io import BytesIO

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .models import StudentInternship

ALLOCATION_HEADERS = [
    "Range",
    "Semester",
    "Guide Username",
    "Guide Name",
    "Guide Email",
    "Allocated On",
]

INTERNSHIP_HEADERS = [
    "Student ID",
    "Student Name",
    "Semester",
    "Guide Username",
    "Guide Name",
    "Manually Assigned",
]


def _write_sheet(ws, headers, rows):
    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for row in rows:
        ws.append(row)

    for index, header in enumerate(headers, start=1):
        ws.column_dimensions[get_column_letter(index)].width = max(len(header) + 4, 16)


def build_allocations_workbook(allocations, semester=None):
    """
    Two sheets: the allocations themselves and every active internship
    with its current guide.
    """
    wb = openpyxl.Workbook()

    ws = wb.active
    ws.title = "Guide Allocations"
    _write_sheet(ws, ALLOCATION_HEADERS, [
        [
            allocation.range,
            allocation.semester,
            allocation.guide.username,
            allocation.guide.guide_name,
            allocation.guide.email,
            allocation.created_at.strftime("%Y-%m-%d %H:%M"),
        ]
        for allocation in allocations
    ])

    internships = StudentInternship.objects.select_related('student', 'guide').filter(
        student__is_deleted=False
    )
    if semester is not None:
        internships = internships.filter(semester=semester)

    _write_sheet(wb.create_sheet("Student Internships"), INTERNSHIP_HEADERS, [
        [
            internship.student.student_id,
            internship.student.student_name,
            internship.semester,
            internship.guide.username if internship.guide else "",
            internship.guide.guide_name if internship.guide else "",
            "Yes" if internship.is_guide_manually_assigned else "No",
        ]
        for internship in internships
    ])

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer
