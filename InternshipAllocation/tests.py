import uuid
from io import BytesIO, StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase
from openpyxl import load_workbook
from rest_framework import status
from rest_framework.test import APIClient

from UserDataManagement.models import Guide, Student
from . import services
from .exceptions import (
    AllocationNotFoundError,
    GuideNotFoundError,
    InvalidSemesterError,
    MalformedRangeError,
    RangeMismatchError,
    RangeOrderError,
    RangeOverlapError,
)
from .models import GuideAllocation, StudentInternship
from .range_utils import (
    StudentIdRange,
    generate_student_ids,
    normalize_range,
    parse_student_id_range,
    range_contains,
)

User = get_user_model()


class StudentIdRangeTests(SimpleTestCase):
    def test_parse_and_format(self):
        parsed = parse_student_id_range("22cs078-22cs082")
        self.assertEqual(parsed, StudentIdRange("22", "cs", 78, 82))
        self.assertEqual(str(parsed), "22cs078-22cs082")
        self.assertEqual(parsed.student_count, 5)

    def test_expansion_is_ordered_and_padded(self):
        self.assertEqual(
            generate_student_ids("22", "cs", 8, 11),
            ["22cs008", "22cs009", "22cs010", "22cs011"],
        )

    def test_single_student_range(self):
        self.assertEqual(parse_student_id_range("22cs078-22cs078").student_ids(), ["22cs078"])

    def test_normalize_lowercases_and_pads(self):
        self.assertEqual(normalize_range(" 22CS78 - 22cs082 "), "22cs078-22cs082")

    def test_malformed_ranges(self):
        for value in ["", "22cs078", "22cs078-", "-22cs082", "22cs078-22cs079-22cs080",
                      "abc-def", "2cs078-2cs080", "22c078-22c080", "22cs0788-22cs0790", None, 2207]:
            with self.subTest(value=value):
                with self.assertRaises(MalformedRangeError):
                    parse_student_id_range(value)

    def test_mismatched_year_or_department(self):
        for value in ["22cs078-22it082", "22cs078-23cs082"]:
            with self.subTest(value=value):
                with self.assertRaises(RangeMismatchError):
                    parse_student_id_range(value)

    def test_descending_range(self):
        with self.assertRaises(RangeOrderError):
            parse_student_id_range("22cs082-22cs078")

    def test_range_contains(self):
        self.assertTrue(range_contains("22cs078-22cs082", "22CS080"))
        self.assertFalse(range_contains("22cs078-22cs082", "22cs083"))
        self.assertFalse(range_contains("22cs078-22cs082", "22it080"))
        self.assertFalse(range_contains("22cs078-22cs082", "garbage"))


class AllocationServiceTests(TestCase):
    def setUp(self):
        self.guide_a = Guide.objects.create(username='guide_a', guide_name='Guide A', email='a@test.com')
        self.guide_b = Guide.objects.create(username='guide_b', guide_name='Guide B', email='b@test.com')
        # 22cs080 has no student record
        for student_id in ["22cs078", "22cs079", "22cs081", "22cs082", "22cs083"]:
            Student.objects.create(student_id=student_id, semester=7)

    def internship(self, student_id, semester=7):
        return StudentInternship.all_objects.get(student__student_id=student_id, semester=semester)

    def test_allocate_creates_allocation_and_internships(self):
        result = services.allocate_guide_to_range("22CS078-22cs082", self.guide_a.pk, 7)

        self.assertEqual(result.allocation.range, "22cs078-22cs082")
        self.assertEqual(result.allocation.guide, self.guide_a)
        self.assertEqual(result.missing_student_ids, ["22cs080"])
        self.assertEqual(result.skipped_student_ids, [])

        internships = StudentInternship.objects.filter(semester=7)
        self.assertEqual(internships.count(), 4)
        self.assertTrue(all(i.guide_id == self.guide_a.pk for i in internships))
        self.assertFalse(StudentInternship.objects.filter(student__student_id="22cs083").exists())

    def test_allocate_is_idempotent(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)
        services.allocate_guide_to_range("22cs078-22cs082", str(self.guide_a.pk), "7")

        self.assertEqual(GuideAllocation.all_objects.count(), 1)
        self.assertEqual(StudentInternship.all_objects.count(), 4)
        self.assertEqual(self.internship("22cs079").guide, self.guide_a)

    def test_overlap_with_other_guide_is_rejected_without_writes(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        with self.assertRaises(RangeOverlapError) as ctx:
            services.allocate_guide_to_range("22cs081-22cs083", self.guide_b.pk, 7)

        self.assertEqual(ctx.exception.student_ids, ["22cs081", "22cs082"])
        self.assertFalse(GuideAllocation.all_objects.filter(guide=self.guide_b).exists())
        self.assertFalse(StudentInternship.all_objects.filter(student__student_id="22cs083").exists())
        self.assertEqual(self.internship("22cs081").guide, self.guide_a)

    def test_same_range_other_semester_does_not_overlap(self):
        Student.objects.create(student_id="22cs078", semester=5)
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        result = services.allocate_guide_to_range("22cs078-22cs082", self.guide_b.pk, 5)
        self.assertEqual(self.internship("22cs078", 5).guide, self.guide_b)
        self.assertEqual(self.internship("22cs078", 7).guide, self.guide_a)
        self.assertEqual(len(result.missing_student_ids), 4)

    def test_manual_assignment_survives_reallocation(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)
        manual = self.internship("22cs079")
        services.assign_guide_manually(manual.pk, self.guide_b.pk)

        result = services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        self.assertEqual(result.skipped_student_ids, ["22cs079"])
        manual.refresh_from_db()
        self.assertEqual(manual.guide, self.guide_b)
        self.assertTrue(manual.is_guide_manually_assigned)

    def test_range_allocation_never_overrides_a_manual_guide(self):
        services.allocate_guide_to_range("22cs079-22cs079", self.guide_a.pk, 7)
        services.assign_guide_manually(self.internship("22cs079").pk, self.guide_a.pk)

        result = services.allocate_guide_to_range("22cs079-22cs079", self.guide_b.pk, 7)
        self.assertEqual(result.skipped_student_ids, ["22cs079"])
        self.assertEqual(self.internship("22cs079").guide, self.guide_a)

    def test_manual_student_stays_while_rest_of_range_moves(self):
        for student in Student.objects.filter(semester=7):
            services.provision_student_internship(student)
        services.assign_guide_manually(self.internship("22cs079").pk, self.guide_a.pk)

        result = services.allocate_guide_to_range("22cs078-22cs082", self.guide_b.pk, 7)

        self.assertEqual(result.skipped_student_ids, ["22cs079"])
        manual = self.internship("22cs079")
        self.assertEqual(manual.guide, self.guide_a)
        self.assertTrue(manual.is_guide_manually_assigned)
        for student_id in ["22cs078", "22cs081", "22cs082"]:
            internship = self.internship(student_id)
            self.assertEqual(internship.guide, self.guide_b)
            self.assertFalse(internship.is_guide_manually_assigned)
        # Outside the range
        self.assertIsNone(self.internship("22cs083").guide)

    def test_allocation_locks_every_resolved_student(self):
        with patch.object(services, "_lock_students", wraps=services._lock_students) as lock:
            services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        lock.assert_called_once()
        locked_ids = sorted(student.student_id for student in lock.call_args[0][0])
        self.assertEqual(locked_ids, ["22cs078", "22cs079", "22cs081", "22cs082"])

    def test_overlap_is_checked_after_locking(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)
        calls = []

        def record_lock(students):
            calls.append("lock")

        def record_check(*args, **kwargs):
            calls.append("check")

        with patch.object(services, "_lock_students", side_effect=record_lock), \
                patch.object(services, "_ensure_no_overlap", side_effect=record_check):
            services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        self.assertEqual(calls, ["lock", "check"])

    def test_range_without_students_still_records_allocation(self):
        result = services.allocate_guide_to_range("21it001-21it003", self.guide_a.pk, 7)
        self.assertEqual(result.missing_student_ids, ["21it001", "21it002", "21it003"])
        self.assertTrue(GuideAllocation.objects.filter(range="21it001-21it003").exists())

    def test_invalid_inputs(self):
        with self.assertRaises(InvalidSemesterError):
            services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 6)
        with self.assertRaises(MalformedRangeError):
            services.allocate_guide_to_range("22cs078", self.guide_a.pk, 7)
        with self.assertRaises(GuideNotFoundError):
            services.allocate_guide_to_range("22cs078-22cs082", uuid.uuid4(), 7)
        with self.assertRaises(GuideNotFoundError):
            services.allocate_guide_to_range("22cs078-22cs082", "not-a-uuid", 7)

    def test_deleted_guide_cannot_be_allocated(self):
        self.guide_b.soft_delete()
        with self.assertRaises(GuideNotFoundError):
            services.allocate_guide_to_range("22cs078-22cs082", self.guide_b.pk, 7)

    def test_validate_range_overlap(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        with self.assertRaises(RangeOverlapError):
            services.validate_range_overlap("22cs078-22cs079", 7)
        services.validate_range_overlap("22cs078-22cs079", 7, exclude_guide_id=self.guide_a.pk)
        services.validate_range_overlap("22cs083-22cs090", 7)

    def test_delete_then_reallocate(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        deleted = services.delete_guide_allocation("22cs078-22cs082", 7)
        self.assertTrue(deleted.is_deleted)
        self.assertIsNotNone(deleted.deleted_at)
        self.assertEqual(list(services.get_all_guide_allocations(7)), [])
        self.assertFalse(StudentInternship.objects.filter(semester=7).exists())

        for internship in StudentInternship.all_objects.filter(semester=7):
            self.assertTrue(internship.is_deleted)
            self.assertIsNotNone(internship.deleted_at)
        self.assertEqual(StudentInternship.all_objects.filter(semester=7).count(), 4)

        # Soft-deleted internships no longer block another guide
        result = services.allocate_guide_to_range("22cs078-22cs082", self.guide_b.pk, 7)
        self.assertFalse(result.allocation.is_deleted)
        self.assertEqual(StudentInternship.objects.filter(semester=7, guide=self.guide_b).count(), 4)
        self.assertEqual(StudentInternship.all_objects.count(), 4)

    def test_reallocating_same_guide_revives_allocation(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)
        services.delete_guide_allocation("22cs078-22cs082", 7)
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        self.assertEqual(GuideAllocation.all_objects.count(), 1)
        self.assertEqual(GuideAllocation.objects.count(), 1)

    def test_delete_unknown_allocation(self):
        with self.assertRaises(AllocationNotFoundError):
            services.delete_guide_allocation("22cs078-22cs082", 7)

        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)
        with self.assertRaises(AllocationNotFoundError):
            services.delete_guide_allocation("22cs078-22cs082", 7, guide_id=self.guide_b.pk)

    def test_provision_picks_up_covering_allocation(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)
        late = Student.objects.create(student_id="22cs080", semester=7)

        internship = services.provision_student_internship(late)
        self.assertEqual(internship.guide, self.guide_a)
        self.assertFalse(internship.is_guide_manually_assigned)

        # A second call keeps the single record
        services.provision_student_internship(late)
        self.assertEqual(StudentInternship.all_objects.filter(student=late).count(), 1)

    def test_provision_without_allocation_leaves_guide_empty(self):
        student = Student.objects.get(student_id="22cs083", semester=7)
        internship = services.provision_student_internship(student)
        self.assertIsNone(internship.guide)

    def test_guide_students_and_lookup(self):
        services.allocate_guide_to_range("22cs078-22cs082", self.guide_a.pk, 7)

        student_ids = [i.student.student_id for i in services.get_guide_students(self.guide_a, 7)]
        self.assertEqual(student_ids, ["22cs078", "22cs079", "22cs081", "22cs082"])
        self.assertEqual(list(services.get_guide_students(self.guide_b)), [])

        internship = services.get_student_internship("22CS081", "7")
        self.assertEqual(internship.guide, self.guide_a)


class AllocationAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin_user = User.objects.create_user(
            username='admin', password='password', role='ADMIN', email='admin@test.com'
        )
        self.client.force_authenticate(user=self.admin_user)

        self.guide_user = User.objects.create_user(
            username='guide_a', password='password', role='GUIDE', email='a@test.com'
        )
        self.guide_a = Guide.objects.create(
            user=self.guide_user, username='guide_a', guide_name='Guide A', email='a@test.com'
        )
        self.guide_b = Guide.objects.create(username='guide_b', guide_name='Guide B', email='b@test.com')

        self.student_user = User.objects.create_user(
            username='22cs078', password='password', role='STUDENT', email='22cs078@charusat.edu.in'
        )
        Student.objects.create(user=self.student_user, student_id="22cs078", semester=7)
        Student.objects.create(student_id="22cs079", semester=7)

    def allocate(self, range_value, guide, semester=7):
        return self.client.post('/api/guide-allocation/allocate/', {
            'range': range_value, 'guideId': str(guide.pk), 'semester': semester
        }, format='json')

    def test_allocate(self):
        res = self.allocate('22cs078-22cs080', self.guide_a)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data['success'])
        self.assertEqual(res.data['data']['range'], '22cs078-22cs080')
        self.assertEqual(res.data['data']['guide']['username'], 'guide_a')
        self.assertEqual(res.data['missingStudents'], ['22cs080'])

    def test_allocate_error_statuses(self):
        res = self.allocate('22cs078-22it080', self.guide_a)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(res.data['success'])

        res = self.allocate('22cs078-22cs080', self.guide_a, semester=3)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.post('/api/guide-allocation/allocate/', {
            'range': '22cs078-22cs080', 'guideId': str(uuid.uuid4()), 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        res = self.client.post('/api/guide-allocation/allocate/', {'range': '22cs078-22cs080'}, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_overlap_response_lists_students(self):
        self.allocate('22cs078-22cs079', self.guide_a)
        res = self.allocate('22cs079-22cs085', self.guide_b)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data['overlappingStudents'], ['22cs079'])

        res = self.client.post('/api/guide-allocation/validate-range/', {
            'range': '22cs079-22cs085', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.post('/api/guide-allocation/validate-range/', {
            'range': '22cs080-22cs085', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data['overlappingStudents'], [])

    def test_list_and_delete(self):
        self.allocate('22cs078-22cs079', self.guide_a)

        res = self.client.get('/api/guide-allocation/allocations/', {'semester': 7})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data['data']), 1)

        res = self.client.get('/api/guide-allocation/allocations/', {'semester': 6})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.delete('/api/guide-allocation/allocations/', {
            'range': '22cs078-22cs079', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data['data']['is_deleted'])

        res = self.client.delete('/api/guide-allocation/allocations/', {
            'range': '22cs078-22cs079', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        res = self.client.get('/api/guide-allocation/allocations/')
        self.assertEqual(res.data['data'], [])

    def test_export_workbook(self):
        self.allocate('22cs078-22cs079', self.guide_a)

        res = self.client.get('/api/guide-allocation/allocations/export/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn('Guide_Allocations.xlsx', res['Content-Disposition'])

        wb = load_workbook(BytesIO(res.content))
        self.assertEqual(wb.sheetnames, ['Guide Allocations', 'Student Internships'])
        rows = list(wb['Guide Allocations'].iter_rows(values_only=True))
        self.assertEqual(rows[0][0], 'Range')
        self.assertEqual(rows[1][0], '22cs078-22cs079')
        self.assertEqual(wb['Student Internships'].max_row, 3)

    def test_update_guide_marks_manual(self):
        self.allocate('22cs078-22cs079', self.guide_a)
        internship = StudentInternship.objects.get(student__student_id='22cs079')

        res = self.client.put(f'/api/student-internships/{internship.pk}/update-guide/', {
            'guideId': str(self.guide_b.pk)
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data['data']['is_guide_manually_assigned'])
        self.assertEqual(res.data['data']['guide']['username'], 'guide_b')

        res = self.client.put(f'/api/student-internships/{uuid.uuid4()}/update-guide/', {
            'guideId': str(self.guide_b.pk)
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_student_lookup(self):
        self.allocate('22cs078-22cs079', self.guide_a)

        res = self.client.get('/api/student-internships/student/22CS078/', {'semester': 7})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data['data']['student']['student_id'], '22cs078')

        res = self.client.get('/api/student-internships/student/22cs078/')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.get('/api/student-internships/student/22cs099/', {'semester': 7})
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_guide_sees_own_students(self):
        self.allocate('22cs078-22cs079', self.guide_a)

        self.client.force_authenticate(user=self.guide_user)
        res = self.client.get('/api/student-internships/my-students/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row['student']['student_id'] for row in res.data['data']], ['22cs078', '22cs079'])

        res = self.client.post('/api/guide-allocation/allocate/', {
            'range': '22cs078-22cs079', 'guideId': str(self.guide_a.pk), 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_sees_own_internship(self):
        self.allocate('22cs078-22cs079', self.guide_a)

        self.client.force_authenticate(user=self.student_user)
        res = self.client.get('/api/student-internships/me/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data['data']), 1)
        self.assertEqual(res.data['data'][0]['guide']['username'], 'guide_a')

        res = self.client.get('/api/student-internships/my-students/')
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_requires_authentication(self):
        client = APIClient()
        res = client.get('/api/guide-allocation/allocations/')
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class GuideAllocationsCommandTests(TestCase):
    def setUp(self):
        self.guide = Guide.objects.create(username='guide_a', guide_name='Guide A', email='a@test.com')
        Student.objects.create(student_id="22cs078", semester=7)
        services.allocate_guide_to_range("22cs078-22cs079", self.guide.pk, 7)

    def test_lists_allocations_with_missing_students(self):
        out = StringIO()
        call_command('guide_allocations', '--missing', stdout=out)
        output = out.getvalue()

        self.assertIn('Found 1 guide allocation(s) for all semesters', output)
        self.assertIn('range=22cs078-22cs079 semester=7 guide=guide_a students=2', output)
        self.assertIn('missing: 22cs079', output)

    def test_semester_filter(self):
        out = StringIO()
        call_command('guide_allocations', '--semester', '5', stdout=out)
        self.assertIn('Found 0 guide allocation(s) for semester 5', out.getvalue())

    def test_invalid_semester(self):
        with self.assertRaises(CommandError):
            call_command('guide_allocations', '--semester', '6', stdout=StringIO())
