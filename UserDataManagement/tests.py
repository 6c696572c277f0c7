from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from InternshipAllocation import services
from InternshipAllocation.models import GuideAllocation, StudentInternship
from .models import Guide, Student, current_academic_year

User = get_user_model()


class StudentModelTests(TestCase):
    def test_save_normalizes_id_and_derives_email(self):
        student = Student.objects.create(student_id=" 22CS078 ", semester=7)
        self.assertEqual(student.student_id, "22cs078")
        self.assertEqual(student.email, "22cs078@charusat.edu.in")
        self.assertEqual(student.year, current_academic_year())

    def test_soft_deleted_rows_are_hidden(self):
        student = Student.objects.create(student_id="22cs078", semester=7)
        student.soft_delete()
        self.assertFalse(Student.objects.filter(pk=student.pk).exists())
        self.assertTrue(Student.all_objects.filter(pk=student.pk).exists())

        student.restore()
        self.assertTrue(Student.objects.filter(pk=student.pk).exists())


class GuideAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin_user = User.objects.create_user(
            username='admin', password='password', role='ADMIN', email='admin@test.com'
        )
        self.client.force_authenticate(user=self.admin_user)

    def test_create_guide_creates_login(self):
        res = self.client.post('/api/users/guides/', {
            'username': 'Guide1', 'guide_name': 'Guide One', 'email': 'guide1@test.com'
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

        guide = Guide.objects.get(username='guide1')
        self.assertEqual(guide.user.role, 'GUIDE')
        self.assertTrue(guide.user.check_password('guide1'))

    def test_duplicate_username_rejected_even_when_deleted(self):
        guide = Guide.objects.create(username='guide1', guide_name='Guide One', email='guide1@test.com')
        guide.soft_delete()

        res = self.client.post('/api/users/guides/', {
            'username': 'guide1', 'guide_name': 'Other', 'email': 'other@test.com'
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_username_of_other_role_rejected(self):
        res = self.client.post('/api/users/guides/', {
            'username': 'admin', 'guide_name': 'Not A Guide', 'email': 'notaguide@test.com'
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Guide.all_objects.exists())

        self.admin_user.refresh_from_db()
        self.assertEqual(self.admin_user.role, 'ADMIN')

    def test_existing_guide_login_without_profile_is_linked(self):
        login = User.objects.create_user(username='guide2', password='p', role='GUIDE', email='guide2@test.com')
        res = self.client.post('/api/users/guides/', {
            'username': 'guide2', 'guide_name': 'Guide Two', 'email': 'guide2@test.com'
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Guide.objects.get(username='guide2').user, login)

    def test_update_keeps_login_in_sync(self):
        self.client.post('/api/users/guides/', {
            'username': 'guide1', 'guide_name': 'Guide One', 'email': 'guide1@test.com'
        }, format='json')
        guide = Guide.objects.get(username='guide1')

        res = self.client.put(f'/api/users/guides/{guide.pk}/', {
            'username': 'Guide.One', 'email': 'NEW@test.com'
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        guide.user.refresh_from_db()
        self.assertEqual(guide.user.username, 'guide.one')
        self.assertEqual(guide.user.email, 'new@test.com')

    def test_update_rejects_identifier_of_another_login(self):
        self.client.post('/api/users/guides/', {
            'username': 'guide1', 'guide_name': 'Guide One', 'email': 'guide1@test.com'
        }, format='json')
        guide = Guide.objects.get(username='guide1')

        res = self.client.put(f'/api/users/guides/{guide.pk}/', {'email': 'admin@test.com'}, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.put(f'/api/users/guides/{guide.pk}/', {'username': 'admin'}, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        guide.refresh_from_db()
        self.assertEqual(guide.email, 'guide1@test.com')
        self.assertEqual(guide.username, 'guide1')

    def test_delete_is_soft(self):
        guide = Guide.objects.create(username='guide1', guide_name='Guide One', email='guide1@test.com')
        res = self.client.delete(f'/api/users/guides/{guide.pk}/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(Guide.all_objects.get(pk=guide.pk).is_deleted)

        res = self.client.get(f'/api/users/guides/{guide.pk}/')
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_non_admin_forbidden(self):
        student_user = User.objects.create_user(username='s1', password='p', role='STUDENT', email='s1@test.com')
        self.client.force_authenticate(user=student_user)
        res = self.client.get('/api/users/guides/')
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)


class StudentAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin_user = User.objects.create_user(
            username='admin', password='password', role='ADMIN', email='admin@test.com'
        )
        self.client.force_authenticate(user=self.admin_user)
        self.guide = Guide.objects.create(username='guide1', guide_name='Guide One', email='guide1@test.com')

    def test_create_student_provisions_internship(self):
        res = self.client.post('/api/users/students/', {
            'student_id': '22CS078', 'student_name': 'Student One', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(res.data['guideId'])

        student = Student.objects.get(student_id='22cs078', semester=7)
        self.assertEqual(student.user.role, 'STUDENT')
        internship = StudentInternship.objects.get(student=student, semester=7)
        self.assertIsNone(internship.guide)

    def test_create_student_inside_allocated_range_gets_guide(self):
        GuideAllocation.objects.create(guide=self.guide, range='22cs078-22cs082', semester=7)

        res = self.client.post('/api/users/students/', {
            'student_id': '22cs080', 'student_name': 'Late Joiner', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data['guideId'], str(self.guide.pk))

        internship = StudentInternship.objects.get(student__student_id='22cs080')
        self.assertEqual(internship.guide, self.guide)
        self.assertFalse(internship.is_guide_manually_assigned)

    def test_allocation_for_other_semester_is_ignored(self):
        GuideAllocation.objects.create(guide=self.guide, range='22cs078-22cs082', semester=5)

        res = self.client.post('/api/users/students/', {
            'student_id': '22cs080', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(res.data['guideId'])

    def test_invalid_student_id_rejected(self):
        res = self.client.post('/api/users/students/', {
            'student_id': 'abc', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_semester_rejected(self):
        res = self.client.post('/api/users/students/', {
            'student_id': '22cs078', 'semester': 6
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_student_rejected(self):
        Student.objects.create(student_id='22cs078', semester=7)
        res = self.client.post('/api/users/students/', {
            'student_id': '22cs078', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_by_semester(self):
        Student.objects.create(student_id='22cs078', semester=7)
        Student.objects.create(student_id='23cs001', semester=5)

        res = self.client.get('/api/users/students/', {'semester': 5})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data['count'], 1)
        self.assertEqual(res.data['data'][0]['student_id'], '23cs001')

    def test_update_student_name(self):
        student = Student.objects.create(student_id='22cs078', semester=7)
        res = self.client.put(f'/api/users/students/{student.pk}/', {'student_name': 'Renamed'}, format='json')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        student.refresh_from_db()
        self.assertEqual(student.student_name, 'Renamed')

    def test_delete_student_soft_deletes_internship(self):
        student = Student.objects.create(student_id='22cs078', semester=7)
        internship = StudentInternship.objects.create(student=student, semester=7, guide=self.guide)

        res = self.client.delete(f'/api/users/students/{student.pk}/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(Student.all_objects.get(pk=student.pk).is_deleted)
        self.assertTrue(StudentInternship.all_objects.get(pk=internship.pk).is_deleted)

    def test_student_id_of_other_role_rejected(self):
        User.objects.create_user(username='22cs078', password='p', role='GUIDE', email='g78@test.com')
        res = self.client.post('/api/users/students/', {
            'student_id': '22cs078', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Student.all_objects.exists())

    def test_semester_change_moves_internship(self):
        other_guide = Guide.objects.create(username='guide2', guide_name='Guide Two', email='guide2@test.com')
        res = self.client.post('/api/users/students/', {
            'student_id': '22cs078', 'semester': 5
        }, format='json')
        student = Student.objects.get(pk=res.data['data']['id'])
        services.allocate_guide_to_range('22cs078-22cs078', self.guide.pk, 5)
        GuideAllocation.objects.create(guide=other_guide, range='22cs070-22cs080', semester=7)

        res = self.client.put(f'/api/users/students/{student.pk}/', {'semester': 7}, format='json')
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        old = StudentInternship.all_objects.get(student=student, semester=5)
        self.assertTrue(old.is_deleted)
        current = StudentInternship.objects.get(student=student)
        self.assertEqual(current.semester, 7)
        self.assertEqual(current.guide, other_guide)
        self.assertEqual(list(services.get_guide_students(self.guide)), [])

        # A later allocation for the new semester leaves a single live record
        services.allocate_guide_to_range('22cs078-22cs078', other_guide.pk, 7)
        self.assertEqual(StudentInternship.objects.filter(student=student).count(), 1)

    def test_student_id_change_follows_new_range(self):
        other_guide = Guide.objects.create(username='guide2', guide_name='Guide Two', email='guide2@test.com')
        GuideAllocation.objects.create(guide=self.guide, range='22cs078-22cs080', semester=7)
        GuideAllocation.objects.create(guide=other_guide, range='22cs090-22cs095', semester=7)

        res = self.client.post('/api/users/students/', {
            'student_id': '22cs078', 'semester': 7
        }, format='json')
        self.assertEqual(res.data['guideId'], str(self.guide.pk))

        res = self.client.put(f"/api/users/students/{res.data['data']['id']}/", {'student_id': '22cs091'}, format='json')
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        internship = StudentInternship.objects.get(student__student_id='22cs091')
        self.assertEqual(internship.guide, other_guide)
        self.assertEqual(StudentInternship.all_objects.count(), 1)

    def test_deleted_student_is_restored_on_create(self):
        res = self.client.post('/api/users/students/', {
            'student_id': '22cs078', 'student_name': 'Student One', 'semester': 7
        }, format='json')
        student_pk = res.data['data']['id']
        self.client.delete(f'/api/users/students/{student_pk}/')

        res = self.client.post('/api/users/students/', {
            'student_id': '22cs078', 'student_name': 'Student Again', 'semester': 7
        }, format='json')
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(res.data['data']['id']), str(student_pk))

        student = Student.objects.get(pk=student_pk)
        self.assertEqual(student.student_name, 'Student Again')
        self.assertEqual(Student.all_objects.count(), 1)
        self.assertTrue(StudentInternship.objects.filter(student=student).exists())
