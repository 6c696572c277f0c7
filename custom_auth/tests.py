from django.conf import settings
from django.test import TestCase
from rest_framework.test import APIClient

from .models import User, ROLE_ADMIN, ROLE_GUIDE


class LoginFlowTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username='admin1', email='admin@test.com', password='pass123', role=ROLE_ADMIN
        )

    def test_login_with_username_returns_tokens_and_cookie(self):
        res = self.client.post('/api/auth/login/', {'username': 'admin1', 'password': 'pass123'}, format='json')
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data['success'])
        self.assertIn('access', res.data)
        self.assertIn('refresh', res.data)
        self.assertEqual(res.data['role'], ROLE_ADMIN)
        self.assertIn(settings.JWT_AUTH_COOKIE, res.cookies)
        self.assertTrue(res.cookies[settings.JWT_AUTH_COOKIE]['httponly'])

    def test_login_with_email_form_encoded(self):
        res = self.client.post('/api/auth/login/', {'email': 'ADMIN@test.com', 'password': 'pass123'}, format='multipart')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data['email'], 'admin@test.com')

    def test_wrong_password_is_rejected(self):
        res = self.client.post('/api/auth/login/', {'username': 'admin1', 'password': 'nope'}, format='json')
        self.assertEqual(res.status_code, 401)
        self.assertFalse(res.data['success'])

    def test_inactive_user_is_rejected(self):
        self.user.is_active = False
        self.user.save()
        res = self.client.post('/api/auth/login/', {'username': 'admin1', 'password': 'pass123'}, format='json')
        self.assertEqual(res.status_code, 401)

    def test_cookie_authenticates_following_requests(self):
        self.client.post('/api/auth/login/', {'username': 'admin1', 'password': 'pass123'}, format='json')
        res = self.client.get('/api/auth/me/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data['data']['username'], 'admin1')
        self.assertEqual(res.data['data']['role'], ROLE_ADMIN)

    def test_bearer_header_authenticates(self):
        login = self.client.post('/api/auth/login/', {'username': 'admin1', 'password': 'pass123'}, format='json')
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        res = client.get('/api/auth/me/')
        self.assertEqual(res.status_code, 200)

    def test_me_requires_authentication(self):
        res = self.client.get('/api/auth/me/')
        self.assertEqual(res.status_code, 401)

    def test_logout_clears_cookie(self):
        self.client.post('/api/auth/login/', {'username': 'admin1', 'password': 'pass123'}, format='json')
        res = self.client.post('/api/auth/logout/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.cookies[settings.JWT_AUTH_COOKIE].value, '')


class RolePropertiesTest(TestCase):
    def test_role_flags(self):
        guide = User.objects.create_user(username='g1', email='g1@test.com', password='x', role=ROLE_GUIDE)
        self.assertTrue(guide.is_guide)
        self.assertFalse(guide.is_portal_admin)
        self.assertFalse(guide.is_student)
