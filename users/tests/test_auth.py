from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

User = get_user_model()


class RegisterLoginTestCase(APITestCase):

    def test_registration_always_creates_a_student(self):
        response = self.client.post(reverse('register'), {
            "email": "new@example.com",
            "first_name": "New",
            "last_name": "Person",
            "password": "long-enough-1",
            "role": "admin",
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email="new@example.com").role, User.Role.STUDENT)

    def test_login_is_case_insensitive_and_returns_user(self):
        User.objects.create_user(username="mixed@example.com", email="mixed@example.com", password="long-enough-1")

        response = self.client.post(
            reverse('login'), {"email": "MIXED@example.com", "password": "long-enough-1"}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['role'], User.Role.STUDENT)
        self.assertEqual(response.data['user']['attempts_submitted'], 0)

    def test_wrong_password(self):
        User.objects.create_user(username="a@example.com", email="a@example.com", password="long-enough-1")

        response = self.client.post(reverse('login'), {"email": "a@example.com", "password": "nope"}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
