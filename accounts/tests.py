from unittest.mock import patch

from botocore.exceptions import ClientError, NoRegionError
from django.contrib.auth import get_user_model
from django.test import Client, TestCase, override_settings

from accounts.emails import send_access_code_email
from accounts.tasks import ACCESS_CODE_SUBJECT, EmailDeliveryError, deliver_access_code
from accounts.tokens import ADMIN_ROLE, QUIZ_TAKER_ROLE, make_bearer_token, read_bearer_token
from accounts.utils import get_ses_client
from quiz_platform.testing import admin_headers, create_admin
from quiztakers.models import PREMIUM, REGULAR, QuizTaker

User = get_user_model()


class AdminRegistrationTestCase(TestCase):

    def setUp(self):
        self.client = Client()

    def test_first_admin_can_register_without_token(self):
        response = self.client.post("/api/auth/admin/register",
                                    {"email": "First@Example.com", "password": "secret1"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["admin"]["email"], "first@example.com")

        admin = User.objects.get(email="first@example.com")
        self.assertTrue(admin.is_staff)
        self.assertEqual(read_bearer_token(body["token"]), {"id": admin.pk, "role": ADMIN_ROLE})

    def test_registration_closed_once_an_admin_exists(self):
        create_admin()

        response = self.client.post("/api/auth/admin/register",
                                    {"email": "second@example.com", "password": "secret1"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 403)
        self.assertFalse(User.objects.filter(email="second@example.com").exists())

    def test_existing_admin_can_register_another(self):
        admin = create_admin()

        response = self.client.post("/api/auth/admin/register",
                                    {"email": "second@example.com", "password": "secret1"},
                                    content_type="application/json", headers=admin_headers(admin))

        self.assertEqual(response.status_code, 201)
        self.assertTrue(User.objects.filter(email="second@example.com", is_staff=True).exists())

    def test_duplicate_email_rejected(self):
        admin = create_admin()

        response = self.client.post("/api/auth/admin/register",
                                    {"email": "ADMIN@example.com", "password": "secret1"},
                                    content_type="application/json", headers=admin_headers(admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("Admin already exists", response.json()["message"])

    def test_short_password_rejected(self):
        response = self.client.post("/api/auth/admin/register",
                                    {"email": "first@example.com", "password": "abc"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("Password must be at least 6 characters", response.json()["message"])

    def test_malformed_json_rejected(self):
        response = self.client.post("/api/auth/admin/register", "{not json",
                                    content_type="application/json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Request body must be valid JSON")


class AdminLoginTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin(email="admin@example.com", password="password123")
        cls.not_staff = User.objects.create_user(username="user@example.com", email="user@example.com",
                                                 password="password123")

    def test_login_with_email(self):
        response = self.client.post("/api/auth/admin/login",
                                    {"email": "Admin@Example.com", "password": "password123"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 200)
        payload = read_bearer_token(response.json()["token"])
        self.assertEqual(payload, {"id": self.admin.pk, "role": ADMIN_ROLE})

    def test_wrong_password(self):
        response = self.client.post("/api/auth/admin/login",
                                    {"email": "admin@example.com", "password": "wrong"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Invalid credentials")

    def test_non_staff_user_cannot_login(self):
        response = self.client.post("/api/auth/admin/login",
                                    {"email": "user@example.com", "password": "password123"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 401)

    def test_missing_fields(self):
        response = self.client.post("/api/auth/admin/login", {"email": "admin@example.com"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 400)

    def test_get_not_allowed(self):
        response = self.client.get("/api/auth/admin/login")

        self.assertEqual(response.status_code, 405)


class QuizTakerLoginTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.quiz_taker = QuizTaker.objects.create(email="taker@example.com", name="Taker",
                                                  account_type=PREMIUM, access_code="ABC123XYZ")
        cls.inactive = QuizTaker.objects.create(email="inactive@example.com", account_type=PREMIUM,
                                                access_code="INACTIVE1", is_active=False)
        cls.regular = QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR)

    def test_login_with_access_code(self):
        response = self.client.post("/api/auth/quiztaker/login",
                                    {"email": "TAKER@example.com", "accessCode": "abc123xyz"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["quizTaker"]["accessCode"], "ABC123XYZ")
        self.assertEqual(read_bearer_token(body["token"]), {"id": self.quiz_taker.pk, "role": QUIZ_TAKER_ROLE})

    def test_wrong_access_code(self):
        response = self.client.post("/api/auth/quiztaker/login",
                                    {"email": "taker@example.com", "accessCode": "WRONG0000"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 401)

    def test_regular_taker_cannot_login(self):
        response = self.client.post("/api/auth/quiztaker/login",
                                    {"email": "regular@example.com", "accessCode": "ABC123XYZ"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 401)

    def test_inactive_taker(self):
        response = self.client.post("/api/auth/quiztaker/login",
                                    {"email": "inactive@example.com", "accessCode": "INACTIVE1"},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "Account is inactive. Contact admin.")


class BearerTokenDecoratorTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.quiz_taker = QuizTaker.objects.create(email="taker@example.com", account_type=PREMIUM,
                                                  access_code="ABC123XYZ")

    def test_missing_token(self):
        response = self.client.get("/api/admin/quiztakers")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Access denied. No token provided.")

    def test_tampered_token(self):
        response = self.client.get("/api/admin/quiztakers", headers={"Authorization": "Bearer not-a-token"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Invalid token.")

    def test_quiz_taker_token_on_admin_route(self):
        token = make_bearer_token(self.quiz_taker.pk, QUIZ_TAKER_ROLE)

        response = self.client.get("/api/admin/quiztakers", headers={"Authorization": f"Bearer {token}"})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "Access denied. Admin only.")

    def test_admin_token_on_quiz_taker_route(self):
        response = self.client.get("/api/quiztaker/profile", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "Access denied. Quiz taker only.")

    def test_token_for_deleted_taker(self):
        token = make_bearer_token(999999, QUIZ_TAKER_ROLE)

        response = self.client.get("/api/quiztaker/profile", headers={"Authorization": f"Bearer {token}"})

        self.assertEqual(response.status_code, 401)


class AccessCodeEmailTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.quiz_taker = QuizTaker.objects.create(email="taker@example.com", name="Ada", account_type=PREMIUM,
                                                  access_code="ABC123XYZ")

    @patch("accounts.emails.deliver_access_code.delay")
    def test_email_queued_after_commit(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            send_access_code_email(self.quiz_taker)
            mock_delay.assert_not_called()

        self.assertEqual(len(callbacks), 1)
        mock_delay.assert_called_once_with(self.quiz_taker.pk)

    @patch("accounts.tasks.get_ses_client")
    def test_deliver_access_code(self, mock_get_client):
        mock_get_client.return_value.send_email.return_value = {"MessageId": "abc"}

        self.assertEqual(deliver_access_code(self.quiz_taker.pk), "abc")

        sent = mock_get_client.return_value.send_email.call_args.kwargs
        self.assertEqual(sent["Destination"], {"ToAddresses": ["taker@example.com"]})
        self.assertEqual(sent["Message"]["Subject"], {"Data": ACCESS_CODE_SUBJECT})
        self.assertIn("ABC123XYZ", sent["Message"]["Body"]["Text"]["Data"])
        self.assertIn("ABC123XYZ", sent["Message"]["Body"]["Html"]["Data"])

    @patch("accounts.tasks.get_ses_client")
    def test_regular_taker_gets_no_email(self, mock_get_client):
        regular = QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR)

        self.assertIsNone(deliver_access_code(regular.pk))
        mock_get_client.assert_not_called()

    @patch("accounts.tasks.get_ses_client", return_value=None)
    def test_missing_ses_client_fails_the_task(self, mock_get_client):
        with self.assertRaises(EmailDeliveryError):
            deliver_access_code(self.quiz_taker.pk)

    @patch("accounts.tasks.get_ses_client")
    def test_ses_rejection_is_raised(self, mock_get_client):
        mock_get_client.return_value.send_email.side_effect = ClientError(
            {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified."}}, "SendEmail")

        with self.assertRaises(ClientError):
            deliver_access_code(self.quiz_taker.pk)


class SesClientTestCase(TestCase):

    @override_settings(DJANGO_ENV="DEVELOPMENT", AWS_REGION="eu-west-2", AWS_ACCESS_KEY="key",
                       AWS_SECRET_ACCESS_KEY="secret")
    @patch("accounts.utils.boto3.client")
    def test_development_uses_configured_keys(self, mock_client):
        self.assertEqual(get_ses_client(), mock_client.return_value)
        mock_client.assert_called_once_with("ses", region_name="eu-west-2", aws_access_key_id="key",
                                            aws_secret_access_key="secret")

    @override_settings(DJANGO_ENV="PRODUCTION", AWS_REGION="eu-west-2", AWS_ACCESS_KEY="key")
    @patch("accounts.utils.boto3.client")
    def test_other_environments_use_instance_role(self, mock_client):
        get_ses_client()
        mock_client.assert_called_once_with("ses", region_name="eu-west-2")

    @patch("accounts.utils.boto3.client", side_effect=NoRegionError())
    def test_client_errors_return_none(self, mock_client):
        self.assertIsNone(get_ses_client())
