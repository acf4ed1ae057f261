import datetime

import pytest
from django.core.cache import cache
from model_bakery import baker
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from InternshipTrackApp.core.choices import PlacementStatus, ReviewerRole, Role

PASSWORD = "pass1234"


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def faculty():
    return baker.make("organization.Faculty", name="Engineering")


@pytest.fixture
def department(faculty):
    return baker.make("organization.Department", faculty=faculty, name="D005")


@pytest.fixture
def other_department(faculty):
    return baker.make("organization.Department", faculty=faculty, name="D006")


@pytest.fixture
def make_subject():
    def _make(role, email=None, **kwargs):
        if email is not None:
            kwargs["email"] = email
        user = baker.make("users.User", role=role, **kwargs)
        user.set_password(PASSWORD)
        user.save()
        return user
    return _make


@pytest.fixture
def student(make_subject, department):
    return make_subject(Role.STUDENT, email="stu1@example.com", department=department,
                        faculty=department.faculty)


@pytest.fixture
def other_student(make_subject, other_department):
    return make_subject(Role.STUDENT, email="stu2@example.com", department=other_department,
                        faculty=other_department.faculty)


@pytest.fixture
def lecturer(make_subject, department):
    return make_subject(Role.LECTURER, email="lec1@example.com", department=department)


@pytest.fixture
def supervisor(make_subject):
    return make_subject(Role.SUPERVISOR, email="sup1@example.com", company_name="Acme Ltd")


@pytest.fixture
def hod(make_subject, department):
    return make_subject(Role.HOD, email="hod@example.com", department=department)


@pytest.fixture
def admin_user(make_subject):
    return make_subject(Role.ADMIN, email="admin@example.com")


@pytest.fixture
def assign():
    def _assign(student, reviewer, is_active=True):
        return baker.make(
            "organization.Assignment",
            student=student,
            reviewer=reviewer,
            reviewer_role=ReviewerRole(reviewer.role),
            is_active=is_active,
        )
    return _assign


@pytest.fixture
def make_placement():
    def _make(student, status=PlacementStatus.PENDING_APPROVAL, **kwargs):
        kwargs.setdefault("start_date", datetime.date(2025, 1, 6))
        kwargs.setdefault("end_date", datetime.date(2025, 6, 27))
        kwargs.setdefault("company_name", "Acme Ltd")
        kwargs.setdefault("supervisor_email", "sup1@example.com")
        return baker.make("internships.Placement", student=student, status=status, **kwargs)
    return _make


@pytest.fixture
def api():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")
        return client
    return _client


@pytest.fixture
def login():
    """Client authenticated through the token endpoint with the subject's password."""
    def _login(user):
        client = APIClient()
        token = client.post(
            "/api/v1/auth/token/", {"email": user.email, "password": PASSWORD}, format="json"
        ).data["access"]
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client
    return _login
