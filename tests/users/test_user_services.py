from __future__ import annotations

import io

import pytest
from werkzeug.security import check_password_hash

from ce_attendance.core.enums import Role
from ce_attendance.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ce_attendance.users.service import AccountService, AuthService, HeadshotService, require_admin

from conftest import InMemoryAdmins, InMemoryHeadshots, InMemoryUsers, make_profile, png_bytes


def signup(service, **overrides):
    values = dict(
        email="  Jo@Example.com ",
        password="hunter22",
        first_name="Jo",
        last_name="Broker",
        trec_license=" 0777000 ",
        middle_initial="k.",
    )
    values.update(overrides)
    return service.create_account(**values)


def test_create_account_normalizes_and_hashes():
    users = InMemoryUsers()

    user_id = signup(AccountService(users))

    profile = users.get_by_id(user_id)
    assert profile.email == "jo@example.com"
    assert profile.trec_license == "0777000"
    assert profile.middle_initial == "K"
    assert profile.display_name == "Jo K. Broker"
    assert check_password_hash(profile.password_hash, "hunter22")


@pytest.mark.parametrize("field", ["email", "password", "first_name", "last_name", "trec_license"])
def test_create_account_requires_fields(field):
    with pytest.raises(ValidationError) as exc:
        signup(AccountService(InMemoryUsers()), **{field: "  "})
    assert str(exc.value).startswith("Missing required fields")


def test_create_account_rejects_short_password_and_bad_email():
    service = AccountService(InMemoryUsers())

    with pytest.raises(ValidationError):
        signup(service, password="12345")
    with pytest.raises(ValidationError):
        signup(service, email="not-an-email")


def test_create_account_rejects_duplicates():
    service = AccountService(InMemoryUsers(make_profile()))

    with pytest.raises(ValidationError, match="email"):
        signup(service, email="PAT@example.com")
    with pytest.raises(ValidationError, match="TREC license"):
        signup(service, trec_license="0654321")


def test_authenticate_resolves_admin_capability():
    users = InMemoryUsers(make_profile(), make_profile("u-admin", email="teacher@example.com", trec_license="staff-1"))
    auth = AuthService(users, InMemoryAdmins("u-admin"))

    student = auth.authenticate("Pat@Example.com", "secret123")
    admin = auth.authenticate("teacher@example.com", "secret123")

    assert student.student_identifier == "0654321"
    assert student.role == Role.STUDENT
    assert admin.is_admin and admin.role == Role.ADMIN


@pytest.mark.parametrize(
    "email,password",
    [("pat@example.com", "wrong"), ("nobody@example.com", "secret123"), ("", "")],
)
def test_authenticate_failures(email, password):
    auth = AuthService(InMemoryUsers(make_profile()), InMemoryAdmins())

    with pytest.raises(AuthenticationError):
        auth.authenticate(email, password)


def test_authenticate_placeholder_hash_is_a_plain_failure():
    auth = AuthService(InMemoryUsers(make_profile(password_hash="CHANGE_ME")), InMemoryAdmins())

    with pytest.raises(AuthenticationError):
        auth.authenticate("pat@example.com", "CHANGE_ME")


def test_principal_for_unknown_user():
    auth = AuthService(InMemoryUsers(make_profile()), InMemoryAdmins())

    assert auth.principal_for(None) is None
    assert auth.principal_for("ghost") is None
    assert auth.principal_for("u-student").display_name == "Pat Q. Realtor"


def test_require_admin(student, admin):
    assert require_admin(admin) is admin
    with pytest.raises(AuthorizationError):
        require_admin(student)
    with pytest.raises(AuthorizationError):
        require_admin(None)


def test_headshot_path_uses_safe_extension():
    assert HeadshotService.path_for("0654321", "Me.JPEG") == "headshots/0654321.jpeg"
    assert HeadshotService.path_for("0654321", "photo") == "headshots/0654321.jpg"
    assert HeadshotService.path_for("0654321", "x.p/n?g") == "headshots/0654321.png"


def test_store_headshot_writes_file_and_public_url(admin, student, tmp_path):
    repo = InMemoryHeadshots()
    service = HeadshotService(repo, base_url="https://cdn.example.test/public/", storage_dir=tmp_path)

    with pytest.raises(AuthorizationError):
        service.store_headshot(principal=student, trec_license="0654321", filename="a.png", stream=io.BytesIO(png_bytes()))

    path = service.store_headshot(
        principal=admin, trec_license=" 0654321 ", filename="a.png", stream=io.BytesIO(png_bytes())
    )

    assert path == "headshots/0654321.png"
    assert (tmp_path / path).read_bytes() == png_bytes()
    assert service.headshot_url("0654321") == "https://cdn.example.test/public/headshots/0654321.png"
    assert service.headshot_url("0000000") is None
    assert HeadshotService(repo).headshot_url("0654321") == "headshots/0654321.png"


def test_store_headshot_rejects_non_images(admin, tmp_path):
    repo = InMemoryHeadshots()
    service = HeadshotService(repo, storage_dir=tmp_path)

    with pytest.raises(ValidationError):
        service.store_headshot(principal=admin, trec_license="0654321", filename="a.png", stream=io.BytesIO(b"fake"))

    assert repo.paths == {}
    assert not (tmp_path / "headshots").exists()


def test_store_headshot_needs_a_storage_dir(admin):
    with pytest.raises(ValidationError):
        HeadshotService(InMemoryHeadshots()).store_headshot(
            principal=admin, trec_license="0654321", filename="a.png", stream=io.BytesIO(png_bytes())
        )
