"""Tests for account use cases: register, login, refresh, profile."""
import pytest

from app.application.accounts import (
    AuthenticatedUser, RegisterUserUseCase, LoginUseCase, RefreshTokensUseCase,
    GetProfileUseCase, validate_account_input,
)
from app.application.errors import AuthError, ConflictError, NotFoundError, ValidationError
from app.auth import hash_password, needs_rehash, validate_password_strength, verify_password
from app.infrastructure.db.models import User
from app.tokens import verify_token, TOKEN_TYPE_REFRESH

PASSWORD = "MySecure2024!Pass"


@pytest.fixture
def registered(db_session):
    user, tokens = RegisterUserUseCase(db_session).execute({
        "email": "  Alice@Example.COM ",
        "password": PASSWORD,
        "name": " Alice ",
    })
    return user, tokens


class TestPasswordPolicy:
    def test_strong_password(self):
        assert validate_password_strength(PASSWORD) == []

    def test_too_short(self):
        assert "Password must be at least 6 characters long" in validate_password_strength("ab1")

    def test_needs_letter(self):
        assert "Password must contain at least one letter" in validate_password_strength("12345678")

    def test_common_password(self):
        errors = validate_password_strength("Password123")
        assert "Password is too common, please choose a stronger password" in errors

    def test_repeated_characters(self):
        errors = validate_password_strength("aaaa-bcdef")
        assert "Password cannot contain more than 3 consecutive identical characters" in errors

    def test_hash_roundtrip(self):
        password_hash = hash_password(PASSWORD)
        assert password_hash != PASSWORD
        assert verify_password(PASSWORD, password_hash) is True
        assert verify_password("wrong-password", password_hash) is False


class TestAccountInput:
    def test_required_and_invalid_email(self):
        errors, _ = validate_account_input({"email": "not-an-email"}, required=("email", "password"))
        assert errors == ["password is required", "Please provide a valid email address"]

    def test_email_normalized(self):
        errors, sanitized = validate_account_input({"email": " Bob@Mail.Org "}, required=("email",))
        assert errors == []
        assert sanitized == {"email": "bob@mail.org"}


class TestRegister:
    def test_creates_user_and_tokens(self, registered):
        user, tokens = registered
        assert user.email == "alice@example.com"
        assert user.name == "Alice"
        assert user.password_hash != PASSWORD
        assert tokens["expiresIn"] == "7d"
        assert verify_token(tokens["accessToken"]).user_id == user.id
        assert verify_token(tokens["refreshToken"], expected_type=TOKEN_TYPE_REFRESH).user_id == user.id

    def test_duplicate_email(self, db_session, registered):
        with pytest.raises(ConflictError) as exc_info:
            RegisterUserUseCase(db_session).execute({"email": "alice@example.com", "password": PASSWORD})
        assert exc_info.value.error == "User already exists"
        assert exc_info.value.status_code == 400

    def test_weak_password(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            RegisterUserUseCase(db_session).execute({"email": "bob@example.com", "password": "123"})
        assert exc_info.value.error == "Password validation failed"
        assert exc_info.value.details
        assert db_session.query(User).count() == 0

    def test_missing_fields(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            RegisterUserUseCase(db_session).execute({})
        assert exc_info.value.details == ["email is required", "password is required"]


class TestLogin:
    def test_success(self, db_session, registered):
        user, tokens = LoginUseCase(db_session).execute({"email": "ALICE@example.com", "password": PASSWORD})
        assert user.id == registered[0].id
        assert verify_token(tokens["accessToken"]).user_id == user.id

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, db_session, registered):
        with pytest.raises(AuthError) as wrong:
            LoginUseCase(db_session).execute({"email": "alice@example.com", "password": "Nope12345"})
        with pytest.raises(AuthError) as unknown:
            LoginUseCase(db_session).execute({"email": "nobody@example.com", "password": PASSWORD})
        assert wrong.value.to_dict() == unknown.value.to_dict()
        assert wrong.value.error == "Invalid credentials"

    def test_current_hash_is_not_rewritten(self, db_session, registered):
        user, _ = registered
        before = user.password_hash
        assert needs_rehash(before) is False

        LoginUseCase(db_session).execute({"email": "alice@example.com", "password": PASSWORD})
        db_session.refresh(user)
        assert user.password_hash == before

    def test_missing_password(self, db_session, registered):
        with pytest.raises(ValidationError):
            LoginUseCase(db_session).execute({"email": "alice@example.com"})


class TestRefresh:
    def test_issues_new_pair(self, db_session, registered):
        user, tokens = registered
        same_user, new_tokens = RefreshTokensUseCase(db_session).execute(tokens["refreshToken"])
        assert same_user.id == user.id
        assert set(new_tokens) == {"accessToken", "refreshToken", "expiresIn"}

    def test_access_token_rejected(self, db_session, registered):
        _, tokens = registered
        with pytest.raises(AuthError):
            RefreshTokensUseCase(db_session).execute(tokens["accessToken"])

    def test_missing_token(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            RefreshTokensUseCase(db_session).execute(None)
        assert exc_info.value.message == "Refresh token is required"

    def test_deleted_user(self, db_session, registered):
        user, tokens = registered
        db_session.delete(user)
        db_session.commit()
        with pytest.raises(AuthError):
            RefreshTokensUseCase(db_session).execute(tokens["refreshToken"])


class TestProfile:
    def test_profile_with_subscription_count(self, db_session, user, subscription_factory):
        subscription_factory(user.id)
        subscription_factory(user.id, service_name="Spotify")
        requester = AuthenticatedUser(user_id=user.id, email=user.email, name=user.name)

        profile = GetProfileUseCase(db_session).execute(requester)

        assert profile["email"] == "owner@example.com"
        assert profile["subscriptionCount"] == 2
        assert "password_hash" not in profile
        assert "passwordHash" not in profile

    def test_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            GetProfileUseCase(db_session).execute(AuthenticatedUser(user_id=404, email="x@y.z", name=None))
