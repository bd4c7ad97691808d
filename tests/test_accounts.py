import pytest

from app.exceptions import ConflictError, PermissionDeniedError, ValidationError
from applications.user.models import User, UserRole, UserStatus

pytestmark = pytest.mark.usefixtures("db")


class TestRegister:
    async def test_register_hashes_password_and_prefixes_id(self, services):
        user = await services.accounts.register(
            email="Jane@Example.com",
            password="secret123",
            first_name="Jane",
            last_name="Doe",
            role=UserRole.PROVIDER,
        )

        assert user.id.startswith("PRV")
        assert user.email == "jane@example.com"
        assert user.password != "secret123"
        assert user.verify_password("secret123")

    async def test_duplicate_email(self, services, make_user):
        await make_user(UserRole.CLIENT, email="taken@example.com")
        with pytest.raises(ConflictError):
            await services.accounts.register("taken@example.com", "secret123", "A", "B", UserRole.CLIENT)

    async def test_admin_cannot_self_register(self, services):
        with pytest.raises(PermissionDeniedError):
            await services.accounts.register("boss@example.com", "secret123", "A", "B", UserRole.ADMIN)

    @pytest.mark.parametrize(
        "email,password,first_name",
        [("not-an-email", "secret123", "A"), ("a@example.com", "123", "A"), ("a@example.com", "secret123", " ")],
    )
    async def test_validation(self, services, email, password, first_name):
        with pytest.raises(ValidationError):
            await services.accounts.register(email, password, first_name, "B", UserRole.CLIENT)


class TestAuthenticate:
    async def test_good_and_bad_password(self, services, make_user):
        user = await make_user(UserRole.CLIENT, email="me@example.com")

        assert (await services.accounts.authenticate("me@example.com", "secret123")).id == user.id
        with pytest.raises(ValidationError):
            await services.accounts.authenticate("me@example.com", "wrong")
        with pytest.raises(ValidationError):
            await services.accounts.authenticate("nobody@example.com", "secret123")

    async def test_suspended_user_is_refused(self, services, make_user):
        await make_user(UserRole.CLIENT, email="me@example.com", status=UserStatus.SUSPENDED)
        with pytest.raises(PermissionDeniedError):
            await services.accounts.authenticate("me@example.com", "secret123")


class TestProfile:
    async def test_location_and_availability(self, services, make_user):
        provider = await make_user(UserRole.PROVIDER, is_available=False)

        await services.accounts.update_location(provider, 45.76, 4.84)
        updated = await services.accounts.set_availability(provider, True)

        assert (updated.current_latitude, updated.current_longitude) == (45.76, 4.84)
        assert updated.is_available is True

    async def test_out_of_range_location(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        with pytest.raises(ValidationError):
            await services.accounts.update_location(client, 95, 0)

    async def test_clients_have_no_availability(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        with pytest.raises(PermissionDeniedError):
            await services.accounts.set_availability(client, True)

    async def test_update_profile_ignores_unknown_fields(self, services, make_user):
        provider = await make_user(UserRole.PROVIDER)

        updated = await services.accounts.update_profile(
            provider, phone="+33 6 00 00 00 00", service_radius=7.5, role=UserRole.ADMIN
        )

        assert updated.phone == "+33 6 00 00 00 00"
        assert updated.service_radius == 7.5
        assert updated.role == UserRole.PROVIDER

    async def test_notification_token(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        await services.accounts.set_notification_token(client, "fcm-abc")
        assert (await User.get(id=client.id)).notification_token == "fcm-abc"
