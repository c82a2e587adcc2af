import httpx

from planit.models.schemas import ProfileUpdate, User
from planit.services.auth import AuthState
from planit.services.storage import StorageKeys

USER = {"id": "u1", "email": "sam@example.com", "name": "Sam"}


def auth_ok(token="tok-1", **user_changes):
    return httpx.Response(200, json={"success": True, "token": token, "user": {**USER, **user_changes}})


async def store_login(storage, token="tok-1"):
    await storage.set_item(StorageKeys.AUTH_TOKEN, token)
    await storage.set_item(StorageKeys.USER_DATA, User(**USER).model_dump_json(by_alias=True))


async def test_login_persists_credentials(storage, make_client):
    auth = AuthState(storage, make_client(lambda request: auth_ok()))

    result = await auth.login("sam@example.com", "secret")

    assert result.success
    assert auth.is_authenticated
    assert auth.user.name == "Sam"
    assert await storage.get_item(StorageKeys.AUTH_TOKEN) == "tok-1"


async def test_login_rejected(storage, make_client):
    client = make_client(
        lambda request: httpx.Response(401, json={"success": False, "message": "Invalid email or password"})
    )
    auth = AuthState(storage, client)

    result = await auth.login("sam@example.com", "wrong")

    assert not result.success
    assert result.message == "Invalid email or password"
    assert not auth.is_authenticated


async def test_login_connection_error(storage, make_client):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = await AuthState(storage, make_client(handler)).login("sam@example.com", "secret")

    assert not result.success
    assert result.message == "Unable to connect to server. Please try again."


async def test_signup(storage, make_client):
    auth = AuthState(storage, make_client(lambda request: auth_ok(token="tok-2")))

    result = await auth.signup("sam@example.com", "secret", "Sam")

    assert result.success
    assert auth.token == "tok-2"


async def test_initialize_restores_and_refreshes(storage, make_client):
    await store_login(storage)
    seen = []

    def handler(request):
        seen.append(request.headers.get("authorization"))
        return auth_ok(name="Samantha")

    auth = AuthState(storage, make_client(handler))
    await auth.initialize()

    assert auth.is_authenticated
    assert auth.user.name == "Samantha"
    assert seen == ["Bearer tok-1"]
    assert not auth.is_loading


async def test_initialize_clears_rejected_session(storage, make_client):
    await store_login(storage)
    client = make_client(lambda request: httpx.Response(401, json={"success": False, "message": "expired"}))

    auth = AuthState(storage, client)
    await auth.initialize()

    assert not auth.is_authenticated
    assert await storage.get_item(StorageKeys.AUTH_TOKEN) is None
    assert await storage.get_item(StorageKeys.USER_DATA) is None


async def test_initialize_keeps_session_when_offline(storage, make_client):
    await store_login(storage)

    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    auth = AuthState(storage, make_client(handler))
    await auth.initialize()

    assert auth.is_authenticated
    assert auth.user.name == "Sam"


async def test_initialize_without_credentials(storage, make_client):
    calls = []
    auth = AuthState(storage, make_client(lambda request: calls.append(request)))

    await auth.initialize()

    assert not auth.is_authenticated
    assert calls == []


async def test_initialize_with_invalid_user_data(storage, make_client):
    await storage.set_item(StorageKeys.AUTH_TOKEN, "tok-1")
    await storage.set_item(StorageKeys.USER_DATA, "{broken")

    auth = AuthState(storage, make_client(lambda request: auth_ok()))
    await auth.initialize()

    assert not auth.is_authenticated
    assert await storage.get_item(StorageKeys.AUTH_TOKEN) is None


async def test_logout(storage, make_client):
    auth = AuthState(storage, make_client(lambda request: auth_ok()))
    await auth.login("sam@example.com", "secret")

    await auth.logout()

    assert auth.user is None and auth.token is None
    assert await storage.get_item(StorageKeys.AUTH_TOKEN) is None


async def test_update_profile_requires_login(storage, make_client):
    auth = AuthState(storage, make_client(lambda request: auth_ok()))

    result = await auth.update_profile(ProfileUpdate(name="New"))

    assert not result.success
    assert result.message == "Not signed in"


async def test_account_data_signed_out_is_local(storage, make_client):
    calls = []
    auth = AuthState(storage, make_client(lambda request: calls.append(request)))

    assert (await auth.save_account_data("  Sam ", "sam@example.com ")).success
    data = await auth.load_account_data()

    assert (data.name, data.email) == ("Sam", "sam@example.com")
    assert calls == []


async def test_account_data_requires_name(storage, make_client):
    auth = AuthState(storage, make_client(lambda request: auth_ok()))

    result = await auth.save_account_data("  ", "sam@example.com")

    assert not result.success
    assert result.message == "Name is required"


async def test_account_data_signed_in_updates_profile(storage, make_client):
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        if request.method == "PUT":
            return auth_ok(name="Samuel")
        return auth_ok()

    auth = AuthState(storage, make_client(handler, token_provider=lambda: "tok-1"))
    await auth.login("sam@example.com", "secret")

    result = await auth.save_account_data("Samuel", "sam@example.com")

    assert result.success
    assert auth.user.name == "Samuel"
    assert ("PUT", "/api/auth/profile") in seen
    assert (await auth.load_account_data()).name == "Samuel"
