import pytest
from src.stores import CallDirectory, ExternalStoreError, SubscriberProfile, normalize_phone_number


@pytest.mark.parametrize(
    ("raw", "digits"),
    [
        ("+91 (987) 654-3210", "919876543210"),
        ("9876543210", "9876543210"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_phone_number_keeps_digits_only(raw, digits):
    assert normalize_phone_number(raw) == digits


def test_unknown_number_is_unrecognized(supabase_client_factory):
    directory = CallDirectory(supabase_client_factory({"AllowedNumber": []}))

    profile = directory.lookup_subscriber("+91 98765 43210")

    assert profile == SubscriberProfile.inactive("919876543210", "Unrecognized Caller")
    assert profile.dashboard_link == "/new-call/search?caller=919876543210"


def test_active_plan_is_verified(supabase_client_factory):
    client = supabase_client_factory(
        {
            "AllowedNumber": [{"user_id": 42}],
            "User": [{"plan_status": "Active", "name": "Asha"}],
        }
    )
    directory = CallDirectory(client, url="https://directory.supabase.co")

    profile = directory.lookup_subscriber("+919876543210")

    assert profile.has_active_subscription is True
    assert profile.user_name == "Asha"
    assert profile.subscription_status == "Verified"
    assert profile.dashboard_link == "/user/dashboard/42"
    assert profile.ticket == "Active Plan Call"
    client.table("AllowedNumber").eq.assert_called_with("phone_number", "919876543210")
    client.table("User").eq.assert_called_with("user_id", 42)
    assert directory.server_address == "directory.supabase.co"


def test_active_plan_without_name_gets_placeholder(supabase_client_factory):
    client = supabase_client_factory(
        {"AllowedNumber": [{"user_id": 1}], "User": [{"plan_status": "active", "name": None}]}
    )

    profile = CallDirectory(client).lookup_subscriber("123")

    assert profile.user_name == "Active Subscriber"


def test_inactive_plan_keeps_user_name(supabase_client_factory):
    client = supabase_client_factory(
        {"AllowedNumber": [{"user_id": 9}], "User": [{"plan_status": "expired", "name": "Ravi"}]}
    )

    profile = CallDirectory(client).lookup_subscriber("+1 555 000 1111")

    assert profile.has_active_subscription is False
    assert profile.user_name == "Ravi"
    assert profile.subscription_status == "None"


def test_missing_user_row(supabase_client_factory):
    client = supabase_client_factory({"AllowedNumber": [{"user_id": 9}], "User": []})

    profile = CallDirectory(client).lookup_subscriber("5550001111")

    assert profile.user_name == "User Data Missing"


def test_store_error_degrades_to_inactive_profile(supabase_client_factory):
    client = supabase_client_factory(errors={"AllowedNumber": RuntimeError("connection refused")})

    profile = CallDirectory(client).lookup_subscriber("5550001111")

    assert profile.user_name == "DB Error"
    assert profile.has_active_subscription is False


def test_list_addresses(supabase_client_factory):
    rows = [{"id": 1, "user_id": "u1", "address_line": "Plot 12, Sector 6"}]
    directory = CallDirectory(supabase_client_factory({"Address": rows}))

    assert directory.list_addresses("u1") == rows


def test_list_addresses_wraps_sdk_errors(supabase_client_factory):
    directory = CallDirectory(supabase_client_factory(errors={"Address": RuntimeError("rls")}))

    with pytest.raises(ExternalStoreError) as exc_info:
        directory.list_addresses("u1")

    assert isinstance(exc_info.value.cause, RuntimeError)


@pytest.mark.parametrize("plan_status", [True, 1, {"tier": "gold"}])
def test_non_string_plan_status_is_inactive(supabase_client_factory, plan_status):
    client = supabase_client_factory(
        {"AllowedNumber": [{"user_id": 7}], "User": [{"plan_status": plan_status, "name": "Meera"}]}
    )

    profile = CallDirectory(client).lookup_subscriber("+919876543210")

    assert profile == SubscriberProfile.inactive("919876543210", "Meera")


def test_padded_active_plan_status_is_verified(supabase_client_factory):
    client = supabase_client_factory(
        {"AllowedNumber": [{"user_id": 7}], "User": [{"plan_status": " ACTIVE ", "name": "Meera"}]}
    )

    assert CallDirectory(client).lookup_subscriber("7").has_active_subscription is True


def test_unexpected_user_row_degrades_to_system_error(supabase_client_factory):
    client = supabase_client_factory({"AllowedNumber": [{"user_id": 7}], "User": ["not-a-row"]})

    profile = CallDirectory(client).lookup_subscriber("7")

    assert profile.user_name == "System Error"
    assert profile.has_active_subscription is False
