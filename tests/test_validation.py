"""Tests for the registration validation gate."""

from user_microservice import PasswordPolicy, Settings, validate_registration

from conftest import valid_registration


def fields(result):
    return [failure.field for failure in result.errors]


def test_valid_registration_passes():
    result = validate_registration(valid_registration(), PasswordPolicy())

    assert result.ok
    assert result.errors == []
    assert result.value.email == "jane.doe@acme.io"
    assert result.value.first_name == "Jane"


def test_missing_email_is_reported():
    payload = valid_registration()
    del payload["email"]

    result = validate_registration(payload, PasswordPolicy())

    assert not result.ok
    assert result.value is None
    assert fields(result) == ["email"]
    assert result.errors[0].message == '"email" is required'


def test_malformed_email_is_reported():
    result = validate_registration(valid_registration(email="not-an-email"), PasswordPolicy())

    assert fields(result) == ["email"]
    assert result.errors[0].message == '"email" must be a valid email'


def test_weak_password_lists_every_broken_rule():
    result = validate_registration(valid_registration(password="abc"), PasswordPolicy())

    assert fields(result) == ["password", "password", "password"]
    messages = " ".join(failure.message for failure in result.errors)
    assert "at least 8 characters" in messages
    assert "uppercase" in messages
    assert "digit" in messages


def test_all_violations_reported_together_in_field_order():
    payload = {"password": "short", "lastName": "Doe", "email": "bad"}

    result = validate_registration(payload, PasswordPolicy())

    failed = fields(result)
    assert failed[0] == "email"
    assert "password" in failed
    assert "firstName" in failed
    assert failed.index("password") < failed.index("firstName")


def test_missing_password_is_reported_once():
    payload = valid_registration()
    del payload["password"]

    result = validate_registration(payload, PasswordPolicy())

    assert fields(result) == ["password"]
    assert result.errors[0].message == '"password" is required'


def test_empty_profile_field_is_rejected():
    result = validate_registration(valid_registration(firstName=""), PasswordPolicy())

    assert fields(result) == ["firstName"]
    assert result.errors[0].message == '"firstName" is not allowed to be empty'


def test_nested_fields_use_dotted_paths():
    payload = valid_registration(address={"street": "1 Main St", "country": "NO"})

    result = validate_registration(payload, PasswordPolicy())

    assert fields(result) == ["address.city"]


def test_non_object_body_is_rejected():
    result = validate_registration(["jane.doe@acme.io"], PasswordPolicy())

    assert fields(result) == ["body"]


def test_policy_is_configurable():
    lenient = PasswordPolicy(min_length=4, require_uppercase=False, require_digit=False)
    strict = PasswordPolicy(min_length=12, require_special=True)

    assert validate_registration(valid_registration(password="abcd"), lenient).ok

    result = validate_registration(valid_registration(password="Sup3rSecret"), strict)
    messages = [failure.message for failure in result.errors]
    assert len(messages) == 2
    assert any("special character" in message for message in messages)


def test_extra_fields_are_kept_for_the_service():
    result = validate_registration(valid_registration(newsletter=True), PasswordPolicy())

    assert result.ok
    assert result.value.model_dump(by_alias=True)["newsletter"] is True


def test_gate_does_not_mutate_input():
    payload = valid_registration()
    snapshot = dict(payload)

    validate_registration(payload, PasswordPolicy())
    validate_registration(payload, PasswordPolicy())

    assert payload == snapshot


def test_policy_reads_environment(monkeypatch):
    monkeypatch.setenv("USER_SERVICE_PASSWORD_MIN_LENGTH", "10")
    monkeypatch.setenv("USER_SERVICE_PASSWORD_REQUIRE_SPECIAL", "true")

    policy = PasswordPolicy.from_settings(Settings(_env_file=None))

    assert policy.min_length == 10
    assert policy.require_special is True
