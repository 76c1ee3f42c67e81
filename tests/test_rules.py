import pytest

from taskstore.domain.enums import TaskStatus
from taskstore.domain.errors import TaskValidationError
from taskstore.domain.rules import (
    CREATE_FIELDS,
    FIELD_RULES,
    REQUIRED_FIELDS,
    UPDATE_FIELDS,
    validate_input,
)


def test_every_recognized_field_has_a_rule():
    assert CREATE_FIELDS <= FIELD_RULES.keys()
    assert UPDATE_FIELDS <= CREATE_FIELDS
    assert REQUIRED_FIELDS <= CREATE_FIELDS


def test_status_is_normalized_to_enum():
    cleaned = validate_input({"status": "finalizado"}, allowed=UPDATE_FIELDS)
    assert cleaned == {"status": TaskStatus.FINALIZADO}


def test_enum_member_is_accepted():
    cleaned = validate_input({"status": TaskStatus.FAZENDO}, allowed=UPDATE_FIELDS)
    assert cleaned["status"] is TaskStatus.FAZENDO


@pytest.mark.parametrize("value", ["ABERTO", "open", "", None, 1])
def test_unknown_status_rejected(value):
    with pytest.raises(TaskValidationError) as exc:
        validate_input({"status": value}, allowed=UPDATE_FIELDS)
    assert exc.value.fields == ["status"]


def test_non_string_title_rejected():
    with pytest.raises(TaskValidationError) as exc:
        validate_input({"title": 123}, allowed=UPDATE_FIELDS)
    assert exc.value.errors["title"] == "nie moze byc pusty"


def test_unknown_field_rejected_even_if_everything_else_is_valid():
    with pytest.raises(TaskValidationError) as exc:
        validate_input(
            {"title": "a", "description": "b", "createdAt": "2025-01-01"},
            allowed=CREATE_FIELDS,
            required=REQUIRED_FIELDS,
        )
    assert exc.value.errors == {"createdAt": "nieznane pole"}


def test_missing_required_fields_are_reported():
    with pytest.raises(TaskValidationError) as exc:
        validate_input({}, allowed=CREATE_FIELDS, required=REQUIRED_FIELDS)
    assert exc.value.fields == ["description", "title"]


def test_empty_update_is_valid():
    assert validate_input({}, allowed=UPDATE_FIELDS) == {}


def test_non_mapping_body_rejected():
    with pytest.raises(TaskValidationError) as exc:
        validate_input(["title"], allowed=CREATE_FIELDS)
    assert exc.value.field == "body"


def test_error_message_names_fields():
    err = TaskValidationError({"title": "nie moze byc pusty", "status": "zly"})
    assert "'title'" in str(err)
    assert "'status'" in str(err)
    assert err.status_code == 400
