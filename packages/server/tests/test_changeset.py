"""Tests for the generic changeset primitives."""

from __future__ import annotations

from types import SimpleNamespace

from codecorps.core.changeset import Changeset, FieldError, ValidationFailed


def _data(**attrs):
    defaults = {"name": None, "nickname": "old"}
    defaults.update(attrs)
    return SimpleNamespace(**defaults)


class TestCast:
    def test_records_only_present_keys(self):
        cs = Changeset(data=_data()).cast({"name": "Ada"}, ["name", "nickname"])
        assert cs.changes == {"name": "Ada"}

    def test_unchanged_values_are_not_recorded(self):
        cs = Changeset(data=_data()).cast({"nickname": "old"}, ["nickname"])
        assert cs.changes == {}

    def test_blank_string_clears(self):
        cs = Changeset(data=_data()).cast({"nickname": "   "}, ["nickname"])
        assert cs.changes == {"nickname": None}

    def test_ignores_unpermitted_keys(self):
        cs = Changeset(data=_data()).cast({"admin": True}, ["name"])
        assert cs.changes == {}


class TestValidations:
    def test_required_uses_existing_value(self):
        cs = Changeset(data=_data()).validate_required(["nickname", "name"])
        assert [e.field for e in cs.errors] == ["name"]

    def test_length_only_checks_changes(self):
        cs = Changeset(data=_data(nickname="x" * 50)).validate_length("nickname", max=10)
        assert cs.valid

    def test_format(self):
        cs = Changeset(data=_data()).cast({"name": "a b"}, ["name"])
        cs.validate_format("name", lambda v: " " not in v)
        assert cs.errors_on("name") == ["has invalid format"]

    def test_first_error_is_prepended(self):
        cs = Changeset(data=_data())
        cs.add_error("a", "one")
        cs.add_error("b", "two", first=True)
        assert [e.field for e in cs.errors] == ["b", "a"]


def test_field_error_render():
    error = FieldError("username", "should be at most {count} character(s)", {"count": 39})
    assert error.render() == "should be at most 39 character(s)"


def test_apply_copies_changes():
    data = _data()
    Changeset(data=data, changes={"name": "Ada"}).apply()
    assert data.name == "Ada"


def test_validation_failed_names_fields():
    cs = Changeset(data=_data())
    cs.add_error("name", "can't be blank")
    exc = ValidationFailed(cs)
    assert exc.changeset is cs
    assert "name" in str(exc)


def test_render_leaves_formatted_message_alone():
    error = FieldError("state_transition", "invalid transition {oops} from signed_up", {"validation": "transition"})
    assert error.render() == "invalid transition {oops} from signed_up"


class TestUpdateChange:
    def test_transforms_pending_change(self):
        cs = Changeset(data=_data()).cast({"name": "ada"}, ["name"])
        cs.update_change("name", str.title)
        assert cs.changes == {"name": "Ada"}

    def test_drops_change_equal_to_current_value(self):
        cs = Changeset(data=_data(nickname="Old")).cast({"nickname": "old"}, ["nickname"])
        cs.update_change("nickname", str.title)
        assert cs.changes == {}
