"""Tests for record registration."""

from typing import Optional

import pytest
from sqlmodel import SQLModel

from dailyposts.core.errors import RecordDefinitionError
from dailyposts.core.records import is_zero, record, spec_of
from dailyposts.models.comment import Comment
from dailyposts.models.user import User


def test_columns_follow_declaration_order():
    assert spec_of(User).columns == ("uid", "name", "admin", "password")
    assert spec_of(Comment).columns == ("cid", "pid", "uid", "text", "answer")


def test_columns_are_lowercased_field_names():
    @record
    class Mixed(SQLModel):
        Title: str = ""
        viewCount: int = 0

    assert spec_of(Mixed).columns == ("title", "viewcount")


def test_duplicate_columns_rejected_at_definition():
    with pytest.raises(RecordDefinitionError):
        @record
        class Clash(SQLModel):
            name: str = ""
            Name: str = ""


def test_zero_test_for_unknown_field_rejected():
    with pytest.raises(RecordDefinitionError):
        @record(zero={"missing": lambda v: v is None})
        class Partial(SQLModel):
            value: int = 0


def test_unregistered_type_rejected():
    class Plain(SQLModel):
        value: int = 0

    with pytest.raises(RecordDefinitionError):
        spec_of(Plain)


def test_registration_is_not_inherited():
    @record
    class Base(SQLModel):
        value: int = 0

    class Derived(Base):
        extra: str = ""

    with pytest.raises(RecordDefinitionError):
        spec_of(Derived)


@pytest.mark.parametrize("value", [None, 0, 0.0, False, "", b"", [], {}])
def test_default_zero_values(value):
    assert is_zero(value)


@pytest.mark.parametrize("value", [1, -1, True, "x", b"\x00", [0], object()])
def test_default_non_zero_values(value):
    assert not is_zero(value)


def test_values_skip_zero_only_when_asked():
    @record
    class Score(SQLModel):
        points: int = 0
        label: Optional[str] = None

    spec = spec_of(Score)
    assert spec.values(Score(points=0, label="a"), skip_zero=True) == [("label", "a")]
    assert spec.values(Score(points=0, label="a"), skip_zero=False) == [("points", 0), ("label", "a")]


def test_custom_zero_test():
    @record(zero={"points": lambda v: v is None})
    class Nullable(SQLModel):
        points: Optional[int] = None

    spec = spec_of(Nullable)
    assert spec.values(Nullable(points=0), skip_zero=True) == [("points", 0)]
    assert spec.values(Nullable(), skip_zero=True) == []
