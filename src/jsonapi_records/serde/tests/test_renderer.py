import datetime
import decimal

import pytest


@pytest.fixture
def target_class():
    from ..renderer import ReprRenderer

    return ReprRenderer


def test_singleton(target_class):
    from ..models import (
        LinkageRepr,
        ResourceIdRepr,
        ResourceRepr,
        SingletonDocumentRepr,
    )

    target = target_class()

    result = target(
        SingletonDocumentRepr(
            data=ResourceRepr(
                type="foos",
                id="1",
                attributes=[
                    ("a", 1),
                    ("b", 2),
                    ("c", 3),
                ],
                relationships=[
                    (
                        "item",
                        LinkageRepr(
                            data=ResourceIdRepr(
                                type="bars",
                                id="1",
                            ),
                        ),
                    ),
                    (
                        "items",
                        LinkageRepr(
                            data=[
                                ResourceIdRepr(
                                    type="bars",
                                    id="1",
                                ),
                                ResourceIdRepr(
                                    type="bars",
                                    id="2",
                                ),
                            ],
                        ),
                    ),
                ],
                meta={"big": True},
            ),
        )
    )

    assert result == {
        "data": {
            "type": "foos",
            "id": "1",
            "attributes": {
                "a": 1,
                "b": 2,
                "c": 3,
            },
            "relationships": {
                "item": {
                    "data": {"type": "bars", "id": "1"},
                },
                "items": {
                    "data": [
                        {"type": "bars", "id": "1"},
                        {"type": "bars", "id": "2"},
                    ],
                },
            },
            "meta": {"big": True},
        },
    }


def test_write_members(target_class):
    from ..models import (
        LinkageRepr,
        ResourceIdRepr,
        ResourceRepr,
        SingletonDocumentRepr,
        WriteMethod,
    )

    target = target_class()

    result = target(
        SingletonDocumentRepr(
            data=ResourceRepr(
                type="authors",
                id=None,
                attributes=[("first_name", "Stephen")],
                relationships=[
                    (
                        "books",
                        LinkageRepr(
                            data=[
                                ResourceIdRepr(
                                    type="books",
                                    temp_id="abc1",
                                    method=WriteMethod.CREATE,
                                ),
                            ],
                        ),
                    ),
                    ("genre", LinkageRepr(data=None)),
                ],
            ),
            included=[
                ResourceRepr(
                    type="books",
                    id=None,
                    temp_id="abc1",
                    method=WriteMethod.CREATE,
                    attributes=[("title", "The Shining")],
                ),
            ],
        )
    )

    assert result == {
        "data": {
            "type": "authors",
            "attributes": {"first_name": "Stephen"},
            "relationships": {
                "books": {
                    "data": [
                        {"type": "books", "temp-id": "abc1", "method": "create"},
                    ],
                },
                "genre": {"data": None},
            },
        },
        "included": [
            {
                "type": "books",
                "temp-id": "abc1",
                "method": "create",
                "attributes": {"title": "The Shining"},
            },
        ],
    }


def test_collection(target_class):
    from ..models import CollectionDocumentRepr, ResourceRepr

    target = target_class()

    result = target(
        CollectionDocumentRepr(
            data=[
                ResourceRepr(type="foos", id="1"),
                ResourceRepr(type="foos", id="2"),
            ],
            meta={"total": 2},
        )
    )

    assert result == {
        "data": [
            {"type": "foos", "id": "1"},
            {"type": "foos", "id": "2"},
        ],
        "meta": {"total": 2},
    }


def test_null_data(target_class):
    from ..models import SingletonDocumentRepr

    assert target_class()(SingletonDocumentRepr(data=None)) == {"data": None}


@pytest.mark.parametrize(
    ("input", "expected"),
    [
        (
            datetime.datetime(2020, 1, 1, 9, 0, 0, tzinfo=datetime.timezone.utc),
            "2020-01-01T09:00:00+00:00",
        ),
        (datetime.date(2020, 1, 1), "2020-01-01"),
        (decimal.Decimal("1.50"), "1.50"),
        (b"\x00\x01", "AAE="),
        ([1, "a", None], [1, "a", None]),
        ({"x": {"y": decimal.Decimal("2")}}, {"x": {"y": "2"}}),
    ],
)
def test_attribute_values(target_class, input, expected):
    from ..models import ResourceRepr, SingletonDocumentRepr

    result = target_class()(
        SingletonDocumentRepr(
            data=ResourceRepr(type="foos", id="1", attributes=[("value", input)]),
        )
    )
    assert result["data"]["attributes"]["value"] == expected


def test_naive_datetime(target_class):
    from ..models import ResourceRepr, SingletonDocumentRepr

    doc = SingletonDocumentRepr(
        data=ResourceRepr(
            type="foos", id="1", attributes=[("at", datetime.datetime(2020, 1, 1, 9, 0, 0))]
        ),
    )

    with pytest.raises(ValueError) as e:
        target_class()(doc)
    assert "/data/attributes/at" in str(e.value)

    result = target_class(assume_naive_timezone_as=datetime.timezone.utc)(doc)
    assert result["data"]["attributes"]["at"] == "2020-01-01T09:00:00+00:00"


def test_unsupported_type(target_class):
    from ..models import ResourceRepr, SingletonDocumentRepr

    with pytest.raises(TypeError):
        target_class()(
            SingletonDocumentRepr(
                data=ResourceRepr(type="foos", id="1", attributes=[("value", object())]),
            )
        )
