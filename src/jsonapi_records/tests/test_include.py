import pytest


@pytest.fixture
def target():
    from ..include import normalize_include_directive

    return normalize_include_directive


@pytest.mark.parametrize(
    ("input", "expected"),
    [
        (None, {}),
        ({}, {}),
        ("books", {"books": {}}),
        ("books.genre", {"books": {"genre": {}}}),
        ("books, genre", {"books": {}, "genre": {}}),
        (["genre", {"books": "genre"}], {"genre": {}, "books": {"genre": {}}}),
        ({"books": "genre", "specialBooks": {}}, {"books": {"genre": {}}, "specialBooks": {}}),
        ({"books": None, "genre": True}, {"books": {}, "genre": {}}),
        ({"books": set()}, {"books": {}}),
        ({"books.genre": "authors"}, {"books": {"genre": {"authors": {}}}}),
        (("books", "books.genre"), {"books": {"genre": {}}}),
        ({"books": ["genre", "author"]}, {"books": {"genre": {}, "author": {}}}),
    ],
)
def test_normalize(target, input, expected):
    assert target(input) == expected


def test_normalize_deep_path(target):
    result = target(".".join(["books", "author"] * 1000))
    depth = 0
    while result:
        (result,) = result.values()
        depth += 1
    assert depth == 2000


def test_normalize_does_not_modify_argument(target):
    directive = {"books": {"genre": {}}}
    result = target(directive)
    result["books"]["author"] = {}
    assert directive == {"books": {"genre": {}}}


@pytest.mark.parametrize(
    "input",
    [
        1,
        {"books": 1},
        {1: "books"},
        "books..genre",
        ["books", object()],
    ],
)
def test_normalize_invalid(target, input):
    from ..exceptions import InvalidIncludeDirectiveError

    with pytest.raises(InvalidIncludeDirectiveError) as e:
        target(input)
    assert e.value.directive == input


@pytest.mark.parametrize(
    ("input", "expected"),
    [
        (None, ""),
        ("books", "books"),
        ({"a": ["b", {"c": "d"}]}, "a.b,a.c.d"),
        ({"books": "genre", "special_books": {}}, "books.genre,special_books"),
    ],
)
def test_to_include_param(input, expected):
    from ..include import to_include_param

    assert to_include_param(input) == expected
