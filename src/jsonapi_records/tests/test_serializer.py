import pytest

from ..exceptions import UnknownRelationshipError
from ..naming import KeyFormat
from .testing import Author, Book, CountingTempIds, Genre, persisted, registry


@pytest.fixture
def target():
    from ..serializer import GraphSerializer

    return GraphSerializer(registry, temp_id_factory=CountingTempIds())


def update_payload(method):
    return {
        "data": {
            "id": "1",
            "type": "authors",
            "attributes": {"first_name": "Stephen"},
            "relationships": {
                "books": {
                    "data": [{"id": "10", "type": "books", "method": method}],
                },
            },
        },
        "included": [
            {
                "id": "10",
                "type": "books",
                "method": method,
                "attributes": {"title": "Updated Book Title"},
                "relationships": {
                    "genre": {
                        "data": {"id": "20", "type": "genres", "method": method},
                    },
                },
            },
            {
                "id": "20",
                "type": "genres",
                "method": method,
                "attributes": {"name": "Updated Genre Name"},
            },
        ],
    }


@pytest.fixture
def seeded():
    genre = persisted(Genre(id="20", name="Horror"))
    book = persisted(Book(id="10", title="The Shining", genre=genre))
    special_book = persisted(Book(id="30", title="The Stand"))
    instance = Author(first_name="Stephen")
    instance.id = "1"
    instance.books = [book]
    instance.special_books = [special_book]
    instance.persisted = True
    genre.name = "Updated Genre Name"
    book.title = "Updated Book Title"
    return instance


class TestNestedCreate:
    @pytest.fixture
    def instance(self):
        instance = Author(first_name="Stephen")
        instance.books = [Book(title="The Shining", genre=Genre(name="Horror"))]
        instance.special_books = [Book(title="The Stand")]
        return instance

    def test_payload(self, target, instance):
        payload = target.build_payload(instance, {"books": "genre", "specialBooks": {}})
        assert payload.to_json() == {
            "data": {
                "type": "authors",
                "attributes": {"first_name": "Stephen"},
                "relationships": {
                    "books": {
                        "data": [{"temp-id": "abc1", "type": "books", "method": "create"}],
                    },
                    "special_books": {
                        "data": [{"temp-id": "abc3", "type": "books", "method": "create"}],
                    },
                },
            },
            "included": [
                {
                    "temp-id": "abc1",
                    "type": "books",
                    "method": "create",
                    "attributes": {"title": "The Shining"},
                    "relationships": {
                        "genre": {
                            "data": {"temp-id": "abc2", "type": "genres", "method": "create"},
                        },
                    },
                },
                {
                    "temp-id": "abc2",
                    "type": "genres",
                    "method": "create",
                    "attributes": {"name": "Horror"},
                },
                {
                    "temp-id": "abc3",
                    "type": "books",
                    "method": "create",
                    "attributes": {"title": "The Stand"},
                },
            ],
        }
        assert payload.temp_ids == {
            "abc1": instance.books[0],
            "abc2": instance.books[0].genre,
            "abc3": instance.special_books[0],
        }
        assert payload.include == {"books": {"genre": {}}, "specialBooks": {}}

    def test_records_are_left_untouched(self, target, instance):
        target.build_payload(instance, {"books": "genre", "specialBooks": {}})
        assert instance.id is None
        assert not instance.persisted
        assert instance.books[0].id is None
        assert not hasattr(instance.books[0], "temp_id")

    def test_empty_directive_sends_root_only(self, target, instance):
        assert target.build_payload(instance).to_json() == {
            "data": {"type": "authors", "attributes": {"first_name": "Stephen"}},
        }

    def test_untouched_unpersisted_member_is_created(self, target, instance):
        instance.books[0] = Book()
        payload = target.build_payload(instance, {"books": "genre"})
        assert payload.to_json() == {
            "data": {
                "type": "authors",
                "attributes": {"first_name": "Stephen"},
                "relationships": {
                    "books": {
                        "data": [{"temp-id": "abc1", "type": "books", "method": "create"}],
                    },
                },
            },
            "included": [{"temp-id": "abc1", "type": "books", "method": "create"}],
        }


class TestNestedUpdate:
    def test_update(self, target, seeded):
        payload = target.build_payload(seeded, {"books": "genre"})
        assert payload.to_json() == update_payload("update")
        assert payload.temp_ids == {}

    def test_destroy(self, target, seeded):
        seeded.books[0].marked_for_destruction = True
        seeded.books[0].genre.marked_for_destruction = True
        assert target.build_payload(seeded, {"books": "genre"}).to_json() == update_payload(
            "destroy"
        )

    def test_disassociate(self, target, seeded):
        seeded.books[0].marked_for_disassociation = True
        seeded.books[0].genre.marked_for_disassociation = True
        assert target.build_payload(seeded, {"books": "genre"}).to_json() == update_payload(
            "disassociate"
        )

    def test_untouched_persisted_member_is_omitted(self, target, seeded):
        result = target.build_payload(seeded, {"books": "genre", "special_books": {}}).to_json()
        assert "special_books" not in result["data"]["relationships"]
        assert [r["id"] for r in result["included"]] == ["10", "20"]

    def test_clean_relationship_is_omitted(self, target):
        book = persisted(Book(id="10", title="x"))
        instance = persisted(Author(id="1", first_name="Stephen", books=[book]))
        assert target.build_payload(instance, "books").to_json() == {
            "data": {"type": "authors", "id": "1", "attributes": {"first_name": "Stephen"}},
        }

    def test_dirty_member_among_clean_ones(self, target):
        books = [persisted(Book(id=str(i), title="x")) for i in range(3)]
        instance = persisted(Author(id="1", books=books))
        books[1].title = "y"
        result = target.build_payload(instance, "books").to_json()
        assert result["data"]["relationships"] == {
            "books": {"data": [{"type": "books", "id": "1", "method": "update"}]},
        }
        assert result["included"] == [
            {"type": "books", "id": "1", "method": "update", "attributes": {"title": "y"}},
        ]

    def test_newly_associated_persisted_member(self, target):
        instance = persisted(Author(id="1"))
        instance.books.append(persisted(Book(id="99", title="x")))
        result = target.build_payload(instance, "books").to_json()
        assert result == {
            "data": {
                "type": "authors",
                "id": "1",
                "relationships": {
                    "books": {"data": [{"type": "books", "id": "99", "method": "update"}]},
                },
            },
            "included": [{"type": "books", "id": "99", "method": "update"}],
        }

    def test_cleared_to_one(self, target):
        instance = persisted(Author(id="1", genre=persisted(Genre(id="20"))))
        instance.genre = None
        assert target.build_payload(instance, "genre").to_json() == {
            "data": {
                "type": "authors",
                "id": "1",
                "relationships": {"genre": {"data": None}},
            },
        }

    def test_swapped_to_one(self, target):
        instance = persisted(Author(id="1", genre=persisted(Genre(id="20"))))
        instance.genre = persisted(Genre(id="21"))
        result = target.build_payload(instance, "genre").to_json()
        assert result["data"]["relationships"] == {
            "genre": {"data": {"type": "genres", "id": "21", "method": "update"}},
        }


class TestGraphShapes:
    def test_cycle(self, target):
        author = Author(first_name="a")
        book = Book(title="b", author=author)
        author.books = [book]

        payload = target.build_payload(author, {"books": "author"})
        assert payload.to_json() == {
            "data": {
                "type": "authors",
                "temp-id": "abc2",
                "attributes": {"first_name": "a"},
                "relationships": {
                    "books": {
                        "data": [{"type": "books", "temp-id": "abc1", "method": "create"}],
                    },
                },
            },
            "included": [
                {
                    "type": "books",
                    "temp-id": "abc1",
                    "method": "create",
                    "attributes": {"title": "b"},
                    "relationships": {
                        "author": {
                            "data": {"type": "authors", "temp-id": "abc2", "method": "create"},
                        },
                    },
                },
            ],
        }
        assert payload.temp_ids == {"abc1": book, "abc2": author}

    def test_shared_reference(self, target):
        genre = Genre(name="Horror")
        author = Author(books=[Book(title="a", genre=genre), Book(title="b", genre=genre)])

        result = target.build_payload(author, {"books": "genre"}).to_json()
        assert [(r["type"], r["temp-id"]) for r in result["included"]] == [
            ("books", "abc1"),
            ("genres", "abc2"),
            ("books", "abc3"),
        ]
        assert result["included"][2]["relationships"]["genre"]["data"] == {
            "type": "genres",
            "temp-id": "abc2",
            "method": "create",
        }

    def test_key_format(self):
        from ..serializer import GraphSerializer

        target = GraphSerializer(registry, KeyFormat.CAMELIZE, CountingTempIds())
        instance = Author(first_name="x", special_books=[Book()])
        result = target.build_payload(instance, "special_books").to_json()
        assert result["data"]["attributes"] == {"firstName": "x"}
        assert result["data"]["relationships"] == {
            "specialBooks": {"data": [{"type": "books", "temp-id": "abc1", "method": "create"}]},
        }

    def test_unknown_relationship(self, target):
        instance = Author(books=[Book(title="x")])
        with pytest.raises(UnknownRelationshipError):
            target.build_payload(instance, {"books": "unknown"})

    def test_unknown_relationship_under_empty_branch(self, target):
        with pytest.raises(UnknownRelationshipError) as e:
            target.build_payload(Author(books=[]), {"books": "bogus"})
        assert e.value.resource_type == "books"
        assert e.value.name == "bogus"

    def test_unknown_relationship_under_omitted_branch(self, target):
        instance = persisted(Author(id="1", books=[persisted(Book(id="10"))]))
        with pytest.raises(UnknownRelationshipError):
            target.build_payload(instance, {"books": {"genre": "bogus"}})
        with pytest.raises(UnknownRelationshipError):
            target.build_payload(instance, {"genre": "bogus"})

    def test_any_type_relationship(self, target):
        result = target.build_payload(Author(tags=[]), {"tags": "genre"}).to_json()
        assert "relationships" not in result["data"]
        with pytest.raises(UnknownRelationshipError):
            target.build_payload(Author(tags=[]), {"tags": "bogus"})


def test_temp_id_generator():
    from ..serializer import TempIdGenerator

    a, b = TempIdGenerator(), TempIdGenerator("x-")
    ids = {a(), a(), b()}
    assert len(ids) == 3
    assert all(i.startswith("temp-id-") or i.startswith("x-") for i in ids)


ROUND_TRIP_DOC = {
    "data": {
        "type": "authors",
        "id": "1",
        "attributes": {"first_name": "Stephen"},
        "relationships": {
            "books": {"data": [{"type": "books", "id": "10"}, {"type": "books", "id": "11"}]},
            "genre": {"data": {"type": "genres", "id": "20"}},
        },
    },
    "included": [
        {
            "type": "books",
            "id": "10",
            "attributes": {"title": "The Shining"},
            "relationships": {"genre": {"data": {"type": "genres", "id": "20"}}},
        },
        {"type": "books", "id": "11", "attributes": {"title": "It"}},
        {"type": "genres", "id": "20", "attributes": {"name": "Horror"}},
    ],
}


def identities(linkage):
    data = linkage["data"]
    if isinstance(data, dict):
        data = [data]
    return [(d["type"], d["id"]) for d in data]


def shape(document):
    return {
        (r["type"], r["id"]): (
            r.get("attributes", {}),
            {name: identities(linkage) for name, linkage in r.get("relationships", {}).items()},
        )
        for r in [document["data"], *document.get("included", [])]
    }


class TestRoundTrip:
    DIRECTIVE = {"books": "genre", "genre": {}}

    @pytest.fixture
    def loaded(self):
        from ..deserializer import RecordDeserializer

        return RecordDeserializer(registry).load_document(ROUND_TRIP_DOC)

    def test_clean_graph(self, target, loaded):
        from ..serde.models import ResourceIdRepr

        result = target.build_payload(loaded, self.DIRECTIVE).to_json()
        assert result == {
            "data": {"type": "authors", "id": "1", "attributes": {"first_name": "Stephen"}},
        }
        assert loaded.relationship_resource_identifiers(["books", "genre"]) == {
            "books": [ResourceIdRepr(type="books", id="10"), ResourceIdRepr(type="books", id="11")],
            "genre": [ResourceIdRepr(type="genres", id="20")],
        }
        assert loaded.books[0].relationship_resource_identifiers(["genre"]) == {
            "genre": [ResourceIdRepr(type="genres", id="20")],
        }

    def test_new_graph(self, target, loaded):
        for record in (loaded, *loaded.books, loaded.genre):
            record.persisted = False
        result = target.build_payload(loaded, self.DIRECTIVE).to_json()
        assert shape(result) == shape(ROUND_TRIP_DOC)

    def test_dirty_graph(self, target, loaded):
        loaded.books[0].title = "Carrie"
        loaded.books[1].title = "Misery"
        loaded.genre.name = "Thriller"
        result = target.build_payload(loaded, self.DIRECTIVE).to_json()
        assert shape(result) == {
            ("authors", "1"): (
                {"first_name": "Stephen"},
                {"books": [("books", "10"), ("books", "11")], "genre": [("genres", "20")]},
            ),
            ("books", "10"): ({"title": "Carrie"}, {"genre": [("genres", "20")]}),
            ("books", "11"): ({"title": "Misery"}, {}),
            ("genres", "20"): ({"name": "Thriller"}, {}),
        }
