import pytest

from .testing import Author, Book, Genre, registry


@pytest.fixture
def target():
    from ..identity import IdentityResolver

    return IdentityResolver(registry)


class TestIdentityResolver:
    def test_creates_and_registers(self, target):
        from ..identity import IdentityPool

        pool = IdentityPool()
        book = target.resolve("books", 1, pool)
        assert isinstance(book, Book)
        assert book.id == "1"
        assert not book.persisted
        assert ("books", "1") in pool
        assert pool.created == [book]
        assert target.resolve("books", "1", pool) is book
        assert pool.created == [book]

    def test_returns_pooled_instance(self, target):
        from ..identity import IdentityPool

        pool = IdentityPool()
        author = Author(id="1")
        pool.put(("authors", "1"), author)
        assert target.resolve("authors", 1, pool) is author
        assert pool.created == []

    def test_unknown_type(self, target):
        from ..exceptions import UnknownResourceTypeError
        from ..identity import IdentityPool

        pool = IdentityPool()
        with pytest.raises(UnknownResourceTypeError) as e:
            target.resolve("unknowns", "1", pool, "/data/relationships/foo/data")
        assert e.value.sources == ["/data/relationships/foo/data"]
        assert ("unknowns", "1") not in pool
        assert pool.created == []


class TestIdentityPool:
    def test_seed(self):
        from ..identity import IdentityPool

        genre = Genre(id="20")
        other_genre = Genre(id="20")
        author = Author(id="1", genre=genre)
        author.books = [
            Book(id="10", author=author, genre=genre),
            Book(genre=other_genre),
        ]

        pool = IdentityPool()
        pool.seed(author)
        assert pool.get(("authors", "1")) is author
        assert pool.get(("books", "10")) is author.books[0]
        assert pool.get(("genres", "20")) is genre
