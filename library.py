import logging
from threading import RLock
from typing import Iterable, List, Optional

from book import Book
from utils.validators import IDValidator, TextValidator

logger = logging.getLogger(__name__)

SEED_BOOKS = (
    {"id": "1", "title": "The Great Gatsby", "author": "F. Scott Fitzgerald"},
    {"id": "2", "title": "1984", "author": "George Orwell"},
    {"id": "3", "title": "To Kill a Mockingbird", "author": "Harper Lee"},
)


class LibraryError(Exception):
    """Base class for errors surfaced to API clients."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidBookError(LibraryError, ValueError):
    pass


class BookNotFoundError(LibraryError, LookupError):
    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book with ID {book_id} not found.")
        self.book_id = book_id


class Library:
    """Manages the in-memory collection of books.

    Every read-modify-write sequence runs under a single lock so the store
    can be shared between the request threads of the ASGI server. Books
    handed out are copies; callers never hold a reference into the
    collection.
    """

    def __init__(self, books: Optional[Iterable[Book]] = None) -> None:
        self._lock = RLock()
        self._books: List[Book] = []
        for book in books or ():
            if self._index_of(book.id) is not None:
                raise ValueError(f"Book with ID {book.id} already exists.")
            self._books.append(book.copy())

    @classmethod
    def with_seed_data(cls) -> "Library":
        return cls(Book.from_dict(data) for data in SEED_BOOKS)

    # ------------------------- Core operations ------------------------- #
    def list_books(self) -> List[Book]:
        with self._lock:
            return [book.copy() for book in self._books]

    def find_book(self, book_id: str) -> Book:
        with self._lock:
            index = self._index_of(book_id)
            if index is None:
                raise BookNotFoundError(book_id)
            return self._books[index].copy()

    def add_book(self, title: Optional[str], author: Optional[str]) -> Book:
        """Create a book with a freshly assigned id and append it."""
        if not (TextValidator.validate_title(title) and TextValidator.validate_author(author)):
            raise InvalidBookError("Title and author are required.")

        with self._lock:
            book = Book(id=self._generate_id(), title=title, author=author)
            self._books.append(book)
            logger.info("New book added: %s", book.to_dict())
            return book.copy()

    def update_book(self, book_id: str, *, title: Optional[str] = None, author: Optional[str] = None) -> Book:
        """Update title and/or author in place. Empty values keep the current field."""
        with self._lock:
            index = self._index_of(book_id)
            if index is None:
                raise BookNotFoundError(book_id)
            book = self._books[index]
            book.title = TextValidator.pick(title, book.title)
            book.author = TextValidator.pick(author, book.author)
            logger.info("Book updated: %s", book.to_dict())
            return book.copy()

    def remove_book(self, book_id: str) -> None:
        with self._lock:
            initial_length = len(self._books)
            self._books = [b for b in self._books if b.id != book_id]
            if len(self._books) == initial_length:
                raise BookNotFoundError(book_id)
        logger.info("Book with ID %s deleted.", book_id)

    def count(self) -> int:
        with self._lock:
            return len(self._books)

    # ------------------------- Utilities ------------------------- #
    def _generate_id(self) -> str:
        # max + 1 over the numeric ids currently held; "1" for an empty collection
        numbers = [n for n in (IDValidator.as_number(b.id) for b in self._books) if n is not None]
        return str(max(numbers, default=0) + 1)

    def _index_of(self, book_id: str) -> Optional[int]:
        for index, book in enumerate(self._books):
            if book.id == book_id:
                return index
        return None
