import logging
from typing import Any, Dict, List, Optional

import httpx

from book import Book
from config import settings

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Raised when the book service answers with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class BookClient:
    """Synchronous HTTP client for the book service."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 http: Optional[httpx.Client] = None) -> None:
        if http is None:
            timeout = timeout if timeout is not None else settings.client_timeout
            http = httpx.Client(
                base_url=base_url or settings.base_url,
                timeout=httpx.Timeout(timeout=timeout, connect=5.0),
                follow_redirects=True,
            )
        self._client = http

    def list_books(self) -> List[Book]:
        data = self._request("GET", "/books")
        return [Book.from_dict(item) for item in data]

    def get_book(self, book_id: str) -> Book:
        return Book.from_dict(self._request("GET", f"/books/{book_id}"))

    def add_book(self, title: str, author: str) -> Book:
        return Book.from_dict(self._request("POST", "/books", json={"title": title, "author": author}))

    def update_book(self, book_id: str, *, title: Optional[str] = None, author: Optional[str] = None) -> Book:
        payload: Dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if author is not None:
            payload["author"] = author
        return Book.from_dict(self._request("PUT", f"/books/{book_id}", json=payload))

    def remove_book(self, book_id: str) -> None:
        self._request("DELETE", f"/books/{book_id}")

    def _request(self, method: str, path: str, **kwargs) -> Any:
        logger.debug("%s %s", method, path)
        response = self._client.request(method, path, **kwargs)
        if response.status_code >= 400:
            raise APIError(response.status_code, self._error_message(response))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code}"

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BookClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
