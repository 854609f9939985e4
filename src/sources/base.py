"""Abstract base class for remote user sources."""

from abc import ABC, abstractmethod

from src.core.schemas import Page


class UserSource(ABC):
    """Base class that every remote user source must implement."""

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Unique identifier for this source (e.g. 'randomuser')."""

    @abstractmethod
    async def fetch_page(self, page: int, page_size: int, seed: str | None = None) -> Page:
        """Fetch one page of users.

        Args:
            page: 1-based page index.
            page_size: Number of users requested.
            seed: Seed echoed by an earlier response; None lets the server pick one.

        Raises:
            FetchError: Any of its subclasses, depending on which step failed.
        """
