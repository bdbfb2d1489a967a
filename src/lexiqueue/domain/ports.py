"""
Ports (interfaces) for the review service.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import GradeSubmission


class ReviewGateway(ABC):
    """
    Port for the remote list/refill and submit-grade operations.

    Implementations:
        - HttpReviewGateway: Talks to the vocabulary-review HTTP function.
    """

    @abstractmethod
    async def list_queue(
        self,
        mode: str,
        limit: int,
        category: str | None = None,
        reset_session: bool = False,
    ) -> dict[str, Any]:
        """
        Fetch a page of cards.

        Args:
            mode: "learn" or "review".
            limit: Maximum number of items to return.
            category: Optional category id or slug.
            reset_session: Ask the server to start a fresh session.

        Returns:
            Payload with "items" and "session" (or "meta") keys.
        """
        pass

    @abstractmethod
    async def submit_grade(self, submission: GradeSubmission) -> dict[str, Any]:
        """
        Commit a grade.

        Returns:
            Payload with "session" (or "meta") describing updated gamification state.

        Raises:
            ReviewApiError: If the service rejects the grade.
        """
        pass

    async def aclose(self) -> None:
        """Release transport resources."""
        return None
