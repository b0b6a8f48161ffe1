"""Request transaction interface."""

from abc import ABC, abstractmethod


class Transaction(ABC):
    """Handle on the request's unit of work.

    Use cases commit it before they return their response, so a failed
    commit reaches the caller as an error instead of after a success was
    reported. They roll it back when a call is aborted halfway, so no
    partial mutation becomes visible.
    """

    @abstractmethod
    async def commit(self) -> None:
        """Make everything written in the current request durable.

        Raises:
            UnavailableError: If the store did not confirm the commit
        """
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard everything written in the current request."""
        pass
