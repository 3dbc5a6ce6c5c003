"""Transaction boundary interface."""

from abc import ABC, abstractmethod


class Transaction(ABC):
    """The request's unit of work.

    Use cases that change state commit before building their response, so
    a failed commit reaches the caller as an error instead of being lost
    after the response is sent.
    """

    @abstractmethod
    async def commit(self) -> None:
        """Commit everything the request has written so far.

        Raises:
            RepositoryError: If the store refuses the commit
        """
        pass
