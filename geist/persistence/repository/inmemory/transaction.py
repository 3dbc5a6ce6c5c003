"""In-memory transaction for testing."""

from geist.domain.repository.transaction import Transaction


class InMemoryTransaction(Transaction):
    """Writes are applied immediately; commit only counts calls."""

    def __init__(self) -> None:
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1
