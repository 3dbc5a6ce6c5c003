"""Transaction implementation over the request's SQLAlchemy session."""

import logfire
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from geist.domain.error import RepositoryError
from geist.domain.repository.transaction import Transaction


class PostgresTransaction(Transaction):
    """Commits the request-scoped session.

    The session provider still commits when the request scope closes; after
    an explicit commit that has nothing left to do.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        """Commit the session, translating failures into RepositoryError."""
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logfire.error(
                "Commit failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            await self.session.rollback()
            raise RepositoryError("Identity store failure during commit") from e
