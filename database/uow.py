import contextlib
import logging
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from database.database import build_engine, build_session_factory, init_db
from database.repository import StoreRepository

logger = logging.getLogger(__name__)


class EvidenceStore:
    """Store handle passed to every component at construction.

    Owns the engine and session factory. The process bootstrap creates one
    and disposes of it on shutdown.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory: sessionmaker = build_session_factory(engine)

    @classmethod
    def from_url(cls, url: str, pool_pre_ping: bool = True, echo: bool = False) -> "EvidenceStore":
        return cls(build_engine(url, pool_pre_ping=pool_pre_ping, echo=echo))

    def create_schema(self) -> None:
        init_db(self.engine)

    @contextlib.contextmanager
    def unit_of_work(self) -> Iterator[StoreRepository]:
        """Per-unit-of-work transaction scope.

        Yields a StoreRepository bound to a fresh Session. Commits on success,
        rolls back on exception, always closes.

        Usage:
            with store.unit_of_work() as repo:
                user = repo.users.get_by_user_id(user_id)
            # commit happens automatically on successful exit
        """
        session = self.session_factory()
        try:
            repo = StoreRepository(session)
            yield repo
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Evidence store connections closed")
