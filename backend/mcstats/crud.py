# backend/mcstats/crud.py
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from . import models
from .database import Base, StoreUnavailable, build_engine
from .stats import PlayerRecord

def get_player_stats(db: Session, uuid: str) -> Optional[PlayerRecord]:
    row = db.get(models.PlayerStats, uuid)
    if not row:
        return None
    return PlayerRecord(id=row.uuid, raw_payload=row.stats)

def list_player_stats(db: Session) -> List[PlayerRecord]:
    rows = db.execute(select(models.PlayerStats.uuid, models.PlayerStats.stats)).all()
    return [PlayerRecord(id=r[0], raw_payload=r[1]) for r in rows]


class StatsStore:
    """Read-only access to the ``player_stats`` table.

    Built once at startup and handed to the routes. Database errors surface
    as :class:`StoreUnavailable` and are never retried here.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    @classmethod
    def from_url(cls, url, pool_size: int = 10) -> "StatsStore":
        return cls(build_engine(url, pool_size))

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e
        finally:
            db.close()

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e

    def fetch_by_id(self, uuid: str) -> Optional[PlayerRecord]:
        with self.session() as db:
            return get_player_stats(db, uuid)

    def fetch_all(self) -> List[PlayerRecord]:
        with self.session() as db:
            return list_player_stats(db)

    def dispose(self) -> None:
        self.engine.dispose()
