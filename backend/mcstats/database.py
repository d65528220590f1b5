# backend/mcstats/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoreUnavailable(Exception):
    """The stats database could not be reached or queried."""


def build_engine(url, pool_size: int = 10) -> Engine:
    kwargs = {"pool_pre_ping": True}
    if make_url(url).get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # fixed-size pool, callers wait for a free connection
        kwargs.update(pool_size=pool_size, max_overflow=0, pool_timeout=None)
    return create_engine(url, **kwargs)
