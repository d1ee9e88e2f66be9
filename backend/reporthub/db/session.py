from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine


def get_engine(database_url: str, echo: bool = False) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # request handlers and background generation share the engine across threads
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def create_tables(engine: Engine) -> None:
    # models must be imported so their tables are registered on the metadata
    from reporthub.models import order, report, user  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine) -> Session:
    return Session(engine)
