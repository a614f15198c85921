# agenda/db.py

from sqlmodel import SQLModel, create_engine, Session

from agenda.data import shop_settings

DATABASE_URL = shop_settings["database_url"]

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}  # required for SQLite + FastAPI

engine = create_engine(
    DATABASE_URL,
    echo=False,
    connect_args=connect_args,
)


def init_db(bind=engine):
    import agenda.models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(bind)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
