from typing import Generator, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine
from jose import JWTError
import os
from dotenv import load_dotenv
from pydantic import BaseModel

from class_calendar.utils.authentication import WRITE_ROLES, decode_access_token

load_dotenv()

# Database configuration
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATABASE_PATH = os.path.join(os.path.dirname(BASE_DIR), "class_calendar.db")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_PATH}")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# Holiday years loaded for session generation, counted from the class start year
HOLIDAY_HORIZON_YEARS = int(os.getenv("HOLIDAY_HORIZON_YEARS", "4"))
# Country whose public holidays are always skipped; empty turns them off
HOLIDAY_COUNTRY = os.getenv("HOLIDAY_COUNTRY", "PH")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token")


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
    """Let SQLAlchemy drive BEGIN on pysqlite so nested transactions work.

    Session upserts run each row inside a SAVEPOINT; the stdlib sqlite3
    driver otherwise manages transactions on its own and breaks them.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, **kwargs) -> Engine:
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        db_engine = create_engine(database_url, connect_args=connect_args, **kwargs)
        enable_sqlite_savepoints(db_engine)
        return db_engine
    return create_engine(database_url, **kwargs)


engine = build_engine(DATABASE_URL, echo=SQL_ECHO)


class Operator(BaseModel):
    """The authenticated staff member performing a request."""

    operator_id: Optional[int] = None
    username: Optional[str] = None
    user_type: str


def create_db_and_tables():
    """Create database and tables if they don't exist"""
    # Register every table on the metadata before create_all
    import class_calendar.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting the database session."""
    with Session(engine) as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


async def get_current_operator(token: str = Depends(oauth2_scheme)) -> Operator:
    """Resolve the operator from the bearer token payload."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_type = payload.get("user_type")
    if user_type is None:
        raise credentials_exception

    return Operator(
        operator_id=payload.get("user_id"),
        username=payload.get("sub"),
        user_type=user_type,
    )


async def get_current_admin(operator: Operator = Depends(get_current_operator)) -> Operator:
    """Get current operator only if allowed to change schedules"""
    if operator.user_type not in WRITE_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized as admin"
        )
    return operator
