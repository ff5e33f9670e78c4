from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.core.config import settings


logger = logging.getLogger(__name__)


# ORM 基类：所有模型继承它
class Base(DeclarativeBase):
    pass


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


# 创建数据库引擎（SQLite 或外部数据库）
def build_engine(url: str | None = None) -> Engine:
    url = url or settings.resolved_database_url
    if not url.startswith("sqlite"):
        return create_engine(url, future=True, pool_pre_ping=True)
    if _is_memory_sqlite(url):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    else:
        settings.ensure_dirs()
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            future=True,
        )
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


# SQLite 默认不校验外键，每个连接都要打开
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# 全局数据库引擎
engine = build_engine()
# 会话工厂
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


# 初始化数据库：按版本顺序执行迁移
def init_db() -> None:
    from catalog.migrations import upgrade

    applied = upgrade(engine)
    if applied:
        logger.info("Applied %d migration(s): %s", len(applied), ", ".join(applied))


# FastAPI 依赖：获取数据库会话
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 显式事务边界：成功提交，异常回滚后继续抛出
@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
