"""Application context - everything built once at startup and shared by all requests."""

from dataclasses import dataclass

from sqlalchemy import Engine

from dailyposts.core.config import Settings
from dailyposts.core.database import QueryExecutor, create_db_engine
from dailyposts.core.mapper import RecordMapper
from dailyposts.core.sandbox import PathSandbox
from dailyposts.core.security import SessionTokenService


@dataclass
class AppContext:
    settings: Settings
    executor: QueryExecutor
    mapper: RecordMapper
    sandbox: PathSandbox
    tokens: SessionTokenService

    @classmethod
    def build(cls, settings: Settings, engine: Engine | None = None) -> "AppContext":
        executor = QueryExecutor(engine if engine is not None else create_db_engine(settings))
        mapper = RecordMapper(executor)
        return cls(
            settings=settings,
            executor=executor,
            mapper=mapper,
            sandbox=PathSandbox(settings.upload_dir),
            tokens=SessionTokenService(settings.jwt_signature, settings.session_expire, mapper),
        )
