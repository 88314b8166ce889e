import logging

from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import Base, SessionLocal, engine, ensure_scheduling_schema
from backend.models import appointment, doctor, working_hour  # noqa: F401 - registers tables on Base
from backend.repositories.sql import SessionFactory, SqlReservationLookup, SqlTemplateStore
from backend.scheduling.availability import AvailabilityResolver
from backend.scheduling.settings import ResolverSettings

logger = logging.getLogger(__name__)


def initialize_database() -> bool:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_scheduling_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return False
    return True


def build_resolver(
    session_factory: SessionFactory = SessionLocal,
    settings: ResolverSettings | None = None,
) -> AvailabilityResolver:
    config.validate_runtime_config()
    settings = settings or ResolverSettings.from_config()

    return AvailabilityResolver(
        template_store=SqlTemplateStore(session_factory),
        reservation_lookup=SqlReservationLookup(session_factory, timezone=settings.timezone),
        settings=settings,
    )
