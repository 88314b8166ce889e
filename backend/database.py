from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


engine = create_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_scheduling_schema_checked = False

_SCHEDULING_INDEXES = {
    'appointments': [
        'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_window ON appointments(doctor_id, start_at, end_at)',
        'CREATE INDEX IF NOT EXISTS idx_appointments_status_start ON appointments(status, start_at)',
    ],
    'doctor_working_hours': [
        'CREATE INDEX IF NOT EXISTS idx_working_hours_doctor_day ON doctor_working_hours(doctor_id, day_of_week)',
        'CREATE INDEX IF NOT EXISTS idx_working_hours_day_active ON doctor_working_hours(day_of_week, is_active)',
    ],
    'doctors': [
        'CREATE INDEX IF NOT EXISTS idx_doctors_tenant ON doctors(tenant_id)',
    ],
}


def ensure_scheduling_schema(bind: Engine | None = None) -> None:
    global _scheduling_schema_checked

    target = bind if bind is not None else engine
    if bind is None and _scheduling_schema_checked:
        return

    with _schema_lock:
        if bind is None and _scheduling_schema_checked:
            return

        existing_tables = set(inspect(target).get_table_names())

        with target.begin() as connection:
            for table_name, statements in _SCHEDULING_INDEXES.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        if bind is None:
            _scheduling_schema_checked = True
