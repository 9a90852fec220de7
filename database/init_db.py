import logging

from sqlalchemy import inspect
from tenacity import retry, stop_after_attempt, wait_fixed

from core.config_loader import get_config
from database.database import get_engine, get_external_engine
from database.models import Base

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2))
def init_db():
    """Create the job tables, waiting for the database to come up."""
    engine = get_engine()
    logger.info(f"Initializing job database ({engine.url.get_backend_name()})...")
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created or verified.")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


def check_enrollment_source() -> bool:
    """
    Check that the exam platform table is visible on the external engine.

    The table is owned by the exam platform, so it is only checked, never
    created.
    """
    table_name = get_config().external_database.enrollments_table
    try:
        found = inspect(get_external_engine()).has_table(table_name)
    except Exception as e:
        logger.error(f"Cannot reach exam platform database: {e}")
        return False

    if not found:
        logger.warning(f"Table '{table_name}' not found on the exam platform database")
    return found


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    init_db()
    check_enrollment_source()
