import logging

from scrim import config
from scrim.errors import StoreError
from scrim.sheets_manager import SheetsManager

logger = logging.getLogger(__name__)


def initialize_sheets():
    """Create any missing tabs and write the header row of every tab."""
    sheets_mgr = SheetsManager()
    created = sheets_mgr.ensure_tabs()
    logger.info("Successfully initialized all sheets!")
    return created


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        initialize_sheets()
    except StoreError as e:
        logger.error("Error: %s", e.message)
        raise
