"""
Reference mapping loader.

Parses the scoring matrix CSV (question id, title, reference code, ...)
into a ReferenceMapping. The header row is skipped, and section header
pseudo-rows whose reference contains "-Title" are ignored.
"""

import csv
import logging
import os
from functools import lru_cache

from core.exam.exceptions import ConfigurationError
from core.exam.messages import translate, DEFAULT_LOCALE
from core.exam.models import MappingEntry, ReferenceMapping

logger = logging.getLogger(__name__)

TITLE_ROW_MARKER = "-Title"


def load_reference_mapping(source: str, locale: str = DEFAULT_LOCALE) -> ReferenceMapping:
    """
    Load the reference mapping from a CSV file.

    Args:
        source: Path to the mapping CSV.
        locale: Locale for the error message if loading fails.

    Returns:
        ReferenceMapping with question entries and per-reference title order.

    Raises:
        ConfigurationError: If the file is missing or cannot be read.
    """
    if not os.path.isfile(source):
        logger.error(f"Mapping file not found: {source}")
        raise ConfigurationError(translate("csv_file_not_found", locale))

    mapping = ReferenceMapping()
    skipped = 0

    try:
        with open(source, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)
            next(reader, None)  # header

            for row in reader:
                question_id = row[0].strip() if len(row) > 0 else ""
                title = row[1].strip() if len(row) > 1 else ""
                reference = row[2].strip() if len(row) > 2 else ""

                if not question_id or not reference:
                    skipped += 1
                    continue

                if TITLE_ROW_MARKER in reference:
                    skipped += 1
                    continue

                mapping.entries[question_id] = MappingEntry(title=title, reference=reference)

                titles = mapping.title_order.setdefault(reference, [])
                if title not in titles:
                    titles.append(title)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error(f"Error reading mapping file {source}: {e}")
        raise ConfigurationError(translate("csv_file_read_error", locale)) from e

    logger.info(
        f"Loaded reference mapping from {source}: {len(mapping)} questions, "
        f"{len(mapping.title_order)} references, {skipped} rows skipped"
    )
    return mapping.freeze()


@lru_cache(maxsize=8)
def get_reference_mapping(source: str, locale: str = DEFAULT_LOCALE) -> ReferenceMapping:
    """
    Process-wide cached mapping.

    The mapping file is static for the lifetime of a deployment, so it is
    parsed once per process (per locale of the error message). Failures are
    not cached.
    """
    return load_reference_mapping(source, locale)


def clear_mapping_cache() -> None:
    get_reference_mapping.cache_clear()
