from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .errors import PersistenceError
from .ledger import ActivityLedger

logger = logging.getLogger("dkt.export")

FILENAME_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

# Share-sheet targets hidden when the platform supports filtering.
EXCLUDED_SHARE_TARGETS = (
    "post_to_facebook",
    "post_to_twitter",
    "post_to_weibo",
    "post_to_tencent_weibo",
    "post_to_flickr",
    "post_to_vimeo",
)


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now().astimezone()
    return f"doorknocking_log_{now.strftime(FILENAME_TIMESTAMP_FORMAT)}.csv"


def write_export(
    ledger: ActivityLedger,
    directory: Union[str, Path],
    now: Optional[datetime] = None,
) -> Path:
    """Write the ledger CSV into ``directory`` and return the file path."""
    target_dir = Path(directory)
    target = target_dir / export_filename(now)
    content = ledger.to_csv()
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=".doorknocking_log_", suffix=".tmp", dir=target_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        logger.error("error writing CSV file %s: %s", target, exc)
        raise PersistenceError(f"could not write export: {exc}") from exc
    logger.info("CSV file saved to %s", target)
    return target
