"""Component registry CSV loader (columns Code, Name, Type, Notes)."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from pydantic import ValidationError

from payroll_report.models.component import ComponentEntry

logger = logging.getLogger(__name__)

INACTIVE_NOTE = "Inactive"


def load_components(path: Path) -> list[ComponentEntry]:
    """Read registry rows. Incomplete or invalid rows are skipped with a warning.

    A row whose Notes column reads ``Inactive`` is loaded as an inactive entry.
    """
    entries: list[ComponentEntry] = []
    with Path(path).open(newline="", encoding="utf-8-sig") as fh:
        for line_no, row in enumerate(csv.DictReader(fh), start=2):
            code = (row.get("Code") or "").strip()
            name = (row.get("Name") or "").strip()
            kind = (row.get("Type") or "").strip().upper()
            if not (code and name and kind):
                logger.warning("%s:%d: incomplete registry row skipped", path, line_no)
                continue
            notes = (row.get("Notes") or "").strip()
            try:
                entries.append(ComponentEntry(
                    code=code, name=name, type=kind,
                    active=notes != INACTIVE_NOTE, notes=notes,
                ))
            except ValidationError as exc:
                logger.warning("%s:%d: skipping %r (%s)", path, line_no, code, exc.errors()[0]["msg"])
    logger.info(
        "Loaded %d registry entries from %s (%d inactive)",
        len(entries), path, sum(1 for e in entries if not e.active),
    )
    return entries
