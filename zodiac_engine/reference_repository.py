"""Repository for compatibility reference data (JSON file, read-only)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
import threading
from typing import Any

from zodiac_engine.errors import IncompleteMatrixError


logger = logging.getLogger(__name__)


class ReferenceDataRepository:
    """Thread-safe loader for the reference rows and sign→element map.

    Expected layout::

        {
          "version": "1.0",
          "sign_elements": {"Aries": "Fire", ...},   # optional
          "records": [{"sign_a": "Aries", "sign_b": "Leo", ...}, ...]
        }
    """

    def __init__(self, data_path: str) -> None:
        self._path = Path(data_path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> tuple[list[dict[str, Any]], dict[str, str] | None]:
        """Read ``(records, sign_elements)`` from disk.

        Raises:
            IncompleteMatrixError: If the file is missing, unreadable or
                not shaped like reference data.
        """
        with self._lock:
            if not self._path.exists():
                raise IncompleteMatrixError(f"Reference data file not found: {self._path}")
            try:
                with open(self._path, encoding="utf-8") as fh:
                    data = json.load(fh)
            except Exception as exc:
                raise IncompleteMatrixError(f"Failed to load reference data: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise IncompleteMatrixError("Reference data must be an object with a 'records' list")
        records = data["records"]
        if not all(isinstance(r, dict) for r in records):
            raise IncompleteMatrixError("Every reference record must be a JSON object")

        sign_elements = data.get("sign_elements")
        if sign_elements is not None and not isinstance(sign_elements, dict):
            raise IncompleteMatrixError("'sign_elements' must be an object")

        logger.info(
            "Reference data read: %s (version=%s, %d records)",
            self._path, data.get("version", "?"), len(records),
        )
        return records, sign_elements
