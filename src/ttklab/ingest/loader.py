"""
Dataset Loader

Fetches the weapon CSV from a local path or an http(s) URL, tokenizes it
with pandas and feeds the rows to the normalizer.

Loading is all-or-nothing: any fetch or parse failure raises
DatasetLoadError and no records are returned. WeaponDataset keeps the
current snapshot and swaps it wholesale on a successful reload.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from io import StringIO
from pathlib import Path
from typing import Any

import httpx
import pandas as pd

from ttklab.core.constants import COL_WEAPON, COL_WEAPON_TYPE
from ttklab.core.models import AnalysisContext, FilterCriteria, WeaponRecord
from ttklab.core.utils import PerformanceMonitor
from ttklab.ingest.normalizer import (
    DEFAULT_DAMAGE_CORRECTIONS,
    DamageCorrection,
    normalize_rows,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (COL_WEAPON_TYPE, COL_WEAPON)


class DatasetLoadError(Exception):
    """The weapon dataset could not be fetched or parsed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load weapon data from {source}: {reason}")


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


# =============================================================================
# Tokenizing
# =============================================================================


def parse_csv_text(text: str, source: str = "<string>") -> list[dict[str, Any]]:
    """
    Split CSV text into raw rows (column -> raw string).

    Every cell is kept as a string; empty cells stay "" so the normalizer
    can tell them apart from zero. Blank lines are skipped.

    Raises:
        DatasetLoadError: If the text is not valid CSV or lacks the weapon
            name/type columns
    """
    try:
        frame = pd.read_csv(
            StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=False,
        )
    except pd.errors.EmptyDataError as e:
        raise DatasetLoadError(source, "file is empty") from e
    except pd.errors.ParserError as e:
        raise DatasetLoadError(source, f"malformed CSV ({e})") from e

    frame.columns = [str(c).strip() for c in frame.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise DatasetLoadError(source, f"missing columns: {', '.join(missing)}")

    return frame.to_dict(orient="records")


# =============================================================================
# Fetching
# =============================================================================


def fetch_csv_text(
    source: str | Path,
    timeout: float = 10.0,
    encoding: str = "utf-8",
    client: httpx.Client | None = None,
) -> str:
    """
    Read raw CSV text from a file path or URL.

    Args:
        source: Local path or http(s) URL
        timeout: HTTP timeout in seconds
        encoding: File encoding for local paths
        client: Optional pre-configured HTTP client

    Raises:
        DatasetLoadError: On any I/O or HTTP failure, including non-2xx status
    """
    if is_url(source):
        try:
            if client is not None:
                response = client.get(str(source), timeout=timeout)
            else:
                response = httpx.get(str(source), timeout=timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DatasetLoadError(str(source), f"HTTP error ({e})") from e
        return response.text

    try:
        return Path(source).read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise DatasetLoadError(str(source), str(e)) from e


async def fetch_csv_text_async(
    source: str | Path,
    timeout: float = 10.0,
    encoding: str = "utf-8",
    client: httpx.AsyncClient | None = None,
) -> str:
    """Async variant of fetch_csv_text; local files are read in a worker thread."""
    if not is_url(source):
        return await asyncio.to_thread(fetch_csv_text, source, timeout, encoding)

    try:
        if client is not None:
            response = await client.get(str(source), timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned_client:
                response = await owned_client.get(str(source))
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise DatasetLoadError(str(source), f"HTTP error ({e})") from e
    return response.text


# =============================================================================
# Loading
# =============================================================================


def load_weapon_rows(
    rows: Sequence[Mapping[str, Any]],
    corrections: Sequence[DamageCorrection] = DEFAULT_DAMAGE_CORRECTIONS,
) -> tuple[WeaponRecord, ...]:
    """Normalize already-tokenized rows into records."""
    records = normalize_rows(rows, corrections)
    logger.info(f"Loaded {len(records)} weapons from {len(rows)} rows")
    return records


def load_weapon_data(
    source: str | Path,
    corrections: Sequence[DamageCorrection] = DEFAULT_DAMAGE_CORRECTIONS,
    timeout: float = 10.0,
    encoding: str = "utf-8",
    client: httpx.Client | None = None,
) -> tuple[WeaponRecord, ...]:
    """
    Fetch, tokenize and normalize a weapon dataset.

    Args:
        source: Local path or http(s) URL of the CSV
        corrections: Damage correction rules
        timeout: HTTP timeout in seconds
        encoding: File encoding for local paths
        client: Optional HTTP client

    Returns:
        Records in dataset order

    Raises:
        DatasetLoadError: If the dataset cannot be fetched or parsed
    """
    with PerformanceMonitor(f"Loading weapon data from {source}"):
        text = fetch_csv_text(source, timeout=timeout, encoding=encoding, client=client)
        rows = parse_csv_text(text, source=str(source))
        return load_weapon_rows(rows, corrections)


async def load_weapon_data_async(
    source: str | Path,
    corrections: Sequence[DamageCorrection] = DEFAULT_DAMAGE_CORRECTIONS,
    timeout: float = 10.0,
    encoding: str = "utf-8",
    client: httpx.AsyncClient | None = None,
) -> tuple[WeaponRecord, ...]:
    """Async variant of load_weapon_data."""
    with PerformanceMonitor(f"Loading weapon data from {source}"):
        text = await fetch_csv_text_async(source, timeout=timeout, encoding=encoding, client=client)
        rows = parse_csv_text(text, source=str(source))
        return load_weapon_rows(rows, corrections)


class WeaponDataset:
    """
    Holder for the current weapon snapshot.

    The snapshot is an immutable tuple replaced in one assignment on a
    successful load; a failed load leaves the previous snapshot in place.
    """

    def __init__(
        self,
        source: str | Path,
        corrections: Sequence[DamageCorrection] = DEFAULT_DAMAGE_CORRECTIONS,
        timeout: float = 10.0,
        encoding: str = "utf-8",
    ):
        self.source = source
        self.corrections = tuple(corrections)
        self.timeout = timeout
        self.encoding = encoding
        self._records: tuple[WeaponRecord, ...] = ()
        self._loaded = False

    @property
    def records(self) -> tuple[WeaponRecord, ...]:
        return self._records

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def _replace(self, records: tuple[WeaponRecord, ...]) -> tuple[WeaponRecord, ...]:
        self._records = records
        self._loaded = True
        return records

    def load(self, client: httpx.Client | None = None) -> tuple[WeaponRecord, ...]:
        """Load (or reload) the dataset, replacing the current snapshot."""
        records = load_weapon_data(
            self.source,
            self.corrections,
            timeout=self.timeout,
            encoding=self.encoding,
            client=client,
        )
        return self._replace(records)

    async def load_async(self, client: httpx.AsyncClient | None = None) -> tuple[WeaponRecord, ...]:
        records = await load_weapon_data_async(
            self.source,
            self.corrections,
            timeout=self.timeout,
            encoding=self.encoding,
            client=client,
        )
        return self._replace(records)

    def context(self, filters: FilterCriteria | None = None) -> AnalysisContext:
        """An analysis context over the current snapshot."""
        return AnalysisContext(records=self._records, filters=filters or FilterCriteria())
