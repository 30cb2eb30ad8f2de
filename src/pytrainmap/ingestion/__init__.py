"""Ingestion layer.

This package turns decoded feed messages of unknown shape into normalized
records (station catalogs, per-vehicle schedules, position samples) that
the state stores apply.
"""

from pytrainmap.ingestion.messages import normalize_message

__all__: list[str] = ["normalize_message"]
