"""Selection restoration policy.

This module intentionally contains *no* payload parsing.  It decides which
station stays selected when the directory is replaced by a new catalog.
"""

from __future__ import annotations

from collections.abc import Sequence

from pytrainmap.models.station import Station


def _by_id(stations: Sequence[Station], station_id: str | None) -> Station | None:
    if not station_id:
        return None
    wanted = str(station_id)
    for station in stations:
        if station.id == wanted:
            return station
    return None


def resolve_selection(
    stations: Sequence[Station],
    *,
    selector_value: str | None,
    previous: Station | None,
    stored_id: str | None,
) -> Station | None:
    """Pick the selection for a freshly installed catalog.

    Policy, first match wins:
    - the value currently shown in the selector,
    - the previously selected station's id,
    - the persisted selected id,
    - a station named like the previously selected one,
    - the first station of the catalog.

    The selector value is consulted before the remembered selection; the
    two only diverge when something outside the engine moved the selector.
    """

    for candidate_id in (selector_value, previous.id if previous else None, stored_id):
        found = _by_id(stations, candidate_id)
        if found is not None:
            return found

    if previous is not None and previous.name:
        for station in stations:
            if station.name == previous.name:
                return station

    return stations[0] if stations else None
