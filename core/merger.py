"""
External-Update Merger.

Overlays a sparse, id-keyed patch (as produced by the document-analysis
pipeline) onto the state store. Only supplied fields change. Unknown ids,
unknown fields and malformed entries are skipped without raising. Values are
taken as given: nothing here re-checks bounds or re-derives status.
"""

import logging
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.models import Alert, to_snake
from core.state import StateStore

log = logging.getLogger("core.merger")

# Keys accepted in a partial update, mapped to store collections
KEYED_COLLECTIONS = {
    "dams": "dams",
    "bridges": "bridges",
    "transformers": "transformers",
    "trafficZones": "traffic_zones",
    "traffic_zones": "traffic_zones",
    "aqiZones": "aqi_zones",
    "aqi_zones": "aqi_zones",
}


@dataclass
class MergeReport:
    """What a merge actually changed."""
    updated: Dict[str, List[str]] = field(default_factory=dict)  # collection -> ids
    ignored_ids: List[str] = field(default_factory=list)
    weather_fields: List[str] = field(default_factory=list)
    alerts_added: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.updated or self.weather_fields or self.alerts_added)


def _overlay_fields(record, patch: Dict[str, Any]) -> Dict[str, Any]:
    """Translate patch keys to the record's field names, dropping unknown ones."""
    known = {f.name for f in fields(record)}
    changes = {}
    for key, value in patch.items():
        name = to_snake(key)
        if name == "id" or name not in known:
            continue
        changes[name] = value
    return changes


def _merge_collection(records: list, patches: list, report: MergeReport, name: str) -> list:
    by_id = {}
    for patch in patches:
        if not isinstance(patch, dict) or not isinstance(patch.get("id"), str):
            log.debug(f"Skipping malformed {name} patch: {patch!r}")
            continue
        # Later patches for the same id win field by field
        by_id.setdefault(patch["id"], {}).update(patch)

    known_ids = {r.id for r in records}
    for patch_id in by_id:
        if patch_id not in known_ids:
            report.ignored_ids.append(patch_id)

    merged = []
    for record in records:
        patch = by_id.get(record.id)
        if patch is None:
            merged.append(record)
            continue
        changes = _overlay_fields(record, patch)
        if not changes:
            merged.append(record)
            continue
        merged.append(replace(record, **changes))
        report.updated.setdefault(name, []).append(record.id)
    return merged


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            log.debug(f"Unparseable alert timestamp {value!r}, using now")
    return datetime.now()


def coerce_alert(raw: Any) -> Optional[Alert]:
    """Build an Alert from an Alert or a wire dict. Returns None if unusable."""
    if isinstance(raw, Alert):
        return raw
    if not isinstance(raw, dict):
        return None
    return Alert(
        id=str(raw.get("id") or f"ext_{uuid.uuid4().hex[:8]}"),
        severity=raw.get("severity", "info"),
        message=raw.get("message", ""),
        source=raw.get("source", "External Analysis"),
        timestamp=_parse_timestamp(raw.get("timestamp")),
    )


def apply_external_update(store: StateStore, update: Dict[str, Any]) -> MergeReport:
    """
    Merge a partial update into the store.

    Args:
        store: Target state store
        update: {"dams": [...], "bridges": [...], "transformers": [...],
                 "weather": {...}, "alerts": [...]}; every key optional

    Returns:
        MergeReport describing the applied changes
    """
    report = MergeReport()
    if not isinstance(update, dict):
        log.warning(f"Ignoring external update of type {type(update).__name__}")
        return report

    with store.lock:
        for key, name in KEYED_COLLECTIONS.items():
            patches = update.get(key)
            if not isinstance(patches, list):
                continue
            merged = _merge_collection(getattr(store, name), patches, report, name)
            store.replace_collection(name, merged)

        weather_patch = update.get("weather")
        if isinstance(weather_patch, dict):
            changes = _overlay_fields(store.weather, weather_patch)
            if changes:
                store.replace_collection("weather", replace(store.weather, **changes))
                report.weather_fields = sorted(changes)

        raw_alerts = update.get("alerts")
        if isinstance(raw_alerts, list):
            alerts = [a for a in (coerce_alert(r) for r in raw_alerts) if a is not None]
            if alerts:
                store.push_alerts(alerts)
                report.alerts_added = len(alerts)

    log.info(
        f"External update merged: updated={report.updated} "
        f"ignored={report.ignored_ids} weather={report.weather_fields} "
        f"alerts={report.alerts_added}"
    )
    return report
