"""
Fixture loading: build an in-memory adapter from an events file.

Accepted formats:
- JSON array of events
- JSON object {"events": [...]}
- JSONL, one event per line
"""

import json
from typing import Any, Dict, List

from evstore.core import Event, ValidationError
from evstore.storage import InMemoryStorageAdapter


def read_event_dicts(path: str) -> List[Dict[str, Any]]:
    """
    Read raw event mappings from path.

    Raises:
        FileNotFoundError: If path does not exist
        ValidationError: If the file is not a supported events document
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    if not text.strip():
        return []

    try:
        doc = json.loads(text)
    except json.JSONDecodeError:
        records = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ValidationError(f"{path}:{lineno}: invalid JSON ({e.msg})") from e
    else:
        if isinstance(doc, dict):
            # a one-line JSONL file parses as a single event object
            records = doc["events"] if "events" in doc else [doc]
        else:
            records = doc

    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ValidationError(f"{path}: expected a list of event objects")
    return records


def load_adapter(path: str) -> InMemoryStorageAdapter:
    """Seed an in-memory adapter with the events in path."""
    events = [Event.from_dict(rec) for rec in read_event_dicts(path)]
    return InMemoryStorageAdapter(initial_events=events)
