"""
Filter Presets
Named snapshots of the contact-list filters, kept in local storage only.
Names need not be unique; presets are addressed by position.
"""

import json
import logging
from typing import List

from obani.engine.filters import LAST_CONTACT_BUCKETS
from obani.models import FilterPreset
from obani.storage.local_store import PRESETS_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class PresetStore:
    """Ordered list of FilterPreset persisted under PRESETS_KEY."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def list(self) -> List[FilterPreset]:
        """Stored presets, oldest first. Missing or unreadable data means none."""
        raw = self.store.get(PRESETS_KEY)
        if not raw:
            return []
        try:
            presets = [FilterPreset.from_dict(e) for e in json.loads(raw)]
            for p in presets:
                if p.last_contact not in LAST_CONTACT_BUCKETS:
                    raise ValueError(f"unknown last-contact bucket {p.last_contact!r} in preset '{p.name}'")
            return presets
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable filter presets: {type(e).__name__}: {e}")
            return []

    def _write(self, presets: List[FilterPreset]) -> None:
        self.store.set(PRESETS_KEY, json.dumps([p.to_dict() for p in presets]))

    def save(self, preset: FilterPreset) -> List[FilterPreset]:
        """Append a preset. Returns the updated list."""
        if not preset.name.strip():
            raise ValueError("Preset name is required")
        presets = self.list() + [preset]
        self._write(presets)
        logger.info(f"Saved filter preset '{preset.name}' at index {len(presets) - 1}")
        return presets

    def get(self, index: int) -> FilterPreset:
        presets = self.list()
        self._check_index(index, presets)
        return presets[index]

    def delete(self, index: int) -> List[FilterPreset]:
        """Remove the preset at `index`; the rest keep their order."""
        presets = self.list()
        self._check_index(index, presets)
        removed = presets[index]
        remaining = presets[:index] + presets[index + 1:]
        self._write(remaining)
        logger.info(f"Deleted filter preset '{removed.name}' (index {index})")
        return remaining

    @staticmethod
    def _check_index(index: int, presets: List[FilterPreset]) -> None:
        # Negative indexes would silently address from the end
        if index < 0 or index >= len(presets):
            raise IndexError(f"No preset at index {index} ({len(presets)} saved)")
