"""Item store keeping one YAML artifact per item."""

import hashlib
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, Optional

import yaml

from menu_notifier.core import Item, ItemStore
from menu_notifier.core.period import MONDAY, is_current_period

logger = logging.getLogger(__name__)


def safe_filename(value: str) -> str:
    """Turn an opaque id into a file name unique to that id.

    Ids that are already safe are kept as is; anything else gets a short hash
    suffix so that e.g. ``a/b`` and ``a_b`` do not share a file.
    """
    name = re.sub(r"[^\w.-]", "_", value)[:100]
    if name and name == value:
        return name
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"{name}-{digest}"


class YamlItemStore(ItemStore):
    """Persist items as individual YAML files under ``storage_dir/items``."""

    def __init__(
        self,
        storage_dir: Path,
        anchor_weekday: int = MONDAY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.storage_dir = storage_dir
        self.items_dir = storage_dir / "items"
        self.anchor_weekday = anchor_weekday
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.items_dir.mkdir(parents=True, exist_ok=True)

    def save(self, item: Item) -> Item:
        """Write the item artifact, replacing any previous version with the same id."""
        path = self._get_artifact_path(item.id)
        tmp_path = path.with_suffix(".yaml.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                item.to_dict(), f, allow_unicode=True, default_flow_style=False, sort_keys=False
            )
        tmp_path.replace(path)
        logger.debug("Stored item %s at %s", item.id, path)
        return item

    def find_by_id(self, item_id: str) -> Optional[Item]:
        path = self._get_artifact_path(item_id)
        if not path.exists():
            return None
        item = self._load(path)
        if item is None or item.id != item_id:
            return None
        return item

    def find_most_recent(self) -> Optional[Item]:
        items = list(self._iter_items())
        if not items:
            return None
        return max(items, key=lambda item: item.published_at)

    def find_current_period(self, now: Optional[datetime] = None) -> Optional[Item]:
        now = now or self.clock()
        current = [
            item for item in self._iter_items()
            if is_current_period(item, now, self.anchor_weekday)
        ]
        if not current:
            return None
        return max(current, key=lambda item: item.published_at)

    def _iter_items(self) -> Iterator[Item]:
        for path in sorted(self.items_dir.glob("*.yaml")):
            item = self._load(path)
            if item is not None:
                yield item

    def _load(self, path: Path) -> Optional[Item]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not data:
                return None
            return Item.from_dict(data)
        except (OSError, yaml.YAMLError, KeyError, ValueError) as e:
            logger.warning("Skipping unreadable item artifact %s: %s", path, e)
            return None

    def _get_artifact_path(self, item_id: str) -> Path:
        return self.items_dir / f"{safe_filename(item_id)}.yaml"
