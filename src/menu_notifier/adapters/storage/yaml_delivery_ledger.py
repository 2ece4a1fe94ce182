"""Delivery ledger keeping one YAML artifact per (item, destination) pair."""

import hashlib
import logging
from pathlib import Path
from typing import Iterator, Optional

import yaml

from menu_notifier.core import DeliveryLedger, DeliveryRecord, DuplicateError

logger = logging.getLogger(__name__)


class YamlDeliveryLedger(DeliveryLedger):
    """Record deliveries as YAML files under ``storage_dir/deliveries``.

    The artifact name is derived from the (item_id, destination) pair and is
    created with exclusive mode, so the file system enforces that a pair is
    recorded at most once even when two deliveries race.
    """

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = storage_dir
        self.deliveries_dir = storage_dir / "deliveries"
        self.deliveries_dir.mkdir(parents=True, exist_ok=True)

    def find_by_item_and_destination(
        self, item_id: str, destination: str
    ) -> Optional[DeliveryRecord]:
        path = self._get_artifact_path(item_id, destination)
        if not path.exists():
            return None
        record = self._load(path)
        if record is None:
            # The pair is taken even if its artifact is empty or damaged.
            logger.warning("Delivery artifact %s is unreadable, treating as delivered", path)
            record = DeliveryRecord(item_id=item_id, destination=destination)
        return record

    def save(self, record: DeliveryRecord) -> DeliveryRecord:
        path = self._get_artifact_path(record.item_id, record.destination)
        try:
            with open(path, "x", encoding="utf-8") as f:
                yaml.safe_dump(
                    record.to_dict(), f, allow_unicode=True, default_flow_style=False, sort_keys=False
                )
        except FileExistsError as e:
            raise DuplicateError(
                f"Already delivered: {record.item_id} -> {record.destination}", e
            ) from e
        logger.debug("Recorded delivery %s -> %s", record.item_id, record.destination)
        return record

    def find_latest_by_destination(self, destination: str) -> Optional[DeliveryRecord]:
        records = [r for r in self._iter_records() if r.destination == destination]
        if not records:
            return None
        return max(records, key=lambda r: r.delivered_at)

    def _iter_records(self) -> Iterator[DeliveryRecord]:
        for path in sorted(self.deliveries_dir.glob("*.yaml")):
            record = self._load(path)
            if record is not None:
                yield record

    def _load(self, path: Path) -> Optional[DeliveryRecord]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not data:
                # Created but not yet written by a concurrent save.
                return None
            return DeliveryRecord.from_dict(data)
        except (OSError, yaml.YAMLError, KeyError, ValueError) as e:
            logger.warning("Skipping unreadable delivery artifact %s: %s", path, e)
            return None

    def _get_artifact_path(self, item_id: str, destination: str) -> Path:
        key = hashlib.sha256(f"{item_id.strip()}\n{destination.strip()}".encode("utf-8"))
        return self.deliveries_dir / f"{key.hexdigest()[:16]}.yaml"
