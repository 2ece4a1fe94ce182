"""File-backed storage adapters."""

from menu_notifier.adapters.storage.yaml_delivery_ledger import YamlDeliveryLedger
from menu_notifier.adapters.storage.yaml_item_store import YamlItemStore

__all__ = ["YamlItemStore", "YamlDeliveryLedger"]
