# catalog/stats_service.py

from catalog.storage import BaseStore, STATS
from catalog.logger import get_logger

log = get_logger(__name__)


def record_visit(store: BaseStore) -> dict:
  """Increment the visit counter and return the new count."""
  with store.lock(STATS):
    stats = store.load(STATS)
    stats["visits"] = (stats.get("visits") or 0) + 1
    store.save(STATS, stats)

  log.debug(f"Visit recorded, total={stats['visits']}")
  return {"visits": stats["visits"]}


def get_stats(store: BaseStore) -> dict:
  with store.lock(STATS):
    return store.load(STATS)
