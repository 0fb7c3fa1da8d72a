# catalog/storage.py

"""
Whole-file JSON persistence for the two catalog datasets.

Each dataset is a single JSON document that is read completely on every
``load`` and overwritten completely on every ``save``. A missing or broken file
is never an error for the caller: ``load`` falls back to the dataset default.
Write failures are raised as ``StorageWriteError``.

Stores also hand out one lock per dataset. Services hold it around a
read-modify-write cycle so that two requests inside this process cannot
overwrite each other's changes. Other processes writing the same files are
still last-writer-wins.
"""

import copy
import json
import os
import threading
from functools import lru_cache

from catalog.config import get_settings
from catalog.exceptions import StorageReadError, StorageWriteError
from catalog.logger import get_logger

log = get_logger(__name__)

PRODUCTS = "products"
STATS = "stats"

# dataset -> (file name, default snapshot, expected top-level type)
DATASETS = {
  PRODUCTS: ("products.json", [], list),
  STATS: ("stats.json", {"visits": 0}, dict),
}


def default_for(dataset: str):
  """Fresh copy of the dataset default"""
  return copy.deepcopy(DATASETS[dataset][1])


def dump_snapshot(value) -> str:
  return json.dumps(value, ensure_ascii=False, indent=2)


def parse_snapshot(dataset: str, text: str):
  """Parse a stored document, rejecting the wrong top-level shape."""
  value = json.loads(text)
  expected = DATASETS[dataset][2]
  if not isinstance(value, expected):
    raise ValueError(f"expected JSON {expected.__name__}, got {type(value).__name__}")
  return value


class BaseStore:
  """load/save contract shared by the file store and the in-memory fake."""

  def __init__(self):
    self._locks = {name: threading.Lock() for name in DATASETS}

  def lock(self, dataset: str) -> threading.Lock:
    return self._locks[dataset]

  def load(self, dataset: str):
    raise NotImplementedError

  def save(self, dataset: str, value) -> None:
    raise NotImplementedError


class JsonFileStore(BaseStore):
  def __init__(self, data_dir: str):
    super().__init__()
    self.data_dir = data_dir

  def path_for(self, dataset: str) -> str:
    return os.path.join(self.data_dir, DATASETS[dataset][0])

  def load(self, dataset: str):
    path = self.path_for(dataset)
    try:
      with open(path, "r", encoding="utf-8") as f:
        value = parse_snapshot(dataset, f.read())
    except FileNotFoundError:
      log.debug(f"No '{dataset}' file at {path}, starting with default", extra={"dataset": dataset, "path": path})
      return default_for(dataset)
    except (OSError, ValueError) as e:
      err = StorageReadError(dataset, path, str(e))
      log.warning(f"{err.message}. Falling back to default", extra={"dataset": dataset, "path": path})
      return default_for(dataset)

    log.debug(f"Loaded '{dataset}' from {path}", extra={"dataset": dataset, "path": path})
    return value

  def save(self, dataset: str, value) -> None:
    path = self.path_for(dataset)
    try:
      os.makedirs(self.data_dir, exist_ok=True)
      with open(path, "w", encoding="utf-8") as f:
        f.write(dump_snapshot(value))
    except OSError as e:
      log.error(f"Error writing '{dataset}' to {path}: {e}", extra={"dataset": dataset, "path": path})
      raise StorageWriteError(dataset, path, str(e)) from e
    log.info(f"Saved '{dataset}' to {path}", extra={"dataset": dataset, "path": path})


class MemoryStore(BaseStore):
  """In-memory store with the same contract, used by tests."""

  def __init__(self, initial: dict = None):
    super().__init__()
    self._documents = {}
    for dataset, value in (initial or {}).items():
      self.save(dataset, value)

  def load(self, dataset: str):
    text = self._documents.get(dataset)
    if text is None:
      return default_for(dataset)
    try:
      return parse_snapshot(dataset, text)
    except ValueError:
      return default_for(dataset)

  def save(self, dataset: str, value) -> None:
    if dataset not in DATASETS:
      raise KeyError(dataset)
    self._documents[dataset] = dump_snapshot(value)

  def put_raw(self, dataset: str, text: str) -> None:
    """Store a document verbatim, e.g. to simulate a corrupt file."""
    self._documents[dataset] = text


@lru_cache
def get_store() -> BaseStore:
  """Process-wide file store for the configured data directory."""
  settings = get_settings()
  log.info(f"Using data directory '{os.path.abspath(settings.data_dir)}'")
  return JsonFileStore(settings.data_dir)
