# tests/test_product_service.py

import pytest
import logging
from catalog.storage import MemoryStore
from catalog import product_service
from catalog.product_service import validate_product_fields, parse_product_id, is_missing
import catalog.exceptions as ex

test_log = logging.getLogger("tests")

FIELDS = {"name": "Subwoofer", "description": "18 inch", "image": "data:image/png;base64,CCCC", "alt": "subwoofer"}


@pytest.fixture
def store():
  return MemoryStore()


def test_validate_all_present():
  result = validate_product_fields(FIELDS)
  assert result.valid
  assert result.missing == []


def test_validate_reports_every_missing_field():
  result = validate_product_fields({"name": "x", "description": "", "image": None})
  assert not result.valid
  assert result.missing == ["description", "image", "alt"]


def test_validate_is_presence_only():
  # Non-string truthy values pass
  result = validate_product_fields({"name": 1, "description": ["a"], "image": True, "alt": "0"})
  assert result.valid


@pytest.mark.parametrize("value, missing", [
  (None, True),
  (False, True),
  ("", True),
  (0, True),
  (0.0, True),
  (float("nan"), True),
  ([], False),
  ({}, False),
  ("0", False),
  (" ", False),
  (-1, False),
  (True, False),
])
def test_is_missing_follows_falsy_values(value, missing):
  assert is_missing(value) is missing


def test_validate_accepts_empty_containers():
  result = validate_product_fields({"name": [], "description": {}, "image": "x", "alt": "y"})
  assert result.valid
  assert result.missing == []


@pytest.mark.parametrize("raw, expected", [
  ("12", 12),
  ("12abc", 12),
  (" 7", 7),
  ("-3", -3),
  (5, 5),
  ("abc", None),
  ("", None),
])
def test_parse_product_id(raw, expected):
  assert parse_product_id(raw) == expected


def test_create_assigns_ids(store):
  first = product_service.create_product(store, FIELDS)
  second = product_service.create_product(store, {**FIELDS, "name": "Tweeter"})
  assert first["id"] == 1
  assert second["id"] == 2
  assert product_service.list_products(store) == [first, second]
  test_log.info("test_create_assigns_ids completed successfully.")


def test_create_validation_error_does_not_write(store):
  with pytest.raises(ex.ValidationError) as exc_info:
    product_service.create_product(store, {**FIELDS, "image": ""})
  assert exc_info.value.missing == ["image"]
  assert exc_info.value.message == "Missing required fields"
  assert product_service.list_products(store) == []


def test_create_keeps_only_product_fields(store):
  created = product_service.create_product(store, {**FIELDS, "id": 50, "stock": 3})
  assert created == {"id": 1, **FIELDS}


def test_deleted_highest_id_is_reused(store):
  product_service.create_product(store, FIELDS)
  product_service.create_product(store, FIELDS)
  product_service.delete_product(store, 2)
  assert product_service.create_product(store, FIELDS)["id"] == 2


def test_deleted_lower_id_is_not_reused(store):
  product_service.create_product(store, FIELDS)
  product_service.create_product(store, FIELDS)
  product_service.delete_product(store, 1)
  assert product_service.create_product(store, FIELDS)["id"] == 3


def test_update_replaces_record(store):
  product_service.create_product(store, FIELDS)
  updated = product_service.update_product(store, "1", {**FIELDS, "name": "Sub 2", "extra": "ignored"})
  assert updated == {"id": 1, **FIELDS, "name": "Sub 2"}
  assert product_service.list_products(store) == [updated]


def test_update_keeps_position(store):
  product_service.create_product(store, FIELDS)
  product_service.create_product(store, {**FIELDS, "name": "Middle"})
  product_service.create_product(store, FIELDS)
  product_service.update_product(store, 2, {**FIELDS, "name": "Replaced"})
  names = [p["name"] for p in product_service.list_products(store)]
  assert names == ["Subwoofer", "Replaced", "Subwoofer"]


def test_update_not_found_leaves_store_unchanged(store):
  product_service.create_product(store, FIELDS)
  before = product_service.list_products(store)
  with pytest.raises(ex.NotFoundError) as exc_info:
    product_service.update_product(store, 9, FIELDS)
  assert exc_info.value.product_id == 9
  assert product_service.list_products(store) == before


def test_update_validation_error(store):
  product_service.create_product(store, FIELDS)
  with pytest.raises(ex.ValidationError):
    product_service.update_product(store, 1, {**FIELDS, "alt": None})
  assert product_service.list_products(store) == [{"id": 1, **FIELDS}]


def test_delete_not_found_leaves_store_unchanged(store):
  product_service.create_product(store, FIELDS)
  with pytest.raises(ex.NotFoundError):
    product_service.delete_product(store, "nope")
  assert len(product_service.list_products(store)) == 1


def test_delete_returns_message(store):
  product_service.create_product(store, FIELDS)
  assert product_service.delete_product(store, 1) == {"message": "Product deleted"}
  assert product_service.list_products(store) == []


def test_get_product(store):
  created = product_service.create_product(store, FIELDS)
  assert product_service.get_product(store, "1") == created
  with pytest.raises(ex.NotFoundError):
    product_service.get_product(store, 2)


def test_string_ids_do_not_match(store):
  store.save("products", [{"id": "1", **FIELDS}])
  with pytest.raises(ex.NotFoundError):
    product_service.delete_product(store, 1)


def test_create_after_numeric_string_id(store):
  store.save("products", [{"id": "9", **FIELDS}, {"id": 2, **FIELDS}])
  assert product_service.create_product(store, FIELDS)["id"] == 10
