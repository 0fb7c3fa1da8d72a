# catalog/product_service.py

import re
from dataclasses import dataclass, field
from typing import List, Optional

from catalog.storage import BaseStore, PRODUCTS
from catalog.id_allocator import next_id
from catalog.logger import get_logger
import catalog.exceptions as ex

log = get_logger(__name__)

REQUIRED_FIELDS = ("name", "description", "image", "alt")

_leading_int = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class FieldValidation:
  valid: bool
  missing: List[str] = field(default_factory=list)


def is_missing(value) -> bool:
  """
  Falsy in the JavaScript sense: None, False, "", 0 and NaN.
  Empty lists and objects are present values.
  """
  if value is None or value is False or value == "":
    return True
  if isinstance(value, (int, float)) and not isinstance(value, bool):
    return value == 0 or value != value
  return False


def validate_product_fields(fields: dict) -> FieldValidation:
  """Presence check for the product content fields. No type checks."""
  missing = [name for name in REQUIRED_FIELDS if is_missing(fields.get(name))]
  return FieldValidation(valid=not missing, missing=missing)


def parse_product_id(raw) -> Optional[int]:
  """Leading-integer parse of a path id: '12' and '12abc' -> 12, 'abc' -> None"""
  if isinstance(raw, int):
    return raw
  match = _leading_int.match(str(raw))
  return int(match.group(1)) if match else None


def _require_fields(fields: dict) -> None:
  result = validate_product_fields(fields)
  if not result.valid:
    log.warning(f"Product rejected, missing fields: {result.missing}")
    raise ex.ValidationError(result.missing)


def _find_index(products: List[dict], product_id: Optional[int]) -> int:
  if product_id is None:
    return -1
  for index, product in enumerate(products):
    if isinstance(product, dict) and product.get("id") == product_id:
      return index
  return -1


def _build_record(product_id: int, fields: dict) -> dict:
  record = {"id": product_id}
  for name in REQUIRED_FIELDS:
    record[name] = fields[name]
  return record


def list_products(store: BaseStore) -> List[dict]:
  """Return the stored collection as-is."""
  with store.lock(PRODUCTS):
    products = store.load(PRODUCTS)
  log.info(f"Listing {len(products)} products")
  return products


def get_product(store: BaseStore, product_id) -> dict:
  product_id = parse_product_id(product_id)
  with store.lock(PRODUCTS):
    products = store.load(PRODUCTS)
  index = _find_index(products, product_id)
  if index == -1:
    raise ex.NotFoundError(product_id)
  return products[index]


def create_product(store: BaseStore, fields: dict) -> dict:
  """
  Append a new product with the next free id.

  Args:
    store (BaseStore): Persistence store
    fields (dict): Client body; only name, description, image and alt are used

  Returns:
    dict: The created record
  """
  _require_fields(fields)

  with store.lock(PRODUCTS):
    products = store.load(PRODUCTS)
    product = _build_record(next_id(products), fields)
    products.append(product)
    store.save(PRODUCTS, products)

  log.info(f"Created product id={product['id']} name='{product['name']}'", extra={"product_id": product["id"]})
  return product


def update_product(store: BaseStore, product_id, fields: dict) -> dict:
  """
  Replace the product at ``product_id`` entirely. The id comes from the path,
  it is never regenerated.

  Args:
    store (BaseStore): Persistence store
    product_id: Path id, parsed with parse_product_id
    fields (dict): Client body

  Returns:
    dict: The updated record
  """
  _require_fields(fields)
  product_id = parse_product_id(product_id)

  with store.lock(PRODUCTS):
    products = store.load(PRODUCTS)
    index = _find_index(products, product_id)
    if index == -1:
      log.warning(f"Update failed, product id={product_id} not found", extra={"product_id": product_id})
      raise ex.NotFoundError(product_id)
    products[index] = _build_record(product_id, fields)
    store.save(PRODUCTS, products)

  log.info(f"Updated product id={product_id}", extra={"product_id": product_id})
  return products[index]


def delete_product(store: BaseStore, product_id) -> dict:
  product_id = parse_product_id(product_id)

  with store.lock(PRODUCTS):
    products = store.load(PRODUCTS)
    index = _find_index(products, product_id)
    if index == -1:
      log.warning(f"Delete failed, product id={product_id} not found", extra={"product_id": product_id})
      raise ex.NotFoundError(product_id)
    del products[index]
    store.save(PRODUCTS, products)

  log.info(f"Deleted product id={product_id}", extra={"product_id": product_id})
  return {"message": "Product deleted"}
