# catalog/id_allocator.py

from typing import List, Optional


def _numeric_id(value) -> Optional[int]:
  """Stored id as an integer: ints, integral floats and numeric strings such as "9"."""
  if isinstance(value, bool):
    return None
  if isinstance(value, str):
    try:
      value = float(value.strip())
    except ValueError:
      return None
  if isinstance(value, float):
    return int(value) if value.is_integer() else None
  return value if isinstance(value, int) else None


def next_id(products: List[dict]) -> int:
  """
  Next product id: highest id in the collection plus one.
  Missing or non-numeric ids count as 0, so an empty collection starts at 1.
  Ids freed by a delete are only reused when they were the highest.
  """
  max_id = 0
  for product in products:
    value = _numeric_id(product.get("id")) if isinstance(product, dict) else None
    if value is not None and value > max_id:
      max_id = value
  return max_id + 1
