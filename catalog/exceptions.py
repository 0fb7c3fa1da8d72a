# catalog/exceptions.py

class CatalogException(Exception):
  """All catalog errors"""
  pass

class ValidationError(CatalogException):
  """Required product fields absent or falsy"""
  def __init__(self, missing, message: str = None):
    self.missing = list(missing)
    self.message = message or "Missing required fields"
    super().__init__(self.message)

class NotFoundError(CatalogException):
  """No product with the requested id"""
  def __init__(self, product_id, message: str = None):
    self.product_id = product_id
    self.message = message or "Product not found"
    super().__init__(self.message)

class StorageReadError(CatalogException):
  """Data file missing, unreadable or unparsable. Recovered inside the store."""
  def __init__(self, dataset: str, path: str, reason: str = None):
    self.dataset = dataset
    self.path = path
    self.message = f"Cannot read '{dataset}' from {path}" + (f": {reason}" if reason else "")
    super().__init__(self.message)

class StorageWriteError(CatalogException):
  """Data file could not be written"""
  def __init__(self, dataset: str, path: str, reason: str = None):
    self.dataset = dataset
    self.path = path
    self.message = f"Cannot write '{dataset}' to {path}" + (f": {reason}" if reason else "")
    super().__init__(self.message)
