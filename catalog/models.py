# catalog/models.py

from pydantic import BaseModel, ConfigDict
from typing import Any, Optional


class Product(BaseModel):
  id: int
  name: str
  description: str
  image: str # opaque payload, usually a base64 data URL
  alt: str


class ProductFields(BaseModel):
  """Client body for create/update. Values stay untyped, presence is checked by the service."""
  model_config = ConfigDict(extra="ignore")

  name: Optional[Any] = None
  description: Optional[Any] = None
  image: Optional[Any] = None
  alt: Optional[Any] = None


class Stats(BaseModel):
  model_config = ConfigDict(extra="allow")

  visits: int = 0


class Message(BaseModel):
  message: str


class ErrorResponse(BaseModel):
  error: str
