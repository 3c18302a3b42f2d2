# catalog/errors.py
from typing import Any


class CatalogError(Exception):
    """Base class for every failure raised by the catalog."""


class ValidationError(CatalogError, ValueError):
    """A product failed the required-field contract."""


class DuplicateCodeError(CatalogError):
    def __init__(self, code: Any):
        self.code = code
        super().__init__(f"A product with code {code!r} already exists. Use a different code.")


class PersistenceError(CatalogError):
    """Reading or writing the backing file failed."""


class UnknownFieldError(CatalogError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Products have no field named {field!r}.")


class NotFoundError(CatalogError, LookupError):
    def __init__(self, product_id: Any):
        self.product_id = product_id
        super().__init__(f"Product with id {product_id} was not found.")
