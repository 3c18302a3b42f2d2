# catalog/models.py
from enum import Enum
from typing import Any, Dict, Union

from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import UnknownFieldError, ValidationError


def _is_empty(value: Any) -> bool:
    return not value or (isinstance(value, str) and not value.strip())


class Product(BaseModel):
    """A catalog entry before the store has given it an id."""

    code: Union[StrictStr, StrictInt]
    title: StrictStr
    description: StrictStr
    price: Union[StrictInt, StrictFloat]
    thumbnail: StrictStr
    stock: Union[StrictInt, StrictFloat]

    @field_validator("*")
    @classmethod
    def _required(cls, value: Any) -> Any:
        if _is_empty(value):
            raise ValueError("is required and cannot be empty")
        return value

    def with_id(self, product_id: int) -> Dict[str, Any]:
        # id goes first; this dict is exactly what lands in the backing file
        return {"id": product_id, **self.model_dump()}


class ProductField(str, Enum):
    CODE = "code"
    TITLE = "title"
    DESCRIPTION = "description"
    PRICE = "price"
    THUMBNAIL = "thumbnail"
    STOCK = "stock"

    @classmethod
    def parse(cls, name: Union[str, "ProductField"]) -> "ProductField":
        try:
            return cls(name)
        except ValueError:
            raise UnknownFieldError(str(name)) from None


def _invalid(fields) -> ValidationError:
    return ValidationError(
        f"All product fields are required and must be non-empty; invalid: {', '.join(fields)}"
    )


def build_product(**fields: Any) -> Product:
    """
    Construct a Product, turning pydantic's error into the catalog's ValidationError.
    The message lists every field that failed.
    """
    try:
        return Product(**fields)
    except PydanticValidationError as exc:
        bad = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise _invalid(bad) from exc


_ADAPTERS: Dict[ProductField, TypeAdapter] = {
    f: TypeAdapter(Product.model_fields[f.value].annotation) for f in ProductField
}


def validate_field(field: ProductField, value: Any) -> Any:
    """Check one new value against its field's contract; the rest of the record is left alone."""
    try:
        value = _ADAPTERS[field].validate_python(value)
    except PydanticValidationError as exc:
        raise _invalid([field.value]) from exc
    if _is_empty(value):
        raise _invalid([field.value])
    return value
