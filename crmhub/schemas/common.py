from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, HttpUrl, TypeAdapter

_http_url = TypeAdapter(HttpUrl)


def blank_to_none(value: Any) -> Any:
    """Forms submit "" for untouched optional fields"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_url(value: str) -> str:
    # Validate, but store exactly what the client sent
    _http_url.validate_python(value)
    return value


UrlStr = Annotated[str, AfterValidator(_check_url)]
OptionalUrl = Annotated[Optional[UrlStr], BeforeValidator(blank_to_none)]
OptionalId = Annotated[Optional[int], BeforeValidator(blank_to_none)]


class MessageResponse(BaseModel):
    message: str
