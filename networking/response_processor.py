"""Response processor: decodes response bodies into typed values.

Decoding uses pydantic TypeAdapters: ISO-8601 strings become datetimes and
snake_case wire fields map directly onto snake_case model fields.
"""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from networking.errors import NetworkError
from networking.tasks import Result


class ResponseProcessor:
    """Decodes raw bytes into a response type, or classifies the failure."""

    def __init__(self) -> None:
        self._adapters: dict[Any, TypeAdapter[Any]] = {}

    def process(self, data: bytes | None, response_type: Any) -> Result[Any]:
        """Decode ``data`` into ``response_type``.

        Args:
            data: The raw response body, None or empty when absent.
            response_type: Target type understood by pydantic.

        Returns:
            Result with the decoded value, or INVALID_DATA / DECODING_ERROR.
        """
        if not data:
            return Result.failure(NetworkError.invalid_data())

        try:
            value = self._adapter_for(response_type).validate_json(data)
        except ValidationError as exc:
            return Result.failure(NetworkError.decoding_error(exc))

        return Result.success(value)

    def _adapter_for(self, response_type: Any) -> TypeAdapter[Any]:
        try:
            return self._adapters[response_type]
        except KeyError:
            adapter: TypeAdapter[Any] = TypeAdapter(response_type)
            self._adapters[response_type] = adapter
            return adapter
        except TypeError:
            # Unhashable type expressions are not cached.
            return TypeAdapter(response_type)
