"""Sources of flat request parameters.

Bind reads parameters through the RequestParams protocol. An absent name
means the field was untouched, an empty list means it was cleared.
"""

from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from form_bind.upload import RequestProcessingError, UploadedFile


@runtime_checkable
class RequestParams(Protocol):
    """Read access to parameters of one request."""

    def names(self) -> list[str]:
        """Names of all parameters, uploaded files included."""
        ...

    def values(self, name: str) -> list[str] | None:
        """String values of the parameter, None if not present."""
        ...

    def uploaded_files(self, name: str) -> list[UploadedFile] | None:
        """Files uploaded under the name, None if not present."""
        ...

    def request_error(self) -> RequestProcessingError | None:
        """Error that occurred while processing the request, if any."""
        ...

    def value(self, name: str) -> str | None:
        """First value of the parameter."""
        ...


class MapParams:
    """RequestParams backed by plain dictionaries.

    Useful for tests and for adapting other web frameworks. Insertion
    order of parameter names is preserved.
    """

    def __init__(
        self,
        params: Mapping[str, Iterable[str] | str] | None = None,
        files: Mapping[str, Iterable[UploadedFile] | UploadedFile] | None = None,
        request_error: RequestProcessingError | None = None,
    ) -> None:
        self._params: dict[str, list[str]] = {}
        self._files: dict[str, list[UploadedFile]] = {}
        self._request_error = request_error
        for name, values in (params or {}).items():
            self.put(name, values)
        for name, uploaded in (files or {}).items():
            self.put_file(name, uploaded)

    @classmethod
    def from_mapping(cls, params: Mapping[str, Iterable[str] | str]) -> "MapParams":
        return cls(params)

    def put(self, name: str, values: Iterable[str] | str) -> None:
        """Append string value(s) of a parameter."""
        if isinstance(values, str):
            values = [values]
        self._params.setdefault(name, []).extend(values)

    def put_file(self, name: str, files: Iterable[UploadedFile] | UploadedFile) -> None:
        """Append uploaded file(s) of a parameter."""
        if isinstance(files, UploadedFile):
            files = [files]
        self._files.setdefault(name, []).extend(files)

    def contains(self, name: str) -> bool:
        return name in self._params or name in self._files

    def names(self) -> list[str]:
        return list(dict.fromkeys([*self._params, *self._files]))

    def values(self, name: str) -> list[str] | None:
        values = self._params.get(name)
        return list(values) if values is not None else None

    def uploaded_files(self, name: str) -> list[UploadedFile] | None:
        files = self._files.get(name)
        return list(files) if files is not None else None

    def request_error(self) -> RequestProcessingError | None:
        return self._request_error

    def value(self, name: str) -> str | None:
        values = self._params.get(name)
        return values[0] if values else None

    def __len__(self) -> int:
        return len(self._params) + len(self._files)
