"""Records passed between pipeline stages."""
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from urlbits.processing.parser.escaping import Encoding, escape
from urlbits.processing.shared.constants import RECORD_FIELDS


@dataclass(frozen=True)
class UserCredentials:
    """Username plus optional password from the user-info part of an authority."""
    username: str
    password: Optional[str] = None

    @property
    def password_set(self) -> bool:
        return self.password is not None

    def __str__(self) -> str:
        s = escape(self.username, Encoding.USER_PASSWORD)
        if self.password_set:
            s += ":" + escape(self.password, Encoding.USER_PASSWORD)
        return s

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {"username": self.username, "password_set": self.password_set}
        if self.password_set:
            data["password"] = self.password
        return data


@dataclass(frozen=True)
class ParsedURI:
    """
    Decomposed URI reference.

    Either hierarchical (``[scheme:][//[user@]host]path[?query]``) or opaque
    (``scheme:opaque[?query]``); ``opaque`` is only set for the latter.
    """
    scheme: str = ""
    opaque: str = ""
    user: Optional[UserCredentials] = None
    host: str = ""
    path: str = ""
    raw_path: str = ""
    raw_query: str = ""
    fragment: str = ""
    raw_fragment: str = ""
    force_query: bool = False

    @property
    def is_opaque(self) -> bool:
        return bool(self.opaque)

    def to_record(self) -> Dict[str, str]:
        """Flat view of the URI with empty fields left out."""
        values = {
            "scheme": self.scheme,
            "opaque": self.opaque,
            "user": str(self.user) if self.user is not None else "",
            "host": self.host,
            "path": self.path,
            "raw_path": self.raw_path,
            "raw_query": self.raw_query,
            "fragment": self.fragment,
            "raw_fragment": self.raw_fragment,
        }
        return {name: values[name] for name in RECORD_FIELDS if values[name]}


class QueryMap:
    """
    Query parameters: each key maps to its values in order of appearance.

    Keys keep first-appearance order so that output is reproducible.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: Dict[str, List[str]] = {}

    def add(self, key: str, value: str) -> None:
        self._data.setdefault(key, []).append(value)

    def get(self, key: str) -> List[str]:
        return list(self._data.get(key, ()))

    def keys(self) -> Iterator[str]:
        return iter(self._data)

    def values(self) -> Iterator[str]:
        for values in self._data.values():
            yield from values

    def to_dict(self) -> Dict[str, List[str]]:
        return {key: list(values) for key, values in self._data.items()}

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QueryMap):
            return self._data == other._data
        if isinstance(other, dict):
            return self._data == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"QueryMap({self._data!r})"


@dataclass(frozen=True)
class Diagnostic:
    """One dropped record, reported on the side channel."""
    stage: str
    text: str
    reason: str
