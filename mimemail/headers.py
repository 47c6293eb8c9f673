"""Case-insensitive header map and structured header values.

Header names are compared with their ASCII letters folded to lower case,
while the case used on the most recent assignment is kept for display.
Values are opaque strings; no folding or encoding happens here.
"""

from __future__ import annotations

import re
import string
from collections.abc import Iterator, MutableMapping

from .exceptions import InvalidParameterError

CONTENT_TYPE = "Content-Type"
CONTENT_DISPOSITION = "Content-Disposition"
CONTENT_TRANSFER_ENCODING = "Content-Transfer-Encoding"
CONTENT_DESCRIPTION = "Content-Description"
CONTENT_LANGUAGE = "Content-Language"
MIME_VERSION = "MIME-Version"
QUOTED_PRINTABLE = "quoted-printable"

_ASCII_FOLD = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def fold_name(name: str) -> str:
    """Return *name* with ASCII upper case letters turned to lower case."""
    return name.translate(_ASCII_FOLD)


class CaseInsensitiveName(str):
    """A header name whose equality and hash ignore ASCII case.

    ``str(name)`` is the name as it was given, ``name.folded`` the
    canonical lower case form used for lookups and archiving.
    """

    def __new__(cls, name: str) -> CaseInsensitiveName:
        if not name:
            raise InvalidParameterError("a header name cannot be empty")
        self = super().__new__(cls, name)
        self.folded = fold_name(name)
        return self

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.folded == fold_name(other)
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash(self.folded)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"CaseInsensitiveName({str.__repr__(self)})"


class HeaderMap(MutableMapping[str, str]):
    """Mapping of header names to values with case-insensitive lookups.

    Only one value is kept per name; assigning again replaces it (and
    refreshes the display form of the name) without moving the entry.
    Iteration follows insertion order.
    """

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._data: dict[CaseInsensitiveName, str] = {}
        for name, value in (items or {}).items():
            self.set(name, value)

    # ------------------------------------------------------------------
    # Header API
    # ------------------------------------------------------------------

    def set(self, name: str, value: str) -> None:
        key = CaseInsensitiveName(name)
        if key in self._data:
            # same entry, possibly a new display form
            self._data = {(key if k == key else k): v for k, v in self._data.items()}
        self._data[key] = value

    def get(self, name: str, default: str = "") -> str:  # type: ignore[override]
        return self._data.get(CaseInsensitiveName(name), default)

    def has(self, name: str) -> bool:
        return CaseInsensitiveName(name) in self._data

    def remove(self, name: str) -> None:
        if name:
            self._data.pop(CaseInsensitiveName(name), None)

    def copy(self) -> HeaderMap:
        result = HeaderMap()
        result._data = dict(self._data)
        return result

    # ------------------------------------------------------------------
    # MutableMapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, name: str) -> str:
        return self._data[CaseInsensitiveName(name)]

    def __setitem__(self, name: str, value: str) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        del self._data[CaseInsensitiveName(name)]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str) or not name:
            return False
        return CaseInsensitiveName(name) in self._data

    def __iter__(self) -> Iterator[CaseInsensitiveName]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderMap):
            return self._data == other._data
        return NotImplemented

    def __repr__(self) -> str:
        pairs = ", ".join(f"{str(k)!r}: {v!r}" for k, v in self._data.items())
        return f"HeaderMap({{{pairs}}})"

    def __deepcopy__(self, memo: dict) -> HeaderMap:
        return self.copy()


# ----------------------------------------------------------------------
# Structured values: "main; param=value; param=\"quoted value\""
# ----------------------------------------------------------------------

# RFC 2045 token characters
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.0-9A-Z^_`a-z{|}~]+")
_PARAM_RE = re.compile(
    r"""\s*([^\s=;"]+)\s*=\s*("(?:[^"\\]|\\.)*"|[^;]*)""",
    re.DOTALL,
)


class HeaderValue:
    """A header value split into its main value and ordered parameters.

    Parameter names are matched case-insensitively.  Rendering puts one
    space after each ``;`` and only quotes values that are not tokens,
    so parsing a rendered value and rendering it again is stable.
    """

    def __init__(self, value: str = "", params: dict[str, str] | None = None) -> None:
        self.value = value
        self._params: dict[CaseInsensitiveName, str] = {}
        for name, param in (params or {}).items():
            self.set_param(name, param)

    @classmethod
    def parse(cls, raw: str) -> HeaderValue:
        main, _, rest = raw.partition(";")
        result = cls(main.strip())
        for match in _PARAM_RE.finditer(rest):
            name, param = match.group(1), match.group(2).strip()
            if len(param) >= 2 and param[0] == '"' and param[-1] == '"':
                param = re.sub(r"\\(.)", r"\1", param[1:-1])
            result.set_param(name, param)
        return result

    @property
    def params(self) -> dict[str, str]:
        return {str(k): v for k, v in self._params.items()}

    def get_param(self, name: str) -> str:
        return self._params.get(CaseInsensitiveName(name), "")

    def set_param(self, name: str, value: str) -> None:
        self._params[CaseInsensitiveName(name)] = value

    def __str__(self) -> str:
        out = [self.value]
        for name, param in self._params.items():
            if not _TOKEN_RE.fullmatch(param):
                param = '"' + param.replace("\\", "\\\\").replace('"', '\\"') + '"'
            out.append(f"{name}={param}")
        return "; ".join(out)

    def __repr__(self) -> str:
        return f"HeaderValue({str(self)!r})"


def propagate_filename(headers: HeaderMap) -> None:
    """Make ``Content-Type`` and ``Content-Disposition`` agree on the filename.

    A ``filename`` found in the disposition always wins and is forced
    into ``Content-Type`` as ``name``.  Otherwise a ``name`` found in
    ``Content-Type`` is copied to the disposition as ``filename``.
    Nothing happens unless both headers are defined.
    """
    if not headers.has(CONTENT_DISPOSITION) or not headers.has(CONTENT_TYPE):
        return

    disposition = HeaderValue.parse(headers.get(CONTENT_DISPOSITION))
    content_type = HeaderValue.parse(headers.get(CONTENT_TYPE))
    if not disposition.value or not content_type.value:
        return

    filename = disposition.get_param("filename")
    if filename:
        content_type.set_param("name", filename)
        headers.set(CONTENT_TYPE, str(content_type))
        return

    name = content_type.get_param("name")
    if name:
        disposition.set_param("filename", name)
        headers.set(CONTENT_DISPOSITION, str(disposition))
