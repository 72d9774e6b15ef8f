"""
Interface catalog - parsed contract function signatures.

A catalog is supplied by the caller as a list of human-readable signatures,
e.g.::

    "function balanceOf(address owner) view returns (uint256)"
    "transfer(address,uint256) returns (bool)"

or as JSON ABI fragments (``{"type": "function", "name": ..., "inputs": ...}``),
in any mix.  Entries that are not functions (events, errors, constructors)
are skipped.  Parsing happens once per catalog; encoding and decoding work on
the resulting ``CatalogEntry`` records.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Union

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import normalize, parse
from eth_hash.auto import keccak

from ..errors import CatalogError, UnknownFunction

MUTABILITIES = ("pure", "view", "nonpayable", "payable")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_ARRAY_SUFFIX_RE = re.compile(r"^(\[\d*\])*")
_SKIPPED_KINDS = ("event", "error", "constructor", "fallback", "receive", "modifier")
_PARAM_KEYWORDS = frozenset({"indexed", "memory", "calldata", "storage", "payable"})
_MODIFIERS = frozenset({"public", "external", "internal", "private", "virtual", "override"})

SignatureLike = Union[str, Mapping[str, Any]]


@dataclass(frozen=True)
class TypeTag:
    """A canonical ABI type (``uint256``, ``(address,bytes)[]``) and its name."""

    type: str
    name: str = ""

    @property
    def is_dynamic(self) -> bool:
        return parse(self.type).is_dynamic

    def __str__(self) -> str:
        return f"{self.type} {self.name}" if self.name else self.type


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    inputs: tuple[TypeTag, ...] = ()
    outputs: tuple[TypeTag, ...] = ()
    mutability: str = "nonpayable"

    @property
    def input_types(self) -> list[str]:
        return [tag.type for tag in self.inputs]

    @property
    def output_types(self) -> list[str]:
        return [tag.type for tag in self.outputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        # Keccak-256, not NIST SHA3-256.
        return keccak(self.signature.encode("utf-8"))[:4]

    @property
    def is_read_only(self) -> bool:
        return self.mutability in ("pure", "view")


class Catalog:
    """An ordered, immutable set of parsed function entries."""

    def __init__(self, entries: Iterable[CatalogEntry]) -> None:
        self._entries = tuple(entries)

    @classmethod
    def parse(cls, signatures: Iterable[SignatureLike]) -> "Catalog":
        entries = []
        for item in signatures:
            if isinstance(item, str):
                entry = parse_signature(item)
            elif isinstance(item, Mapping):
                entry = parse_abi_fragment(item)
            else:
                raise CatalogError(f"Unsupported catalog item: {item!r}")
            if entry is not None:
                entries.append(entry)
        return cls(entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Catalog({[entry.signature for entry in self._entries]!r})"

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(entry.name for entry in self._entries))

    def lookup(self, function_name: str, arg_count: Optional[int] = None) -> CatalogEntry:
        """
        Find the entry for a function.

        Args:
            function_name: Bare name ("transfer") or full signature
                ("transfer(address,uint256)") to pick an overload
            arg_count: Number of arguments, used to disambiguate overloads

        Raises:
            UnknownFunction: If no entry matches
            CatalogError: If the name is overloaded and cannot be disambiguated
        """
        if "(" in function_name:
            wanted = _canonical_signature(function_name)
            for entry in self._entries:
                if entry.signature == wanted:
                    return entry
            raise UnknownFunction(function_name, self.names)

        candidates = [entry for entry in self._entries if entry.name == function_name]
        if not candidates:
            raise UnknownFunction(function_name, self.names)
        if len(candidates) == 1:
            return candidates[0]

        if arg_count is not None:
            matching = [entry for entry in candidates if len(entry.inputs) == arg_count]
            if len(matching) == 1:
                return matching[0]
        overloads = ", ".join(entry.signature for entry in candidates)
        raise CatalogError(
            f"Function {function_name} is overloaded ({overloads}); use the full signature"
        )


CatalogLike = Union[Catalog, Iterable[SignatureLike]]


def as_catalog(catalog: CatalogLike) -> Catalog:
    """Return ``catalog`` parsed, reusing earlier parses of string catalogs."""
    if isinstance(catalog, Catalog):
        return catalog
    if isinstance(catalog, (str, bytes)):
        raise CatalogError("Catalog must be a sequence of signatures, not a single string")
    items = list(catalog)
    if all(isinstance(item, str) for item in items):
        return _parse_string_catalog(tuple(items))
    return Catalog.parse(items)


@lru_cache(maxsize=64)
def _parse_string_catalog(signatures: tuple[str, ...]) -> Catalog:
    return Catalog.parse(signatures)


# ---------------------------------------------------------------------------
# Human-readable signatures
# ---------------------------------------------------------------------------

def parse_signature(text: str) -> Optional[CatalogEntry]:
    """
    Parse one human-readable signature.

    Returns:
        The parsed entry, or None for non-function declarations (events, ...)

    Raises:
        CatalogError: If the signature is malformed
    """
    source = text.strip().rstrip(";").strip()
    if not source:
        raise CatalogError("Empty signature")

    keyword = source.split(None, 1)[0].split("(", 1)[0]
    if keyword in _SKIPPED_KINDS:
        return None
    if keyword == "function":
        source = source[len("function"):].strip()

    open_at = source.find("(")
    if open_at <= 0:
        raise CatalogError(f"Missing parameter list in signature: {text!r}")
    name = source[:open_at].strip()
    if not _IDENTIFIER_RE.match(name):
        raise CatalogError(f"Invalid function name {name!r} in signature: {text!r}")

    close_at = _matching_paren(source, open_at, text)
    inputs = _parse_param_list(source[open_at + 1:close_at], text)
    rest = source[close_at + 1:].strip()

    mutability = "nonpayable"
    outputs: tuple[TypeTag, ...] = ()
    while rest:
        if rest.startswith("returns"):
            rest = rest[len("returns"):].strip()
            if not rest.startswith("("):
                raise CatalogError(f"Expected '(' after returns in signature: {text!r}")
            end = _matching_paren(rest, 0, text)
            outputs = _parse_param_list(rest[1:end], text)
            rest = rest[end + 1:].strip()
            continue
        word, _, rest = rest.partition(" ")
        rest = rest.strip()
        if word in MUTABILITIES:
            mutability = word
        elif word == "constant":
            mutability = "view"
        elif word not in _MODIFIERS:
            raise CatalogError(f"Unexpected token {word!r} in signature: {text!r}")

    return CatalogEntry(name=name, inputs=inputs, outputs=outputs, mutability=mutability)


def _matching_paren(source: str, open_at: int, text: str) -> int:
    depth = 0
    for index in range(open_at, len(source)):
        char = source[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    raise CatalogError(f"Unbalanced parentheses in signature: {text!r}")


def _split_top_level(source: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in source:
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current.append(char)
    parts.append("".join(current))
    return parts


def _parse_param_list(source: str, text: str) -> tuple[TypeTag, ...]:
    if not source.strip():
        return ()
    return tuple(_parse_param(part.strip(), text) for part in _split_top_level(source))


def _parse_param(source: str, text: str) -> TypeTag:
    if not source:
        raise CatalogError(f"Empty parameter in signature: {text!r}")

    if source.startswith("tuple("):
        source = source[len("tuple"):]
    if source.startswith("("):
        end = _matching_paren(source, 0, text)
        components = _parse_param_list(source[1:end], text)
        suffix = _ARRAY_SUFFIX_RE.match(source[end + 1:]).group(0)
        type_str = "(" + ",".join(tag.type for tag in components) + ")" + suffix
        words = source[end + 1 + len(suffix):].split()
    else:
        type_str, *words = source.split()

    words = [word for word in words if word not in _PARAM_KEYWORDS]
    if len(words) > 1:
        raise CatalogError(f"Cannot parse parameter {source!r} in signature: {text!r}")
    return TypeTag(type=canonical_type(type_str), name=words[0] if words else "")


def canonical_type(type_str: str) -> str:
    """Normalise aliases (``uint`` -> ``uint256``) and validate the type."""
    canonical = normalize(type_str.strip())
    try:
        parse(canonical).validate()
    except (ParseError, ABITypeError) as exc:
        raise CatalogError(f"Invalid ABI type {type_str!r}: {exc}") from exc
    return canonical


def _canonical_signature(function_name: str) -> str:
    entry = parse_signature(function_name)
    if entry is None:
        raise CatalogError(f"Not a function signature: {function_name!r}")
    return entry.signature


# ---------------------------------------------------------------------------
# JSON ABI fragments
# ---------------------------------------------------------------------------

def parse_abi_fragment(fragment: Mapping[str, Any]) -> Optional[CatalogEntry]:
    """Parse a JSON ABI item; returns None for non-function items."""
    if fragment.get("type", "function") != "function":
        return None
    name = fragment.get("name")
    if not name or not _IDENTIFIER_RE.match(name):
        raise CatalogError(f"ABI function without a valid name: {fragment!r}")

    mutability = fragment.get("stateMutability")
    if mutability is None:
        if fragment.get("constant"):
            mutability = "view"
        elif fragment.get("payable"):
            mutability = "payable"
        else:
            mutability = "nonpayable"
    if mutability not in MUTABILITIES:
        raise CatalogError(f"Unknown stateMutability {mutability!r} for {name}")

    return CatalogEntry(
        name=name,
        inputs=tuple(_abi_param(item) for item in fragment.get("inputs", [])),
        outputs=tuple(_abi_param(item) for item in fragment.get("outputs", [])),
        mutability=mutability,
    )


def _abi_param(item: Mapping[str, Any]) -> TypeTag:
    return TypeTag(type=canonical_type(_abi_type(item)), name=item.get("name", "") or "")


def _abi_type(item: Mapping[str, Any]) -> str:
    type_str = item["type"]
    if type_str.startswith("tuple"):
        components = ",".join(_abi_type(c) for c in item.get("components", []))
        return f"({components}){type_str[len('tuple'):]}"
    return type_str
