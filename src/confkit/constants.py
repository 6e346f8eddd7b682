"""Behaviour flags, schema key tags and the unset sentinel."""

import enum


class Behaviour(enum.IntFlag):
    """
    Bit flags describing how a field resolves and accepts values.

    Flags combine, e.g. ``Behaviour.OPTIONAL | Behaviour.FALLBACK``.
    """

    DEFAULT = 0
    FALLBACK = 1
    OPTIONAL = 2
    READONLY = 4


class KeyType(enum.IntEnum):
    """Classification of a schema entry."""

    FIELD = 1
    SCHEMA = 2
    NON_FIELD = 10


class _Unset:
    """Marker type for a field override that has never been written."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Unset, ())


# Sentinel for "no override written", distinct from None, False and ""
UNSET = _Unset()
