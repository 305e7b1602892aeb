"""Shared serialisation helpers for settings dataclasses."""

from __future__ import annotations

import dataclasses

_defaults_cache: dict[tuple[type, frozenset[str]], dict] = {}


def _field_defaults(cls: type, *, exclude: frozenset[str] = frozenset()) -> dict:
    """Return ``{field_name: default}`` for the simple-default fields of *cls*.

    Fields declared with ``default_factory`` (or with no default) are
    left out, as are names in *exclude*.  ``to_dict()`` implementations
    compare against this mapping so that only changed values are
    written.  Results are cached per ``(cls, exclude)``.
    """
    key = (cls, exclude)
    cached = _defaults_cache.get(key)
    if cached is None:
        cached = {
            f.name: f.default
            for f in dataclasses.fields(cls)
            if f.default is not dataclasses.MISSING
            and f.name not in exclude
        }
        _defaults_cache[key] = cached
    return cached
