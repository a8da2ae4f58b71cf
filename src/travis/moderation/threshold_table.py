"""
Per-attribute punishment thresholds.

A ThresholdTable is built once from configuration and never changes. Lookups
return the entries for an attribute ordered from the most to the least severe
punishment, independent of the order they were configured in.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Mapping

from travis.datatypes.moderation_datatypes import PunishmentKind, ThresholdEntry
from travis.datatypes.perspective_datatypes import AttributeKind
from travis.exceptions import ConfigurationError


class ThresholdTable:
    """Immutable mapping of attribute -> (punishment, minimum score) entries."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[AttributeKind, Mapping[PunishmentKind, float]]) -> None:
        if not entries:
            raise ConfigurationError("Threshold table must configure at least one attribute")

        table: dict[AttributeKind, tuple[ThresholdEntry, ...]] = {}
        for attribute, thresholds in entries.items():
            if not isinstance(attribute, AttributeKind):
                raise ConfigurationError(f"Unknown attribute in threshold table: {attribute!r}")
            for punishment, minimum in thresholds.items():
                if not isinstance(punishment, PunishmentKind):
                    raise ConfigurationError(f"Unknown punishment {punishment!r} for {attribute}")
                _validate_score(attribute, punishment, minimum)

            table[attribute] = tuple(
                ThresholdEntry(kind, float(thresholds[kind]))
                for kind in PunishmentKind.by_severity()
                if kind in thresholds
            )

        object.__setattr__(self, "_entries", MappingProxyType(table))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ThresholdTable is immutable")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]] | None) -> ThresholdTable:
        """Build a table from configuration of the form ``{attribute: {ban: x, kick: y, delete: z}}``.

        Attribute names are matched case-insensitively against the Perspective
        names; punishment names must be ``ban``, ``kick`` or ``delete``.

        Raises:
            ConfigurationError: On unknown names, non-numeric values or values outside [0, 1].
        """
        if not isinstance(raw, Mapping) or not raw:
            raise ConfigurationError("'thresholds' must be a non-empty mapping")

        parsed: dict[AttributeKind, dict[PunishmentKind, float]] = {}
        for attribute_name, thresholds in raw.items():
            try:
                attribute = AttributeKind.parse(attribute_name)
            except ValueError:
                raise ConfigurationError(f"Unknown attribute in thresholds: {attribute_name!r}") from None

            if not isinstance(thresholds, Mapping):
                raise ConfigurationError(f"Thresholds for {attribute} must be a mapping")

            punishments: dict[PunishmentKind, float] = {}
            for punishment_name, minimum in thresholds.items():
                try:
                    punishment = PunishmentKind(str(punishment_name).strip().lower())
                except ValueError:
                    raise ConfigurationError(
                        f"Unknown punishment {punishment_name!r} for {attribute}"
                    ) from None
                punishments[punishment] = minimum
            parsed[attribute] = punishments

        return cls(parsed)

    @property
    def attributes(self) -> tuple[AttributeKind, ...]:
        """Attributes that have at least one configured threshold mapping."""
        return tuple(self._entries)

    def lookup(self, attribute: AttributeKind) -> tuple[ThresholdEntry, ...]:
        """Return the entries for ``attribute``, most severe punishment first.

        Unconfigured attributes yield an empty tuple.
        """
        return self._entries.get(attribute, ())

    def __contains__(self, attribute: object) -> bool:
        return attribute in self._entries

    def __repr__(self) -> str:
        body = ", ".join(
            f"{attribute}: {{{', '.join(f'{e.punishment}: {e.minimum_score}' for e in entries)}}}"
            for attribute, entries in self._entries.items()
        )
        return f"ThresholdTable({{{body}}})"


def _validate_score(attribute: AttributeKind, punishment: PunishmentKind, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"Threshold {attribute}.{punishment} must be a number, got {value!r}")
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"Threshold {attribute}.{punishment} must be within [0, 1], got {value}")
