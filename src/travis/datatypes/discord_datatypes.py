"""
Type-safe wrappers for Discord snowflake identifiers.

Discord snowflakes are 64-bit integers that are often carried around as
strings. The wrappers here normalize both forms so that IDs logged by the
evaluator and IDs handed to the Discord API always agree.
"""

from __future__ import annotations

from typing import Union


class _Snowflake:
    """Shared behaviour for the snowflake wrappers.

    Attributes:
        _value (str): The snowflake stored as a decimal string.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "_Snowflake"]) -> None:
        """
        Initialize from a string, int, or another wrapper of the same kind.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, type(self)):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool: {value}")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    def to_int(self) -> int:
        """Convert to an integer for Discord API calls."""
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, type(self)):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))


class UserID(_Snowflake):
    """Snowflake of a Discord user or guild member."""

    __slots__ = ()


class GuildID(_Snowflake):
    """Snowflake of a Discord guild."""

    __slots__ = ()


class ChannelID(_Snowflake):
    """Snowflake of a Discord channel or thread."""

    __slots__ = ()


class MessageID(_Snowflake):
    """Snowflake of a Discord message."""

    __slots__ = ()
