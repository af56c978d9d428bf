"""Tolerant numeric decoding for upstream fields that arrive as strings or numbers."""

from __future__ import annotations

from typing import Annotated, Any, Type, TypeVar

from pydantic import BeforeValidator

from ..errors import DecodeError

N = TypeVar("N", int, float)


def decode_number(value: Any, target: Type[N]) -> N:
    """Decode a JSON scalar encoded either as a string or as a number.

    Parameters
    ----------
    value : Any
        The already-parsed JSON value (``str``, ``int`` or ``float``).
    target : type
        ``int`` or ``float``.

    Returns
    -------
    int or float
        ``value`` converted to ``target``.

    Raises
    ------
    DecodeError
        When the value is neither a parseable string nor a number of the
        requested kind. Callers treat this as fatal to the enclosing fetch.
    """
    if target not in (int, float):
        raise TypeError(f"unsupported target type: {target!r}")

    if isinstance(value, str):
        # float() and int() also accept digit separators and padding
        if "_" in value or value != value.strip():
            raise DecodeError(f"could not parse {value!r} as {target.__name__}")
        try:
            return target(value)
        except ValueError as exc:
            raise DecodeError(f"could not parse {value!r} as {target.__name__}") from exc

    # bool is an int subclass but never a valid reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"could not decode {value!r} as string or {target.__name__}")

    if target is int:
        if isinstance(value, float):
            if not value.is_integer():
                raise DecodeError(f"could not decode {value!r} as int")
            return int(value)
        return value
    return float(value)


def _to_float(value: Any) -> float:
    return decode_number(value, float)


def _to_int(value: Any) -> int:
    return decode_number(value, int)


TolerantFloat = Annotated[float, BeforeValidator(_to_float)]
TolerantInt = Annotated[int, BeforeValidator(_to_int)]


__all__ = ["decode_number", "TolerantFloat", "TolerantInt"]
