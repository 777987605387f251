"""
Typed parsing of button and list reply ids.

Reply ids carry data (``loc_Centro``, ``pass_2``) or name a fixed action
(``fazer_cotacao``). The engine never slices these strings itself; it asks
``parse_selection`` for a typed variant and dispatches on that.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

LOCATION_PREFIX = "loc_"
PASSENGER_PREFIX = "pass_"
ESCAPE_ID = "outro_local"


class Action(str, Enum):
    """Fixed action ids used by the menus."""
    START_QUOTE = "fazer_cotacao"
    SHOW_PRICES = "ver_precos"
    DIRECT_CONTACT = "contato_direto"
    CONFIRM_TRIP = "confirmar_viagem"


class InvalidSelectionError(ValueError):
    """Raised when a reply id has a known prefix but an unusable payload."""


@dataclass(frozen=True)
class LocationChoice:
    name: str


@dataclass(frozen=True)
class PassengerChoice:
    count: int


@dataclass(frozen=True)
class ActionChoice:
    action: Action


@dataclass(frozen=True)
class EscapeChoice:
    """The "type another address" row."""


@dataclass(frozen=True)
class UnknownChoice:
    raw: str


Selection = Union[LocationChoice, PassengerChoice, ActionChoice, EscapeChoice, UnknownChoice]


def location_id(name: str) -> str:
    return f"{LOCATION_PREFIX}{name}"


def passenger_id(count: int) -> str:
    return f"{PASSENGER_PREFIX}{count}"


def parse_selection(raw: str) -> Selection:
    """Turn a reply id into a typed selection.

    Raises:
        InvalidSelectionError: for ``loc_`` without a name or ``pass_``
            without a positive integer.
    """
    value = raw.strip()
    if value == ESCAPE_ID:
        return EscapeChoice()
    if value.startswith(LOCATION_PREFIX):
        name = value[len(LOCATION_PREFIX):].strip()
        if not name:
            raise InvalidSelectionError(f"Location selection without a name: {raw!r}")
        return LocationChoice(name=name)
    if value.startswith(PASSENGER_PREFIX):
        suffix = value[len(PASSENGER_PREFIX):]
        try:
            count = int(suffix)
        except ValueError:
            raise InvalidSelectionError(f"Passenger selection is not a number: {raw!r}") from None
        if count < 1:
            raise InvalidSelectionError(f"Passenger count must be positive: {raw!r}")
        return PassengerChoice(count=count)
    try:
        return ActionChoice(action=Action(value))
    except ValueError:
        return UnknownChoice(raw=value)
