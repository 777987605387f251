"""Tests for reply id parsing."""

import pytest

from src.conversation.selection import (
    Action,
    ActionChoice,
    EscapeChoice,
    InvalidSelectionError,
    LocationChoice,
    PassengerChoice,
    UnknownChoice,
    location_id,
    parse_selection,
    passenger_id,
)


class TestParseSelection:
    def test_location_keeps_full_name(self):
        assert parse_selection("loc_Cuiabá Centro") == LocationChoice(name="Cuiabá Centro")

    def test_passenger_count(self):
        assert parse_selection("pass_2") == PassengerChoice(count=2)

    def test_large_passenger_count(self):
        assert parse_selection("pass_7") == PassengerChoice(count=7)

    def test_escape_row(self):
        assert parse_selection("outro_local") == EscapeChoice()

    @pytest.mark.parametrize("raw,action", [
        ("fazer_cotacao", Action.START_QUOTE),
        ("ver_precos", Action.SHOW_PRICES),
        ("contato_direto", Action.DIRECT_CONTACT),
        ("confirmar_viagem", Action.CONFIRM_TRIP),
    ])
    def test_fixed_actions(self, raw, action):
        assert parse_selection(raw) == ActionChoice(action=action)

    def test_unknown_id(self):
        assert parse_selection("something_else") == UnknownChoice(raw="something_else")

    @pytest.mark.parametrize("raw", ["pass_abc", "pass_", "pass_0", "pass_-1", "loc_", "loc_   "])
    def test_malformed_payloads_raise(self, raw):
        with pytest.raises(InvalidSelectionError):
            parse_selection(raw)


class TestIdBuilders:
    def test_location_id(self):
        assert location_id("Centro") == "loc_Centro"

    def test_passenger_id(self):
        assert passenger_id(3) == "pass_3"

    def test_builders_parse_back(self):
        assert parse_selection(location_id("Sítio São João")) == LocationChoice("Sítio São João")
        assert parse_selection(passenger_id(4)) == PassengerChoice(4)
