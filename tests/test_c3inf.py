import pytest

from sxassets.c3inf import inf_path_for, load_radio_messages, parse_radio_messages


def test_inf_path_for_replaces_extension():
    assert inf_path_for("res/c1m1.mis") == "res/c1m1.inf"


def test_inf_path_for_too_short():
    with pytest.raises(ValueError):
        inf_path_for("ab")


def test_parse_skips_briefing_and_out_of_range():
    lines = [
        ">text",
        ">rm5",
        "briefing line",
        "<",
        ">rm1",
        "hello pilot",
        "<",
        ">rm100",
        "ignored",
        ">rm0",
        "also ignored",
        ">rm 7",
        "seven",
    ]
    assert parse_radio_messages(lines) == {1: "hello pilot", 7: "seven"}


def test_parse_strips_line_endings():
    assert parse_radio_messages([">rm3\r\n", "text here\r\n"]) == {3: "text here"}


def test_parse_message_header_at_end():
    assert parse_radio_messages([">rm2"]) == {}


def test_load_from_file(tmp_path):
    mission = tmp_path / "c1m1.mis"
    (tmp_path / "c1m1.inf").write_bytes(b">rm12\r\nmove out\r\n<\r\n")
    assert load_radio_messages(mission) == {12: "move out"}


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_radio_messages(tmp_path / "none.mis")