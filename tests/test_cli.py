"""
Tests for the CLI commands in mock mode.
"""

import json

from typer.testing import CliRunner

from washregistry.cli.app import app

runner = CliRunner()


def test_search_lists_mock_suggestions():
    result = runner.invoke(app, ["search", "cairo", "--mock"])

    assert result.exit_code == 0
    assert "Tahrir" in result.output


def test_search_without_matches():
    result = runner.invoke(app, ["search", "alexandria", "--mock"])

    assert result.exit_code == 0
    assert "No suggestions found" in result.output


def test_reverse_prints_address():
    result = runner.invoke(app, ["reverse", "29.9934", "31.1553", "--mock"])

    assert result.exit_code == 0
    assert "Haram" in result.output


def test_reverse_rejects_invalid_point():
    result = runner.invoke(app, ["reverse", "120", "31", "--mock"])

    assert result.exit_code == 1
    assert "invalid_point" in result.output


def test_locate_in_mock_mode():
    result = runner.invoke(app, ["locate", "--mock"])

    assert result.exit_code == 0
    assert "Downtown" in result.output


def test_register_wizard_writes_payload(tmp_path):
    output = tmp_path / "carwash.json"
    answers = "\n".join([
        "Sparkle Auto Wash",  # name
        "1012345678",         # phone
        "giza",               # search
        "1",                  # pick Pyramids Road
        "y",                  # use location
        "n",                  # edit address
        "Basic Wash",         # wash type
        "20",                 # price
        "Exterior only",      # description
        "",                   # finish wash types
        "s",                  # add slot
        "1",                  # to day 1
        "d",                  # done
    ]) + "\n"

    result = runner.invoke(app, ["register", "--mock", "--output", str(output)], input=answers)

    assert result.exit_code == 0, result.output
    record = json.loads(output.read_text(encoding="utf-8"))
    assert record["phoneNumber"] == "+201012345678"
    assert record["area"] == "Haram"
    assert record["washTypes"] == [{"name": "Basic Wash", "price": 20.0, "description": "Exterior only"}]
    assert record["availability"][0]["slots"][1] == {
        "startTime": "12:00",
        "endTime": "13:00",
        "slotNumber": 2,
    }


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "washregistry" in result.output
