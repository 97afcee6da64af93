"""Tests for the gridsift.recipes module."""

import pytest

from gridsift.config import GuessSettings
from gridsift.exceptions import ValidationError
from gridsift.recipes import load_recipe, save_recipe


def test_load_valid_recipe(tmp_path):
    recipe_path = tmp_path / "recipe.yml"
    recipe_path.write_text(
        "\n".join(
            [
                "min_samples: 3",
                "detect_guid: true",
                "serial_date_time: true",
                "true_value: Ja",
                "false_value: Nein",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_recipe(recipe_path)
    assert settings.min_samples == 3
    assert settings.detect_guid is True
    assert settings.serial_date_time is True
    assert settings.true_value == "Ja"
    assert settings.false_value == "Nein"
    assert settings.sample_values == GuessSettings().sample_values


def test_recipe_lists_are_joined(tmp_path):
    recipe_path = tmp_path / "lists.yml"
    recipe_path.write_text(
        "treat_as_null:\n  - 'NULL'\n  - '-'\ndate_format:\n  - dd.MM.yyyy\n  - yyyy-MM-dd\n",
        encoding="utf-8",
    )

    settings = load_recipe(recipe_path)
    assert settings.treat_as_null == "NULL;-"
    assert settings.treat_as_null_values == {"NULL", "-"}
    assert settings.date_format == "dd.MM.yyyy;yyyy-MM-dd"


def test_save_recipe_creates_yaml(tmp_path):
    recipe_path = tmp_path / "saved.yml"
    save_recipe(GuessSettings(min_samples=2), recipe_path)

    assert recipe_path.exists()
    text = recipe_path.read_text(encoding="utf-8")
    assert "min_samples: 2" in text
    assert "columns" not in text
    assert "verbose" not in text


def test_recipe_roundtrip(tmp_path):
    recipe_path = tmp_path / "roundtrip.yml"
    settings = GuessSettings(
        checked_records=500,
        detect_percentage=False,
        remove_currency_symbols=False,
        date_format="dd/MM/yyyy",
        possible_match_ratio=0.9,
    )
    save_recipe(settings, recipe_path)
    loaded = load_recipe(recipe_path)

    assert loaded.checked_records == 500
    assert loaded.detect_percentage is False
    assert loaded.remove_currency_symbols is False
    assert loaded.date_format == "dd/MM/yyyy"
    assert loaded.possible_match_ratio == 0.9


def test_save_recipe_rejects_invalid_settings(tmp_path):
    with pytest.raises(ValidationError):
        save_recipe(GuessSettings(min_samples=0), tmp_path / "bad.yml")


def test_save_recipe_to_directory(tmp_path):
    with pytest.raises(IsADirectoryError):
        save_recipe(GuessSettings(), tmp_path)


def test_save_recipe_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        save_recipe(GuessSettings(), tmp_path / "missing" / "recipe.yml")


def test_load_missing_recipe(tmp_path):
    with pytest.raises(FileNotFoundError) as exc_info:
        load_recipe(tmp_path / "nope.yml")

    assert "Recipe file not found" in str(exc_info.value)


def test_invalid_yaml_raises_validation_error(tmp_path):
    recipe_path = tmp_path / "bad.yml"
    recipe_path.write_text("min_samples: [3", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_recipe(recipe_path)


def test_non_mapping_yaml_raises_validation_error(tmp_path):
    recipe_path = tmp_path / "list.yml"
    recipe_path.write_text("- a\n- b", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_recipe(recipe_path)


def test_unknown_key_rejected(tmp_path):
    recipe_path = tmp_path / "unknown.yml"
    recipe_path.write_text("columns: [A]", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_recipe(recipe_path)


def test_out_of_range_value_rejected(tmp_path):
    recipe_path = tmp_path / "range.yml"
    recipe_path.write_text("possible_match_ratio: 1.5", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_recipe(recipe_path)


def test_overlapping_literals_rejected(tmp_path):
    recipe_path = tmp_path / "literals.yml"
    recipe_path.write_text("true_value: yes;1\nfalse_value: no;1\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_recipe(recipe_path)
