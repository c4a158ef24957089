"""
Tests for configuration loading and validation.
"""

import copy

import pytest
import yaml

from dropjack.core.config_loader import load_config, parse_config


def _raw():
    return {
        "board": {"width": 10, "height": 15, "spawn_row": 0},
        "timing": {
            "initial_fall_ms": 1000,
            "min_fall_ms": 100,
            "speed_increase_interval_s": 30,
            "speed_factor": 0.9,
            "removal_stagger_ms": 300,
            "hard_drop_row_ms": 15,
        },
        "scoring": {"card_score": 21, "cascade_bonus": 50},
    }


class TestDefaultConfig:
    """Test the shipped game_config.yaml."""

    def test_board_dimensions(self):
        """Default board is 10 columns by 15 rows."""
        config = load_config()
        assert config.board.width == 10
        assert config.board.height == 15
        assert config.cell_count == 150

    def test_timing_in_seconds(self):
        """Millisecond values are exposed in seconds."""
        config = load_config()
        assert config.timing.initial_fall_interval == pytest.approx(1.0)
        assert config.timing.min_fall_interval == pytest.approx(0.1)
        assert config.timing.removal_stagger == pytest.approx(0.3)
        assert config.timing.speed_factor == pytest.approx(0.9)

    def test_scoring(self):
        config = load_config()
        assert config.scoring.card_score == 21
        assert config.scoring.cascade_bonus == 50

    def test_session_defaults(self):
        config = load_config()
        assert config.session.max_initials == 3
        assert config.session.starting_difficulty == "easy"


class TestParseConfig:
    """Test building configs from raw mappings."""

    def test_optional_sections_default(self):
        """deck, persistence and session may be omitted."""
        config = parse_config(_raw())
        assert config.deck.seed is None
        assert config.persistence.db_filename == "highscores.db"
        assert config.persistence.top_scores_limit == 10
        assert config.session.max_initials == 3

    def test_missing_section_raises(self):
        raw = _raw()
        del raw["timing"]
        with pytest.raises(ValueError):
            parse_config(raw)

    @pytest.mark.parametrize("width,height", [(0, 15), (10, 1), (-3, 10)])
    def test_bad_dimensions_raise(self, width, height):
        raw = _raw()
        raw["board"]["width"] = width
        raw["board"]["height"] = height
        with pytest.raises(ValueError):
            parse_config(raw)

    def test_spawn_row_outside_board_raises(self):
        raw = _raw()
        raw["board"]["spawn_row"] = 15
        with pytest.raises(ValueError):
            parse_config(raw)

    def test_bad_timing_raises(self):
        """Speed factor above one would slow the game down."""
        raw = _raw()
        raw["timing"]["speed_factor"] = 1.5
        with pytest.raises(ValueError):
            parse_config(raw)

        raw = _raw()
        raw["timing"]["initial_fall_ms"] = 50
        with pytest.raises(ValueError):
            parse_config(raw)

    def test_bad_difficulty_raises(self):
        raw = _raw()
        raw["session"] = {"starting_difficulty": "nightmare"}
        with pytest.raises(ValueError):
            parse_config(raw)


class TestLoadConfig:
    """Test loading from disk."""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_custom_file(self, tmp_path):
        raw = copy.deepcopy(_raw())
        raw["board"]["width"] = 6
        raw["deck"] = {"seed": 99}
        path = tmp_path / "game_config.yaml"
        path.write_text(yaml.safe_dump(raw))

        config = load_config(str(path))
        assert config.board.width == 6
        assert config.deck.seed == 99
