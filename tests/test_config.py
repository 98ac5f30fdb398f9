from pathlib import Path

import pytest

from filmrate.config import load_config


def test_load_config_with_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[app]\ndatabase_path = "data/films.sqlite"\n\n[recommend]\nquality_floor = 7.5\n',
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.database_path == "data/films.sqlite"
    assert cfg.recommend.quality_floor == 7.5
    assert cfg.recommend.similarity_threshold == 1
    assert (cfg.ratings.min_value, cfg.ratings.max_value) == (1, 10)
    assert cfg.storage.max_retries == 3


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.toml")


def test_inverted_rating_bounds(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[app]\ndatabase_path = "x.sqlite"\n\n[ratings]\nmin_value = 10\nmax_value = 1\n',
        encoding="utf-8",
    )

    with pytest.raises(ValueError):
        load_config(path)
