import logging
from pathlib import Path

import pytest

from drunkenfall.config import AppConfig
from drunkenfall.exceptions import InvalidConfigurationException
from drunkenfall.models.person import Person
from drunkenfall.models.tournament.tournament import Tournament
from drunkenfall.models.tournament.tournament_config import TournamentConfig
from drunkenfall.utils import from_iso, minutes_from_now, setup_logger, to_iso, utc_now


def test_app_config_from_env():
    config = AppConfig.from_env(
        {
            "DRUNKENFALL_DATA_DIR": "/tmp/drunkenfall",
            "DRUNKENFALL_LOG_LEVEL": "debug",
            "DRUNKENFALL_BROADCAST_WORKERS": "4",
        }
    )
    assert config.data_dir == Path("/tmp/drunkenfall")
    assert config.log_level == "DEBUG"
    assert config.broadcast_workers == 4


def test_app_config_defaults():
    config = AppConfig.from_env({})
    assert config.data_dir == Path("data")
    assert config.log_level == "INFO"
    assert config.broadcast_workers == 2


@pytest.mark.parametrize(
    "environ",
    [
        {"DRUNKENFALL_BROADCAST_WORKERS": "many"},
        {"DRUNKENFALL_BROADCAST_WORKERS": "0"},
        {"DRUNKENFALL_LOG_LEVEL": "chatty"},
    ],
)
def test_app_config_rejects_bad_values(environ):
    with pytest.raises(InvalidConfigurationException):
        AppConfig.from_env(environ)


def test_tournament_config_validation():
    with pytest.raises(InvalidConfigurationException):
        TournamentConfig(match_length=0)
    with pytest.raises(InvalidConfigurationException):
        TournamentConfig(min_players=40, max_players=32)


def test_tournament_config_drives_the_bracket():
    config = TournamentConfig(match_length=5, final_length=7, double_promotion_max_tryouts=2)
    tournament = Tournament("DrunkenFall Config", config=config)
    for i in range(12):
        tournament.add_player(Person(id=f"p{i}", nick=f"n{i}", color_preference=["red"]))
    tournament.start_tournament()

    assert [m.length for m in tournament.matches] == [5, 5, 5, 5, 5, 7]
    assert tournament.bracket_manager.promotions_per_tryout == 1
    assert TournamentConfig.from_dict(config.to_dict()) == config


def test_iso_helpers_keep_timezones():
    now = utc_now()
    assert from_iso(to_iso(now)) == now
    assert from_iso(None) is None
    assert to_iso(None) is None
    naive = from_iso("2025-03-01T20:00:00")
    assert naive.tzinfo is not None


def test_minutes_from_now():
    now = utc_now()
    assert (minutes_from_now(5, now=now) - now).total_seconds() == 300


def test_module_loggers_hang_off_the_package_logger():
    logger = setup_logger("drunkenfall.somewhere")
    assert logger.name == "drunkenfall.somewhere"
    assert logging.getLogger("drunkenfall").handlers
    assert setup_logger("elsewhere").name == "drunkenfall.elsewhere"


def test_apply_logging_sets_package_level():
    package_logger = logging.getLogger("drunkenfall")
    previous = package_logger.level
    try:
        AppConfig(log_level="warning").apply_logging()
        assert package_logger.level == logging.WARNING
    finally:
        package_logger.setLevel(previous)
