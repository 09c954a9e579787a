import json

from drunkenfall.storage import Database, JsonFileStore
from drunkenfall.testing.__main__ import (
    COMMANDS,
    create_completer,
    create_main_parser,
    run_standard_mode,
)


def test_completer_accepts_both_command_formats():
    options = create_completer().options
    for command in COMMANDS:
        assert command in options
        assert f"/{command}" in options


def test_main_parser_wires_every_runner():
    parser = create_main_parser()
    for command in ("generate", "stats", "clear", "unit"):
        args = parser.parse_args([command])
        assert callable(args.func)


def test_generate_writes_json(tmp_path, capsys):
    output = tmp_path / "tournament.json"
    code = run_standard_mode(
        ["generate", "--players", "8", "--seed", "3", "--output", str(output)]
    )

    assert code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert len(data["winners"]) == 3
    assert "Tournament Generated" in capsys.readouterr().out


def test_saved_practice_tournaments_can_be_cleared(tmp_path, monkeypatch):
    monkeypatch.setenv("DRUNKENFALL_DATA_DIR", str(tmp_path))
    assert run_standard_mode(
        ["generate", "--players", "8", "--seed", "1", "--name", "Practice", "--save"]
    ) == 0
    assert len(Database(JsonFileStore(tmp_path)).load_tournaments()) == 1

    assert run_standard_mode(["clear", "--data-dir", str(tmp_path)]) == 0
    assert Database(JsonFileStore(tmp_path)).load_tournaments() == []


def test_stats_prints_a_ranking(capsys):
    code = run_standard_mode(
        ["stats", "--tournaments", "2", "--players", "8", "--seed", "9", "--top", "3"]
    )
    assert code == 0
    assert "Ranking:" in capsys.readouterr().out
