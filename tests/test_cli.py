import json
from pathlib import Path

import pytest

from rudis.cli import main, parse_address, parse_args, run
from rudis.config import ConfigError
from rudis.store import Store


def _write_config(path: Path) -> Path:
    path.write_text(
        json.dumps(
            {
                "aof": True,
                "rdb": False,
                "snapshot_interval_secs": 1,
                "snapshot_threshold": 100,
            }
        ),
        encoding="utf-8",
    )
    return path


def test_parse_args_defaults():
    args = parse_args([])
    assert args.listen == "127.0.0.1:6380"
    assert args.config == Path("config.json")
    assert args.db_path == Path("kv.db")
    assert args.aof_path == Path("appendonly.aof")
    assert args.rdb_path == Path("dump.rdb")


def test_parse_args_overrides():
    args = parse_args(
        ["-l", "0.0.0.0:7000", "-c", "cfg.json", "-d", "data", "--aof-path", "a.aof"]
    )
    assert args.listen == "0.0.0.0:7000"
    assert args.config == Path("cfg.json")
    assert args.db_path == Path("data")
    assert args.aof_path == Path("a.aof")


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as info:
        parse_args(["--version"])
    assert info.value.code == 0
    assert "0.1.0" in capsys.readouterr().out


def test_parse_address_ipv4():
    assert parse_address("127.0.0.1:6380") == ("127.0.0.1", 6380)


def test_parse_address_bracketed_ipv6():
    assert parse_address("[::1]:6380") == ("::1", 6380)


@pytest.mark.parametrize(
    "addr", ["localhost", "host:abc", "host:70000", ":6380", "::1:6380"]
)
def test_parse_address_rejects(addr):
    with pytest.raises(ValueError):
        parse_address(addr)


def test_run_with_missing_config_raises(tmp_path):
    args = parse_args(["-c", str(tmp_path / "absent.json"), "-d", str(tmp_path / "db")])
    with pytest.raises(ConfigError):
        run(args)


def test_main_reports_missing_config(tmp_path, capsys):
    code = main(["-c", str(tmp_path / "absent.json"), "-d", str(tmp_path / "db")])
    assert code == 1
    assert "Failed to read config file" in capsys.readouterr().err


def test_main_replays_log_before_listening(tmp_path):
    config = _write_config(tmp_path / "config.json")
    aof = tmp_path / "appendonly.aof"
    aof.write_text("SET a 1\nSET b 2\nDEL b\n", encoding="utf-8")
    db_path = tmp_path / "db"

    code = main(
        [
            "-c", str(config),
            "-d", str(db_path),
            "--aof-path", str(aof),
            "--rdb-path", str(tmp_path / "dump.rdb"),
            "-l", "not-an-address",
        ]
    )

    assert code == 1
    with Store(db_path) as db:
        assert db.get("a") == b"1"
        assert db.get("b") is None