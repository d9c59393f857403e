from __future__ import annotations

import json
from pathlib import Path

import pytest

import solemap.cli.main as main_mod
from solemap.cli.args import parse_args
from solemap.cli.commands import read_capture


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    # handlers bound to pytest's captured stderr outlive the test
    monkeypatch.setattr(main_mod, "configure_logging", lambda **kw: None)


def test_parse_args_defaults():
    args = parse_args(["simulate"])
    assert args.cmd == "simulate"
    assert args.rate == 2
    assert args.secs is None
    assert args.encoding == "untagged_csv"
    assert args.config is None


def test_parse_args_rejects_unknown_encoding():
    with pytest.raises(SystemExit):
        parse_args(["simulate", "--encoding", "scalar_broadcast"])


def test_decode_text(capsys):
    assert main_mod.main(["decode", "PRESSURE_RIGHT: 1,2,3,4,5,6,7,8"]) == 0
    assert capsys.readouterr().out.strip() == "encoding=tagged_csv side=RIGHT values=1,2,3,4,5,6,7,8"


def test_decode_hex(capsys):
    assert main_mod.main(["decode", "--hex", "0102030405060708"]) == 0
    assert capsys.readouterr().out.strip() == "encoding=binary_u8 values=1,2,3,4,5,6,7,8"


def test_decode_failure(capsys):
    assert main_mod.main(["decode", "hello"]) == 1
    assert capsys.readouterr().out.startswith("FAILED reason=unrecognized format")


def test_decode_bad_hex(capsys):
    assert main_mod.main(["decode", "--hex", "zz"]) == 2
    assert "invalid hex" in capsys.readouterr().out


def test_validate(capsys):
    assert main_mod.main(["validate", "PRESSURE_LEFT: 1,2,3,4,5,6,7,8"]) == 0
    assert main_mod.main(["validate", "PRESSURE_LEFT: 1,2,3"]) == 1
    assert capsys.readouterr().out.split() == ["ok", "malformed"]


def test_simulate_prints_summary(capsys):
    rc = main_mod.main(["simulate", "--secs", "2", "--rate", "3", "--seed", "7", "--encoding", "binary_u8"])
    out = capsys.readouterr()
    assert rc == 0
    result = json.loads(out.out)
    assert result["sample_count"] == 6
    assert len(result["per_channel_average"]) == 8
    assert "Starting 2-second measurement..." in out.err


def test_simulate_rejects_bad_rate(capsys):
    assert main_mod.main(["simulate", "--rate", "0"]) == 2


def test_replay_capture(tmp_path: Path, capsys):
    cap = tmp_path / "capture.txt"
    cap.write_text(
        "# recorded on bench\n"
        "PRESSURE_LEFT: 10,20,30,40,50,60,70,80\n"
        "\n"
        "30,40,50,60,70,80,90,100\n"
        "not a frame\n",
        encoding="utf-8",
    )
    rc = main_mod.main(["replay", str(cap)])
    out = capsys.readouterr()
    assert rc == 0
    assert json.loads(out.out) == {
        "per_channel_average": [20, 30, 40, 50, 60, 70, 80, 90],
        "peak_channel_index": 7,
        "peak_value": 90,
        "overall_average": 55,
        "sample_count": 2,
    }
    assert "[RAW] 'not a frame'" in out.err


def test_replay_empty_capture_reports_condition(tmp_path: Path, capsys):
    cap = tmp_path / "empty.txt"
    cap.write_text("# nothing\n", encoding="utf-8")
    assert main_mod.main(["replay", str(cap)]) == 1
    assert json.loads(capsys.readouterr().out)["reason"] == "no data collected"


def test_replay_missing_file(tmp_path: Path, capsys):
    assert main_mod.main(["replay", str(tmp_path / "missing.txt")]) == 2
    assert "cannot read capture" in capsys.readouterr().out


def test_bad_config_prints_error_and_hint(tmp_path: Path, capsys):
    cap = tmp_path / "c.txt"
    cap.write_text("1,2,3,4\n", encoding="utf-8")
    rc = main_mod.main(["replay", str(cap), "--config", str(tmp_path / "nope.yml")])
    out = capsys.readouterr().out
    assert rc == 1
    assert "ERROR: Failed to load configuration." in out
    assert "Hint: Missing config file" in out


def test_read_capture_hex(tmp_path: Path):
    cap = tmp_path / "hex.txt"
    cap.write_text("0102030405060708\n  # note\nff\n", encoding="utf-8")
    assert read_capture(cap, as_hex=True) == [bytes(range(1, 9)), b"\xff"]


@pytest.mark.parametrize("secs", ["0", "-3"])
def test_simulate_rejects_non_positive_secs(secs, capsys):
    assert main_mod.main(["simulate", "--secs", secs]) == 2
    assert "ERROR: --secs must be > 0" in capsys.readouterr().out


def test_decode_json(capsys):
    assert main_mod.main(["decode", "--json", "PRESSURE_LEFT: 1,2,3,4,5,6,7,8"]) == 0
    assert json.loads(capsys.readouterr().out) == {
        "values": [1, 2, 3, 4, 5, 6, 7, 8],
        "encoding": "tagged_csv",
        "side": "LEFT",
    }
