import json

import pytest

from grid36.cli import main


@pytest.fixture
def cfg_path(tmp_path):
    return str(tmp_path / "cfg.json")


def run_json(capsys, argv):
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


def test_decode(capsys, cfg_path):
    out = run_json(capsys, ["--config", cfg_path, "decode", "u0"])
    assert out["id"] == "U0"
    assert out["depth"] == 2
    assert out["tile_size"] == 279936.0
    assert out["bounds"]["x_min"] == 607919.0 + 839808


def test_encode_with_depth(capsys, cfg_path):
    out = run_json(capsys, ["--config", cfg_path, "encode", "-47.8825", "-15.7942", "--depth", "5"])
    assert len(out["id"]) == 5
    assert out["outside_domain"] is False


def test_encode_uses_config_depth(capsys, tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"grid": {"default_depth": 3}}), encoding="utf-8")
    out = run_json(capsys, ["--config", str(path), "encode", "-47.8825", "-15.7942"])
    assert out["depth"] == 3


def test_adjust_and_search(capsys, cfg_path):
    assert run_json(capsys, ["--config", cfg_path, "adjust", "U", "9"]) == {"id": "U0UUUUUUU"}
    out = run_json(capsys, ["--config", cfg_path, "search", "7B2"])
    assert out["record"]["id"] == "7B2"
    assert set(out["corner_geo"]) == {"lon", "lat"}


def test_errors_exit_2(capsys, cfg_path):
    assert main(["--config", cfg_path, "decode", "NOT-AN-ID"]) == 2
    assert "invalid tile ID" in capsys.readouterr().err
    assert main(["--config", cfg_path, "adjust", "U", "0"]) == 2
    assert "depth must be" in capsys.readouterr().err
