import json
import os

from grid36.config import DEFAULT_CONFIG, Config, _default_config_path
from grid36.geodesy import LinearApproximation, ManualAlbers, PyprojAlbers


def test_load_missing_returns_defaults_without_writing(tmp_path):
    path = tmp_path / "cfg.json"
    cfg = Config.load(str(path))
    assert cfg["grid"]["default_depth"] == 9
    assert cfg["projection"]["strategy"] == "pyproj"
    assert not path.exists()


def test_load_missing_can_create(tmp_path):
    path = tmp_path / "sub" / "cfg.json"
    Config.load(str(path), create_if_missing=True)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["grid"]["default_depth"] == DEFAULT_CONFIG["grid"]["default_depth"]


def test_user_values_merge_and_validate(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({
        "grid": {"default_depth": 42},
        "projection": {"strategy": "albers", "fallback": "albers"},
        "shell": {"theme": "neon", "coord_precision": "3"},
        "logging": {"level": "debug", "pyproj_debug": "yes"},
    }), encoding="utf-8")
    cfg = Config.load(str(path))
    assert cfg.default_depth == 9
    assert cfg["projection"] == {"strategy": "albers", "fallback": None}
    assert cfg["shell"]["theme"] == "auto"
    assert cfg["shell"]["coord_precision"] == 3
    assert cfg["logging"]["level"] == "DEBUG"
    assert cfg["logging"]["pyproj_debug"] is True
    # untouched sections keep defaults
    assert cfg["logging"]["rotate_keep"] == 3


def test_unknown_strategy_falls_back_to_default(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"projection": {"strategy": "mercator", "fallback": "nope"}}), encoding="utf-8")
    cfg = Config.load(str(path))
    assert cfg["projection"] == {"strategy": "pyproj", "fallback": None}


def test_corrupt_file_is_backed_up(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json", encoding="utf-8")
    cfg = Config.load(str(path))
    assert cfg.default_depth == 9
    assert os.path.exists(str(path) + ".corrupt.bak")


def test_save_and_reload(tmp_path):
    path = tmp_path / "cfg.json"
    cfg = Config.load(str(path))
    cfg.update({"grid": {"default_depth": 5}, "shell": {"theme": "dark"}})
    cfg.save()
    again = Config.load(str(path))
    assert again.default_depth == 5
    assert again["shell"]["theme"] == "dark"


def test_update_does_not_mutate_defaults(tmp_path):
    cfg = Config.load(str(tmp_path / "cfg.json"))
    cfg["grid"]["default_depth"] = 2
    assert DEFAULT_CONFIG["grid"]["default_depth"] == 9


def test_env_override(tmp_path, monkeypatch):
    target = tmp_path / "env.json"
    monkeypatch.setenv("GRID36_CONFIG", str(target))
    assert _default_config_path() == str(target)
    assert Config.load().path == str(target)


def test_projection_from_config(tmp_path):
    cfg = Config.load(str(tmp_path / "cfg.json"))
    proj = cfg.projection()
    assert isinstance(proj.primary, PyprojAlbers)
    assert isinstance(proj.fallback, ManualAlbers)

    cfg.update({"projection": {"strategy": "linear", "fallback": None}})
    proj = cfg.projection()
    assert isinstance(proj.primary, LinearApproximation)
    assert proj.fallback is None
