import json
from pathlib import Path

import pytest

from rfi_report.utils.config_loader import find_config_path, load_config, resolve_path, season_range


@pytest.fixture
def project(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
    (tmp_path / "config").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RFI_CONFIG", raising=False)
    return tmp_path


@pytest.mark.unit
def test_load_yaml_config_forces_root_path(project):
    (project / "config" / "config.yaml").write_text(
        "root_path: /somewhere/else\nmlb_data:\n  raw: data/raw\n")

    cfg = load_config()

    assert cfg["mlb_data"]["raw"] == "data/raw"
    assert Path(cfg["root_path"]).resolve() == project.resolve()


@pytest.mark.unit
def test_load_json_config(project):
    path = project / "config" / "alt.json"
    path.write_text(json.dumps({"models": {"mlb_rfi": {"target": "run_first_inning"}}}))

    cfg = load_config(str(path))

    assert cfg["models"]["mlb_rfi"]["target"] == "run_first_inning"


@pytest.mark.unit
def test_config_env_override(project, monkeypatch):
    path = project / "config" / "other.yaml"
    path.write_text("notify: {}\n")
    monkeypatch.setenv("RFI_CONFIG", str(path))

    assert find_config_path() == path.resolve()


@pytest.mark.unit
def test_load_config_rejects_non_mapping(project):
    (project / "config" / "config.yaml").write_text("- just\n- a list\n")
    with pytest.raises(RuntimeError, match="Failed to load config"):
        load_config()


@pytest.mark.unit
def test_missing_explicit_config(project):
    with pytest.raises(FileNotFoundError):
        find_config_path(str(project / "nope.yaml"))


@pytest.mark.unit
def test_resolve_path_formats_and_anchors(tmp_path):
    cfg = {"root_path": str(tmp_path)}

    assert resolve_path(cfg, "raw/GL{season}.TXT", season=2019) == tmp_path / "raw" / "GL2019.TXT"
    assert resolve_path(cfg, tmp_path / "abs.csv") == tmp_path / "abs.csv"
    # templates survive when no values are given
    assert resolve_path(cfg, "raw/GL{season}.TXT").name == "GL{season}.TXT"


@pytest.mark.unit
@pytest.mark.parametrize("start, end, expected", [
    (None, None, [2010, 2011, 2012]),
    (2019, None, [2019]),
    (2011, None, [2011]),
    (None, 2011, [2010, 2011]),
    (2015, 2017, [2015, 2016, 2017]),
])
def test_season_range_defaults(start, end, expected):
    cfg = {"mlb_data": {"seasons": {"start": 2010, "end": 2012}}}
    assert season_range(cfg, start, end) == expected


@pytest.mark.unit
def test_season_range_rejects_inverted_or_missing():
    with pytest.raises(ValueError, match="Invalid season range"):
        season_range({"mlb_data": {"seasons": {"start": 2010, "end": 2012}}}, 2019, 2018)
    with pytest.raises(ValueError, match="No start season"):
        season_range({"mlb_data": {}})
