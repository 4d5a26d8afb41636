import json
import logging
import os
import warnings
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Suppress FutureWarnings globally for pybaseball
warnings.filterwarnings("ignore", category=FutureWarning, module="pybaseball")

DEFAULT_CONFIG = "config/config.yaml"
CONFIG_ENV_VAR = "RFI_CONFIG"


def _search_starts():
    return (Path.cwd().resolve(), Path(__file__).resolve().parent)


def find_project_root(markers=(".git", "pyproject.toml", DEFAULT_CONFIG)) -> Path:
    """
    Walk upwards from the working directory (then this file's directory) to
    locate a project root marker.
    Returns the Path to the project root directory.
    Raises FileNotFoundError if not found.
    """
    for start in _search_starts():
        for parent in (start, *start.parents):
            for marker in markers:
                if (parent / marker).exists():
                    return parent
    raise FileNotFoundError(f"Could not locate project root using markers: {markers}")


def find_config_path(filename: str = DEFAULT_CONFIG) -> Path:
    """
    Locate the config file. An explicit path (or the RFI_CONFIG env var) wins;
    otherwise walk upwards from the working directory and this file's
    directory and return the first match.
    Raises FileNotFoundError if not found.
    """
    override = os.getenv(CONFIG_ENV_VAR)
    if override and filename == DEFAULT_CONFIG:
        filename = override

    direct = Path(filename)
    if direct.is_absolute() or direct.is_file():
        if direct.is_file():
            return direct.resolve()
        raise FileNotFoundError(f"Config file not found: {direct}")

    for start in _search_starts():
        for parent in (start, *start.parents):
            candidate = parent / filename
            if candidate.is_file():
                return candidate
    raise FileNotFoundError(
        f"Could not locate {filename} in any parent directories")


def load_config(filename: str = DEFAULT_CONFIG) -> dict:
    """
    Load and parse the YAML or JSON config file from the project root (or nearest parent).

    Usage:
        from rfi_report.utils.config_loader import load_config
        config = load_config()
    """
    path = find_config_path(filename)
    logger.debug("Loading config from: %s", path)
    try:
        content = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            config = yaml.safe_load(content)
        elif path.suffix == ".json":
            config = json.loads(content)
        else:
            # attempt YAML first, then JSON
            try:
                config = yaml.safe_load(content)
            except yaml.YAMLError:
                config = json.loads(content)
        if not isinstance(config, dict):
            raise ValueError("top-level config must be a mapping")
    except Exception as e:
        raise RuntimeError(f"Failed to load config from {path}: {e}") from e

    # Force root_path to always be the detected project root; a config that
    # lives outside any project falls back to its own parent directory
    try:
        project_root = str(find_project_root())
    except FileNotFoundError as e:
        logger.warning("Could not auto-detect project root: %s", e)
        project_root = str(path.parent.parent if path.parent.name == "config" else path.parent)
    config["root_path"] = project_root
    logger.debug("Forced root_path to project root: %s", project_root)
    return config


def resolve_path(cfg: dict, path_like, **fmt) -> Path:
    """
    Fill any ``{season}``-style placeholders in ``path_like`` and anchor
    relative paths at ``cfg["root_path"]``.
    """
    text = str(path_like)
    if fmt:
        text = text.format(**fmt)
    path = Path(text)
    if not path.is_absolute():
        path = Path(cfg.get("root_path", ".")) / path
    return path


def season_range(cfg: dict, start_season: int = None, end_season: int = None) -> list:
    """
    Seasons to process. Unset bounds fall back to ``mlb_data.seasons``; a
    start season given on its own means just that season.
    Raises ValueError on an empty or inverted range.
    """
    seasons_cfg = cfg.get("mlb_data", {}).get("seasons") or {}
    if start_season is not None and end_season is None:
        end_season = start_season
    start = start_season if start_season is not None else seasons_cfg.get("start")
    end = end_season if end_season is not None else seasons_cfg.get("end", start)
    if start is None:
        raise ValueError("No start season given and none configured under mlb_data.seasons")
    if end is None or int(end) < int(start):
        raise ValueError(f"Invalid season range {start} → {end}")
    return list(range(int(start), int(end) + 1))
