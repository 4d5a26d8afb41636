#!/usr/bin/env python3
"""
Download the flat files the RFI report reads.

  * Retrosheet game logs, one ``GL{season}.TXT`` per season, fetched as the
    official zip so line scores keep their exact text
  * Lahman ``Pitching``, ``People`` and ``Teams`` tables via pybaseball

USAGE EXAMPLES:
  # Fetch the configured default seasons
  rfi-fetch

  # Fetch a season range, overwriting files already on disk
  rfi-fetch --start-season 2015 --end-season 2019 --force
"""
import argparse
import io
import logging
import logging.config
import sys
import zipfile
from pathlib import Path

import requests
from pybaseball import lahman

from rfi_report.utils.config_loader import load_config, resolve_path, season_range

logger = logging.getLogger(__name__)

RETROSHEET_GAMELOG_URL = "https://www.retrosheet.org/gamelogs/gl{season}.zip"

LAHMAN_TABLES = {
    "pitching_filepath": "pitching",
    "people_filepath": "people",
    "teams_filepath": "teams_core",
}


def fetch_game_log(season: int, dest: Path, url_template: str = RETROSHEET_GAMELOG_URL,
                   force: bool = False, session=None) -> Path:
    """Download one season's game log zip and extract its text file to ``dest``."""
    dest = Path(dest)
    if dest.exists() and not force:
        logger.info("📦 %s already present, skipping", dest)
        return dest

    url = url_template.format(season=season)
    logger.info("📡 Fetching Retrosheet game log for %d from %s", season, url)
    resp = (session or requests).get(url, timeout=60)
    resp.raise_for_status()

    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        members = [m for m in zf.namelist() if m.lower().endswith(".txt")]
        if not members:
            raise ValueError(f"No game log text file inside {url}")
        payload = zf.read(members[0])

    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(payload)
    logger.info("✅ Saved %s", dest)
    return dest


def fetch_lahman_tables(paths: dict, force: bool = False) -> dict:
    """
    Write the Lahman tables to their configured CSV paths.
    ``paths`` maps the config key (``pitching_filepath``...) to a destination.
    """
    written = {}
    for key, table in LAHMAN_TABLES.items():
        dest = Path(paths[key])
        if dest.exists() and not force:
            logger.info("📦 %s already present, skipping", dest)
            written[key] = dest
            continue
        logger.info("📡 Loading Lahman %s table via pybaseball", table)
        df = getattr(lahman, table)()
        dest.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(dest, index=False)
        logger.info("✅ Saved %d rows to %s", len(df), dest)
        written[key] = dest
    return written


def fetch_all(cfg: dict, seasons, force: bool = False) -> dict:
    rfi_cfg = cfg["mlb_data"]["rfi"]
    url_template = rfi_cfg.get("gamelogs_url", RETROSHEET_GAMELOG_URL)
    with requests.Session() as session:
        gamelogs = [
            fetch_game_log(season, resolve_path(cfg, rfi_cfg["gamelogs_filepath"], season=season),
                           url_template=url_template, force=force, session=session)
            for season in seasons
        ]
    tables = fetch_lahman_tables(
        {key: resolve_path(cfg, rfi_cfg[key]) for key in LAHMAN_TABLES}, force=force)
    return {"gamelogs": gamelogs, **tables}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Fetch Retrosheet game logs and Lahman tables for the RFI report")
    parser.add_argument("--config", default="config/config.yaml", help="Config file (YAML or JSON)")
    parser.add_argument("--start-season", type=int, default=None, help="First season (default: config)")
    parser.add_argument("--end-season", type=int, default=None, help="Last season (default: config)")
    parser.add_argument("--force", action="store_true", help="Re-download files that already exist")
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (FileNotFoundError, RuntimeError) as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("%s", e)
        sys.exit(1)
    logging.config.dictConfig(cfg["logging"])

    try:
        seasons = season_range(cfg, args.start_season, args.end_season)
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)

    try:
        fetch_all(cfg, seasons, force=args.force)
    except Exception as e:
        logger.error("Fetch failed: %s", e)
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
