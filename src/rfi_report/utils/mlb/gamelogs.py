"""
Load and clean Retrosheet game logs and derive the first-inning run label.

Each season lives in one headerless, comma-separated file (``GL2019.TXT``)
with 161 quoted fields per game. Only a handful of them feed the report:
date, teams, line scores, forfeit info and the two starting pitchers.
"""
import logging
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

_HEADER_FIELDS = [
    "date", "game_num", "day_of_week",
    "visiting_team", "visiting_team_league", "visiting_team_game_num",
    "home_team", "home_team_league", "home_team_game_num",
    "visiting_score", "home_score", "num_outs", "day_night",
    "completion_info", "forfeit_info", "protest_info", "park_id",
    "attendance", "time_of_game_minutes",
    "visiting_line_score", "home_line_score",
]
_TEAM_OFFENSE = [
    "abs", "hits", "doubles", "triples", "homeruns", "rbi", "sac_hits",
    "sac_flies", "hbp", "walks", "intentional_walks", "strikeouts",
    "stolen_bases", "caught_stealing", "gidp", "catcher_interference",
    "left_on_base",
]
_TEAM_PITCHING = ["pitchers_used", "individual_er", "team_er", "wild_pitches", "balks"]
_TEAM_DEFENSE = ["putouts", "assists", "errors", "passed_balls", "double_plays", "triple_plays"]
_UMPIRE_POSITIONS = ["hp", "1b", "2b", "3b", "lf", "rf"]
_PERSON_ROLES = [
    "visiting_manager", "home_manager",
    "winning_pitcher", "losing_pitcher", "saving_pitcher",
    "game_winning_rbi",
    "visiting_starting_pitcher", "home_starting_pitcher",
]


def _build_gamelog_columns():
    cols = list(_HEADER_FIELDS)
    for side in ("visiting", "home"):
        cols += [f"{side}_{stat}" for stat in _TEAM_OFFENSE + _TEAM_PITCHING + _TEAM_DEFENSE]
    for pos in _UMPIRE_POSITIONS:
        cols += [f"ump_{pos}_id", f"ump_{pos}_name"]
    for role in _PERSON_ROLES:
        cols += [f"{role}_id", f"{role}_name"]
    for side in ("visiting", "home"):
        for slot in range(1, 10):
            cols += [f"{side}_{slot}_id", f"{side}_{slot}_name", f"{side}_{slot}_pos"]
    cols += ["additional_info", "acquisition_info"]
    return cols


GAMELOG_COLUMNS = _build_gamelog_columns()

GAMELOG_USECOLS = [
    "date", "game_num", "visiting_team", "home_team",
    "visiting_score", "home_score", "num_outs", "forfeit_info", "park_id",
    "visiting_line_score", "home_line_score",
    "visiting_starting_pitcher_id", "visiting_starting_pitcher_name",
    "home_starting_pitcher_id", "home_starting_pitcher_name",
]

# "(10)" for a double-digit inning, otherwise a single digit
_FIRST_INNING_RE = r"^\s*(?:\((?P<multi>\d+)\)|(?P<single>\d))"


def load_game_logs(path_template, seasons) -> pd.DataFrame:
    """
    Read one game-log file per season and concatenate them.

    ``path_template`` may contain a ``{season}`` placeholder. Every column is
    read as a string so line scores keep their leading zeros.
    """
    frames = []
    for season in seasons:
        path = Path(str(path_template).format(season=season))
        if not path.exists():
            raise FileNotFoundError(
                f"{path} not found—run `rfi-fetch --start-season {season} --end-season {season}` "
                "or add the Retrosheet game log manually.")
        df = pd.read_csv(
            path,
            header=None,
            names=GAMELOG_COLUMNS,
            usecols=GAMELOG_USECOLS,
            dtype=str,
            keep_default_na=False,
        )
        logger.info("Loaded %d games from %s", len(df), path.name)
        frames.append(df)
    if not frames:
        raise ValueError("No seasons requested")
    return pd.concat(frames, ignore_index=True)


def first_inning_runs(line_scores: pd.Series) -> pd.Series:
    """
    Runs scored in the first inning according to a Retrosheet line score.

    "010000200" -> 0, "(10)00000x" -> 10, "" or "x" -> NaN
    """
    parts = line_scores.fillna("").astype(str).str.extract(_FIRST_INNING_RE)
    runs = parts["multi"].fillna(parts["single"])
    return pd.to_numeric(runs, errors="coerce").astype(float)


def _drop(df, mask, message, level=logging.INFO):
    count = int(mask.sum())
    if count:
        logger.log(level, message, count)
    return df.loc[~mask].copy()


def clean_game_logs(games: pd.DataFrame) -> pd.DataFrame:
    """
    Drop games unusable for the report and derive the first-inning columns.

    Adds ``season``, ``first_inning_away_runs``, ``first_inning_home_runs``,
    ``first_inning_runs`` and the 0/1 label ``run_first_inning``.
    """
    df = games.copy()
    start = len(df)

    df["date"] = pd.to_datetime(df["date"], format="%Y%m%d", errors="coerce")
    df = _drop(df, df["date"].isna(), "Dropping %d games with an unparsable date", logging.WARNING)
    df["season"] = df["date"].dt.year.astype(int)

    for col in ("visiting_score", "home_score", "num_outs"):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    forfeits = df["forfeit_info"].fillna("").astype(str).str.strip() != ""
    df = _drop(df, forfeits, "Dropping %d forfeited games")

    df["first_inning_away_runs"] = first_inning_runs(df["visiting_line_score"])
    df["first_inning_home_runs"] = first_inning_runs(df["home_line_score"])
    no_first = df["first_inning_away_runs"].isna() | df["first_inning_home_runs"].isna()
    df = _drop(df, no_first, "Dropping %d games without a first-inning line score")

    for side in ("visiting", "home"):
        col = f"{side}_starting_pitcher_id"
        df[col] = df[col].fillna("").astype(str).str.strip()
    no_starter = (df["visiting_starting_pitcher_id"] == "") | (df["home_starting_pitcher_id"] == "")
    df = _drop(df, no_starter, "Dropping %d games without both starting pitchers")

    dupes = df.duplicated(subset=["date", "game_num", "home_team"])
    df = _drop(df, dupes, "Dropping %d duplicate game records", logging.WARNING)

    df["first_inning_away_runs"] = df["first_inning_away_runs"].astype(int)
    df["first_inning_home_runs"] = df["first_inning_home_runs"].astype(int)
    df["first_inning_runs"] = df["first_inning_away_runs"] + df["first_inning_home_runs"]
    df["run_first_inning"] = np.where(df["first_inning_runs"] > 0, 1, 0)

    logger.info("Kept %d of %d games after cleaning", len(df), start)
    return df.reset_index(drop=True)
