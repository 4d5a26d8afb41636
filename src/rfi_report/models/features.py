"""
Predictor engineering and the game-log / season-stats record matching.

Every game is matched, for each side, to the season line of its starting
pitcher (Retrosheet ID + season) and to its team's season batting line
(Retrosheet team code + season). Games that fail any match are dropped.
"""
import logging

import numpy as np
import pandas as pd

from rfi_report.utils.mlb.gamelogs import clean_game_logs

logger = logging.getLogger(__name__)

SIDES = ("home", "visiting")

PITCHER_COUNT_COLUMNS = ["G", "GS", "IPouts", "H", "ER", "HR", "BB", "SO"]
PITCHER_RATE_COLUMNS = ["era", "whip", "k9", "bb9", "hr9"]
BATTING_RATE_COLUMNS = ["obp", "slg", "runs_per_game"]


def _per_out(numerator, ipouts, scale):
    return scale * numerator / ipouts.replace(0, np.nan)


def pitcher_season_stats(pitching: pd.DataFrame, people: pd.DataFrame, min_ipouts: int = 0) -> pd.DataFrame:
    """
    Season pitching line per pitcher, summed over stints, keyed by Retrosheet ID.

    Returns columns ``retroID``, ``season``, the summed counts and the rates
    ``era``, ``whip``, ``k9``, ``bb9``, ``hr9``.
    """
    counts = pitching[["playerID", "yearID"] + PITCHER_COUNT_COLUMNS].copy()
    counts[PITCHER_COUNT_COLUMNS] = counts[PITCHER_COUNT_COLUMNS].apply(pd.to_numeric, errors="coerce").fillna(0)
    season = counts.groupby(["playerID", "yearID"], as_index=False)[PITCHER_COUNT_COLUMNS].sum()

    too_few = season["IPouts"] < max(int(min_ipouts), 1)
    if too_few.any():
        logger.info("Dropping %d pitcher seasons under %d outs", int(too_few.sum()), max(int(min_ipouts), 1))
    season = season.loc[~too_few].copy()

    ipouts = season["IPouts"]
    season["era"] = _per_out(season["ER"], ipouts, 27)
    season["whip"] = _per_out(season["H"] + season["BB"], ipouts, 3)
    season["k9"] = _per_out(season["SO"], ipouts, 27)
    season["bb9"] = _per_out(season["BB"], ipouts, 27)
    season["hr9"] = _per_out(season["HR"], ipouts, 27)

    ids = people[["playerID", "retroID"]].dropna().drop_duplicates("playerID")
    season = season.merge(ids, on="playerID", how="left")
    no_retro = season["retroID"].isna()
    if no_retro.any():
        logger.warning("Dropping %d pitcher seasons without a Retrosheet ID", int(no_retro.sum()))
    season = season.loc[~no_retro].rename(columns={"yearID": "season"})
    season["season"] = season["season"].astype(int)

    dupes = season.duplicated(subset=["retroID", "season"])
    if dupes.any():
        logger.warning("Dropping %d pitcher seasons sharing a Retrosheet ID", int(dupes.sum()))
    return season.loc[~dupes].reset_index(drop=True)


def team_batting_stats(teams: pd.DataFrame) -> pd.DataFrame:
    """Season team batting rates keyed by (``season``, ``team``) Retrosheet code."""
    df = teams[["yearID", "teamIDretro", "G", "R", "AB", "H", "2B", "3B", "HR", "BB", "HBP", "SF"]].copy()
    numeric = ["G", "R", "AB", "H", "2B", "3B", "HR", "BB", "HBP", "SF"]
    df[numeric] = df[numeric].apply(pd.to_numeric, errors="coerce")
    # HBP and SF are blank for early seasons
    df[["HBP", "SF"]] = df[["HBP", "SF"]].fillna(0)

    on_base = df["H"] + df["BB"] + df["HBP"]
    pa = df["AB"] + df["BB"] + df["HBP"] + df["SF"]
    total_bases = df["H"] + df["2B"] + 2 * df["3B"] + 3 * df["HR"]
    out = pd.DataFrame({
        "season": df["yearID"].astype(int),
        "team": df["teamIDretro"].astype(str).str.strip(),
        "obp": on_base / pa.replace(0, np.nan),
        "slg": total_bases / df["AB"].replace(0, np.nan),
        "runs_per_game": df["R"] / df["G"].replace(0, np.nan),
    })
    dupes = out.duplicated(subset=["season", "team"])
    if dupes.any():
        logger.warning("Dropping %d duplicate team-season rows", int(dupes.sum()))
    return out.loc[~dupes].reset_index(drop=True)


def join_game_features(games: pd.DataFrame, pitchers: pd.DataFrame, batting: pd.DataFrame) -> pd.DataFrame:
    """
    Attach ``{side}_sp_*`` starter rates and ``{side}_bat_*`` team rates to each game.

    Each (Retrosheet ID, season) and (team, season) key is unique in its
    table, so a game matches at most one row per side; unmatched games drop.
    """
    sp_cols = ["retroID", "season"] + PITCHER_RATE_COLUMNS + ["IPouts"]
    bat_cols = ["team", "season"] + BATTING_RATE_COLUMNS
    df = games.copy()
    start = len(df)

    for side in SIDES:
        sp = pitchers[sp_cols].rename(columns={
            c: f"{side}_sp_{c.lower()}" for c in sp_cols if c not in ("retroID", "season")})
        sp = sp.rename(columns={"retroID": f"{side}_starting_pitcher_id"})
        df = df.merge(sp, on=[f"{side}_starting_pitcher_id", "season"], how="left", validate="many_to_one")

        bat = batting[bat_cols].rename(columns={
            c: f"{side}_bat_{c}" for c in BATTING_RATE_COLUMNS})
        bat = bat.rename(columns={"team": f"{side}_team"})
        df = df.merge(bat, on=[f"{side}_team", "season"], how="left", validate="many_to_one")

    for side in SIDES:
        no_sp = df[f"{side}_sp_era"].isna()
        if no_sp.any():
            logger.info("%d games have no season line for the %s starter", int(no_sp.sum()), side)
        no_bat = df[f"{side}_bat_obp"].isna()
        if no_bat.any():
            logger.warning("%d games have no team batting line for the %s team", int(no_bat.sum()), side)

    matched = df[[f"{side}_sp_era" for side in SIDES] + [f"{side}_bat_obp" for side in SIDES]].notna().all(axis=1)
    df = df.loc[matched].reset_index(drop=True)
    logger.info("Matched %d of %d games to pitching and batting lines", len(df), start)
    return df


def build_model_frame(raw_games, pitching, people, teams, min_ipouts=0) -> pd.DataFrame:
    """Clean the game logs, derive season stats and join them into the modeling frame."""
    games = clean_game_logs(raw_games)
    pitchers = pitcher_season_stats(pitching, people, min_ipouts=min_ipouts)
    batting = team_batting_stats(teams)
    return join_game_features(games, pitchers, batting)
