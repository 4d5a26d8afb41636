import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

PITCHING_COLUMNS = ["playerID", "yearID", "stint", "teamID", "G", "GS",
                    "IPouts", "H", "ER", "HR", "BB", "SO"]
PEOPLE_COLUMNS = ["playerID", "retroID", "nameFirst", "nameLast"]
TEAMS_COLUMNS = ["yearID", "teamID", "teamIDretro", "G", "R", "AB", "H",
                 "2B", "3B", "HR", "BB", "HBP", "SF"]


def load_lahman_table(path, required_columns) -> pd.DataFrame:
    """
    Read a Lahman database CSV and check it carries ``required_columns``.
    Raises FileNotFoundError / KeyError with enough detail to fix the input.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"{path} not found—run `rfi-fetch` or copy the Lahman table there.")
    df = pd.read_csv(path, low_memory=False)
    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise KeyError(
            f"{path.name} is missing required columns {missing}; available: {df.columns.tolist()}")
    logger.info("Loaded %d rows from %s", len(df), path.name)
    return df


def load_pitching(path) -> pd.DataFrame:
    return load_lahman_table(path, PITCHING_COLUMNS)


def load_people(path) -> pd.DataFrame:
    return load_lahman_table(path, PEOPLE_COLUMNS)


def load_teams(path) -> pd.DataFrame:
    return load_lahman_table(path, TEAMS_COLUMNS)
