import csv

import numpy as np
import pandas as pd
import pytest

from rfi_report.utils.mlb.gamelogs import GAMELOG_COLUMNS, GAMELOG_USECOLS

TEAMS = ["NYA", "BOS", "TBA", "TOR", "BAL", "CLE"]
PITCHERS_PER_TEAM = 6
FEATURES = [
    "home_sp_era", "home_sp_whip", "home_sp_k9",
    "visiting_sp_era", "visiting_sp_whip", "visiting_sp_k9",
    "home_bat_obp", "home_bat_slg", "visiting_bat_obp", "visiting_bat_slg",
]


def line_score(first, rng):
    return str(first) + "".join(str(v) for v in rng.integers(0, 3, size=8))


def build_universe(seasons=(2018, 2019), games_per_season=240, seed=7):
    """
    Synthetic Retrosheet/Lahman world. The chance of a first-inning run
    rises with both starters' ERA, so the classifiers have signal to find.
    """
    rng = np.random.default_rng(seed)
    people, pitching, teams, games = [], [], [], []

    roster = {}
    for t_idx, team in enumerate(TEAMS):
        roster[team] = []
        for p in range(PITCHERS_PER_TEAM):
            n = t_idx * PITCHERS_PER_TEAM + p
            player_id, retro_id = f"pitch{n:02d}01", f"ptch{n:04d}"
            roster[team].append(retro_id)
            people.append({"playerID": player_id, "retroID": retro_id,
                           "nameFirst": f"First{n}", "nameLast": f"Last{n}"})

    era_by_key = {}
    for season in seasons:
        for team in TEAMS:
            g = 162
            ab = int(rng.integers(5300, 5700))
            hits = int(ab * rng.uniform(0.23, 0.28))
            teams.append({
                "yearID": season, "teamID": team, "teamIDretro": team, "G": g,
                "R": int(rng.integers(600, 900)), "AB": ab, "H": hits,
                "2B": int(rng.integers(250, 330)), "3B": int(rng.integers(10, 40)),
                "HR": int(rng.integers(130, 260)), "BB": int(rng.integers(400, 650)),
                "HBP": int(rng.integers(40, 90)), "SF": int(rng.integers(30, 60)),
            })
            for retro_id in roster[team]:
                player_id = f"pitch{int(retro_id[4:]):02d}01"
                ipouts = int(rng.integers(300, 600))
                era = float(rng.uniform(2.5, 6.5))
                era_by_key[(retro_id, season)] = era
                pitching.append({
                    "playerID": player_id, "yearID": season, "stint": 1, "teamID": team,
                    "G": 30, "GS": 30, "IPouts": ipouts,
                    "H": int(ipouts / 3 * rng.uniform(0.8, 1.1)),
                    "ER": int(round(era * ipouts / 27)),
                    "HR": int(rng.integers(10, 35)),
                    "BB": int(ipouts / 3 * rng.uniform(0.25, 0.4)),
                    "SO": int(ipouts / 3 * rng.uniform(0.7, 1.2)),
                })

        start = pd.Timestamp(f"{season}-04-01")
        for g_idx in range(games_per_season):
            home, away = (str(t) for t in rng.choice(TEAMS, size=2, replace=False))
            home_sp, away_sp = str(rng.choice(roster[home])), str(rng.choice(roster[away]))
            eras = era_by_key[(home_sp, season)] + era_by_key[(away_sp, season)]
            p_run = 1 / (1 + np.exp(-(eras - 9.0)))
            if rng.random() < p_run:
                away_first = int(rng.integers(0, 3))
                home_first = int(rng.integers(1, 3)) if away_first == 0 else int(rng.integers(0, 2))
            else:
                away_first, home_first = 0, 0
            games.append({
                "date": (start + pd.Timedelta(days=g_idx // 3)).strftime("%Y%m%d"),
                "game_num": str(g_idx % 3),
                "visiting_team": away, "home_team": home,
                "visiting_score": str(int(rng.integers(0, 10))),
                "home_score": str(int(rng.integers(0, 10))),
                "num_outs": "54", "forfeit_info": "", "park_id": f"{home}01",
                "visiting_line_score": line_score(away_first, rng),
                "home_line_score": line_score(home_first, rng),
                "visiting_starting_pitcher_id": away_sp,
                "visiting_starting_pitcher_name": f"Pitcher {away_sp}",
                "home_starting_pitcher_id": home_sp,
                "home_starting_pitcher_name": f"Pitcher {home_sp}",
            })

    return {
        "games": pd.DataFrame(games, columns=GAMELOG_USECOLS),
        "pitching": pd.DataFrame(pitching),
        "people": pd.DataFrame(people),
        "teams": pd.DataFrame(teams),
    }


def write_gamelog(games: pd.DataFrame, path):
    """Write rows in the 161-field, all-quoted Retrosheet layout."""
    full = pd.DataFrame("", index=games.index, columns=GAMELOG_COLUMNS)
    for col in games.columns:
        full[col] = games[col]
    path.parent.mkdir(parents=True, exist_ok=True)
    full.to_csv(path, header=False, index=False, quoting=csv.QUOTE_ALL)
    return path


@pytest.fixture(scope="session")
def universe():
    return build_universe()


@pytest.fixture
def raw_games():
    """A handful of hand-written games covering every cleaning rule."""
    rows = [
        # scored in the first (home)
        ("20190401", "0", "BOS", "NYA", "", "000000000", "100000000", "ptch0006", "ptch0000"),
        # no first-inning run
        ("20190401", "0", "TOR", "TBA", "", "000100000", "00000010x", "ptch0018", "ptch0012"),
        # double-digit first inning for the visitors
        ("20190402", "0", "BAL", "CLE", "", "(10)00000000", "000000000", "ptch0024", "ptch0030"),
        # forfeit
        ("20190402", "0", "BOS", "TBA", "V", "000000000", "000000000", "ptch0007", "ptch0013"),
        # missing line score
        ("20190403", "0", "NYA", "TOR", "", "", "000000000", "ptch0001", "ptch0019"),
        # missing starter
        ("20190403", "0", "CLE", "BAL", "", "000000000", "000000000", "", "ptch0025"),
        # duplicate of the first game
        ("20190401", "0", "BOS", "NYA", "", "000000000", "100000000", "ptch0006", "ptch0000"),
    ]
    records = []
    for date, num, vis, home, forfeit, vls, hls, vsp, hsp in rows:
        records.append({
            "date": date, "game_num": num, "visiting_team": vis, "home_team": home,
            "visiting_score": "3", "home_score": "4", "num_outs": "54",
            "forfeit_info": forfeit, "park_id": f"{home}01",
            "visiting_line_score": vls, "home_line_score": hls,
            "visiting_starting_pitcher_id": vsp, "visiting_starting_pitcher_name": "",
            "home_starting_pitcher_id": hsp, "home_starting_pitcher_name": "",
        })
    return pd.DataFrame(records, columns=GAMELOG_USECOLS)


@pytest.fixture
def report_config(tmp_path, universe):
    """Config dict whose inputs live under tmp_path."""
    raw = tmp_path / "raw"
    games = universe["games"]
    for season, season_games in games.groupby(games["date"].str[:4]):
        write_gamelog(season_games.reset_index(drop=True), raw / "retrosheet" / f"GL{season}.TXT")
    (raw / "lahman").mkdir(parents=True, exist_ok=True)
    universe["pitching"].to_csv(raw / "lahman" / "Pitching.csv", index=False)
    universe["people"].to_csv(raw / "lahman" / "People.csv", index=False)
    universe["teams"].to_csv(raw / "lahman" / "Teams.csv", index=False)

    return {
        "root_path": str(tmp_path),
        "mlb_data": {
            "raw": "raw",
            "processed": "processed",
            "reports": "reports",
            "seasons": {"start": 2018, "end": 2019},
            "rfi": {
                "gamelogs_filepath": "raw/retrosheet/GL{season}.TXT",
                "pitching_filepath": "raw/lahman/Pitching.csv",
                "people_filepath": "raw/lahman/People.csv",
                "teams_filepath": "raw/lahman/Teams.csv",
            },
        },
        "models": {
            "mlb_rfi": {
                "target": "run_first_inning",
                "min_starter_ipouts": 60,
                "features": list(FEATURES),
                "cv": {"n_splits": 3, "shuffle": True, "random_state": 0},
                "classifiers": {
                    "logistic_regression": {"max_iter": 500},
                    "lda": {},
                    "qda": {"reg_param": 0.1},
                    "random_forest": {"n_estimators": 25, "min_samples_leaf": 5,
                                      "n_jobs": 1, "random_state": 0},
                },
            }
        },
        "notify": {"discord_webhook_env": "RFI_TEST_WEBHOOK_URL"},
        "logging": {"version": 1, "disable_existing_loggers": False},
    }
