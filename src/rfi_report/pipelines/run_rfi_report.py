#!/usr/bin/env python3
"""
Run First Inning (RFI) classifier report.

Loads Retrosheet game logs and Lahman season tables, labels every game by
whether a run scored in the first inning, joins each game to its starters'
season pitching lines and both teams' season batting lines, describes the
data, cross-validates four classifiers and writes the report.

USAGE EXAMPLES:
  # Default seasons from config/config.yaml
  rfi-report

  # A season range, downloading missing inputs first
  rfi-report --start-season 2015 --end-season 2019 --fetch

  # Re-run into a custom directory with 5 folds
  rfi-report --output-dir reports/rfi_5fold --folds 5 --force
"""
import argparse
import copy
import logging
import logging.config
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from rfi_report.models.classifiers import MODEL_LABELS, benchmark_classifiers, build_classifiers, make_cv
from rfi_report.models.describe import describe_features, label_rate_by_season
from rfi_report.models.features import build_model_frame
from rfi_report.renderers import plots
from rfi_report.renderers.rfi_report_html import generate_html, write_html
from rfi_report.utils.config_loader import load_config, resolve_path, season_range
from rfi_report.utils.io import load_json, save_as_json, save_frame
from rfi_report.utils.mlb.fetch_datasets import fetch_all
from rfi_report.utils.mlb.gamelogs import load_game_logs
from rfi_report.utils.mlb.lahman import load_people, load_pitching, load_teams
from rfi_report.utils.notify import send_discord_webhook

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "rfi_report_summary.json"


def load_inputs(cfg, seasons):
    rfi_cfg = cfg["mlb_data"]["rfi"]
    gamelog_template = resolve_path(cfg, rfi_cfg["gamelogs_filepath"])
    return {
        "games": load_game_logs(gamelog_template, seasons),
        "pitching": load_pitching(resolve_path(cfg, rfi_cfg["pitching_filepath"])),
        "people": load_people(resolve_path(cfg, rfi_cfg["people_filepath"])),
        "teams": load_teams(resolve_path(cfg, rfi_cfg["teams_filepath"])),
    }


def notify_completion(cfg, summary):
    env_key = cfg.get("notify", {}).get("discord_webhook_env", "DISCORD_WEBHOOK_URL")
    webhook_url = os.getenv(env_key)
    if not webhook_url:
        logger.info("%s not set, skipping Discord notification", env_key)
        return False
    best = summary["models"][0]
    msg = (f"MLB RFI report finished for {summary['seasons']}. Games: {summary['n_games']}. "
           f"Best model: {best['label']} (AUC {best['auc_mean']:.3f})")
    return send_discord_webhook(msg, webhook_url)


def run_pipeline(cfg: dict, start_season: int = None, end_season: int = None, output_dir=None,
                 fetch: bool = False, force: bool = False) -> dict:
    """
    Execute load → transform → join → describe → fit → report once.
    Returns the run summary (also written as JSON next to the report).
    """
    seasons = season_range(cfg, start_season, end_season)
    season_label = f"{seasons[0]}-{seasons[-1]}" if len(seasons) > 1 else str(seasons[0])
    model_cfg = cfg["models"]["mlb_rfi"]
    target = model_cfg.get("target", "run_first_inning")
    features = list(model_cfg["features"])

    out_dir = Path(output_dir) if output_dir else resolve_path(cfg, cfg["mlb_data"]["reports"]) / season_label
    summary_path = out_dir / SUMMARY_FILENAME
    if summary_path.exists() and not force:
        logger.info("Report for %s already exists at %s. Use --force to re-run.", season_label, summary_path)
        return load_json(summary_path)

    if fetch:
        logger.info("📡 Fetching inputs for seasons %s", season_label)
        fetch_all(cfg, seasons, force=force)

    # 1. Load
    inputs = load_inputs(cfg, seasons)

    # 2-3. Transform + join
    frame = build_model_frame(
        inputs["games"], inputs["pitching"], inputs["people"], inputs["teams"],
        min_ipouts=model_cfg.get("min_starter_ipouts", 0),
    )
    if frame.empty:
        raise ValueError(f"No games left for {season_label} after cleaning and matching")
    processed_path = resolve_path(cfg, cfg["mlb_data"]["processed"]) / f"mlb_rfi_model_frame_{season_label}.csv"
    save_frame(frame, processed_path)

    # 4. Describe
    season_rates = label_rate_by_season(frame, target)
    feature_table = describe_features(frame, features, target)
    save_frame(season_rates, out_dir / "rfi_rate_by_season.csv")
    save_frame(feature_table, out_dir / "feature_summary.csv")

    # 5. Fit
    cv = make_cv(model_cfg.get("cv"))
    result = benchmark_classifiers(frame, features, target, build_classifiers(model_cfg["classifiers"]), cv)
    save_frame(result.summary, out_dir / "model_summary.csv")
    save_frame(result.fold_scores, out_dir / "model_fold_scores.csv")

    # 6. Report
    plot_paths = {
        "RFI rate by season": plots.plot_label_rate_by_season(season_rates, out_dir / "rfi_rate_by_season.png"),
        "Predictor distributions": plots.plot_feature_distributions(
            frame, features, target, out_dir / "feature_distributions.png"),
        "ROC curves": plots.plot_roc_curves(result.roc_curves, out_dir / "roc_curves.png", labels=MODEL_LABELS),
        "ROC-AUC by model": plots.plot_auc_comparison(result.summary, out_dir / "auc_comparison.png"),
    }
    meta = {
        "seasons": season_label,
        "n_games": result.n_rows,
        "baseline_accuracy": result.baseline_accuracy,
        "n_splits": cv.get_n_splits(),
        "features": features,
    }
    html_path = write_html(generate_html(result.summary, season_rates, meta, plot_paths),
                           out_dir / "rfi_report.html")

    summary = {
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "seasons": season_label,
        "n_games": result.n_rows,
        "rfi_rate": result.positive_rate,
        "baseline_accuracy": result.baseline_accuracy,
        "target": target,
        "features": features,
        "n_splits": cv.get_n_splits(),
        "best_model": result.best_model,
        "models": result.summary.to_dict(orient="records"),
        "outputs": {
            "html": str(html_path),
            "model_frame": str(processed_path),
            "plots": {k: str(v) for k, v in plot_paths.items()},
        },
    }
    save_as_json(summary, summary_path)
    logger.info("✅ Best model for %s: %s (AUC %.4f)", season_label, result.best_model,
                result.summary.iloc[0]["auc_mean"])

    try:
        notify_completion(cfg, summary)
    except Exception as e:
        logger.error("Failed to send completion notification: %s", e)
    return summary


def main(argv=None):
    parser = argparse.ArgumentParser(description="MLB Run First Inning (RFI) classifier report")
    parser.add_argument("--config", default="config/config.yaml", help="Config file (YAML or JSON)")
    parser.add_argument("--start-season", type=int, default=None, help="First season (default: config)")
    parser.add_argument("--end-season", type=int, default=None, help="Last season (default: config)")
    parser.add_argument("--output-dir", default=None, help="Report directory (default: mlb_data.reports/<seasons>)")
    parser.add_argument("--folds", type=int, default=None, help="Override the number of CV folds")
    parser.add_argument("--fetch", action="store_true", help="Download missing inputs before running")
    parser.add_argument("--force", action="store_true", help="Re-run even if the report exists (and re-download with --fetch)")
    parser.add_argument("--example", action="store_true", help="Show usage examples and exit.")
    args = parser.parse_args(argv)
    if args.example:
        print(__doc__)
        return 0

    load_dotenv()  # Load environment variables from .env file

    try:
        cfg = load_config(args.config)
    except (FileNotFoundError, RuntimeError) as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("%s", e)
        sys.exit(1)
    logging.config.dictConfig(cfg["logging"])

    if args.folds is not None:
        if args.folds < 2:
            logger.error("--folds must be at least 2, got %d", args.folds)
            sys.exit(1)
        cfg = copy.deepcopy(cfg)
        cfg["models"]["mlb_rfi"].setdefault("cv", {})["n_splits"] = args.folds

    try:
        run_pipeline(cfg, args.start_season, args.end_season, args.output_dir,
                     fetch=args.fetch, force=args.force)
    except (FileNotFoundError, KeyError, ValueError) as e:
        logger.error("RFI report failed: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.exception("RFI report failed unexpectedly: %s", e)
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
