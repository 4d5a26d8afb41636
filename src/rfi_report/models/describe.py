import logging

import pandas as pd

logger = logging.getLogger(__name__)


def describe_features(frame: pd.DataFrame, features, target: str) -> pd.DataFrame:
    """
    Mean, std and count of every predictor, overall and split by label.

    One row per feature; columns ``all_mean``, ``all_std``, ``all_count``
    and the same triple per label value (``rfi_0_mean``, ``rfi_1_mean``...).
    """
    missing = [c for c in list(features) + [target] if c not in frame.columns]
    if missing:
        raise KeyError(f"Columns {missing} not found; available: {frame.columns.tolist()}")

    stats = ["mean", "std", "count"]
    overall = frame[list(features)].agg(stats).T.add_prefix("all_")
    by_label = frame.groupby(target)[list(features)].agg(stats)
    parts = [overall]
    for label in sorted(frame[target].dropna().unique()):
        part = by_label.loc[label].unstack(level=1)
        parts.append(part.add_prefix(f"rfi_{int(label)}_"))
    table = pd.concat(parts, axis=1)
    table.index.name = "feature"
    return table.reset_index()


def label_rate_by_season(frame: pd.DataFrame, target: str) -> pd.DataFrame:
    """Games, first-inning-run games and the RFI rate for each season."""
    grouped = frame.groupby("season")[target]
    out = pd.DataFrame({
        "games": grouped.size(),
        "rfi_games": grouped.sum().astype(int),
    })
    out["rfi_rate"] = out["rfi_games"] / out["games"]
    out = out.reset_index()
    logger.debug("RFI rate by season:\n%s", out.to_string(index=False))
    return out
