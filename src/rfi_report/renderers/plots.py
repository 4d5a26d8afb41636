import logging
import math
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # headless; the report only writes PNGs
import matplotlib.pyplot as plt
import pandas as pd

logger = logging.getLogger(__name__)

_DPI = 120
_RFI_COLORS = {0: "#06b6d4", 1: "#f97316"}


def _save(fig, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=_DPI, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved plot to %s", path)
    return path


def plot_label_rate_by_season(season_rates: pd.DataFrame, path):
    fig, ax = plt.subplots(figsize=(8, 4.5))
    ax.plot(season_rates["season"], season_rates["rfi_rate"], marker="o", color=_RFI_COLORS[1])
    overall = season_rates["rfi_games"].sum() / season_rates["games"].sum()
    ax.axhline(overall, linestyle="--", color="gray", label=f"All seasons ({overall:.3f})")
    ax.set_xlabel("Season")
    ax.set_ylabel("Share of games with a first-inning run")
    ax.set_title("Run First Inning rate by season")
    ax.set_xticks(season_rates["season"].tolist())
    ax.legend()
    return _save(fig, path)


def plot_feature_distributions(frame: pd.DataFrame, features, target: str, path, ncols: int = 4):
    """Box plot of every predictor, split by label."""
    features = list(features)
    nrows = max(1, math.ceil(len(features) / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(4 * ncols, 3.2 * nrows), squeeze=False)
    labels = sorted(frame[target].dropna().unique())
    for ax, feat in zip(axes.flat, features):
        groups = [frame.loc[frame[target] == lab, feat].dropna() for lab in labels]
        box = ax.boxplot(groups, patch_artist=True, showfliers=False)
        for patch, lab in zip(box["boxes"], labels):
            patch.set_facecolor(_RFI_COLORS.get(int(lab), "lightgray"))
        ax.set_xticks(range(1, len(labels) + 1))
        ax.set_xticklabels(["NRFI" if int(lab) == 0 else "RFI" for lab in labels])
        ax.set_title(feat)
    for ax in list(axes.flat)[len(features):]:
        ax.axis("off")
    fig.suptitle("Predictor distributions by first-inning outcome")
    fig.tight_layout()
    return _save(fig, path)


def plot_roc_curves(roc_curves: dict, path, labels: dict = None):
    """Pooled out-of-fold ROC curve of each model."""
    labels = labels or {}
    fig, ax = plt.subplots(figsize=(6, 6))
    for name, curve in roc_curves.items():
        ax.plot(curve["fpr"], curve["tpr"], label=f"{labels.get(name, name)} (AUC {curve['auc']:.3f})")
    ax.plot([0, 1], [0, 1], "k--", linewidth=1)
    ax.set_xlabel("False Positive Rate")
    ax.set_ylabel("True Positive Rate")
    ax.set_title("ROC Curves (out-of-fold)")
    ax.legend(loc="lower right")
    return _save(fig, path)


def plot_auc_comparison(summary: pd.DataFrame, path):
    """Mean fold AUC with ±1 std error bars."""
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.bar(summary["label"], summary["auc_mean"], yerr=summary["auc_std"], capsize=6, color="#34d399")
    ax.axhline(0.5, linestyle="--", color="gray", linewidth=1)
    low = max(0.0, float((summary["auc_mean"] - summary["auc_std"]).min()) - 0.05)
    ax.set_ylim(min(low, 0.45), 1.0)
    ax.set_ylabel("ROC-AUC")
    ax.set_title("Cross-validated ROC-AUC by model")
    plt.setp(ax.get_xticklabels(), rotation=15, ha="right")
    return _save(fig, path)
