"""
Cross-validated benchmark of the four classical classifiers used by the report.

    logistic_regression  standardized inputs + LogisticRegression
    lda                  LinearDiscriminantAnalysis
    qda                  QuadraticDiscriminantAnalysis
    random_forest        RandomForestClassifier

All models are scored on the same stratified folds so their fold AUCs are
paired.
"""
import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis, QuadraticDiscriminantAnalysis
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import roc_auc_score, roc_curve
from sklearn.model_selection import StratifiedKFold, cross_val_predict, cross_validate
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

logger = logging.getLogger(__name__)

MODEL_LABELS = {
    "logistic_regression": "Logistic Regression",
    "lda": "Linear Discriminant Analysis",
    "qda": "Quadratic Discriminant Analysis",
    "random_forest": "Random Forest",
}


def _logistic_regression(**params):
    return Pipeline([
        ("scaler", StandardScaler()),
        ("clf", LogisticRegression(**params)),
    ])


CLASSIFIER_FACTORIES = {
    "logistic_regression": _logistic_regression,
    "lda": LinearDiscriminantAnalysis,
    "qda": QuadraticDiscriminantAnalysis,
    "random_forest": RandomForestClassifier,
}


def build_classifiers(classifiers_cfg: dict) -> dict:
    """
    Instantiate estimators from the ``models.mlb_rfi.classifiers`` config block.
    Keys pick the model, values are keyword arguments (``{}`` or null for defaults).
    """
    if not classifiers_cfg:
        raise ValueError("No classifiers configured")
    models = {}
    for name, params in classifiers_cfg.items():
        if name not in CLASSIFIER_FACTORIES:
            raise ValueError(
                f"Unknown classifier {name!r}; expected one of {sorted(CLASSIFIER_FACTORIES)}")
        models[name] = CLASSIFIER_FACTORIES[name](**(params or {}))
    return models


def make_cv(cv_cfg: dict = None) -> StratifiedKFold:
    cv_cfg = cv_cfg or {}
    shuffle = bool(cv_cfg.get("shuffle", True))
    return StratifiedKFold(
        n_splits=int(cv_cfg.get("n_splits", 10)),
        shuffle=shuffle,
        random_state=cv_cfg.get("random_state", 42) if shuffle else None,
    )


@dataclass
class BenchmarkResult:
    summary: pd.DataFrame
    fold_scores: pd.DataFrame
    roc_curves: dict = field(default_factory=dict)
    baseline_accuracy: float = float("nan")
    n_rows: int = 0
    positive_rate: float = float("nan")

    @property
    def best_model(self) -> str:
        return self.summary.iloc[0]["model"]


def _prepare(frame, features, target, n_splits):
    missing = [c for c in list(features) + [target] if c not in frame.columns]
    if missing:
        raise KeyError(f"Required columns {missing} not found; available: {frame.columns.tolist()}")

    data = frame[list(features) + [target]].replace([np.inf, -np.inf], np.nan)
    incomplete = data.isna().any(axis=1)
    if incomplete.any():
        logger.warning("Dropping %d rows with missing predictors or label", int(incomplete.sum()))
        data = data.loc[~incomplete]

    X = data[list(features)].to_numpy(dtype=float)
    y = data[target].astype(int).to_numpy()
    classes, counts = np.unique(y, return_counts=True)
    if len(classes) != 2:
        raise ValueError(f"Target {target!r} needs two classes, found {classes.tolist()}")
    if counts.min() < n_splits:
        raise ValueError(
            f"Smallest class has {counts.min()} rows; need at least {n_splits} for {n_splits}-fold CV")
    return X, y


def benchmark_classifiers(frame: pd.DataFrame, features, target: str, classifiers: dict,
                          cv: StratifiedKFold = None) -> BenchmarkResult:
    """
    Score every classifier with ROC-AUC and accuracy on the same CV folds.

    Out-of-fold probabilities give one pooled ROC curve (and pooled AUC)
    per model next to the per-fold mean and std.
    """
    cv = cv or make_cv()
    X, y = _prepare(frame, features, target, cv.get_n_splits())
    positive_rate = float(y.mean())
    baseline = max(positive_rate, 1 - positive_rate)
    logger.info("Benchmarking %d classifiers on %d games (%d features, RFI rate %.3f)",
                len(classifiers), len(y), len(features), positive_rate)

    rows, folds, curves = [], [], {}
    for name, model in classifiers.items():
        logger.info("Cross-validating %s (%d folds)", name, cv.get_n_splits())
        scores = cross_validate(model, X, y, cv=cv, scoring=["roc_auc", "accuracy"])
        proba = cross_val_predict(model, X, y, cv=cv, method="predict_proba")[:, 1]
        fpr, tpr, _ = roc_curve(y, proba)
        pooled_auc = roc_auc_score(y, proba)
        curves[name] = {"fpr": fpr, "tpr": tpr, "auc": pooled_auc}

        auc = scores["test_roc_auc"]
        acc = scores["test_accuracy"]
        for i, (fold_auc, fold_acc) in enumerate(zip(auc, acc), start=1):
            folds.append({"model": name, "fold": i, "roc_auc": fold_auc, "accuracy": fold_acc})
        rows.append({
            "model": name,
            "label": MODEL_LABELS.get(name, name),
            "auc_mean": auc.mean(),
            "auc_std": auc.std(ddof=1) if len(auc) > 1 else 0.0,
            "pooled_auc": pooled_auc,
            "accuracy_mean": acc.mean(),
            "accuracy_std": acc.std(ddof=1) if len(acc) > 1 else 0.0,
            "fit_time_mean": scores["fit_time"].mean(),
        })
        logger.info("%s: AUC %.4f ± %.4f, accuracy %.4f", name, auc.mean(), rows[-1]["auc_std"], acc.mean())

    summary = (pd.DataFrame(rows)
               .sort_values("auc_mean", ascending=False)
               .reset_index(drop=True))
    return BenchmarkResult(
        summary=summary,
        fold_scores=pd.DataFrame(folds),
        roc_curves=curves,
        baseline_accuracy=baseline,
        n_rows=len(y),
        positive_rate=positive_rate,
    )
