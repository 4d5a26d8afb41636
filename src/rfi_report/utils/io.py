import json
import logging
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def _json_default(obj):
    # numpy scalars and paths show up in run summaries
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


# Utility: Save JSON to file
def save_as_json(data, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, default=_json_default)
    logger.info("Saved JSON to %s", path)
    return path


def load_json(path):
    """Load JSON file from disk."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


# Utility: Save a DataFrame as CSV, creating the parent directory
def save_frame(df: pd.DataFrame, path, index=False):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=index)
    logger.info("Saved CSV to %s (%d rows)", path, len(df))
    return path
