"""
    Helpers shared by the pipeline scripts.
"""

import json
from pathlib import Path

import numpy as np
import pandas as pd


# load a CSV and check the columns a script relies on
def load_table(path, required):
    path = Path(path)
    if not path.exists():
        raise SystemExit(f"Input file not found: {path.resolve()}")
    df = pd.read_csv(path).reset_index(drop=True)
    missing = set(required) - set(df.columns)
    assert not missing, f"{path} is missing columns: {sorted(missing)}"
    return df


# covariates are every column that is not the id, text or label
def covariate_columns(df, exclude):
    return [c for c in df.columns if c not in set(exclude)]


def load_frozen_test_indices(json_path):
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return sorted(int(i) for i in data["test_index"])


# recursively convert Path objects (and numpy scalars) to JSON-serializable values
def serialize_meta(meta):
    if isinstance(meta, dict):
        return {str(k): serialize_meta(v) for k, v in meta.items()}
    if isinstance(meta, (list, tuple)):
        return [serialize_meta(v) for v in meta]
    if isinstance(meta, np.integer):
        return int(meta)
    if isinstance(meta, np.floating):
        return float(meta)
    if isinstance(meta, np.ndarray):
        return serialize_meta(meta.tolist())
    if isinstance(meta, Path):
        return str(meta)
    return meta


def write_json(obj, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_meta(obj), f, indent=2)


def bool_flag(parser, name, default):
    group = parser.add_mutually_exclusive_group()
    group.add_argument(f"--{name}", dest=name.replace("-", "_"), action="store_true")
    group.add_argument(f"--no-{name}", dest=name.replace("-", "_"), action="store_false")
    parser.set_defaults(**{name.replace("-", "_"): default})
