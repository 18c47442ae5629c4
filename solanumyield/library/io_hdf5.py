"""Module to save/load Results objects to/from HDF5 files."""

from __future__ import annotations

import json
import logging
import platform
import subprocess
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import h5py

import numpy as np

from solanumyield.core.data_containers import RESULT_FIELDS, Results

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
DATE_DTYPE = "datetime64[D]"


def _git_commit_or_none() -> Optional[str]:
    try:
        return subprocess.check_output(
            ["git", "rev-parse", "HEAD"],
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return None


def _write_dataset(g: h5py.Group, name: str, arr: np.ndarray) -> None:
    arr = np.asarray(arr)
    # Dates are stored as int64 days since the epoch
    if np.issubdtype(arr.dtype, np.datetime64):
        arr = arr.astype(DATE_DTYPE).astype(np.int64)
        dset = g.create_dataset(
            name, data=arr, compression="gzip", compression_opts=4, shuffle=True
        )
        dset.attrs["logical_dtype"] = DATE_DTYPE
        return

    dset = g.create_dataset(
        name, data=arr, compression="gzip", compression_opts=4, shuffle=True
    )
    dset.attrs["dtype"] = str(arr.dtype)


def _read_dataset(g: h5py.Group, name: str) -> np.ndarray:
    arr = g[name][...]
    if g[name].attrs.get("logical_dtype", "").startswith("datetime64"):
        arr = arr.astype(DATE_DTYPE)
    return arr


def save_results_hdf5(
    results: Results,
    path: Path,
    group: str = "results",
    extra_meta: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Persist the columns of a trajectory to HDF5 with metadata.

    Several runs can share one file by using distinct ``group`` names (the
    file is opened in append mode); an existing group is replaced.

    Parameters
    ----------
    results : Results
        Trajectory to store.
    path : pathlib.Path
        Target file; parent directories are created.
    group : str, default="results"
        HDF5 group holding one dataset per result field.
    extra_meta : dict, optional
        Extra attributes for the group (dicts/lists are JSON-encoded).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    meta = {
        "schema_version": SCHEMA_VERSION,
        "python": platform.python_version(),
        "numpy": np.__version__,
        "git_commit": _git_commit_or_none(),
        "n_days": len(results),
    }
    if extra_meta:
        meta.update(extra_meta)

    with h5py.File(path, "a") as f:
        if group in f:
            del f[group]
        g = f.create_group(group)
        for k, v in meta.items():
            g.attrs[k] = (
                json.dumps(v)
                if isinstance(v, (dict, list))
                else ("" if v is None else v)
            )
        for name in RESULT_FIELDS:
            _write_dataset(g, name, results.column(name))

    logger.info("Wrote HDF5 snapshot %s:%s", path.resolve(), group)


def load_results_vars_hdf5(
    path: Path, names: Iterable[str], group: str = "results"
) -> Dict[str, np.ndarray]:
    """
    Load only selected variables from the HDF5 snapshot.

    Returns
    -------
    dict
        Mapping of variable name to array.

    Raises
    ------
    KeyError
        If a variable is not stored in ``group``.
    """
    out: Dict[str, np.ndarray] = {}
    with h5py.File(path, "r") as f:
        g = f[group]
        for name in names:
            if name not in g:
                raise KeyError(f"Variable '{name}' not found in HDF5 file.")
            out[name] = _read_dataset(g, name)
    return out


def load_results_hdf5(path: Path, group: str = "results") -> Results:
    """Load a full :class:`Results` trajectory from HDF5."""
    columns = load_results_vars_hdf5(path, RESULT_FIELDS, group=group)
    logger.info("Read HDF5 snapshot %s:%s", Path(path).resolve(), group)
    return Results.from_columns(columns)


def list_runs_hdf5(path: Path) -> list[str]:
    """Names of the groups (runs) stored in a file."""
    with h5py.File(path, "r") as f:
        return [k for k, v in f.items() if isinstance(v, h5py.Group)]
