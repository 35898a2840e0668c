#--------------------------------------------------------------
# Lettura/scrittura dei CSV Olist con inferenza dei tipi per colonna.
## Tutte le celle vengono lette come testo, le celle vuote diventano NULL (pd.NA).
## Poi ogni colonna viene tipizzata: intero -> float -> timestamp -> stringa.
## I CAP con zero iniziale (es. 01037) restano stringhe.
#--------------------------------------------------------------

import os
from pathlib import Path

import pandas as pd

from etl.utils import staging_path

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TIMESTAMP_PATTERN = r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$"
INTEGER_PATTERN = r"^[+-]?(0|[1-9]\d*)$"
LEADING_ZERO_PATTERN = r"^[+-]?0\d"


def _as_int64(values: pd.Series, index) -> pd.Series | None:
    try:
        ints = pd.to_numeric(values)
    except (OverflowError, ValueError):
        return None
    # fuori dal range int64: pandas ripiega su uint64/float/object
    if ints.dtype != "int64":
        return None
    result = pd.Series(pd.NA, index=index, dtype="Int64")
    result.loc[ints.index] = ints
    return result


def _infer_column(col: pd.Series) -> pd.Series:
    # conversione solo sui valori presenti, poi reindex: i NULL restano NULL
    values = col.dropna().astype(str)
    if values.empty:
        return col

    # zero iniziale (CAP, codici): resta testo, altrimenti 01037 -> 1037
    if values.str.match(LEADING_ZERO_PATTERN).any():
        return col

    if values.str.fullmatch(INTEGER_PATTERN).all():
        ints = _as_int64(values, col.index)
        return col if ints is None else ints

    numeric = pd.to_numeric(values, errors="coerce")
    if numeric.notna().all():
        return numeric.reindex(col.index).astype("Float64")

    if values.str.fullmatch(TIMESTAMP_PATTERN).all():
        parsed = pd.to_datetime(values, format=TIMESTAMP_FORMAT, errors="coerce")
        # date impossibili (es. 2017-02-30): la colonna resta testo
        if parsed.isna().any():
            return col
        return parsed.reindex(col.index)

    return col


def read(path) -> pd.DataFrame:
    """
    Carica un CSV con header e inferisce il tipo di ogni colonna.
    Le colonne sono identificate dal nome nell'header.
    """
    df = pd.read_csv(
        path,
        dtype="string",
        keep_default_na=False,
        na_values=[""],
    )
    for name in df.columns:
        df[name] = _infer_column(df[name])
    return df


def write_csv(df: pd.DataFrame, path) -> int:
    """
    Scrive df come CSV con header tramite file temporaneo + rename.
    Ritorna il numero di righe scritte.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = staging_path(path, ".tmp")
    try:
        df.to_csv(tmp_path, index=False, date_format=TIMESTAMP_FORMAT, na_rep="")
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return len(df)
