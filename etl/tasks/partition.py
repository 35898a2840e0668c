#--------------------------------------------------------------
# Partizionamento giornaliero del dataset Olist.
## Orders: la data di partizione e' order_purchase_timestamp troncato al giorno (UTC civile).
## Order items / payments / reviews: ereditano la data con un inner join su order_id.
## Customers / products / sellers: non partizionati (serviti interi dal packaging).
## Le partizioni vuote non vengono scritte.
#
# Output: <output_dir>/<YYYY-MM-DD>/<entity>/<entity>.csv
#--------------------------------------------------------------

from pathlib import Path

import pandas as pd
import pandera.pandas as pa
from pandera.errors import SchemaError as PanderaSchemaError

from etl.errors import SchemaError
from etl.tasks import reader
from etl.utils import entity_name

ORDERS_CSV = "olist_orders_dataset.csv"
CHILD_CSVS = [
    "olist_order_items_dataset.csv",
    "olist_order_payments_dataset.csv",
    "olist_order_reviews_dataset.csv",
]

ORDER_DATE = "order_date"
PURCHASE_TS = "order_purchase_timestamp"
DATE_FORMAT = "%Y-%m-%d"

# --- SCHEMI MINIMI: solo le colonne necessarie al join/partizionamento ---
orders_schema = pa.DataFrameSchema({
    "order_id": pa.Column(nullable=True),
    PURCHASE_TS: pa.Column(nullable=True),
})

child_schema = pa.DataFrameSchema({
    "order_id": pa.Column(nullable=True),
})


def _validate(schema: pa.DataFrameSchema, df: pd.DataFrame, path: Path) -> None:
    try:
        schema.validate(df)
    except PanderaSchemaError as e:
        raise SchemaError(f"{path.name}: {e}") from e


def _load_table(extracted_dir: Path, csv_name: str, schema: pa.DataFrameSchema) -> pd.DataFrame:
    path = Path(extracted_dir) / csv_name
    if not path.exists():
        raise FileNotFoundError(f"Non trovo {path}")
    df = reader.read(path)
    _validate(schema, df, path)
    return df


def purchase_dates(timestamps: pd.Series) -> pd.Series:
    """
    Tronca i timestamp di acquisto a 'YYYY-MM-DD' (UTC civile).
    I valori mancanti o non parsabili diventano NULL.
    """
    if pd.api.types.is_datetime64_any_dtype(timestamps):
        ts = timestamps
    else:
        ts = pd.to_datetime(timestamps.astype("string"), format=reader.TIMESTAMP_FORMAT, errors="coerce")

    # timestamp senza fuso = UTC civile; quelli con fuso vengono portati in UTC
    if getattr(ts.dt, "tz", None) is not None:
        ts = ts.dt.tz_convert("UTC")

    dates = ts.dt.strftime(DATE_FORMAT)
    return dates.where(ts.notna(), None)


def load_orders(extracted_dir: Path) -> pd.DataFrame:
    """Orders con la colonna derivata order_date (NULL se il timestamp e' invalido)."""
    orders = _load_table(extracted_dir, ORDERS_CSV, orders_schema)
    orders[ORDER_DATE] = purchase_dates(orders[PURCHASE_TS])
    return orders


def join_child(child: pd.DataFrame, order_keys: pd.DataFrame) -> pd.DataFrame:
    """
    Inner join child x orders[order_id, order_date].
    Le righe orfane vengono scartate, gli order_id duplicati moltiplicano le righe.
    Un order_id NULL non corrisponde a niente, nemmeno a un altro NULL.
    """
    left = child.assign(_join_key=child["order_id"].astype("string"))
    left = left[left["_join_key"].notna()]
    right = pd.DataFrame({
        "_join_key": order_keys["order_id"].astype("string"),
        ORDER_DATE: order_keys[ORDER_DATE],
    })
    right = right[right["_join_key"].notna()]
    joined = left.merge(right, on="_join_key", how="inner")
    return joined.drop(columns=["_join_key"])


def _split_by_date(df: pd.DataFrame) -> dict:
    return {
        key: group.drop(columns=[ORDER_DATE])
        for key, group in df.groupby(ORDER_DATE, sort=True)
    }


def slice_path(output_dir: Path, date_key: str, entity: str) -> Path:
    return Path(output_dir) / date_key / entity / f"{entity}.csv"


def partition(extracted_dir: Path, output_dir: Path) -> dict:
    """
    Scrive una slice per ogni (data x tabella con data).
    Ritorna un riepilogo: numero di date, file scritti e righe per entity.
    """
    extracted_dir = Path(extracted_dir)
    output_dir = Path(output_dir)

    orders = load_orders(extracted_dir)
    dated = orders[orders[ORDER_DATE].notna()]
    skipped = len(orders) - len(dated)
    if skipped:
        print(f"Ordini senza data di acquisto valida (esclusi): {skipped}")

    dates = sorted(dated[ORDER_DATE].unique())
    print(f"Trovate {len(dates)} date d'ordine distinte")

    slices = {entity_name(ORDERS_CSV): _split_by_date(dated)}
    order_keys = dated[["order_id", ORDER_DATE]]

    for csv_name in CHILD_CSVS:
        child = _load_table(extracted_dir, csv_name, child_schema)
        joined = join_child(child, order_keys)
        orphans = int((~child["order_id"].astype("string").isin(order_keys["order_id"].astype("string"))).sum())
        if orphans:
            print(f"{csv_name}: righe senza ordine datato (scartate): {orphans}")
        slices[entity_name(csv_name)] = _split_by_date(joined)

    files_written = 0
    rows_written = {entity: 0 for entity in slices}
    output_dir.mkdir(parents=True, exist_ok=True)

    for date_key in dates:
        for entity, by_date in slices.items():
            df_slice = by_date.get(date_key)
            if df_slice is None or df_slice.empty:
                continue
            rows_written[entity] += reader.write_csv(df_slice, slice_path(output_dir, date_key, entity))
            files_written += 1

    print(f"Partizionamento completato: {files_written} file in {output_dir}")
    for entity, rows in rows_written.items():
        print(f"- {entity}: {rows} righe")

    return {"dates": len(dates), "files": files_written, "rows": rows_written}
