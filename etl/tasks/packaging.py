#--------------------------------------------------------------
# Packaging delle slice in archivi ZIP serviti dall'API.
## Daily bundle: <zip_base>/<YYYY-MM-DD>.zip con <entity>/<file>.csv per ogni entity della data.
## Whole-entity bundle: <zip_base>/<entity>.zip con il CSV sorgente preso dall'estrazione.
## Idempotente: un archivio gia' presente non viene toccato.
#--------------------------------------------------------------

import os
import re
import zipfile
from pathlib import Path

from etl.utils import staging_path

DATE_DIR_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# entity servita intera -> (CSV sorgente, obbligatorio)
WHOLE_ENTITIES = {
    "customers": ("olist_customers_dataset.csv", True),
    "products": ("olist_products_dataset.csv", True),
    "sellers": ("olist_sellers_dataset.csv", True),
    "geolocation": ("olist_geolocation_dataset.csv", True),
    "product_category_name_translation": ("product_category_name_translation.csv", False),
}


def _write_zip(zip_path: Path, entries: list) -> None:
    """entries: lista di (percorso sorgente, nome dentro l'archivio)."""
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = staging_path(zip_path, ".tmp")
    try:
        with zipfile.ZipFile(tmp_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for source, arcname in entries:
                zf.write(source, arcname)
        os.replace(tmp_path, zip_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def date_dirs(partitioned_dir: Path) -> list:
    """Directory di data (YYYY-MM-DD) presenti, in ordine crescente. Il resto viene ignorato."""
    partitioned_dir = Path(partitioned_dir)
    if not partitioned_dir.is_dir():
        return []
    return sorted(
        p for p in partitioned_dir.iterdir()
        if p.is_dir() and DATE_DIR_PATTERN.match(p.name)
    )


def package_daily(date_dir: Path, zip_base_dir: Path) -> bool:
    """Crea <zip_base>/<data>.zip per una directory di data. False se esisteva gia'."""
    date_dir = Path(date_dir)
    zip_path = Path(zip_base_dir) / f"{date_dir.name}.zip"
    if zip_path.exists():
        return False

    entries = [
        (f, f.relative_to(date_dir).as_posix())
        for f in sorted(date_dir.rglob("*"))
        if f.is_file() and f.suffix == ".csv"
    ]
    _write_zip(zip_path, entries)
    return True


def package_entity(entity: str, extracted_dir: Path, zip_base_dir: Path) -> bool:
    """
    Crea <zip_base>/<entity>.zip con il CSV sorgente come unica entry.
    False se l'archivio esisteva gia' o se la tabella opzionale manca.
    """
    csv_name, required = WHOLE_ENTITIES[entity]
    zip_path = Path(zip_base_dir) / f"{entity}.zip"
    if zip_path.exists():
        return False

    source = Path(extracted_dir) / csv_name
    if not source.exists():
        if required:
            raise FileNotFoundError(f"Non trovo {source}")
        print(f"SKIP (manca, opzionale): {csv_name}")
        return False

    _write_zip(zip_path, [(source, csv_name)])
    return True


def package_all(partitioned_dir: Path, extracted_dir: Path, zip_base_dir: Path) -> dict:
    """Crea tutti gli archivi mancanti. Ritorna i conteggi creati/saltati."""
    Path(zip_base_dir).mkdir(parents=True, exist_ok=True)
    created, skipped = 0, 0

    for date_dir in date_dirs(partitioned_dir):
        if package_daily(date_dir, zip_base_dir):
            created += 1
        else:
            skipped += 1

    for entity in WHOLE_ENTITIES:
        if package_entity(entity, extracted_dir, zip_base_dir):
            created += 1
            print(f"CREATO: {entity}.zip")
        else:
            skipped += 1

    print(f"Archivi: created={created}, skipped={skipped}")
    return {"created": created, "skipped": skipped}
