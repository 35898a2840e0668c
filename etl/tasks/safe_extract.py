#--------------------------------------------------------------
# Estrazione sicura di un archivio ZIP non fidato.
## Ogni entry viene risolta contro la directory di destinazione:
## se il percorso canonico esce dalla destinazione (Zip-Slip) l'intera
## estrazione fallisce con IntegrityError. L'output parziale resta su disco.
#--------------------------------------------------------------

import os
import shutil
import zipfile
from pathlib import Path

from etl.errors import IntegrityError

BUFFER_SIZE = 8192


def resolve_entry(dest_dir: Path, entry_name: str) -> Path:
    """Percorso canonico dell'entry dentro dest_dir, oppure IntegrityError."""
    root = os.path.realpath(dest_dir)
    target = os.path.realpath(os.path.join(root, entry_name))
    if os.path.commonpath([root, target]) != root:
        raise IntegrityError(f"Zip-Slip rilevato: l'entry '{entry_name}' esce da {dest_dir}")
    return Path(target)


def extract(archive_path: Path, dest_dir: Path) -> int:
    """
    Espande tutte le entry di archive_path in dest_dir.
    Ritorna il numero di file scritti.
    """
    archive_path = Path(archive_path)
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    print(f"Estrazione di {archive_path} in {dest_dir}...")
    files_written = 0
    try:
        with zipfile.ZipFile(archive_path) as zf:
            for info in zf.infolist():
                target = resolve_entry(dest_dir, info.filename)

                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst, BUFFER_SIZE)
                files_written += 1
    except zipfile.BadZipFile as e:
        raise IntegrityError(f"Archivio malformato: {archive_path} ({e})") from e

    print(f"Estratti {files_written} file in {dest_dir}")
    return files_written
