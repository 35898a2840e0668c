#--------------------------------------------------------------
# Download dell'archivio Olist da Kaggle.
## Credenziali: prima username/key (Basic auth), poi KAGGLE_API_TOKEN (Bearer).
## Streaming: il body viene scritto a blocchi da 8 KiB in un file .part,
## rinominato sul percorso finale solo a download completato.
#--------------------------------------------------------------

import base64
import os
from pathlib import Path

import requests

from etl.errors import ConfigError, RemoteError
from etl.utils import Settings, staging_path

KAGGLE_DOWNLOAD_URL = "https://www.kaggle.com/api/v1/datasets/download/{slug}"
CHUNK_SIZE = 8192
MAX_ERROR_BODY = 4096
DEFAULT_HTTP_TIMEOUT = "60"

session = requests.Session()


def download_url(settings: Settings) -> str:
    return KAGGLE_DOWNLOAD_URL.format(slug=settings.kaggle_dataset)


def auth_headers(settings: Settings) -> dict:
    """
    Sceglie lo schema di autenticazione:
    1) username + key configurati -> Basic base64(user:key)
    2) variabile KAGGLE_API_TOKEN -> Bearer <token>
    3) nessuna credenziale -> ConfigError (prima di qualsiasi chiamata di rete)
    """
    if settings.kaggle_username and settings.kaggle_key:
        raw = f"{settings.kaggle_username}:{settings.kaggle_key}".encode("utf-8")
        return {"Authorization": "Basic " + base64.b64encode(raw).decode("ascii")}

    token = os.getenv("KAGGLE_API_TOKEN")
    if token:
        return {"Authorization": f"Bearer {token}"}

    raise ConfigError("Credenziali Kaggle non trovate. Imposta KAGGLE_API_TOKEN oppure KAGGLE_USERNAME/KAGGLE_KEY")


def _read_error_body(response) -> str:
    data = b""
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        data += chunk
        if len(data) >= MAX_ERROR_BODY:
            break
    return data[:MAX_ERROR_BODY].decode("utf-8", errors="replace")


def fetch(target_path: Path, settings: Settings) -> bool:
    """
    Scarica l'archivio in target_path. Ritorna False se il file esisteva gia'
    (nessuna chiamata di rete), True se e' stato scaricato.
    """
    target_path = Path(target_path)
    if target_path.exists():
        print(f"Dataset gia' presente in: {target_path}")
        return False

    headers = auth_headers(settings)
    url = download_url(settings)
    target_path.parent.mkdir(parents=True, exist_ok=True)
    part_path = staging_path(target_path, ".part")

    # letto a ogni chiamata: il .env viene caricato dopo l'import
    timeout = int(os.getenv("HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))

    print(f"Download del dataset {settings.kaggle_dataset} ({headers['Authorization'].split()[0]} auth)...")
    try:
        with session.get(url, headers=headers, stream=True, timeout=timeout) as response:
            if response.status_code != 200:
                body = _read_error_body(response)
                raise RemoteError(
                    f"Kaggle API ha risposto {response.status_code}: {body}",
                    status_code=response.status_code,
                    body=body,
                )

            written = 0
            with open(part_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
    except requests.RequestException as e:
        part_path.unlink(missing_ok=True)
        raise RemoteError(f"Download fallito: {e}") from e
    except BaseException:
        part_path.unlink(missing_ok=True)
        raise

    os.replace(part_path, target_path)
    print(f"Dataset scaricato in: {target_path} ({written} bytes)")
    return True
