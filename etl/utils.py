import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from etl.errors import ConfigError

DATASET_ZIP = "brazilian-ecommerce.zip"
DEFAULT_DATASET = "olistbr/brazilian-ecommerce"


@dataclass(frozen=True)
class Settings:
    base_dir: Path
    extracted_dir: Path
    partitioned_dir: Path
    zip_base_dir: Path
    kaggle_dataset: str
    kaggle_username: str | None = None
    kaggle_key: str | None = None

    @property
    def archive_path(self) -> Path:
        return self.base_dir / DATASET_ZIP


def _blank_to_none(value):
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings(env_file: str | None = None) -> Settings:
    """
    Legge la configurazione dalle variabili d'ambiente (dopo aver caricato il .env).
    Solleva ConfigError se una directory o lo slug del dataset sono vuoti.
    """
    load_dotenv(dotenv_path=env_file)

    dirs = {
        "APP_DATA_BASE_DIR": os.getenv("APP_DATA_BASE_DIR", "data"),
        "APP_DATA_EXTRACTED_DIR": os.getenv("APP_DATA_EXTRACTED_DIR", "data/extracted"),
        "APP_DATA_PARTITIONED_DIR": os.getenv("APP_DATA_PARTITIONED_DIR", "data/partitioned"),
        "APP_DATA_ZIP_BASE_DIR": os.getenv("APP_DATA_ZIP_BASE_DIR", "data/partitioned-zip"),
    }
    for name, value in dirs.items():
        if not value or not value.strip():
            raise ConfigError(f"Directory non configurata: {name}")

    dataset = os.getenv("KAGGLE_DATASET", DEFAULT_DATASET)
    if not dataset or not dataset.strip():
        raise ConfigError("Slug del dataset non configurato: KAGGLE_DATASET")

    return Settings(
        base_dir=Path(dirs["APP_DATA_BASE_DIR"]),
        extracted_dir=Path(dirs["APP_DATA_EXTRACTED_DIR"]),
        partitioned_dir=Path(dirs["APP_DATA_PARTITIONED_DIR"]),
        zip_base_dir=Path(dirs["APP_DATA_ZIP_BASE_DIR"]),
        kaggle_dataset=dataset.strip(),
        kaggle_username=_blank_to_none(os.getenv("KAGGLE_USERNAME")),
        kaggle_key=_blank_to_none(os.getenv("KAGGLE_KEY")),
    )


def entity_name(csv_name: str) -> str:
    # olist_order_items_dataset.csv -> order_items
    name = csv_name
    if name.startswith("olist_"):
        name = name[len("olist_"):]
    if name.endswith("_dataset.csv"):
        name = name[: -len("_dataset.csv")]
    elif name.endswith(".csv"):
        name = name[: -len(".csv")]
    return name


def staging_path(path: Path, suffix: str) -> Path:
    """Percorso fratello usato per scritture atomiche (es. data.zip -> data.zip.tmp)."""
    return path.with_name(path.name + suffix)


def is_empty_dir(path: Path) -> bool:
    return path.is_dir() and not any(path.iterdir())
