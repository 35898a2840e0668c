import os
import shutil

from prefect import flow, task
from prefect.cache_policies import NONE

from etl.tasks import kaggle_fetcher, packaging, partition, safe_extract
from etl.utils import Settings, is_empty_dir, staging_path

# ------------------------------------------------------------
# STAGE DELLA PIPELINE DI AVVIO
# Ogni stage controlla prima su disco se il suo output esiste gia':
# la presenza dell'output e' il segnale che lo stage e' completo.
# ------------------------------------------------------------


@task(name="Fetch Olist Archive", cache_policy=NONE)
def fetch_stage(settings: Settings) -> bool:
    return kaggle_fetcher.fetch(settings.archive_path, settings)


@task(name="Extract Olist Archive", cache_policy=NONE)
def extract_stage(settings: Settings) -> bool:
    if settings.extracted_dir.exists():
        print(f"Dataset gia' estratto in: {settings.extracted_dir}")
        return False

    # estrazione in una directory di staging, rinominata solo a fine lavoro
    partial = staging_path(settings.extracted_dir, ".partial")
    if partial.exists():
        shutil.rmtree(partial)
    safe_extract.extract(settings.archive_path, partial)
    os.replace(partial, settings.extracted_dir)
    return True


@task(name="Partition Orders By Date", cache_policy=NONE)
def partition_stage(settings: Settings) -> dict | None:
    target = settings.partitioned_dir
    if target.exists() and not is_empty_dir(target):
        print(f"Dati gia' partizionati in: {target}")
        return None

    print("Partizionamento per order_purchase_timestamp...")
    partial = staging_path(target, ".partial")
    if partial.exists():
        shutil.rmtree(partial)
    summary = partition.partition(settings.extracted_dir, partial)

    if target.exists():
        target.rmdir()
    os.replace(partial, target)
    return summary


@task(name="Package Slices", cache_policy=NONE)
def package_stage(settings: Settings) -> dict:
    return packaging.package_all(settings.partitioned_dir, settings.extracted_dir, settings.zip_base_dir)


# ------------------------------------------------------------
# FLOW DI AVVIO: Fetch -> Extract -> Partition -> Package
# ------------------------------------------------------------
@flow(name="Olist Data Provider - Startup", log_prints=True, validate_parameters=False)
def startup_flow(settings: Settings) -> dict:
    """
    Prepara gli archivi serviti dall'API. Va eseguito una volta, prima di
    aprire la porta HTTP: qualsiasi eccezione blocca l'avvio.
    """
    print("Inizializzazione Data Provider API...")
    settings.base_dir.mkdir(parents=True, exist_ok=True)

    print("\n--- STEP 1: DOWNLOAD ---")
    fetched = fetch_stage(settings)

    print("\n--- STEP 2: ESTRAZIONE ---")
    extracted = extract_stage(settings)

    print("\n--- STEP 3: PARTIZIONAMENTO ---")
    partitioned = partition_stage(settings)

    print("\n--- STEP 4: PACKAGING ---")
    packaged = package_stage(settings)

    print("\nData Provider API pronta a servire i dati!")
    return {
        "fetched": fetched,
        "extracted": extracted,
        "partitioned": partitioned,
        "packaged": packaged,
    }
