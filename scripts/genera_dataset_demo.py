#--------------------------------------------------------------
# Genera un archivio brazilian-ecommerce.zip sintetico, con la stessa forma del dataset Olist.
## Serve per far girare la pipeline senza credenziali Kaggle: con l'archivio gia'
## presente nella base dir lo step di download viene saltato.
## Seed fisso: a parita' di parametri i CSV generati sono identici.
#--------------------------------------------------------------

import os
import sys
import uuid
import zipfile
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import pandas as pd

DATASET_ZIP = "brazilian-ecommerce.zip"
TS_FORMAT = "%Y-%m-%d %H:%M:%S"


def _ids(rng, prefix, n):
    return [f"{prefix}_{uuid.UUID(int=int(rng.integers(0, 2**63))).hex[:16]}" for _ in range(n)]


def genera_tabelle(num_ordini: int = 200, giorni: int = 10, seed: int = 42) -> dict:
    """Ritorna {nome_csv: DataFrame} per tutte le tabelle Olist."""
    rng = np.random.default_rng(seed)
    start_date = datetime(2017, 1, 1)

    customers = pd.DataFrame({
        "customer_id": _ids(rng, "c", num_ordini),
        "customer_unique_id": _ids(rng, "u", num_ordini),
        "customer_zip_code_prefix": [f"{z:05d}" for z in rng.integers(1000, 99999, num_ordini)],
        "customer_city": rng.choice(["sao paulo", "rio de janeiro", "curitiba"], num_ordini),
        "customer_state": rng.choice(["SP", "RJ", "PR"], num_ordini),
    })

    sellers = pd.DataFrame({
        "seller_id": _ids(rng, "s", 10),
        "seller_zip_code_prefix": [f"{z:05d}" for z in rng.integers(1000, 99999, 10)],
        "seller_city": rng.choice(["campinas", "santos"], 10),
        "seller_state": "SP",
    })

    categorie = ["beleza_saude", "informatica_acessorios", "esporte_lazer"]
    products = pd.DataFrame({
        "product_id": _ids(rng, "p", 30),
        "product_category_name": rng.choice(categorie, 30),
        "product_name_lenght": rng.integers(10, 60, 30),
        "product_description_lenght": rng.integers(100, 2000, 30),
        "product_photos_qty": rng.integers(1, 6, 30),
        "product_weight_g": rng.integers(100, 5000, 30),
        "product_length_cm": rng.integers(10, 60, 30),
        "product_height_cm": rng.integers(2, 40, 30),
        "product_width_cm": rng.integers(10, 40, 30),
    })

    translation = pd.DataFrame({
        "product_category_name": categorie,
        "product_category_name_english": ["health_beauty", "computers_accessories", "sports_leisure"],
    })

    geolocation = pd.DataFrame({
        "geolocation_zip_code_prefix": customers["customer_zip_code_prefix"],
        "geolocation_lat": np.round(rng.uniform(-30, -20, num_ordini), 6),
        "geolocation_lng": np.round(rng.uniform(-50, -40, num_ordini), 6),
        "geolocation_city": customers["customer_city"],
        "geolocation_state": customers["customer_state"],
    })

    purchase = [
        start_date + timedelta(days=int(rng.integers(0, giorni)), seconds=int(rng.integers(0, 86400)))
        for _ in range(num_ordini)
    ]
    orders = pd.DataFrame({
        "order_id": _ids(rng, "o", num_ordini),
        "customer_id": customers["customer_id"],
        "order_status": rng.choice(["delivered", "shipped", "canceled"], num_ordini, p=[0.9, 0.07, 0.03]),
        "order_purchase_timestamp": purchase,
    })
    orders["order_approved_at"] = orders["order_purchase_timestamp"] + timedelta(hours=2)
    orders["order_delivered_carrier_date"] = orders["order_approved_at"] + timedelta(days=2)
    orders["order_delivered_customer_date"] = orders["order_delivered_carrier_date"] + timedelta(days=5)
    orders["order_estimated_delivery_date"] = (orders["order_purchase_timestamp"] + timedelta(days=20)).dt.normalize()

    # Coerenza per ordini non consegnati
    orders.loc[orders["order_status"] != "delivered", "order_delivered_customer_date"] = pd.NaT

    items_per_order = rng.integers(1, 4, num_ordini)
    order_items = pd.DataFrame({
        "order_id": np.repeat(orders["order_id"].to_numpy(), items_per_order),
        "order_item_id": np.concatenate([np.arange(1, n + 1) for n in items_per_order]),
    })
    n_items = len(order_items)
    order_items["product_id"] = rng.choice(products["product_id"], n_items)
    order_items["seller_id"] = rng.choice(sellers["seller_id"], n_items)
    order_items["shipping_limit_date"] = np.repeat(
        (orders["order_purchase_timestamp"] + timedelta(days=6)).to_numpy(), items_per_order
    )
    order_items["price"] = np.round(rng.uniform(10.0, 300.0, n_items), 2)
    order_items["freight_value"] = np.round(rng.uniform(5.0, 40.0, n_items), 2)

    order_payments = pd.DataFrame({
        "order_id": orders["order_id"],
        "payment_sequential": 1,
        "payment_type": rng.choice(["credit_card", "boleto", "voucher"], num_ordini),
        "payment_installments": rng.integers(1, 10, num_ordini),
        "payment_value": order_items.groupby("order_id", sort=False)["price"].sum().reindex(orders["order_id"]).to_numpy(),
    })

    order_reviews = pd.DataFrame({
        "review_id": _ids(rng, "r", num_ordini),
        "order_id": orders["order_id"],
        "review_score": rng.integers(1, 6, num_ordini),
        "review_comment_title": None,
        "review_comment_message": rng.choice(["", "otimo produto", "chegou antes do prazo"], num_ordini),
        "review_creation_date": (orders["order_purchase_timestamp"] + timedelta(days=8)).dt.normalize(),
        "review_answer_timestamp": orders["order_purchase_timestamp"] + timedelta(days=9),
    })

    return {
        "olist_orders_dataset.csv": orders,
        "olist_order_items_dataset.csv": order_items,
        "olist_order_payments_dataset.csv": order_payments,
        "olist_order_reviews_dataset.csv": order_reviews,
        "olist_customers_dataset.csv": customers,
        "olist_products_dataset.csv": products,
        "olist_sellers_dataset.csv": sellers,
        "olist_geolocation_dataset.csv": geolocation,
        "product_category_name_translation.csv": translation,
    }


def scrivi_archivio(base_dir, num_ordini: int = 200, giorni: int = 10, seed: int = 42) -> Path:
    """Scrive <base_dir>/brazilian-ecommerce.zip con i CSV sintetici e ritorna il percorso."""
    base_dir = Path(base_dir)
    base_dir.mkdir(parents=True, exist_ok=True)
    zip_path = base_dir / DATASET_ZIP

    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for csv_name, df in genera_tabelle(num_ordini, giorni, seed).items():
            zf.writestr(csv_name, df.to_csv(index=False, date_format=TS_FORMAT))

    print(f"Archivio demo creato: {zip_path} ({num_ordini} ordini su {giorni} giorni)")
    return zip_path


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else os.getenv("APP_DATA_BASE_DIR", "data")
    scrivi_archivio(target)
