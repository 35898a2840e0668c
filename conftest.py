import textwrap
from pathlib import Path

import pytest

from etl.utils import Settings

ORDERS_CSV = """\
order_id,customer_id,order_status,order_purchase_timestamp,order_approved_at
o1,c1,delivered,2017-01-05 10:00:00,2017-01-05 10:15:00
o2,c2,delivered,2017-01-05 23:59:59,
o3,c3,shipped,2017-01-06 00:00:00,2017-01-06 01:00:00
o4,c4,canceled,,
o5,c5,canceled,not-a-date,
"""

ORDER_ITEMS_CSV = """\
order_id,order_item_id,product_id,seller_id,shipping_limit_date,price,freight_value
o1,1,p1,s1,2017-01-10 10:00:00,58.90,13.29
o1,2,p2,s1,2017-01-10 10:00:00,239.90,19.93
o3,1,p1,s2,2017-01-12 00:00:00,199.00,17.87
oX,1,p3,s2,2017-01-12 00:00:00,12.99,12.79
o4,1,p3,s2,2017-01-12 00:00:00,12.99,12.79
"""

ORDER_PAYMENTS_CSV = """\
order_id,payment_sequential,payment_type,payment_installments,payment_value
o2,1,credit_card,8,99.33
"""

ORDER_REVIEWS_CSV = """\
review_id,order_id,review_score,review_comment_title,review_comment_message,review_creation_date,review_answer_timestamp
r1,o3,4,,Recebi bem antes do prazo,2017-01-18 00:00:00,2017-01-18 21:46:59
r2,oX,5,,,2017-01-18 00:00:00,2017-01-19 10:00:00
"""

CUSTOMERS_CSV = """\
customer_id,customer_unique_id,customer_zip_code_prefix,customer_city,customer_state
c1,u1,01037,sao paulo,SP
c2,u2,14409,franca,SP
"""

PRODUCTS_CSV = """\
product_id,product_category_name,product_weight_g
p1,perfumaria,225
p2,artes,1000
"""

SELLERS_CSV = """\
seller_id,seller_zip_code_prefix,seller_city,seller_state
s1,13023,campinas,SP
s2,04195,sao paulo,SP
"""

GEOLOCATION_CSV = """\
geolocation_zip_code_prefix,geolocation_lat,geolocation_lng,geolocation_city,geolocation_state
01037,-23.545621,-46.639292,sao paulo,SP
"""

TRANSLATION_CSV = """\
product_category_name,product_category_name_english
perfumaria,perfumery
artes,art
"""

OLIST_FILES = {
    "olist_orders_dataset.csv": ORDERS_CSV,
    "olist_order_items_dataset.csv": ORDER_ITEMS_CSV,
    "olist_order_payments_dataset.csv": ORDER_PAYMENTS_CSV,
    "olist_order_reviews_dataset.csv": ORDER_REVIEWS_CSV,
    "olist_customers_dataset.csv": CUSTOMERS_CSV,
    "olist_products_dataset.csv": PRODUCTS_CSV,
    "olist_sellers_dataset.csv": SELLERS_CSV,
    "olist_geolocation_dataset.csv": GEOLOCATION_CSV,
    "product_category_name_translation.csv": TRANSLATION_CSV,
}


def write_text(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path):
    base = tmp_path / "data"
    return Settings(
        base_dir=base,
        extracted_dir=base / "extracted",
        partitioned_dir=base / "partitioned",
        zip_base_dir=base / "partitioned-zip",
        kaggle_dataset="olistbr/brazilian-ecommerce",
    )


@pytest.fixture
def olist_dir(tmp_path):
    """Directory con i CSV Olist minimi usati dagli scenari di test."""
    root = tmp_path / "olist"
    for name, content in OLIST_FILES.items():
        write_text(root / name, content)
    return root


@pytest.fixture(scope="session")
def prefect_harness():
    from prefect.testing.utilities import prefect_test_harness

    with prefect_test_harness():
        yield
