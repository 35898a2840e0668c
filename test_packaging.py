import zipfile

import pytest

from etl.tasks import packaging, partition


@pytest.fixture
def partitioned(olist_dir, tmp_path):
    out = tmp_path / "partitioned"
    partition.partition(olist_dir, out)
    return out


def test_daily_bundle_mirrors_entity_directories(partitioned, tmp_path):
    zip_base = tmp_path / "zips"

    assert packaging.package_daily(partitioned / "2017-01-05", zip_base) is True

    with zipfile.ZipFile(zip_base / "2017-01-05.zip") as zf:
        assert sorted(zf.namelist()) == [
            "order_items/order_items.csv",
            "order_payments/order_payments.csv",
            "orders/orders.csv",
        ]
        assert all(i.compress_type == zipfile.ZIP_DEFLATED for i in zf.infolist())
        orders = zf.read("orders/orders.csv").decode()
    assert orders == (partitioned / "2017-01-05" / "orders" / "orders.csv").read_text()


def test_whole_entity_bundle_has_single_source_entry(olist_dir, tmp_path):
    zip_base = tmp_path / "zips"

    assert packaging.package_entity("customers", olist_dir, zip_base) is True

    with zipfile.ZipFile(zip_base / "customers.zip") as zf:
        assert zf.namelist() == ["olist_customers_dataset.csv"]
        assert zf.read("olist_customers_dataset.csv") == (olist_dir / "olist_customers_dataset.csv").read_bytes()


def test_existing_archive_is_left_untouched(partitioned, olist_dir, tmp_path):
    zip_base = tmp_path / "zips"
    zip_base.mkdir()
    (zip_base / "2017-01-05.zip").write_bytes(b"old")
    (zip_base / "sellers.zip").write_bytes(b"old")

    assert packaging.package_daily(partitioned / "2017-01-05", zip_base) is False
    assert packaging.package_entity("sellers", olist_dir, zip_base) is False
    assert (zip_base / "2017-01-05.zip").read_bytes() == b"old"
    assert (zip_base / "sellers.zip").read_bytes() == b"old"


def test_package_all_builds_every_missing_archive(partitioned, olist_dir, tmp_path):
    zip_base = tmp_path / "zips"

    summary = packaging.package_all(partitioned, olist_dir, zip_base)

    assert summary == {"created": 7, "skipped": 0}
    assert sorted(p.name for p in zip_base.iterdir()) == [
        "2017-01-05.zip",
        "2017-01-06.zip",
        "customers.zip",
        "geolocation.zip",
        "product_category_name_translation.zip",
        "products.zip",
        "sellers.zip",
    ]

    assert packaging.package_all(partitioned, olist_dir, zip_base) == {"created": 0, "skipped": 7}


def test_optional_translation_table_may_be_missing(olist_dir, tmp_path):
    (olist_dir / "product_category_name_translation.csv").unlink()

    assert packaging.package_entity("product_category_name_translation", olist_dir, tmp_path) is False
    assert not (tmp_path / "product_category_name_translation.zip").exists()


def test_missing_required_dimension_raises(olist_dir, tmp_path):
    (olist_dir / "olist_products_dataset.csv").unlink()

    with pytest.raises(FileNotFoundError):
        packaging.package_entity("products", olist_dir, tmp_path / "zips")


def test_date_dirs_ignore_sentinels_and_other_names(tmp_path):
    (tmp_path / "2017-01-05").mkdir()
    (tmp_path / "not-a-date").mkdir()
    (tmp_path / "2017-01-04").mkdir()
    (tmp_path / "2017-01-06").write_text("sentinel")

    assert [p.name for p in packaging.date_dirs(tmp_path)] == ["2017-01-04", "2017-01-05"]
    assert packaging.date_dirs(tmp_path / "missing") == []
