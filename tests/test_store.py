# tests/test_store.py
import asyncio
import json

import pytest

from catalog.errors import (
    DuplicateCodeError, NotFoundError, PersistenceError, UnknownFieldError, ValidationError,
)
from catalog.store import ProductManager


def run(coro):
    return asyncio.run(coro)


def read(path):
    return json.loads(path.read_text(encoding="utf-8"))


def seed(manager, *codes):
    for i, code in enumerate(codes, start=1):
        run(manager.add_product(code, f"T{i}", f"D{i}", 10 * i, f"img{i}.png", i))


def test_scenario(data_file):
    pm = ProductManager(data_file)

    run(pm.add_product("A1", "T", "D", 10, "img.png", 5))
    assert read(data_file) == [
        {"id": 1, "code": "A1", "title": "T", "description": "D", "price": 10, "thumbnail": "img.png", "stock": 5}
    ]

    run(pm.add_product("A2", "T2", "D2", 20, "img2.png", 3))
    assert [p["id"] for p in read(data_file)] == [1, 2]

    assert run(pm.get_product_by_id(1))["code"] == "A1"

    run(pm.delete_product(1))
    assert [p["id"] for p in read(data_file)] == [2]

    with pytest.raises(NotFoundError):
        run(pm.delete_product(1))


def test_file_is_pretty_printed_with_id_first(data_file):
    run(ProductManager(data_file).add_product("A1", "Café", "D", 10, "img.png", 5))
    text = data_file.read_text(encoding="utf-8")
    assert text.startswith('[\n  {\n    "id": 1,\n    "code": "A1"')
    assert "Café" in text


def test_ids_follow_the_max_in_file(data_file):
    data_file.write_text(json.dumps([
        {"id": 4, "code": "X", "title": "T", "description": "D", "price": 1, "thumbnail": "x", "stock": 1},
        {"id": 9, "code": "Y", "title": "T", "description": "D", "price": 1, "thumbnail": "y", "stock": 1},
    ]), encoding="utf-8")
    record = run(ProductManager(data_file).add_product("Z", "T", "D", 1, "z", 1))
    assert record["id"] == 10


def test_deleting_the_max_lets_its_id_be_reused(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A", "B")
    run(pm.delete_product(2))
    assert run(pm.add_product("C", "T", "D", 1, "c", 1))["id"] == 2


def test_add_then_get_products_round_trip(data_file):
    pm = ProductManager(data_file)
    added = run(pm.add_product("A1", "T", "D", 9.5, "img.png", 2))
    products = run(ProductManager(data_file).get_products())
    assert products == [added]


def test_duplicate_code_leaves_file_unchanged(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A1")
    before = data_file.read_bytes()
    with pytest.raises(DuplicateCodeError):
        run(pm.add_product("A1", "Other", "Other", 1, "o.png", 1))
    assert data_file.read_bytes() == before


def test_duplicate_code_is_checked_against_the_file(data_file):
    # a manager seeded with a stale list still sees what is on disk
    stale = ProductManager(data_file, products=[])
    run(ProductManager(data_file).add_product("A1", "T", "D", 1, "a", 1))
    with pytest.raises(DuplicateCodeError):
        run(stale.add_product("A1", "T", "D", 1, "a", 1))


def test_invalid_product_is_never_stored(data_file):
    pm = ProductManager(data_file)
    with pytest.raises(ValidationError):
        run(pm.add_product("A1", "", "D", 10, "img.png", 5))
    assert read(data_file) == []


def test_get_product_by_id_missing_returns_none(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A1")
    assert run(pm.get_product_by_id(99)) is None


def test_update_replaces_in_place(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A", "B", "C")
    updated = run(pm.update_product(2, "price", 99))
    assert updated["price"] == 99
    products = read(data_file)
    assert [p["code"] for p in products] == ["A", "B", "C"]
    assert products[1]["price"] == 99


def test_update_unknown_field(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A")
    with pytest.raises(UnknownFieldError) as exc:
        run(pm.update_product(1, "nonexistentField", 1))
    assert "nonexistentField" in str(exc.value)


def test_update_missing_id_is_not_found_before_field_check(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A")
    with pytest.raises(NotFoundError) as exc:
        run(pm.update_product(42, "nonexistentField", 1))
    assert exc.value.product_id == 42


def test_update_revalidates_value(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A")
    before = data_file.read_bytes()
    with pytest.raises(ValidationError):
        run(pm.update_product(1, "price", ""))
    assert data_file.read_bytes() == before


def test_update_code_keeps_codes_unique(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A", "B")
    with pytest.raises(DuplicateCodeError):
        run(pm.update_product(2, "code", "A"))
    # re-saving a record's own code is fine
    assert run(pm.update_product(2, "code", "B"))["code"] == "B"


def test_delete_preserves_order(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A", "B", "C", "D")
    removed = run(pm.delete_product(2))
    assert removed["code"] == "B"
    assert [p["id"] for p in read(data_file)] == [1, 3, 4]


def test_delete_missing_leaves_file_unchanged(data_file):
    pm = ProductManager(data_file)
    seed(pm, "A")
    before = data_file.read_bytes()
    with pytest.raises(NotFoundError):
        run(pm.delete_product(7))
    assert data_file.read_bytes() == before


def test_missing_file_raises_persistence_error(tmp_path):
    pm = ProductManager(tmp_path / "nope.json")
    with pytest.raises(PersistenceError) as exc:
        run(pm.get_products())
    assert isinstance(exc.value.__cause__, OSError)
    assert "nope.json" in str(exc.value)


def test_malformed_file_raises_persistence_error(data_file):
    data_file.write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError) as exc:
        run(ProductManager(data_file).get_products())
    assert str(exc.value.__cause__) in str(exc.value)


def test_non_list_file_raises_persistence_error(data_file):
    data_file.write_text('{"id": 1}', encoding="utf-8")
    with pytest.raises(PersistenceError):
        run(ProductManager(data_file).get_products())


def test_seed_products_are_replaced_by_file(data_file):
    pm = ProductManager(data_file, products=[{"id": 1, "code": "ghost"}])
    assert run(pm.get_products()) == []


def test_concurrent_adds_do_not_lose_updates(data_file):
    async def add_many():
        return await asyncio.gather(*[
            ProductManager(data_file).add_product(f"C{i}", "T", "D", 1, "img", 1)
            for i in range(5)
        ])

    records = run(add_many())
    assert sorted(r["id"] for r in records) == [1, 2, 3, 4, 5]
    assert len(read(data_file)) == 5


def test_concurrent_adds_across_event_loops(data_file):
    async def add_batch(start):
        return await asyncio.gather(*[
            ProductManager(data_file).add_product(f"C{i}", "T", "D", 1, "img", 1)
            for i in range(start, start + 3)
        ])

    run(add_batch(0))
    records = run(add_batch(3))
    assert sorted(r["id"] for r in records) == [4, 5, 6]
    assert [p["id"] for p in read(data_file)] == [1, 2, 3, 4, 5, 6]


def test_update_touches_only_the_target_field(data_file):
    data_file.write_text(json.dumps([
        {"id": 1, "code": "L", "title": "Old", "description": "D", "price": "10",
         "thumbnail": "l.png", "stock": 1, "color": "red"},
    ]), encoding="utf-8")
    updated = run(ProductManager(data_file).update_product(1, "title", "New"))
    assert updated["title"] == "New"
    assert updated["price"] == "10"
    assert updated["color"] == "red"
    assert read(data_file) == [updated]


@pytest.mark.parametrize("record", [
    {"code": "X", "title": "T", "description": "D", "price": 1, "thumbnail": "x", "stock": 1},
    {"id": None, "code": "X", "title": "T", "description": "D", "price": 1, "thumbnail": "x", "stock": 1},
])
def test_record_without_integer_id_is_a_persistence_error(data_file, record):
    data_file.write_text(json.dumps([record]), encoding="utf-8")
    with pytest.raises(PersistenceError) as exc:
        run(ProductManager(data_file).add_product("Y", "T", "D", 1, "y", 1))
    assert "integer id" in str(exc.value)


def test_failed_write_leaves_no_temp_file(data_file, monkeypatch):
    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("catalog.store.os.replace", broken_replace)
    with pytest.raises(PersistenceError) as exc:
        run(ProductManager(data_file).add_product("A1", "T", "D", 1, "a", 1))
    assert "disk full" in str(exc.value)
    assert not data_file.with_suffix(".json.tmp").exists()
    assert read(data_file) == []


def test_add_validates_before_checking_duplicates(data_file):
    pm = ProductManager(data_file)
    run(pm.add_product(1, "T", "D", 1, "a", 1))
    with pytest.raises(ValidationError):
        run(pm.add_product(True, "T", "D", 1, "b", 1))
