import json

import pytest

PRODUCTS = [
    {"id": "p-tea", "name": "Oolong Tea", "price": "120", "store_id": "s-a", "images": ["tea.png"]},
    {"id": "p-lamp", "name": "Desk Lamp", "price": "900", "store_id": "s-b"},
]
STORES = [
    {"id": "s-a", "seller_id": "seller-a", "user_id": "u-sa"},
    {"id": "s-b", "seller_id": "seller-b", "user_id": "u-sb"},
]
ADDRESSES = [
    {
        "id": "addr-1", "user_id": "u-1", "recipient_name": "Amy Lin",
        "phone": "0912345678", "city": "Taipei", "address_line1": "No. 1",
        "postal_code": "106",
    },
]
DISCOUNTS = [
    {"code": "FREESHIP", "discount_id": "d-ship", "type": "shipping", "amount": "60"},
    {
        "code": "SPRING10", "discount_id": "d-spring", "type": "seasonal",
        "rate": "0.10", "max_discount_amount": "50", "min_purchase_amount": "100",
    },
]


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


def fill_cart(data_dir, buyer_id="u-1", lines=(("p-tea", 2), ("p-lamp", 1))):
    write_json(data_dir / "carts.json", {
        buyer_id: [
            {"product_id": product_id, "quantity": qty, "selected": True}
            for product_id, qty in lines
        ]
    })


@pytest.fixture()
def data_dir(tmp_path):
    directory = tmp_path / "data"
    directory.mkdir()
    write_json(directory / "products.json", PRODUCTS)
    write_json(directory / "stores.json", STORES)
    write_json(directory / "addresses.json", ADDRESSES)
    write_json(directory / "discounts.json", DISCOUNTS)
    fill_cart(directory)
    return directory


@pytest.fixture()
def refill_cart(data_dir):
    def refill(buyer_id="u-1", lines=(("p-tea", 2), ("p-lamp", 1))):
        fill_cart(data_dir, buyer_id, lines)

    return refill
