import pytest

from guitar_studio.core.exceptions import NotFoundError, ValidationError
from guitar_studio.products.service import ProductService, product_view


@pytest.fixture
def service(products_repo):
    return ProductService(products_repo)


def test_numbers_are_sequential(service):
    first = service.create_product({"name": "Yamaha C40", "price": 2500000, "inStock": True})
    second = service.create_product({"name": "Taylor 114ce", "price": 25000000, "unknownField": "x"})

    assert (first.number, second.number) == (1, 2)
    assert product_view(second)["id"] == 2
    assert "unknownField" not in product_view(second)


def test_lookup_by_number_then_object_id(service):
    created = service.create_product({"name": "Capo Kyser"})

    assert service.get_product("1").id == created.id
    assert service.get_product(str(created.id)).id == created.id
    with pytest.raises(NotFoundError):
        service.get_product("99")
    with pytest.raises(NotFoundError):
        service.get_product("not-an-id")


def test_price_must_be_numeric(service):
    with pytest.raises(ValidationError):
        service.create_product({"name": "Dây đàn", "price": "rẻ"})


def test_update_and_delete(service):
    service.create_product({"name": "Bao đàn", "price": 300000})

    updated = service.update_product("1", {"price": 250000, "isNew": True})
    assert updated.price == 250000
    assert updated.is_new is True

    service.delete_product("1")
    assert service.list_products() == []
