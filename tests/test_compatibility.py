import pytest

from fixparts.compatibility import (
    Compatibility,
    CompatibilityExistsError,
    CompatibilityNotFoundError,
    CompatibilityRepository,
    CompatibilityService,
    InvalidItemIDError,
    InvalidSubmodelIDError,
    ItemNotFoundError,
)
from fixparts.database import connect, create_schema
from fixparts.items import Item, ItemRepository


@pytest.fixture
def connection():
    conn = connect(":memory:")
    create_schema(conn)
    conn.execute("INSERT INTO vehicle_makes (make_id, make_name) VALUES (1, 'Volvo'), (2, 'Audi')")
    conn.execute(
        "INSERT INTO vehicle_models (model_id, make_id, model_name) VALUES (1, 1, 'XC60'), (2, 2, 'A4')"
    )
    conn.execute(
        "INSERT INTO vehicle_submodels (submodel_id, model_id, submodel_name) "
        "VALUES (1, 1, 'T5'), (2, 2, 'Avant'), (3, 2, 'Sedan')"
    )
    yield conn
    conn.close()


@pytest.fixture
def repo(connection):
    return CompatibilityRepository(connection)


@pytest.fixture
def items(connection):
    return ItemRepository(connection)


@pytest.fixture
def service(repo, items):
    return CompatibilityService(repo, items)


def _add_item(items, part_number, current=5, minimum=1, active=True):
    return items.create_item(
        Item(
            part_number=part_number,
            description="part",
            buy_price=1.0,
            sell_price=2.0,
            current_stock=current,
            minimum_stock=minimum,
            is_active=active,
        )
    )


def test_add_and_get_compatibilities_with_names(repo, items):
    item_id = _add_item(items, "P-1")
    compat_id = repo.add_compatibility(Compatibility(item_id=item_id, submodel_id=1, notes="fits"))
    [found] = repo.get_compatibilities(item_id)
    assert found.compat_id == compat_id
    assert (found.make_name, found.model_name, found.submodel_name) == ("Volvo", "XC60", "T5")
    assert found.notes == "fits"


def test_compatibilities_ordered_by_make_model_submodel(repo, items):
    item_id = _add_item(items, "P-1")
    for submodel in (1, 3, 2):
        repo.add_compatibility(Compatibility(item_id=item_id, submodel_id=submodel))
    found = repo.get_compatibilities(item_id)
    assert [c.submodel_id for c in found] == [2, 3, 1]


def test_remove_compatibility(repo, items):
    item_id = _add_item(items, "P-1")
    repo.add_compatibility(Compatibility(item_id=item_id, submodel_id=2))
    repo.remove_compatibility(item_id, 2)
    assert repo.get_compatibilities(item_id) == []


def test_remove_missing_compatibility(repo):
    with pytest.raises(CompatibilityNotFoundError, match="compatibility not found"):
        repo.remove_compatibility(1, 1)


def test_compatible_items_only_active(repo, items):
    active = _add_item(items, "B-2")
    inactive = _add_item(items, "A-1", active=False)
    other = _add_item(items, "C-3")
    repo.add_compatibility(Compatibility(item_id=active, submodel_id=1))
    repo.add_compatibility(Compatibility(item_id=inactive, submodel_id=1))
    repo.add_compatibility(Compatibility(item_id=other, submodel_id=2))
    result = repo.get_compatible_items(1)
    assert [i.item_id for i in result] == [active]


def test_low_stock_items(repo, items):
    low = _add_item(items, "L-1", current=1, minimum=5)
    _add_item(items, "H-1", current=10, minimum=5)
    _add_item(items, "I-1", current=0, minimum=1, active=False)
    assert [i.item_id for i in repo.get_low_stock_items()] == [low]


def test_to_dict_omits_empty_fields():
    data = Compatibility(compat_id=1, item_id=2, submodel_id=3).to_dict()
    assert "notes" not in data
    assert "make_name" not in data
    assert data["submodel_id"] == 3


def test_round_trip(repo, items):
    item_id = _add_item(items, "P-1")
    repo.add_compatibility(Compatibility(item_id=item_id, submodel_id=2, notes="n"))
    [found] = repo.get_compatibilities(item_id)
    assert Compatibility.from_dict(found.to_dict()) == found


def test_from_dict_rejects_wrong_type():
    with pytest.raises(ValueError):
        Compatibility.from_dict({"item_id": "abc"})


def test_service_add_success(service, items):
    item_id = _add_item(items, "P-1")
    new_id = service.add_compatibility(Compatibility(item_id=item_id, submodel_id=3))
    assert [c.compat_id for c in service.get_compatibilities(item_id)] == [new_id]


@pytest.mark.parametrize(
    "compat, error",
    [
        (Compatibility(item_id=0, submodel_id=1), InvalidItemIDError),
        (Compatibility(item_id=1, submodel_id=0), InvalidSubmodelIDError),
    ],
)
def test_service_add_invalid_ids(service, compat, error):
    with pytest.raises(error):
        service.add_compatibility(compat)


def test_service_add_missing_item(service):
    with pytest.raises(ItemNotFoundError, match="item not found"):
        service.add_compatibility(Compatibility(item_id=77, submodel_id=1))


def test_service_add_duplicate(service, items):
    item_id = _add_item(items, "P-1")
    service.add_compatibility(Compatibility(item_id=item_id, submodel_id=1))
    with pytest.raises(CompatibilityExistsError, match="compatibility already exists"):
        service.add_compatibility(Compatibility(item_id=item_id, submodel_id=1))


def test_service_get_compatibilities_invalid(service):
    with pytest.raises(InvalidItemIDError):
        service.get_compatibilities(0)


def test_service_remove_invalid(service):
    with pytest.raises(InvalidItemIDError):
        service.remove_compatibility(-1, 1)
    with pytest.raises(InvalidSubmodelIDError):
        service.remove_compatibility(1, 0)


def test_service_remove_missing(service):
    with pytest.raises(CompatibilityNotFoundError):
        service.remove_compatibility(1, 1)


def test_service_compatible_items(service, items):
    item_id = _add_item(items, "P-1")
    service.add_compatibility(Compatibility(item_id=item_id, submodel_id=2))
    assert [i.part_number for i in service.get_compatible_items(2)] == ["P-1"]
    with pytest.raises(InvalidSubmodelIDError):
        service.get_compatible_items(0)