from __future__ import annotations

import math

from shelter_service.core.models import Coordinates, FacilityCategory
from shelter_service.core.normalizer import map_amenity, normalize_element, normalize_elements


def test_way_with_center_normalizes_to_hospital_record() -> None:
    element = {
        "type": "way",
        "id": 42,
        "center": {"lat": 45.1, "lon": 21.2},
        "tags": {"amenity": "hospital", "name": "City Hospital"},
    }

    record = normalize_element(element)

    assert record is not None
    assert record.id == "osm_way_42"
    assert record.category == FacilityCategory.HOSPITAL
    assert record.coordinates == Coordinates(lat=45.1, lng=21.2)
    assert record.display_name == "City Hospital"
    assert record.capacity_hint is None


def test_node_uses_own_coordinates_and_capacity_tag() -> None:
    element = {
        "type": "node",
        "id": 7,
        "lat": 45.75,
        "lon": 21.22,
        "tags": {"amenity": "shelter", "name": "Adapost UPT", "capacity": "200"},
    }

    record = normalize_element(element)

    assert record is not None
    assert record.id == "osm_node_7"
    assert record.category == FacilityCategory.SHELTER
    assert record.coordinates.lat == 45.75
    assert record.coordinates.lng == 21.22
    assert record.capacity_hint == "200"


def test_relation_uses_center() -> None:
    element = {"type": "relation", "id": 9, "center": {"lat": 45.7, "lon": 21.3}, "tags": {"amenity": "police"}}

    record = normalize_element(element)

    assert record is not None
    assert record.id == "osm_relation_9"
    assert record.category == FacilityCategory.POLICE


def test_same_element_yields_same_id() -> None:
    element = {"type": "node", "id": 123, "lat": 45.7, "lon": 21.2, "tags": {"amenity": "pharmacy"}}

    first = normalize_element(element)
    second = normalize_element(dict(element))

    assert first is not None and second is not None
    assert first.id == second.id


def test_node_and_way_sharing_numeric_id_do_not_collide() -> None:
    node = normalize_element({"type": "node", "id": 5, "lat": 45.7, "lon": 21.2})
    way = normalize_element({"type": "way", "id": 5, "center": {"lat": 45.7, "lon": 21.2}})

    assert node is not None and way is not None
    assert node.id != way.id


def test_element_without_coordinates_is_dropped() -> None:
    elements = [
        {"type": "way", "id": 1, "tags": {"amenity": "hospital", "name": "No Center"}},
        {"type": "node", "id": 2, "tags": {"amenity": "hospital"}},
        {"type": "node", "id": 3, "lat": 45.7, "lon": 21.2, "tags": {"amenity": "hospital"}},
    ]

    records = normalize_elements(elements)

    assert [record.id for record in records] == ["osm_node_3"]


def test_missing_name_is_synthesized_from_category() -> None:
    hospital = normalize_element({"type": "node", "id": 11, "lat": 45.7, "lon": 21.2, "tags": {"amenity": "hospital"}})
    fire = normalize_element({"type": "node", "id": 12, "lat": 45.7, "lon": 21.2, "tags": {"amenity": "fire_station", "name": ""}})
    untagged = normalize_element({"type": "node", "id": 13, "lat": 45.7, "lon": 21.2})

    assert hospital is not None and fire is not None and untagged is not None
    assert hospital.display_name == "Hospital #11"
    assert fire.display_name == "Fire_station #12"
    assert untagged.display_name == "Unknown #13"
    assert untagged.category == FacilityCategory.UNKNOWN


def test_unmapped_amenity_maps_to_unknown() -> None:
    assert map_amenity("school") == FacilityCategory.UNKNOWN
    assert map_amenity(None) == FacilityCategory.UNKNOWN
    assert map_amenity(3) == FacilityCategory.UNKNOWN
    assert map_amenity("fire_station") == FacilityCategory.FIRE_STATION


def test_malformed_elements_yield_nothing() -> None:
    malformed = [
        None,
        "node",
        [],
        {"type": "node", "lat": 45.7, "lon": 21.2},
        {"type": "node", "id": "12", "lat": 45.7, "lon": 21.2},
        {"type": "node", "id": True, "lat": 45.7, "lon": 21.2},
        {"type": "area", "id": 1, "lat": 45.7, "lon": 21.2},
        {"type": "way", "id": 1, "center": [45.7, 21.2]},
        {"type": "node", "id": 1, "lat": "45.7", "lon": 21.2},
        {"type": "node", "id": 1, "lat": math.nan, "lon": 21.2},
        {"type": "node", "id": 1, "lat": 95.0, "lon": 21.2},
        {"type": "node", "id": 1, "lat": 45.7, "lon": math.inf},
        {"type": "node", "id": 1, "lat": 10**400, "lon": 21.2},
        {"type": "way", "id": 2, "center": {"lat": 45.7, "lon": -(10**400)}},
    ]

    assert normalize_elements(malformed) == []


def test_non_dict_tags_are_ignored() -> None:
    record = normalize_element({"type": "node", "id": 4, "lat": 45.7, "lon": 21.2, "tags": ["amenity"]})

    assert record is not None
    assert record.category == FacilityCategory.UNKNOWN
    assert record.display_name == "Unknown #4"
