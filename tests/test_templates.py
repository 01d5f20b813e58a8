import pytest

from zoneforge.zones.errors import TemplateError, UnknownGeneratorError
from zoneforge.zones.template_data import (
    ZONE_TEMPLATES,
    get_boss_zone_templates,
    get_town_zone_templates,
    get_zone_template,
    get_zone_templates_by_act,
)
from zoneforge.zones.templates import (
    TemplateRegistry,
    ZoneConnection,
    ZonePrerequisite,
    template_from_dict,
)
from tests.factories import make_template


def test_authored_templates_have_unique_ids():
    ids = [t.id for t in ZONE_TEMPLATES]
    assert len(ids) == len(set(ids))


def test_lookup_helpers():
    assert get_zone_template("tidal_island").boss_type == "hailrake"
    assert get_zone_template("nowhere") is None
    towns = {t.id for t in get_town_zone_templates()}
    assert {"lioneyes_watch", "forest_encampment"} <= towns
    assert all(t.has_boss for t in get_boss_zone_templates())
    assert all(t.act == 1 for t in get_zone_templates_by_act(1))


@pytest.mark.parametrize(
    "field,value",
    [("zone_type", "castle"), ("size", "huge"), ("density", "packed"), ("complexity", "baroque")],
)
def test_invalid_enumerations_rejected(field, value):
    with pytest.raises(TemplateError):
        make_template(**{field: value})


def test_unknown_generator_is_a_template_error():
    with pytest.raises(TemplateError) as exc:
        make_template(generator="hexes")
    assert isinstance(exc.value, UnknownGeneratorError)


def test_bad_prerequisite_type_rejected():
    with pytest.raises(TemplateError):
        ZonePrerequisite("moon_phase", "full")


def test_safe_zone_from_type_or_feature():
    assert make_template(zone_type="town").is_safe_zone
    assert make_template(special_features=["safe_zone"]).is_safe_zone
    assert not make_template().is_safe_zone


def test_lists_are_frozen_to_tuples():
    tpl = make_template(monster_pool=["zombie"], connections=[ZoneConnection("b", "to b")])
    assert tpl.monster_pool == ("zombie",)
    assert tpl.connection_to("b").description == "to b"
    assert tpl.connection_to("c") is None


def test_round_trip_through_record():
    original = get_zone_template("lioneyes_watch")
    record = original.to_dict()
    assert record["safe_zone"] is True
    assert template_from_dict(record) == original


def test_malformed_record():
    with pytest.raises(TemplateError):
        template_from_dict({"id": "x", "name": "X", "colour": "blue"})
    with pytest.raises(TemplateError):
        template_from_dict(["not", "a", "mapping"])


def test_registry_operations():
    reg = TemplateRegistry(ZONE_TEMPLATES)
    assert len(reg) == len(ZONE_TEMPLATES)
    assert "the_coast" in reg
    assert reg.get("the_coast").name == "The Coast"
    assert [t.id for t in reg.all()] == [t.id for t in ZONE_TEMPLATES]
    assert {t.id for t in reg.towns()} == {t.id for t in get_town_zone_templates()}
    assert {t.id for t in reg.bosses()} == {t.id for t in get_boss_zone_templates()}
    assert all(t.act == 2 for t in reg.by_act(2))


def test_registry_rejects_non_templates_and_replaces(capsys):
    reg = TemplateRegistry()
    assert reg.register({"id": "raw"}) is False
    assert len(reg) == 0
    assert reg.register(make_template(name="First")) is True
    assert reg.register(make_template(name="Second")) is True
    assert len(reg) == 1
    assert reg.get("test_zone").name == "Second"
    out = capsys.readouterr()
    assert "event=template_rejected" in out.err
    assert "event=template_replaced" in out.out
