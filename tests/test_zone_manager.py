import pytest

from zoneforge.services import rewards
from zoneforge.services.zone_manager import UNEXPLORED_DESCRIPTION, ZoneInstanceManager
from zoneforge.zones.cells import CellFeature, Position
from zoneforge.zones.config import GenerationConfig
from zoneforge.zones.templates import ZoneConnection, ZonePrerequisite
from zoneforge.zones.tiles import NPC

from tests.factories import FakeClock, make_template


class _Always:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def _create(manager, template_id="twilight_strand", player="p1", seed=42):
    return manager.create_zone_instance(template_id, player, GenerationConfig(seed=seed))


def _hostile(manager, **overrides):
    fields = dict(id="hostile", generator="open", density="dense")
    fields.update(overrides)
    tpl = make_template(**fields)
    manager.register_template(tpl)
    return tpl


def _blocked_cell(inst):
    return next(c for c in inst.grid.iter_cells() if c.blocked)


# ------------------------------------------------------------------ lifecycle
def test_create_unknown_template_returns_none(manager, capsys):
    assert manager.create_zone_instance("nowhere", "p1") is None
    assert "zone_template_not_found" in capsys.readouterr().err
    assert manager.instance_count() == 0


def test_create_registers_and_emits(manager, bus, clock):
    inst = _create(manager)
    assert inst.instance_id == f"twilight_strand-p1-{clock.now}"
    assert inst.seed == 42
    assert manager.get_zone_instance(inst.instance_id) is inst
    assert manager.get_player_instances("p1") == [inst]
    event = bus.history("zone.instance.created")[0]
    assert event.data == {
        "instance_id": inst.instance_id,
        "template_id": "twilight_strand",
        "player_id": "p1",
        "zone_id": "twilight_strand",
    }


def test_instance_ids_never_collide(manager):
    first = _create(manager)
    second = _create(manager)
    assert second.instance_id == first.instance_id + "-1"
    assert len(manager.get_player_instances("p1")) == 2


def test_get_or_create_reuses_player_copy(manager):
    a = manager.get_or_create_zone_instance("the_coast", "p1")
    b = manager.get_or_create_zone_instance("the_coast", "p1")
    c = manager.get_or_create_zone_instance("the_coast", "p2")
    assert a is b
    assert c is not a


def test_reset_replaces_instance(manager, bus, clock):
    old = _create(manager)
    clock.advance(5)
    new = manager.reset_zone_instance("twilight_strand", "p1")
    assert new.instance_id != old.instance_id
    assert manager.get_zone_instance(old.instance_id) is None
    assert manager.get_player_instances("p1") == [new]
    data = bus.history("zone.instance.reset")[0].data
    assert data["old_instance_ids"] == [old.instance_id]
    assert data["instance_id"] == new.instance_id
    assert manager.reset_zone_instance("nowhere", "p1") is None


def test_reset_within_same_millisecond_gets_fresh_id(manager):
    old = _create(manager)
    new = manager.reset_zone_instance("twilight_strand", "p1", GenerationConfig(seed=7))
    assert new.instance_id != old.instance_id
    assert manager.get_player_instances("p1") == [new]


def test_cleanup_is_strictly_older_than_max_age(manager, bus, clock):
    inst = _create(manager)
    clock.advance(manager.max_age_ms)
    assert manager.cleanup_expired_instances() == 0
    clock.advance(1)
    assert manager.cleanup_expired_instances() == 1
    assert manager.get_zone_instance(inst.instance_id) is None
    assert manager.get_player_instances("p1") == []
    assert bus.history("zone.instances.cleaned")[0].data == {"deleted_count": 1}


def test_cleanup_with_explicit_age(manager, clock):
    _create(manager)
    clock.advance(10)
    assert manager.cleanup_expired_instances(max_age_ms=5) == 1


def test_clear_player_instances(manager, bus):
    _create(manager, "twilight_strand")
    _create(manager, "the_coast")
    _create(manager, "the_coast", player="p2")
    assert manager.clear_player_instances("p1") == 2
    assert manager.instance_count() == 1
    assert bus.history("zone.instances.cleared")[0].data == {"player_id": "p1", "deleted_count": 2}
    assert manager.clear_player_instances("ghost") == 0


def test_zero_pack_instance_starts_cleared(manager):
    inst = _create(manager, "lioneyes_watch")
    assert inst.spawns == []
    assert inst.cleared and inst.progress == 100


# ------------------------------------------------------------------- movement
def test_move_to_entry(manager):
    inst = _create(manager)
    entry = manager.get_zone_entry_position(inst.instance_id)
    result = manager.move_player_in_zone(inst.instance_id, entry)
    assert result.success
    assert result.position == entry
    cell = manager.get_cell_at_position(inst.instance_id, entry)
    assert cell.discovered
    assert "p1" in cell.entities
    assert entry.key in inst.visited_cells
    assert inst.player_position == entry


def test_move_accepts_tuples_and_dicts(manager):
    inst = _create(manager)
    entry = manager.get_zone_entry_position(inst.instance_id)
    assert manager.move_player_in_zone(inst.instance_id, (entry.x, entry.y)).success
    assert manager.move_player_in_zone(inst.instance_id, {"x": entry.x, "y": entry.y}).success


def test_player_entity_follows_moves(manager):
    inst = _create(manager)
    y = inst.grid.height // 2
    manager.move_player_in_zone(inst.instance_id, Position(0, y))
    manager.move_player_in_zone(inst.instance_id, Position(1, y))
    assert "p1" not in inst.grid.cell_at(0, y).entities
    assert "p1" in inst.grid.cell_at(1, y).entities


def test_move_failures_leave_state_alone(manager):
    inst = _create(manager)
    wall = _blocked_cell(inst)
    blocked = manager.move_player_in_zone(inst.instance_id, wall.position)
    assert not blocked.success
    assert blocked.description == "Path is blocked"
    assert inst.visited_cells == set()
    assert not wall.discovered

    outside = manager.move_player_in_zone(inst.instance_id, Position(-1, 0))
    assert outside.description == "Invalid position"
    missing = manager.move_player_in_zone("nope", Position(0, 0))
    assert missing.description == "Zone instance not found"


def test_move_onto_pack_reports_combat(manager):
    _hostile(manager)
    inst = manager.create_zone_instance("hostile", "p1", GenerationConfig(seed=3))
    spawn = inst.spawns[0]
    result = manager.move_player_in_zone(inst.instance_id, spawn.position)
    assert result.success
    assert result.combat is spawn
    assert result.description.endswith(f"\n{spawn.description} blocks your path!")


def test_available_directions(manager):
    inst = _create(manager)
    entry = manager.get_zone_entry_position(inst.instance_id)
    options = manager.get_available_directions(inst.instance_id, entry)
    assert options
    for opt in options:
        cell = inst.grid.cell_at(opt.position.x, opt.position.y)
        assert not cell.blocked
        assert opt.description == UNEXPLORED_DESCRIPTION
    assert "west" not in {o.direction for o in options}
    east = next(o for o in options if o.direction == "east")
    manager.move_player_in_zone(inst.instance_id, east.position)
    again = manager.get_available_directions(inst.instance_id, entry)
    assert next(o for o in again if o.direction == "east").description != UNEXPLORED_DESCRIPTION
    assert manager.get_available_directions("nope", entry) == []


# --------------------------------------------------------------------- combat
def test_defeat_all_packs_clears_zone(manager, bus):
    defeated = []
    bus.on("zone.monster.defeated", defeated.append)
    _hostile(manager)
    inst = manager.create_zone_instance("hostile", "p1", GenerationConfig(seed=3))
    total = len(inst.spawns)
    assert total > 1
    last_progress = 0
    for n, spawn in enumerate(list(inst.spawns), start=1):
        result = manager.defeat_monster_pack(inst.instance_id, spawn.position)
        assert result.success
        assert result.experience == rewards.experience_for(spawn)
        assert result.description == f"Defeated {spawn.description}."
        assert result.progress == n * 100 // total
        assert result.progress >= last_progress
        last_progress = result.progress
    assert inst.cleared and inst.progress == 100
    assert len(bus.history("zone.cleared")) == 1
    assert len(defeated) == total


def test_defeat_without_pack(manager):
    inst = _create(manager)
    wall = _blocked_cell(inst)
    result = manager.defeat_monster_pack(inst.instance_id, wall.position)
    assert not result.success
    assert result.description == "No monster pack at that position"
    assert not manager.defeat_monster_pack("nope", Position(0, 0)).success


@pytest.mark.parametrize("roll,expected", [(0.0, ["weapon", "armor"]), (0.99, [])])
def test_pack_loot_uses_injected_rng(bus, clock, roll, expected):
    m = ZoneInstanceManager(events=bus, clock=clock, rng=_Always(roll))
    _hostile(m)
    inst = m.create_zone_instance("hostile", "p1", GenerationConfig(seed=3))
    spawn = inst.spawns[0]
    loot = m.defeat_monster_pack(inst.instance_id, spawn.position).loot
    currency = ["currency_orb"] if spawn.rarity in ("rare", "unique") else []
    assert loot == currency + expected


def test_boss_kill_unlocks_boss_prerequisite(manager):
    _hostile(manager, id="merveil_lair", monster_pool=(), has_boss=True, boss_type="merveil")
    inst = manager.create_zone_instance("merveil_lair", "p1", GenerationConfig(seed=1))
    before = manager.can_access_zone("southern_forest", "p1")
    assert not before.can_access
    assert before.missing_prerequisites == ["Defeat Merveil to access Act 2"]
    boss = inst.spawns[0]
    assert boss.is_boss
    manager.defeat_monster_pack(inst.instance_id, boss.position)
    assert manager.boss_kills("p1") == {"merveil"}
    assert manager.can_access_zone("southern_forest", "p1").can_access
    assert not manager.can_access_zone("southern_forest", "p2").can_access


# ------------------------------------------------------------------ waypoints
def test_waypoint_unlocks_on_visit(manager, bus):
    inst = _create(manager, "the_coast")
    assert manager.use_waypoint(inst.instance_id).description == "Waypoint not available"
    wp = inst.grid.waypoint_position
    manager.move_player_in_zone(inst.instance_id, wp)
    manager.move_player_in_zone(inst.instance_id, wp)
    assert inst.waypoint_unlocked
    assert len(bus.history("zone.waypoint.unlocked")) == 1


def test_waypoint_destinations_and_travel(manager):
    coast = _create(manager, "the_coast")
    flats = _create(manager, "mud_flats")
    manager.move_player_in_zone(coast.instance_id, coast.grid.waypoint_position)
    listing = manager.use_waypoint(coast.instance_id)
    assert listing.success and listing.available_destinations == []
    manager.move_player_in_zone(flats.instance_id, flats.grid.waypoint_position)
    listing = manager.use_waypoint(coast.instance_id)
    assert listing.description == "Waypoint activated. Choose destination:"
    assert listing.available_destinations == ["mud_flats"]
    assert manager.use_waypoint(coast.instance_id, "mud_flats").description == "Transported to The Mud Flats"
    unknown = manager.use_waypoint(coast.instance_id, "atlantis")
    assert not unknown.success
    assert unknown.description == "Unknown destination: atlantis"


# ------------------------------------------------------------------- features
def test_chest_opens_once(manager):
    inst = _create(manager)
    entry = manager.get_zone_entry_position(inst.instance_id)
    cell = inst.grid.cell_at(entry.x, entry.y)
    cell.features = [CellFeature("chest", "Treasure Chest", "A wooden chest that might contain loot")]

    early = manager.interact_with_feature(inst.instance_id, entry)
    assert early.description == "You have not reached that spot yet"

    manager.move_player_in_zone(inst.instance_id, entry)
    opened = manager.interact_with_feature(inst.instance_id, entry)
    assert opened.success
    assert opened.description == "You open the Treasure Chest."
    assert opened.loot
    again = manager.interact_with_feature(inst.instance_id, entry)
    assert not again.success
    assert again.description == "The Treasure Chest is empty."


def test_nothing_to_interact_with(manager):
    inst = _create(manager)
    entry = manager.get_zone_entry_position(inst.instance_id)
    inst.grid.cell_at(entry.x, entry.y).features = []
    manager.move_player_in_zone(inst.instance_id, entry)
    result = manager.interact_with_feature(inst.instance_id, entry)
    assert result.description == "Nothing to interact with here"


def test_town_vendor(manager):
    inst = _create(manager, "lioneyes_watch")
    npc_cell = next(c for c in inst.grid.iter_cells() if c.type == NPC)
    manager.move_player_in_zone(inst.instance_id, npc_cell.position)
    result = manager.interact_with_feature(inst.instance_id, npc_cell.position)
    feature = npc_cell.features[0]
    assert result.success
    assert result.description == f"{feature.name} offers {', '.join(feature.sells_category)}."


# ------------------------------------------------------------------------ map
def test_zone_map(manager):
    inst = _create(manager)
    assert manager.get_zone_map("nope") == "Zone not found"
    lines = manager.get_zone_map(inst.instance_id).split("\n")
    assert len(lines) == inst.grid.height
    assert all(len(line) == inst.grid.width for line in lines)
    assert set("".join(lines)) == {"?"}
    entry = manager.get_zone_entry_position(inst.instance_id)
    manager.move_player_in_zone(inst.instance_id, entry)
    lines = manager.get_zone_map(inst.instance_id).split("\n")
    assert lines[entry.y][entry.x] == "@"


# --------------------------------------------------------------------- access
def test_access_unknown_template(manager):
    result = manager.can_access_zone("nowhere", "p1")
    assert not result.can_access
    assert result.missing_prerequisites == ["Zone template not found"]


def test_level_and_item_prerequisites_checked_when_supplied(manager):
    manager.register_template(make_template(
        id="vault",
        prerequisites=[
            ZonePrerequisite("level_requirement", 10, "Reach level 10"),
            ZonePrerequisite("item_possessed", "vault_key", "Carry the vault key"),
        ],
    ))
    assert manager.can_access_zone("vault", "p1").can_access
    low = manager.can_access_zone("vault", "p1", player_level=3, items=[])
    assert low.missing_prerequisites == ["Reach level 10", "Carry the vault key"]
    assert manager.can_access_zone("vault", "p1", player_level=10, items=["vault_key"]).can_access


def test_available_zones_for_new_player(manager):
    assert [t.id for t in manager.get_available_zones("newbie")] == ["twilight_strand"]


def test_move_to_zone_requires_clear_then_succeeds(manager, bus):
    manager.register_template(make_template(
        id="camp", name="The Camp", zone_type="town", connections=[ZoneConnection("beach")],
        prerequisites=[ZonePrerequisite("zone_cleared", "beach", "Clear the beach")],
    ))
    _hostile(manager, id="beach", name="The Beach",
             connections=[ZoneConnection("camp"), ZoneConnection("void")])
    beach = manager.create_zone_instance("beach", "p1", GenerationConfig(seed=3))

    blocked = manager.move_to_zone(beach.instance_id, "camp")
    assert not blocked.success
    assert blocked.description == "Clear the beach"
    assert manager.move_to_zone(beach.instance_id, "the_coast").description == "No path from The Beach to the_coast"
    assert manager.move_to_zone(beach.instance_id, "void").description == "Zone not found"

    for spawn in list(beach.spawns):
        manager.defeat_monster_pack(beach.instance_id, spawn.position)
    moved = manager.move_to_zone(beach.instance_id, "camp")
    assert moved.success
    assert moved.description == "You enter The Camp."
    camp = manager.get_zone_instance(moved.instance_id)
    assert camp.template_id == "camp"
    assert camp.player_position == moved.position == camp.grid.entry_points[0]
    data = bus.history("zone.transition")[0].data
    assert data["from_instance_id"] == beach.instance_id
    assert data["to_instance_id"] == camp.instance_id


# ----------------------------------------------------------------- end to end
def test_enter_and_clear_small_linear_zone():
    m = ZoneInstanceManager(clock=FakeClock())
    tpl = make_template(id="strand", generator="linear", size="small", density="sparse")
    m.register_template(tpl)
    inst = m.create_zone_instance("strand", "p1", GenerationConfig(seed=42))
    assert (inst.grid.width, inst.grid.height) == (15, 15)
    entry = m.get_zone_entry_position(inst.instance_id)
    assert not inst.grid.cell_at(entry.x, entry.y).blocked
    assert m.move_player_in_zone(inst.instance_id, entry).success
    for spawn in list(inst.spawns):
        assert m.defeat_monster_pack(inst.instance_id, spawn.position).success
    assert inst.cleared
    assert inst.progress == 100
    assert inst.spawns == []
