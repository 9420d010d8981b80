# tests/test_services.py
import pytest

from app.ticket import queries, services
from app.ticket.errors import (
    CycleDetectedError,
    NotFoundError,
    PartialFailureError,
    SelfParentError,
    TicketValidationError,
)


def _ids(tickets):
    return {t.id for t in tickets}


def test_create_defaults_to_incomplete_root(db):
    ticket = services.create_ticket(db, "Write docs")
    assert ticket.title == "Write docs"
    assert ticket.is_completed is False
    assert ticket.parent_id is None
    assert queries.get_by_id(db, ticket.id) == ticket


def test_create_completed(db):
    assert services.create_ticket(db, "Done", is_completed=True).is_completed is True
    assert services.create_ticket(db, "Unspecified", is_completed=None).is_completed is False


@pytest.mark.parametrize("title", ["", "   "])
def test_create_rejects_empty_title(db, title):
    with pytest.raises(TicketValidationError):
        services.create_ticket(db, title)
    assert queries.list_roots(db) == []


def test_update_title(db):
    ticket = services.create_ticket(db, "Old")
    updated = services.update_title(db, ticket.id, "New")
    assert updated.title == "New"
    assert queries.get_by_id(db, ticket.id).title == "New"


def test_update_title_errors(db):
    ticket = services.create_ticket(db, "Old")
    with pytest.raises(NotFoundError):
        services.update_title(db, 999, "New")
    with pytest.raises(TicketValidationError):
        services.update_title(db, ticket.id, "")
    assert queries.get_by_id(db, ticket.id).title == "Old"


def test_set_completed(db):
    ticket = services.create_ticket(db, "Task")
    assert services.set_completed(db, ticket.id, True).is_completed is True
    assert services.set_completed(db, ticket.id, False).is_completed is False
    with pytest.raises(NotFoundError):
        services.set_completed(db, 999, True)


def test_set_parent_and_remove_parent(db):
    parent = services.create_ticket(db, "Parent")
    child = services.create_ticket(db, "Child")

    moved = services.set_parent(db, child.id, parent.id)
    assert moved.parent_id == parent.id
    assert _ids(queries.get_children(db, parent.id)) == {child.id}
    assert _ids(queries.list_roots(db)) == {parent.id}

    detached = services.remove_parent(db, child.id)
    assert detached.parent_id is None
    assert _ids(queries.list_roots(db)) == {parent.id, child.id}


def test_remove_parent_on_root_is_noop(db):
    ticket = services.create_ticket(db, "Root")
    assert services.remove_parent(db, ticket.id).parent_id is None


def test_remove_parent_missing(db):
    with pytest.raises(NotFoundError):
        services.remove_parent(db, 999)


def test_set_parent_self_leaves_ticket_unchanged(db):
    parent = services.create_ticket(db, "Parent")
    ticket = services.create_ticket(db, "Ticket")
    services.set_parent(db, ticket.id, parent.id)

    with pytest.raises(SelfParentError):
        services.set_parent(db, ticket.id, ticket.id)
    assert queries.get_by_id(db, ticket.id).parent_id == parent.id


def test_set_parent_rejects_cycle(db):
    a = services.create_ticket(db, "A")
    b = services.create_ticket(db, "B")
    c = services.create_ticket(db, "C")
    services.set_parent(db, b.id, a.id)
    services.set_parent(db, c.id, b.id)

    with pytest.raises(CycleDetectedError):
        services.set_parent(db, a.id, c.id)
    assert queries.get_by_id(db, a.id).parent_id is None


def test_set_parent_missing_ids(db):
    a = services.create_ticket(db, "A")
    with pytest.raises(NotFoundError):
        services.set_parent(db, 999, a.id)
    with pytest.raises(NotFoundError):
        services.set_parent(db, a.id, 999)
    assert queries.get_by_id(db, a.id).parent_id is None


def test_remove_missing_returns_false(db):
    assert services.remove_ticket(db, 999) is False


def test_remove_orphans_children(db):
    parent = services.create_ticket(db, "Parent")
    kids = [services.create_ticket(db, f"Kid {i}") for i in range(3)]
    services.add_children(db, parent.id, [k.id for k in kids])
    grandchild = services.create_ticket(db, "Grandchild")
    services.set_parent(db, grandchild.id, kids[0].id)

    assert services.remove_ticket(db, parent.id) is True

    with pytest.raises(NotFoundError):
        queries.get_by_id(db, parent.id)
    assert _ids(queries.list_roots(db)) == _ids(kids)
    # only direct children are promoted
    assert queries.get_by_id(db, grandchild.id).parent_id == kids[0].id
    assert services.remove_ticket(db, parent.id) is False


def test_add_children_moves_all(db):
    parent = services.create_ticket(db, "Parent")
    a = services.create_ticket(db, "A")
    b = services.create_ticket(db, "B")

    result = services.add_children(db, parent.id, [a.id, b.id])
    assert result.id == parent.id
    assert _ids(queries.get_children(db, parent.id)) == {a.id, b.id}


def test_add_children_returning_all(db):
    parent = services.create_ticket(db, "Parent")
    a = services.create_ticket(db, "A")
    b = services.create_ticket(db, "B")

    children = services.add_children_returning_all(db, parent.id, [b.id, a.id, b.id])
    assert [c.id for c in children] == [b.id, a.id]
    assert all(c.parent_id == parent.id for c in children)


def test_add_children_missing_parent(db):
    a = services.create_ticket(db, "A")
    with pytest.raises(NotFoundError):
        services.add_children(db, 999, [a.id])
    assert queries.get_by_id(db, a.id).parent_id is None


@pytest.mark.parametrize("bad_position", [0, 1, 2])
def test_add_children_is_all_or_nothing(db, bad_position):
    parent = services.create_ticket(db, "Parent")
    ids = [services.create_ticket(db, f"C{i}").id for i in range(2)]
    ids.insert(bad_position, 999)

    with pytest.raises(PartialFailureError) as exc:
        services.add_children(db, parent.id, ids)

    assert exc.value.offending_id == 999
    assert isinstance(exc.value.reason, NotFoundError)
    assert queries.get_children(db, parent.id) == []
    assert all(t.parent_id is None for t in queries.list_roots(db))


def test_add_children_rejects_self_and_ancestors(db):
    root = services.create_ticket(db, "Root")
    mid = services.create_ticket(db, "Mid")
    leaf = services.create_ticket(db, "Leaf")
    other = services.create_ticket(db, "Other")
    services.set_parent(db, mid.id, root.id)
    services.set_parent(db, leaf.id, mid.id)

    with pytest.raises(PartialFailureError) as exc:
        services.add_children(db, leaf.id, [other.id, leaf.id])
    assert exc.value.offending_id == leaf.id
    assert isinstance(exc.value.reason, SelfParentError)

    with pytest.raises(PartialFailureError) as exc:
        services.add_children(db, leaf.id, [other.id, root.id])
    assert exc.value.offending_id == root.id
    assert isinstance(exc.value.reason, CycleDetectedError)

    assert queries.get_by_id(db, other.id).parent_id is None
    assert queries.get_children(db, leaf.id) == []


def test_add_children_duplicates_are_idempotent(db):
    parent = services.create_ticket(db, "Parent")
    child = services.create_ticket(db, "Child")

    services.add_children(db, parent.id, [child.id, child.id])
    assert [c.id for c in queries.get_children(db, parent.id)] == [child.id]


def test_add_children_empty_list(db):
    parent = services.create_ticket(db, "Parent")
    assert services.add_children(db, parent.id, []).id == parent.id
    assert services.add_children_returning_all(db, parent.id, []) == []


def test_add_children_moves_existing_children(db):
    old = services.create_ticket(db, "Old")
    new = services.create_ticket(db, "New")
    child = services.create_ticket(db, "Child")
    services.set_parent(db, child.id, old.id)

    services.add_children(db, new.id, [child.id])
    assert queries.get_children(db, old.id) == []
    assert _ids(queries.get_children(db, new.id)) == {child.id}


def test_epic_scenario(db):
    r = services.create_ticket(db, "Epic")
    a = services.create_ticket(db, "A")
    b = services.create_ticket(db, "B")

    services.add_children(db, r.id, [a.id, b.id])
    assert _ids(queries.get_children(db, r.id)) == {a.id, b.id}

    services.set_parent(db, a.id, b.id)
    assert queries.get_by_id(db, a.id).parent_id == b.id

    services.remove_parent(db, b.id)
    assert queries.get_by_id(db, a.id).parent_id == b.id
    assert _ids(queries.list_roots(db)) == {r.id, b.id}


def test_every_ancestor_chain_terminates(db):
    tickets = [services.create_ticket(db, f"T{i}") for i in range(6)]
    ids = [t.id for t in tickets]
    services.add_children(db, ids[0], ids[1:3])
    services.add_children(db, ids[1], ids[3:5])
    services.set_parent(db, ids[5], ids[4])
    for candidate in ids:
        for parent in ids:
            try:
                services.set_parent(db, candidate, parent)
            except (SelfParentError, CycleDetectedError):
                pass

    by_id = {t.id: t for t in (queries.get_by_id(db, i) for i in ids)}
    for ticket_id in ids:
        seen = set()
        current = ticket_id
        while current is not None:
            assert current not in seen
            seen.add(current)
            current = by_id[current].parent_id
