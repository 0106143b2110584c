import json
from datetime import datetime

import pytest

from conftest import add_pictures
from slideframe.display_state import DisplayState
from slideframe.errors import EmptyCatalogError, OutOfRangeError


def test_nothing_is_current_initially(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png")
    catalog.refresh()
    assert state.current() == (None, None, False)


def test_set_current_then_current(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png", "c.png")
    catalog.refresh()

    assert state.set_current(1) == "b.png"
    assert state.current() == (1, "b.png", True)


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_set_current_rejects_out_of_range(state, catalog, pictures_dir, index):
    add_pictures(pictures_dir, "a.png", "b.png", "c.png")
    catalog.refresh()
    state.set_current(0)

    with pytest.raises(OutOfRangeError):
        state.set_current(index)
    assert state.current() == (0, "a.png", True)


def test_set_current_on_empty_catalog_fails(state, catalog):
    catalog.refresh()
    with pytest.raises(OutOfRangeError):
        state.set_current(0)


def test_shrinking_catalog_invalidates_current(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png", "c.png")
    catalog.refresh()
    state.set_current(2)

    (pictures_dir / "c.png").unlink()
    catalog.refresh()

    assert len(catalog.snapshot()) == 2
    assert state.current().ok is False


def test_deleting_an_earlier_picture_invalidates_current(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png", "c.png")
    catalog.refresh()
    state.set_current(1)

    (pictures_dir / "a.png").unlink()
    catalog.refresh()

    # Index 1 now holds c.png, which was never put on the panel.
    assert state.current().ok is False


def test_revalidate_clears_stale_index(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png")
    catalog.refresh()
    state.set_current(1)
    assert state.revalidate() is True

    (pictures_dir / "b.png").unlink()
    catalog.refresh()

    assert state.revalidate() is False
    assert state.advance() == 0


def test_advance_wraps_around(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png", "c.png", "d.png")
    catalog.refresh()
    state.set_current(3)

    assert state.advance() == 0


def test_advance_does_not_commit(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png")
    catalog.refresh()
    state.set_current(0)

    assert state.advance() == 1
    assert state.advance() == 1
    assert state.current() == (0, "a.png", True)


def test_advance_starts_at_first_picture(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png")
    catalog.refresh()
    assert state.advance() == 0


def test_advance_on_empty_catalog(state, catalog):
    catalog.refresh()
    with pytest.raises(EmptyCatalogError):
        state.advance()


def test_commit_rotation_records_time(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png")
    snapshot = catalog.refresh()
    when = datetime(2024, 5, 1, 9, 0)

    assert state.commit_rotation(1, snapshot, when) == "b.png"
    assert state.last_rotation == when
    assert state.current() == (1, "b.png", True)


def test_state_survives_restart(catalog, pictures_dir, tmp_path):
    add_pictures(pictures_dir, "a.png", "b.png")
    snapshot = catalog.refresh()
    state_file = tmp_path / "state.json"
    when = datetime(2024, 5, 1, 9, 30).astimezone()

    DisplayState(catalog, state_file).commit_rotation(1, snapshot, when)

    restored = DisplayState(catalog, state_file)
    restored.load()
    assert restored.current() == (1, "b.png", True)
    assert restored.last_rotation == when
    assert json.loads(state_file.read_text())["identifier"] == "b.png"


def test_corrupt_state_file_is_ignored(catalog, tmp_path):
    state_file = tmp_path / "state.json"
    state_file.write_text("{not json")

    state = DisplayState(catalog, state_file)
    state.load()

    assert state.current().ok is False
    assert state.last_rotation is None


def test_advance_restarts_after_picture_deleted_outside_the_frame(state, catalog, pictures_dir):
    add_pictures(pictures_dir, "a.png", "b.png", "c.png", "d.png")
    catalog.refresh()
    state.set_current(1)

    (pictures_dir / "a.png").unlink()
    catalog.refresh()

    # Index 1 now holds c.png; continuing from it would skip c.png.
    assert state.current().ok is False
    assert state.advance() == 0
