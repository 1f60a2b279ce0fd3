import pytest
from loguru import logger

from albumsync.takeout import TakeoutFolder, is_image_file
from conftest import write_sidecar


@pytest.fixture
def warnings():
    messages = []
    sink_id = logger.add(messages.append, level="WARNING", format="{message}")
    yield messages
    logger.remove(sink_id)


def test_indexes_sidecars_and_images_in_subfolders(tmp_path):
    write_sidecar(tmp_path / "Album", "a.jpg", people=("Ann",))
    (tmp_path / "Album" / "a.jpg").write_bytes(b"")

    takeout = TakeoutFolder(tmp_path)

    assert takeout.has_sidecar("a.jpg")
    assert takeout.sidecar_for("a.jpg").person_names() == ["Ann"]
    assert takeout.image_path_for("a.jpg") == tmp_path / "Album" / "a.jpg"
    assert takeout.sidecar_for("b.jpg") is None


def test_duplicate_sidecar_name_warns(tmp_path, warnings):
    write_sidecar(tmp_path / "Album 1", "a.jpg", description="first")
    write_sidecar(tmp_path / "Album 2", "a.jpg", description="second")

    takeout = TakeoutFolder(tmp_path)

    assert takeout.sidecar_for("a.jpg").description == "second"
    assert len(warnings) == 1
    assert "Duplicate sidecar for a.jpg" in warnings[0]


def test_malformed_sidecar_is_skipped(tmp_path, warnings):
    (tmp_path / "broken.jpg.json").write_text("{not json")
    (tmp_path / "list.jpg.json").write_text("[]")

    takeout = TakeoutFolder(tmp_path)

    assert takeout.has_sidecar("broken.jpg")
    assert takeout.sidecar_for("broken.jpg") is None
    assert takeout.sidecar_for("list.jpg") is None
    assert len(warnings) == 2


def test_missing_folder_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        TakeoutFolder(tmp_path / "absent")


def test_image_extensions_case_insensitive():
    assert is_image_file("IMG_1.HEIC")
    assert not is_image_file("clip.mp4")
