from albumsync.local_store import Catalog
from albumsync.models import GeoData, MediaItem, Person, Takeout


def test_media_item_survives_reload(tmp_path):
    path = tmp_path / "catalog.json"
    item = MediaItem(
        id="A", file_name="a.jpg", album_id="album1", width=10, height=20,
        geo_data=GeoData(1.0, 2.0), people=[Person("Ann")], keyword_tag_ids=["n1", "n1"],
    )
    Catalog(path).upsert_media_item(item)

    assert Catalog(path).get_media_item("A") == item


def test_list_by_album(catalog):
    catalog.upsert_media_items([
        MediaItem(id="A", file_name="a.jpg", album_id="x"),
        MediaItem(id="B", file_name="b.jpg", album_id="y"),
        MediaItem(id="C", file_name="c.jpg"),
    ])
    assert [i.id for i in catalog.list_media_items_in_album("x")] == ["A"]
    assert len(catalog.list_media_items()) == 3


def test_deleted_items_admin(catalog):
    catalog.add_deleted_media_item(MediaItem(id="A", file_name="a.jpg"))
    catalog.add_deleted_media_item(MediaItem(id="B", file_name="b.jpg"))

    catalog.remove_deleted_media_item("A")
    assert [i.id for i in catalog.list_deleted_media_items()] == ["B"]

    catalog.clear_deleted_media_items()
    assert catalog.list_deleted_media_items() == []


def test_takeouts(catalog):
    catalog.add_takeout(Takeout("t1", "Trip", "Trip 2023", "takeout-2023"))
    assert catalog.get_takeout("t1").album_name == "Trip 2023"
    assert catalog.get_takeout("t2") is None
