import pytest

from signing.exceptions.errors import FieldNotFound
from signing.models.field import Field, new_field_id
from signing.models.field_enums import FieldType, ImageFormat
from signing.models.field_store import FieldStore
from signing.models.image_payload import ImagePayload
from signing.models.render_models import RenderRequest
from signing.tests.helpers import field, make_image


def test_field_ids_strictly_increase():
    ids = [new_field_id() for _ in range(50)]
    assert ids == sorted(set(ids))


def test_from_dict_parses_client_json():
    png = make_image(4, 2)
    f = Field.from_dict({
        "id": 1729000000000,
        "type": "SIGNATURE",
        "page": 2,
        "x": "12.5", "y": 40, "width": 25, "height": 10,
        "imageData": png.to_data_url(),
    })
    assert f.id == 1729000000000
    assert f.type is FieldType.SIGNATURE
    assert f.page == 2
    assert f.x == 12.5
    assert f.image.format is ImageFormat.PNG
    assert f.image.data == png.data
    assert f.to_dict()["imageData"] == png.to_data_url()


def test_from_dict_defaults():
    f = Field.from_dict({"type": "checkbox"})
    assert f.page == 1
    assert f.checked is False
    assert f.image is None
    assert f.id > 0


def test_from_dict_rejects_unknown_type():
    with pytest.raises(ValueError):
        Field.from_dict({"type": "barcode"})


def test_image_payload_formats():
    assert ImagePayload("image/jpg", b"").format is ImageFormat.JPEG
    assert ImagePayload("image/PNG", b"").format is ImageFormat.PNG
    assert ImagePayload("image/gif", b"").format is None
    with pytest.raises(ValueError):
        ImagePayload.from_data_url("https://example.com/sig.png")


def test_with_changes_keeps_id():
    f = field(7, FieldType.TEXT, text="a")
    g = f.with_changes(id=99, text="b", x=55)
    assert (g.id, g.text, g.x) == (7, "b", 55)
    assert f.text == "a"


def test_store_update_replaces_in_place():
    store = FieldStore()
    store.add(field(1, FieldType.TEXT))
    store.add(field(2, FieldType.SIGNATURE, page=2))
    store.add(field(3, FieldType.DATE))

    store.update(2, image=make_image(2, 2))
    assert [f.id for f in store] == [1, 2, 3]
    assert store.get(2).image is not None
    assert [f.id for f in store.for_page(1)] == [1, 3]


def test_store_errors_and_remove():
    store = FieldStore()
    store.add(field(1, FieldType.TEXT))
    with pytest.raises(ValueError):
        store.add(field(1, FieldType.DATE))
    with pytest.raises(FieldNotFound):
        store.get(5)
    with pytest.raises(KeyError):
        store.update(5, text="x")
    assert store.remove(1) is True
    assert store.remove(1) is False
    assert len(store) == 0


def test_snapshot_is_detached_from_later_edits():
    store = FieldStore()
    store.add(field(1, FieldType.TEXT, text="before"))
    snap = store.snapshot()
    store.update(1, text="after")
    store.add(field(2, FieldType.TEXT))
    assert [f.text for f in snap] == ["before"]


def test_unsigned_signatures_and_request_metadata():
    fields = [
        field(1, FieldType.SIGNATURE),
        field(2, FieldType.SIGNATURE, image=make_image(2, 2)),
        field(3, FieldType.IMAGE),
        field(4, FieldType.TEXT),
    ]
    store = FieldStore()
    for f in fields:
        store.add(f)
    assert [f.id for f in store.unsigned_signature_fields()] == [1]

    request = RenderRequest(source=b"", fields=store.snapshot())
    assert request.field_types == ["signature", "image", "text"]
    assert request.signature_count == 2


def test_from_dict_keeps_field_with_unreadable_image_data():
    f = Field.from_dict({"type": "signature", "imageData": "image/png;base64,AAAA"})
    assert f.type is FieldType.SIGNATURE
    assert f.image is not None
    assert f.image.format is None
    assert f.image.data == b""
