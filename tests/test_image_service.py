from datetime import datetime, timezone
from io import BytesIO
from typing import List, Optional

import pytest

from pydantic import ValidationError

from app.application.ports.image_repo import ImageDto, FolderRef
from app.application.ports.storage_repo import StoredObject
from app.application.services.image_service import ImageService, SEARCH_LIMIT, placement_id
from app.core.config import ImageUploadConfig
from app.db.models import ImageCreate, ImageRename
from app.exceptions import Conflict, FileTypeError, NotFound, SizeLimitError, UploadFailed, ValidationFailed


class FakeImageRepo:
    def __init__(self):
        self.rows: List[ImageDto] = []
        self.folders = {}
        self._id = 1
        self.search_calls = []

    def list_for_owner(self, owner_id: str, folder_id: Optional[str]) -> List[ImageDto]:
        rows = [r for r in self.rows if r.owner_id == owner_id and r.folder_id == folder_id]
        return sorted(rows, key=lambda r: r.name)

    def search(self, owner_id: str, text: str, limit: int) -> List[ImageDto]:
        self.search_calls.append((owner_id, text, limit))
        rows = [r for r in self.rows if r.owner_id == owner_id and text.lower() in r.name.lower()]
        return sorted(rows, key=lambda r: r.name)[:limit]

    def get_for_owner(self, image_id: str, owner_id: str) -> Optional[ImageDto]:
        return next((r for r in self.rows if r.id == image_id and r.owner_id == owner_id), None)

    def name_taken(self, owner_id, folder_id, name, exclude_id=None) -> bool:
        return any(
            r.owner_id == owner_id and r.folder_id == folder_id and r.name == name and r.id != exclude_id
            for r in self.rows
        )

    def create(self, owner_id, folder_id, name, url, storage_key, size, content_type) -> ImageDto:
        now = datetime.now(timezone.utc)
        rec = ImageDto(
            id=f"img-{self._id}", name=name, url=url, storage_key=storage_key, folder_id=folder_id,
            owner_id=owner_id, size=size, content_type=content_type, created_at=now, updated_at=now,
            folder=self.folders.get(folder_id),
        )
        self._id += 1
        self.rows.append(rec)
        return rec

    def rename(self, image_id: str, name: str) -> ImageDto:
        rec = next(r for r in self.rows if r.id == image_id)
        rec.name = name
        return rec

    def delete(self, image_id: str) -> bool:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.id != image_id]
        return len(self.rows) < before


class FakeFolderRepo:
    def __init__(self):
        self.folders = {}

    def add(self, folder_id: str, owner_id: str, name: str = "Pets", path: str = "/Pets") -> FolderRef:
        ref = FolderRef(id=folder_id, name=name, path=path)
        self.folders[(folder_id, owner_id)] = ref
        return ref

    def get_for_owner(self, folder_id: str, owner_id: str) -> Optional[FolderRef]:
        return self.folders.get((folder_id, owner_id))


class FakeStorage:
    def __init__(self, fail_upload: bool = False, fail_delete: bool = False):
        self.fail_upload = fail_upload
        self.fail_delete = fail_delete
        self.objects = {}
        self.uploads = []
        self.deleted = []

    def upload(self, data: bytes, folder: str, public_id: str, content_type: str) -> StoredObject:
        self.uploads.append((folder, public_id, content_type))
        if self.fail_upload:
            raise RuntimeError("storage down")
        key = f"{folder}/{public_id}"
        self.objects[key] = data
        return StoredObject(url=f"https://cdn.test/{key}", storage_key=key)

    def delete(self, storage_key: str) -> None:
        if self.fail_delete:
            raise RuntimeError("storage down")
        self.deleted.append(storage_key)
        self.objects.pop(storage_key, None)


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, user_id, resource_id=None, success=True, details=None):
        self.entries.append((action, user_id, resource_id))


class DummyUpload:
    def __init__(self, data: bytes = b"imagebytes", content_type: str = "image/png", filename: str = "cat.png"):
        self.filename = filename
        self.content_type = content_type
        self.file = BytesIO(data)


def make_service(storage: Optional[FakeStorage] = None, config: Optional[ImageUploadConfig] = None):
    images = FakeImageRepo()
    folders = FakeFolderRepo()
    svc = ImageService(
        image_repo=images,
        folder_repo=folders,
        storage=storage or FakeStorage(),
        audit=FakeAudit(),
        config=config or ImageUploadConfig(),
        clock=lambda: 1700000000.5,
    )
    return svc, images, folders


def test_list_root_returns_only_unfiled_images():
    svc, images, folders = make_service()
    folders.add("f1", "u1")
    images.create("u1", None, "b.png", "u", "k1", 1, "image/png")
    images.create("u1", None, "a.png", "u", "k2", 1, "image/png")
    images.create("u1", "f1", "c.png", "u", "k3", 1, "image/png")
    images.create("u2", None, "d.png", "u", "k4", 1, "image/png")

    out = svc.list_images("u1")
    assert [i.name for i in out] == ["a.png", "b.png"]


def test_list_folder_requires_owned_folder():
    svc, images, folders = make_service()
    folders.add("f1", "u1")
    images.create("u1", "f1", "c.png", "u", "k3", 1, "image/png")

    assert [i.name for i in svc.list_images("u1", "f1")] == ["c.png"]
    with pytest.raises(NotFound) as exc:
        svc.list_images("u2", "f1")
    assert exc.value.detail == "Folder not found"


def test_search_blank_query_skips_repository():
    svc, images, _ = make_service()
    assert svc.search_images("u1", "   ") == []
    assert svc.search_images("u1", None) == []
    assert images.search_calls == []


def test_search_trims_and_caps_results():
    svc, images, _ = make_service()
    for n in range(60):
        images.create("u1", None, f"Cat-{n:02d}.png", "u", f"k{n}", 1, "image/png")

    out = svc.search_images("u1", "  cat ")
    assert images.search_calls == [("u1", "cat", SEARCH_LIMIT)]
    assert len(out) == 50
    assert [i.name for i in out] == sorted(i.name for i in out)


@pytest.mark.parametrize(
    "name,folder_id,upload,message",
    [
        (None, "f1", DummyUpload(), "Image name is required"),
        ("   ", "f1", DummyUpload(), "Image name is required"),
        ("cat.png", None, DummyUpload(), "Folder ID is required"),
        ("cat.png", "f1", None, "Image file is required"),
    ],
)
def test_upload_validation_order(name, folder_id, upload, message):
    svc, _, folders = make_service()
    folders.add("f1", "u1")
    with pytest.raises(ValidationFailed) as exc:
        svc.upload_image("u1", name, folder_id, upload)
    assert exc.value.status_code == 400
    assert exc.value.detail == message


def test_upload_foreign_folder_is_not_found():
    svc, _, folders = make_service()
    folders.add("f1", "someone-else")
    with pytest.raises(NotFound) as exc:
        svc.upload_image("u1", "cat.png", "f1", DummyUpload())
    assert exc.value.detail == "Folder not found"


def test_upload_duplicate_trimmed_name_conflicts():
    svc, images, folders = make_service()
    folders.add("f1", "u1")
    images.create("u1", "f1", "cat.png", "u", "k", 1, "image/png")
    with pytest.raises(Conflict) as exc:
        svc.upload_image("u1", "  cat.png  ", "f1", DummyUpload())
    assert exc.value.status_code == 400
    assert exc.value.detail == "Image with this name already exists in the folder"


def test_upload_stores_object_and_persists_record():
    svc, images, folders = make_service()
    folders.add("f1", "u1")
    images.folders["f1"] = FolderRef(id="f1", name="Pets", path="/Pets")

    out = svc.upload_image("u1", " my cat!.png ", "f1", DummyUpload(b"12345"))

    assert out.name == "my cat!.png"
    assert out.size == 5
    assert out.content_type == "image/png"
    assert out.folder.name == "Pets"
    assert out.storage_key == "users/u1/images/f1_1700000000500_my_cat__png"
    assert svc.storage.uploads == [("users/u1/images", "f1_1700000000500_my_cat__png", "image/png")]
    assert svc.audit.entries[-1][0] == "image_upload"


def test_upload_storage_failure_persists_nothing():
    svc, images, folders = make_service(FakeStorage(fail_upload=True))
    folders.add("f1", "u1")
    with pytest.raises(UploadFailed) as exc:
        svc.upload_image("u1", "cat.png", "f1", DummyUpload())
    assert exc.value.status_code == 500
    assert images.rows == []


def test_upload_persistence_failure_discards_stored_object():
    svc, images, folders = make_service()
    folders.add("f1", "u1")

    def broken_create(**kwargs):
        raise RuntimeError("db down")

    images.create = broken_create
    with pytest.raises(RuntimeError):
        svc.upload_image("u1", "cat.png", "f1", DummyUpload())
    assert svc.storage.objects == {}


def test_upload_invalid_row_is_reported_as_single_message():
    svc, images, folders = make_service()
    folders.add("f1", "u1")

    with pytest.raises(ValidationError) as captured:
        ImageCreate.model_validate({
            "name": "", "url": "u", "storage_key": "k", "owner_id": "u1", "size": -1, "content_type": "image/png",
        })
    assert len(captured.value.errors()) == 2

    def invalid_create(**kwargs):
        raise captured.value

    images.create = invalid_create
    with pytest.raises(ValidationFailed) as exc:
        svc.upload_image("u1", "cat.png", "f1", DummyUpload())
    assert exc.value.status_code == 400
    assert exc.value.detail == ", ".join(e["msg"] for e in captured.value.errors())
    assert svc.storage.objects == {}
    assert svc.storage.deleted == ["users/u1/images/f1_1700000000500_cat_png"]


@pytest.mark.parametrize(
    "upload,error",
    [
        (DummyUpload(b"1234"), SizeLimitError),
        (DummyUpload(b"12", content_type="application/pdf"), FileTypeError),
    ],
)
def test_upload_rechecks_type_and_size(upload, error):
    svc, images, folders = make_service(config=ImageUploadConfig(max_file_size=3))
    folders.add("f1", "u1")
    with pytest.raises(error) as exc:
        svc.upload_image("u1", "cat.png", "f1", upload)
    assert exc.value.status_code == 400
    assert svc.storage.uploads == []
    assert images.rows == []


def test_placement_id_replaces_non_alphanumerics():
    assert placement_id("f1", " a-b c.jpg ", 42) == "f1_42_a_b_c_jpg"


def test_rename_to_own_name_is_not_a_conflict():
    svc, images, _ = make_service()
    img = images.create("u1", "f1", "cat.png", "u", "k", 1, "image/png")
    out = svc.rename_image("u1", img.id, " cat.png ")
    assert out.name == "cat.png"


def test_rename_conflicts_with_sibling_only():
    svc, images, _ = make_service()
    img = images.create("u1", "f1", "cat.png", "u", "k1", 1, "image/png")
    images.create("u1", "f1", "dog.png", "u", "k2", 1, "image/png")
    images.create("u1", "f2", "bird.png", "u", "k3", 1, "image/png")

    with pytest.raises(Conflict):
        svc.rename_image("u1", img.id, "dog.png")
    assert svc.rename_image("u1", img.id, "bird.png").name == "bird.png"
    assert img.folder_id == "f1"


def test_rename_requires_name_and_owned_image():
    svc, images, _ = make_service()
    img = images.create("u1", "f1", "cat.png", "u", "k1", 1, "image/png")
    with pytest.raises(ValidationFailed):
        svc.rename_image("u1", img.id, "")
    with pytest.raises(NotFound) as exc:
        svc.rename_image("u2", img.id, "dog.png")
    assert exc.value.detail == "Image not found"


def test_rename_invalid_name_is_validation_failure():
    svc, images, _ = make_service()
    img = images.create("u1", "f1", "cat.png", "u", "k1", 1, "image/png")

    def checked_rename(image_id, name):
        ImageRename.model_validate({"name": name})
        return FakeImageRepo.rename(images, image_id, name)

    images.rename = checked_rename
    with pytest.raises(ValidationFailed) as exc:
        svc.rename_image("u1", img.id, "x" * 256)
    assert exc.value.status_code == 400
    assert exc.value.detail == "String should have at most 255 characters"
    assert img.name == "cat.png"


def test_delete_removes_record_and_object():
    svc, images, _ = make_service()
    img = images.create("u1", "f1", "cat.png", "u", "users/u1/images/k1", 1, "image/png")
    assert svc.delete_image("u1", img.id) == "Image deleted successfully"
    assert images.rows == []
    assert svc.storage.deleted == ["users/u1/images/k1"]


def test_delete_survives_storage_failure():
    svc, images, _ = make_service(FakeStorage(fail_delete=True))
    img = images.create("u1", "f1", "cat.png", "u", "k1", 1, "image/png")
    assert svc.delete_image("u1", img.id) == "Image deleted successfully"
    assert images.rows == []


def test_delete_foreign_image_is_not_found():
    svc, images, _ = make_service()
    img = images.create("u1", "f1", "cat.png", "u", "k1", 1, "image/png")
    with pytest.raises(NotFound):
        svc.delete_image("u2", img.id)
    assert len(images.rows) == 1
