import asyncio
import io

import pytest

from showerconfig_backend.services.catalog_service import DomainError, NotFoundError
from showerconfig_backend.services.upload_service import UploadService, upload_folder


class FakeStorage:
    def __init__(self):
        self.files = {}

    def upload_file(self, file_path, key, content_type="application/octet-stream"):
        with open(file_path, "rb") as f:
            self.files[key] = (f.read(), content_type)

    def delete_file(self, key):
        return self.files.pop(key, None) is not None

    def get_public_url(self, key):
        return f"/storage/{key}"

    def key_from_public_url(self, url):
        return url[len("/storage/"):] if url.startswith("/storage/") else None


def _upload(service, name="porta.PNG", folder="products/doors", existing=None):
    return asyncio.run(service.save_image(io.BytesIO(b"png-bytes"), name, folder, existing))


def test_upload_stores_under_folder_with_content_type():
    storage = FakeStorage()
    output = _upload(UploadService(storage))

    assert output.key.startswith("uploads/products/doors/")
    assert output.key.endswith(".png")
    assert output.image_url == f"/storage/{output.key}"
    assert storage.files[output.key] == (b"png-bytes", "image/png")


def test_upload_replaces_existing_image():
    storage = FakeStorage()
    service = UploadService(storage)
    first = _upload(service)
    second = _upload(service, existing=first.image_url)

    assert list(storage.files) == [second.key]


def test_external_existing_image_is_left_alone():
    storage = FakeStorage()
    output = _upload(UploadService(storage), existing="https://res.cloudinary.com/demo/image/upload/v1/a.png")
    assert list(storage.files) == [output.key]


@pytest.mark.parametrize("name", ["script.svg", "sem-extensao", None])
def test_upload_rejects_unsupported_files(name):
    with pytest.raises(DomainError, match="formato"):
        _upload(UploadService(FakeStorage()), name=name)


@pytest.mark.parametrize("folder", ["", "/", "../etc", "Produtos Novos"])
def test_upload_rejects_bad_folders(folder):
    with pytest.raises(DomainError):
        upload_folder(folder)


def test_upload_folder_normalizes():
    assert upload_folder("/products/Doors/") == "products/doors"


def test_delete_image():
    storage = FakeStorage()
    service = UploadService(storage)
    output = _upload(service)

    asyncio.run(service.delete_image(output.image_url))
    assert storage.files == {}

    with pytest.raises(NotFoundError):
        asyncio.run(service.delete_image(output.image_url))


@pytest.mark.parametrize("url", ["https://images.example.com/a.png", "/storage/previews/1/a.jpg"])
def test_delete_refuses_images_outside_uploads(url):
    with pytest.raises(DomainError, match="storage de uploads"):
        asyncio.run(UploadService(FakeStorage()).delete_image(url))
