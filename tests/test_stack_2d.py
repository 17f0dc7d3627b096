import pytest
from PIL import Image

from showerconfig_backend.render.image_transform import ImageRef, adjust_image
from showerconfig_backend.render.layer_compositor import OrderedLayer
from showerconfig_backend.render.plumbing import PlumbingSide
from showerconfig_backend.render.stack_2d import preview_key, render_layers

RED = (255, 0, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def images(tmp_path):
    base_path = tmp_path / "base.png"
    Image.new("RGBA", (4, 2), RED + (255,)).save(base_path)

    # metade esquerda azul opaca, direita transparente
    overlay = Image.new("RGBA", (4, 2), (0, 0, 0, 0))
    for x in range(2):
        for y in range(2):
            overlay.putpixel((x, y), BLUE + (255,))
    overlay_path = tmp_path / "overlay.png"
    overlay.save(overlay_path)
    return base_path, overlay_path


def _layers(base_path, overlay_path, mirror=False):
    return [
        OrderedLayer(image=ImageRef.of(str(base_path)), z_index=0.0, is_base=True),
        OrderedLayer(
            image=ImageRef(url=str(overlay_path), source_url=str(overlay_path), mirror=mirror),
            z_index=50.01,
            key="category-1",
            product_id=1,
        ),
    ]


def test_composites_overlay_over_base(images):
    base_path, overlay_path = images
    result = render_layers(_layers(base_path, overlay_path))
    assert result.mode == "RGB"
    assert result.getpixel((0, 0)) == BLUE
    assert result.getpixel((3, 0)) == RED


def test_mirrored_layer_is_flipped_locally(images):
    base_path, overlay_path = images
    result = render_layers(_layers(base_path, overlay_path, mirror=True))
    assert result.getpixel((0, 0)) == RED
    assert result.getpixel((3, 0)) == BLUE


def test_missing_overlay_is_skipped(images, tmp_path):
    base_path, _ = images
    result = render_layers(_layers(base_path, tmp_path / "missing.png"))
    assert result.getpixel((0, 0)) == RED


def test_missing_base_raises(images, tmp_path):
    _, overlay_path = images
    with pytest.raises(FileNotFoundError):
        render_layers(_layers(tmp_path / "missing.png", overlay_path))
    with pytest.raises(FileNotFoundError):
        render_layers(_layers(tmp_path / "missing.png", overlay_path)[1:])


def test_saves_jpeg_when_output_path_given(images, tmp_path):
    base_path, overlay_path = images
    output = tmp_path / "preview.jpg"
    render_layers(_layers(base_path, overlay_path), output_path=output, size=(8, 4))
    with Image.open(output) as saved:
        assert saved.format == "JPEG"
        assert saved.size == (8, 4)


def test_preview_key_tracks_mirror(images):
    base_path, overlay_path = images
    plain = preview_key(_layers(base_path, overlay_path))
    assert plain == preview_key(_layers(base_path, overlay_path))
    assert plain != preview_key(_layers(base_path, overlay_path, mirror=True))
    assert len(plain) == 16


def test_unreadable_overlay_is_skipped(images, tmp_path):
    base_path, _ = images
    corrupt = tmp_path / "corrupt.png"
    corrupt.write_bytes(b"<html>not an image</html>")

    result = render_layers(_layers(base_path, corrupt))
    assert result.getpixel((0, 0)) == RED
    assert result.getpixel((3, 0)) == RED


def test_unreadable_base_raises_file_not_found(images, tmp_path):
    _, overlay_path = images
    corrupt = tmp_path / "corrupt.png"
    corrupt.write_bytes(b"<html>not an image</html>")

    with pytest.raises(FileNotFoundError):
        render_layers(_layers(corrupt, overlay_path))


def test_non_cdn_layer_for_right_side_is_mirrored(images):
    base_path, overlay_path = images
    image = adjust_image(str(overlay_path), PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert image.passthrough is True
    assert image.mirror is True

    layers = [
        OrderedLayer(image=ImageRef.of(str(base_path)), z_index=0.0, is_base=True),
        OrderedLayer(image=image, z_index=50.01, key="category-1", product_id=1),
    ]
    result = render_layers(layers)
    assert result.getpixel((0, 0)) == RED
    assert result.getpixel((3, 0)) == BLUE
