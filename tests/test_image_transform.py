import pytest

from showerconfig_backend.render.image_transform import (
    ImageRef,
    ImageTransformCache,
    adjust_image,
    should_mirror,
    thumbnail_image,
)
from showerconfig_backend.render.plumbing import PlumbingSide

URL = "https://res.cloudinary.com/demo/image/upload/v123/showers/door.png"
FLIPPED = "https://res.cloudinary.com/demo/image/upload/a_hflip/v123/showers/door.png"


@pytest.mark.parametrize(
    "orientation,target,expected",
    [
        (PlumbingSide.LEFT, PlumbingSide.LEFT, False),
        (PlumbingSide.RIGHT, PlumbingSide.LEFT, False),
        (PlumbingSide.BOTH, PlumbingSide.LEFT, False),
        (PlumbingSide.LEFT, PlumbingSide.RIGHT, True),
        (None, PlumbingSide.RIGHT, True),
        (PlumbingSide.RIGHT, PlumbingSide.RIGHT, False),
        (PlumbingSide.BOTH, PlumbingSide.RIGHT, False),
    ],
)
def test_should_mirror(orientation, target, expected):
    assert should_mirror(orientation, target) is expected


def test_left_variant_on_right_side_is_flipped():
    ref = adjust_image(URL, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert ref.url == FLIPPED
    assert ref.source_url == URL
    assert ref.flipped is True
    assert ref.passthrough is False


def test_left_target_leaves_url_untouched():
    ref = adjust_image(URL, PlumbingSide.LEFT, PlumbingSide.LEFT)
    assert ref == ImageRef(url=URL, source_url=URL)


def test_adjusting_twice_never_double_flips():
    once = adjust_image(URL, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    twice = adjust_image(once, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert twice == once
    assert twice.url.count("a_hflip") == 1


def test_flip_already_in_source_counts_as_applied():
    authored = "https://res.cloudinary.com/demo/image/upload/a_hflip/v1/rod.png"
    ref = adjust_image(authored, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert ref.url == authored
    assert ref.url.count("a_hflip") == 1
    assert ref.flipped is False


def test_directives_share_one_segment_after_marker():
    ref = adjust_image(
        URL,
        PlumbingSide.LEFT,
        PlumbingSide.RIGHT,
        width=400,
        height=300,
        quality=80,
        fmt="webp",
    )
    assert ref.url == (
        "https://res.cloudinary.com/demo/image/upload/"
        "a_hflip,q_80,w_400,h_300,c_fill,f_webp/v123/showers/door.png"
    )


def test_width_only_resize():
    ref = adjust_image(URL, PlumbingSide.RIGHT, PlumbingSide.RIGHT, width=400)
    assert ref.url == "https://res.cloudinary.com/demo/image/upload/w_400/v123/showers/door.png"
    assert ref.flipped is False


def test_thumbnail_uses_fill_and_auto():
    ref = thumbnail_image(URL)
    assert ref.url == (
        "https://res.cloudinary.com/demo/image/upload/q_auto,w_200,h_200,c_fill,f_auto/v123/showers/door.png"
    )


@pytest.mark.parametrize(
    "url,reason",
    [
        ("", "empty"),
        ("not a url", "malformed"),
        ("http://[::1/broken.png", "malformed"),
        ("https://images.example.com/door.png", "non_cdn"),
        ("https://res.cloudinary.com/demo/image/fetch/door.png", "no_marker"),
    ],
)
def test_bad_urls_pass_through(url, reason):
    ref = adjust_image(url, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert ref.url == url
    assert ref.passthrough is True
    assert ref.reason == reason
    assert ref.flipped is False


class TestImageTransformCache:
    def test_repeated_lookup_is_memoized(self):
        cache = ImageTransformCache(PlumbingSide.RIGHT)
        first = cache.get_or_adjust(URL, PlumbingSide.LEFT, PlumbingSide.RIGHT)
        second = cache.get_or_adjust(URL, PlumbingSide.LEFT, PlumbingSide.RIGHT)
        assert first is second
        assert len(cache) == 1

    def test_changing_side_invalidates(self):
        cache = ImageTransformCache(PlumbingSide.RIGHT)
        cache.get_or_adjust(URL, PlumbingSide.LEFT, PlumbingSide.RIGHT)
        cache.get_or_adjust("https://res.cloudinary.com/demo/image/upload/v1/b.png", None, PlumbingSide.RIGHT)
        assert len(cache) == 2

        ref = cache.get_or_adjust(URL, PlumbingSide.LEFT, PlumbingSide.LEFT)
        assert len(cache) == 1
        assert cache.target_side is PlumbingSide.LEFT
        assert ref.flipped is False

    def test_clear(self):
        cache = ImageTransformCache()
        cache.get_or_adjust(URL, PlumbingSide.LEFT, PlumbingSide.RIGHT)
        cache.clear()
        assert len(cache) == 0

    def test_key_normalizes_orientation_and_side(self):
        assert ImageTransformCache.key(URL, None, "right") == f"{URL}|LEFT|RIGHT|"
        assert ImageTransformCache.key(URL, "both", "left", width=100) == f"{URL}|BOTH|LEFT|width=100"


def test_mirror_follows_flip_for_cdn_urls():
    ref = adjust_image(URL, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert ref.mirror is True
    assert adjust_image(URL, PlumbingSide.RIGHT, PlumbingSide.RIGHT).mirror is False


def test_non_cdn_url_keeps_mirror_decision():
    ref = adjust_image("https://images.example.com/door.png", PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert ref.passthrough is True
    assert ref.flipped is False
    assert ref.mirror is True

    left = adjust_image("https://images.example.com/door.png", PlumbingSide.LEFT, PlumbingSide.LEFT)
    assert left.mirror is False


def test_flip_in_later_transformation_segment_counts_as_applied():
    authored = "https://res.cloudinary.com/demo/image/upload/q_80/a_hflip/v1/x.png"
    ref = adjust_image(authored, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert ref.url == authored
    assert ref.flipped is False
    assert ref.mirror is False


def test_public_id_named_like_a_directive_is_not_a_flip():
    source = "https://res.cloudinary.com/demo/image/upload/a_hflip"
    ref = adjust_image(source, PlumbingSide.LEFT, PlumbingSide.RIGHT)
    assert ref.flipped is True
    assert ref.url == "https://res.cloudinary.com/demo/image/upload/a_hflip/a_hflip"
