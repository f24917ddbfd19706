"""
image_cropper.py
----------------
Pan/zoom crop math for gallery uploads plus the Pillow export.

Coordinates are in frame pixels: the frame is the visible crop window and the
image is drawn at (tx, ty) with a uniform scale. The image must always cover
the frame, so the smallest allowed scale is the "cover" scale and translation
is clamped so no gap shows at any edge. Zoom never exceeds 4x cover.

The same state the client uses while the user drags and pinches is posted
with the upload, and export_crop() renders exactly that window.
"""

import math
import os
from dataclasses import dataclass, replace
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

MAX_ZOOM = 4.0
DOUBLE_TAP_STEPS = (2.0, 3.5)

FEED_WIDTH = 1080
FEED_QUALITY = 85
THUMB_WIDTH = 320
THUMB_QUALITY = 80

# width / height
ASPECTS = {
    "square": 1.0,
    "portrait": 4 / 5,
    "landscape": 16 / 9,
}


class CropError(ValueError):
    """Unreadable image or crop parameters that cannot be applied."""


@dataclass(frozen=True)
class CropState:
    image_w: float
    image_h: float
    frame_w: float
    frame_h: float
    scale: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def __post_init__(self):
        for name in ("image_w", "image_h", "frame_w", "frame_h", "scale"):
            value = getattr(self, name)
            if not (isinstance(value, (int, float)) and math.isfinite(value) and value > 0):
                raise CropError(f"{name} must be a positive number.")

    @property
    def min_scale(self):
        return cover_scale(self.image_w, self.image_h, self.frame_w, self.frame_h)

    @property
    def max_scale(self):
        return self.min_scale * MAX_ZOOM


def cover_scale(image_w, image_h, frame_w, frame_h):
    """Smallest scale at which the image fills the frame."""
    return max(frame_w / image_w, frame_h / image_h)


def fit_to_cover(image_w, image_h, frame_w, frame_h) -> CropState:
    """Initial state: cover scale, image centred in the frame."""
    scale = cover_scale(image_w, image_h, frame_w, frame_h)
    return CropState(
        image_w=image_w,
        image_h=image_h,
        frame_w=frame_w,
        frame_h=frame_h,
        scale=scale,
        tx=(frame_w - image_w * scale) / 2,
        ty=(frame_h - image_h * scale) / 2,
    )


def _clamp(value, low, high):
    return min(max(value, low), high)


def clamp_translate(state: CropState, tx, ty) -> CropState:
    img_w = state.image_w * state.scale
    img_h = state.image_h * state.scale
    min_x, max_x = min(0, state.frame_w - img_w), max(0, state.frame_w - img_w)
    min_y, max_y = min(0, state.frame_h - img_h), max(0, state.frame_h - img_h)
    return replace(state, tx=_clamp(tx, min_x, max_x), ty=_clamp(ty, min_y, max_y))


def state_from_client(image_w, image_h, frame_w, frame_h, scale, tx=0.0, ty=0.0) -> CropState:
    """Rebuild a posted cropper state, pulling scale and offsets back into range."""
    state = CropState(image_w, image_h, frame_w, frame_h, scale=scale)
    state = replace(state, scale=_clamp(scale, state.min_scale, state.max_scale))
    return clamp_translate(state, tx, ty)


def pan(state: CropState, dx, dy) -> CropState:
    return clamp_translate(state, state.tx + dx, state.ty + dy)


def zoom_to(state: CropState, x, y, target_scale) -> CropState:
    """
    Scale to target_scale keeping the image point under (x, y) fixed.
    (x, y) is relative to the frame's top-left corner.
    """
    new_scale = _clamp(target_scale, state.min_scale, state.max_scale)
    k = new_scale / state.scale
    tx = x - (x - state.tx) * k
    ty = y - (y - state.ty) * k
    return clamp_translate(replace(state, scale=new_scale), tx, ty)


def zoom_at(state: CropState, x, y, factor) -> CropState:
    if factor <= 0:
        raise CropError("Zoom factor must be positive.")
    return zoom_to(state, x, y, state.scale * factor)


def pinch(state: CropState, start_distance, current_distance, cx, cy) -> CropState:
    """Two-finger zoom around the pinch centre by the distance ratio."""
    if start_distance <= 0:
        return state
    return zoom_at(state, cx, cy, current_distance / start_distance)


def double_tap_target(state: CropState) -> float:
    """Next scale in the 2x -> 3.5x -> cover cycle (relative to cover)."""
    for step in DOUBLE_TAP_STEPS:
        target = state.min_scale * step
        if state.scale < target - 0.01:
            return min(target, state.max_scale)
    return state.min_scale


def double_tap(state: CropState, x, y) -> CropState:
    return zoom_to(state, x, y, double_tap_target(state))


def source_rect(state: CropState, image_w=None, image_h=None):
    """
    Visible region in source image pixels as (left, top, right, bottom).
    image_w/image_h default to the state's image size.
    """
    image_w = state.image_w if image_w is None else image_w
    image_h = state.image_h if image_h is None else image_h
    sx = max(0.0, -state.tx / state.scale)
    sy = max(0.0, -state.ty / state.scale)
    sw = min(image_w - sx, state.frame_w / state.scale)
    sh = min(image_h - sy, state.frame_h / state.scale)
    if sw <= 0 or sh <= 0:
        raise CropError("Crop window lies outside the image.")
    return (sx, sy, sx + sw, sy + sh)


# -------------------- Pillow export --------------------
def open_image(fp) -> Image.Image:
    """Open an upload, apply EXIF orientation and normalise to RGB."""
    try:
        image = Image.open(fp)
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise CropError("Upload is not a readable image.") from e
    image = ImageOps.exif_transpose(image)
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def _to_jpeg(image: Image.Image, quality) -> bytes:
    buf = BytesIO()
    image.save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def export_crop(image: Image.Image, state: CropState, target_w=FEED_WIDTH, target_h=None, quality=FEED_QUALITY) -> bytes:
    """Render the visible crop window to a target_w-wide JPEG with the frame's aspect."""
    if target_h is None:
        target_h = round(target_w * state.frame_h / state.frame_w)
    box = source_rect(state, image.width, image.height)
    out = image.resize((int(target_w), int(target_h)), Image.LANCZOS, box=box)
    return _to_jpeg(out, quality)


def render_thumb(feed_bytes: bytes, thumb_w=THUMB_WIDTH, quality=THUMB_QUALITY) -> bytes:
    """Thumbnail rendered from the exported feed so both show the same crop."""
    with Image.open(BytesIO(feed_bytes)) as feed:
        thumb_h = max(1, round(thumb_w * feed.height / feed.width))
        thumb = feed.convert("RGB").resize((thumb_w, thumb_h), Image.LANCZOS)
    return _to_jpeg(thumb, quality)


def export_feed_and_thumb(image: Image.Image, state: CropState):
    feed = export_crop(image, state)
    return feed, render_thumb(feed)


def generate_feed_and_thumb(image: Image.Image, feed_max_width=FEED_WIDTH, thumb_width=THUMB_WIDTH):
    """Uncropped upload: downscale (never upscale) keeping the aspect ratio."""
    feed = image
    if image.width > feed_max_width:
        feed_h = max(1, round(image.height * feed_max_width / image.width))
        feed = image.resize((feed_max_width, feed_h), Image.LANCZOS)
    feed_bytes = _to_jpeg(feed, FEED_QUALITY)
    return feed_bytes, render_thumb(feed_bytes, thumb_w=min(thumb_width, feed.width))


# -------------------- Variant naming --------------------
def nearest_aspect(width, height) -> str:
    ratio = width / height
    return min(ASPECTS, key=lambda key: abs(ASPECTS[key] - ratio))


def make_variant_name(base_name: str, aspect: str, variant: str) -> str:
    """'IMG_01.png', 'square', 'feed' -> 'IMG_01_square_feed.png'"""
    name, ext = os.path.splitext(base_name)
    return f"{name}_{aspect}_{variant}{ext or '.jpg'}"


def detect_aspect_from_name(name: str):
    lower = (name or "").lower()
    for aspect in ASPECTS:
        if f"_{aspect}_" in lower:
            return aspect
    return None


def thumb_name_from_feed(name: str) -> str:
    if "_feed" in name:
        return name.replace("_feed", "_thumb", 1)
    return name
