"""Aspect-ratio aware resampling."""

from PIL import Image

from ....common.schemas import ResizeSpec

USER_RESAMPLE = Image.Resampling.LANCZOS
PREVIEW_RESAMPLE = Image.Resampling.BILINEAR


def compute_target_size(
    original_size: tuple[int, int],
    width: int | None,
    height: int | None,
    keep_aspect_ratio: bool,
) -> tuple[int, int] | None:
    """Target size for a request setting at most one side.

    Returns None when both sides are given (handled as box or exact resize)
    or when neither is, meaning the image stays as it is.
    """
    original_width, original_height = original_size

    if width is not None and height is None:
        if keep_aspect_ratio:
            height = round(original_height * width / original_width)
        else:
            height = original_height
    elif height is not None and width is None:
        if keep_aspect_ratio:
            width = round(original_width * height / original_height)
        else:
            width = original_width
    else:
        return None

    return max(1, width), max(1, height)


def fit_within(original_size: tuple[int, int], box: tuple[int, int]) -> tuple[int, int]:
    """Largest size with the original aspect ratio that fits inside ``box``."""
    original_width, original_height = original_size
    box_width, box_height = box
    ratio = min(box_width / original_width, box_height / original_height)
    return (
        max(1, min(box_width, round(original_width * ratio))),
        max(1, min(box_height, round(original_height * ratio))),
    )


def resize_image(image: Image.Image, spec: ResizeSpec) -> Image.Image:
    """Resize ``image`` according to ``spec`` with the Lanczos filter.

    Args:
        image: Decoded image, left untouched
        spec: Target geometry

    Returns:
        The resampled image, or ``image`` itself when ``spec`` sets no size
    """
    if spec.is_noop:
        return image

    if spec.width is not None and spec.height is not None:
        if spec.keep_aspect_ratio:
            target = fit_within(image.size, (spec.width, spec.height))
        else:
            target = (max(1, spec.width), max(1, spec.height))
    else:
        target = compute_target_size(image.size, spec.width, spec.height, spec.keep_aspect_ratio)
        assert target is not None

    return image.resize(target, USER_RESAMPLE)


def scale_image(image: Image.Image, factor: float) -> Image.Image:
    """Cheap proportional downscale used for previews."""
    width = max(1, int(image.width * factor))
    height = max(1, int(image.height * factor))
    return image.resize((width, height), PREVIEW_RESAMPLE)


def fit_image(image: Image.Image, max_side: int) -> Image.Image:
    """Cheap downscale so that both sides fit into ``max_side``."""
    return image.resize(fit_within(image.size, (max_side, max_side)), PREVIEW_RESAMPLE)
