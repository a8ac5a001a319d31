"""IGDB image URL helpers.

IGDB returns protocol-relative, thumbnail-sized image URLs such as
`//images.igdb.com/igdb/image/upload/t_thumb/abc.jpg`, unsuitable for direct
display on the generated page.
"""

THUMBNAIL_SIZE = "t_thumb"
COVER_SIZE = "t_cover_med"


def normalize_image_url(url: str, size: str = COVER_SIZE) -> str:
    """Rewrites an image URL to the given size token with an https scheme.

    Idempotent: an already normalized URL is returned unchanged.
    """
    normalized = url.replace(f"/{THUMBNAIL_SIZE}/", f"/{size}/")
    if normalized.startswith("//"):
        normalized = f"https:{normalized}"
    return normalized
