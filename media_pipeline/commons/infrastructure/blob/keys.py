"""Storage key derivation for artifacts generated from a source video."""

import posixpath


def _split_extension(key: str) -> tuple[str, str]:
    """Split the extension off the last path component only."""
    head, name = posixpath.split(key)
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        return key, ""
    return posixpath.join(head, stem) if head else stem, f".{extension}"


def derive_quality_key(base_key: str, quality: str) -> str:
    """Key of a transcoded variant: ``lessons/a.mp4`` -> ``lessons/a_720p.mp4``."""
    stem, extension = _split_extension(base_key)
    return f"{stem}_{quality}{extension}"


def derive_thumbnail_key(video_key: str) -> str:
    """Key of a video's thumbnail: ``lessons/a.mp4`` -> ``lessons/a_thumb.jpg``."""
    stem, _ = _split_extension(video_key)
    return f"{stem}_thumb.jpg"
