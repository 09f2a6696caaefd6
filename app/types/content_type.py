from enum import Enum


class ContentType(str, Enum):
    """
    Accepted `content_type` for school images, the name is used as the file extension
    """

    jpg = "image/jpeg"
    png = "image/png"
    webp = "image/webp"
    gif = "image/gif"
    avif = "image/avif"
    svg = "image/svg+xml"
