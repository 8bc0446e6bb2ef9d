from enum import Enum


class Category(str, Enum):
    """Closed set of upload categories"""
    IMAGES = "images"
    VIDEOS = "videos"
    DOCUMENTS = "documents"
    ARCHIVES = "archives"
    AUDIOS = "audios"
    OTHERS = "others"


class CloudProvider(str, Enum):
    CLOUDFLARE_R2 = "cloudflare-r2"


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"
