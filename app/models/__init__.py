from app.models.admin import Admin
from app.models.html_block import HtmlBlock
from app.models.html_block_translation import HtmlBlockTranslation
from app.models.store import Store
from app.models.store_setting import StoreModuleSetting

__all__ = [
    "Admin",
    "HtmlBlock",
    "HtmlBlockTranslation",
    "Store",
    "StoreModuleSetting",
]
