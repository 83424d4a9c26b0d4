import sys
from pathlib import Path

from sqlalchemy import delete, select

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.db.session import session_scope
from app.models.html_block import HtmlBlock
from app.models.html_block_translation import HtmlBlockTranslation
from app.models.store import Store

DEMO_STORES = ("main", "outlet")
DEMO_TITLE_PREFIX = "[DEMO]"

# (store code or None for global, position, sort order, {locale: html})
DEMO_BLOCKS = [
    (None, "header_top", 0, {"en": "<div class=\"promo\">Free shipping over 50</div>", "de": "<div class=\"promo\">Gratisversand ab 50</div>"}),
    (None, "footer_left", 5, {"en": "<p>About us</p>", "de": "<p>Über uns</p>"}),
    (None, "footer_left", 10, {"en": "<p>Contact</p>", "de": "<p>Kontakt</p>"}),
    ("outlet", "header_top", 1, {"en": "<div class=\"promo\">Outlet prices, final sale</div>"}),
    ("main", "sidebar_top", 0, {"en": "<aside>New arrivals every Monday</aside>"}),
]


def main() -> None:
    with session_scope() as db:
        stores: dict[str, Store] = {}
        for code in DEMO_STORES:
            store = db.scalar(select(Store).where(Store.code == code))
            if store is None:
                store = Store(code=code)
                db.add(store)
            stores[code] = store
        db.flush()

        demo_ids = db.scalars(
            select(HtmlBlockTranslation.html_block_id).where(HtmlBlockTranslation.title.like(f"{DEMO_TITLE_PREFIX}%"))
        ).all()
        if demo_ids:
            db.execute(delete(HtmlBlockTranslation).where(HtmlBlockTranslation.html_block_id.in_(demo_ids)))
            db.execute(delete(HtmlBlock).where(HtmlBlock.id.in_(demo_ids)))

        for store_code, position, sort_order, contents in DEMO_BLOCKS:
            block = HtmlBlock(
                store_id=stores[store_code].id if store_code else None,
                code=position,
                sort_order=sort_order,
                is_active=True,
            )
            for locale, html in contents.items():
                translation = block.translate_or_new(locale)
                translation.title = f"{DEMO_TITLE_PREFIX} {position}"
                translation.content = html
            db.add(block)
    print(f"Seeded {len(DEMO_BLOCKS)} demo HTML blocks across {len(DEMO_STORES)} stores.")


if __name__ == "__main__":
    main()
