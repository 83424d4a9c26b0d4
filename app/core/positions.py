"""Layout positions that themes render HTML blocks into.

Codes are conventional, not enforced: blocks may be saved under any code and
will still resolve when a template asks for it.
"""

POSITIONS: dict[str, str] = {
    "header_top": "Header Top Banner",
    "header_bottom": "Header Bottom",
    "homepage_top": "Homepage Top",
    "homepage_bottom": "Homepage Bottom",
    "category_top": "Category Page Top",
    "category_bottom": "Category Page Bottom",
    "product_top": "Product Page Top",
    "product_bottom": "Product Page Bottom",
    "sidebar_top": "Sidebar Top",
    "sidebar_bottom": "Sidebar Bottom",
    "footer_top": "Footer Top",
    "footer_left": "Footer Left Column",
    "footer_center": "Footer Center Column",
    "footer_right": "Footer Right Column",
    "footer_bottom": "Footer Bottom",
    "checkout_top": "Checkout Top",
    "cart_bottom": "Cart Page Bottom",
    "custom": "Custom Position",
}


def normalize_position(code: str) -> str:
    return code.strip()
