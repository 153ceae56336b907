"""CSS selectors describing where fields live on the delivery site."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SiteSelectors:
    """Selector paths for one site layout.

    The listing and detail extractors only read these; swap in another
    instance to crawl a site with different markup.
    """

    # --- Listing page ---------------------------------------------------------
    listing_card: str = "section#listing-container > article"
    card_image: str = ".item-pic > img"
    card_link: str = ".item-pic > a"
    card_title: str = ".item-title > a"
    card_rating: str = ".item-title > span.item-star-rating"
    card_rating_attr: str = "data-rating"
    card_cuisine: str = ".item-meta > .item-address"
    # Delivery time is the last child element of the first match
    card_delivery_time: str = ".item-meta .row-fluid .span4"

    # --- Detail page ----------------------------------------------------------
    menu_category: str = ".tab-pane.mspan7-menu"
    category_label: str = "h4"
    menu_item: str = ".menu-item"
    item_name: str = ".menu-item-name"
    item_description: str = ".menu-item-name > small"
    serving: str = ".menu-subitems > .menu-subitem"
    serving_kind: str = ".subitem-name"
    serving_hidden_price: str = "input[type=hidden]#ItemPrice"
    serving_price_text: str = ".subitem-price > span"


DEFAULT_SELECTORS = SiteSelectors()
