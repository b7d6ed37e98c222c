from . import admin, battles, inventory, profile, shop, story, trades

__all__ = ["admin", "battles", "inventory", "profile", "shop", "story", "trades"]
