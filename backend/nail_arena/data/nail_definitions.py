"""Nail catalog seeded into empty stores, ordered by ``order_index``."""

NAIL_DEFINITIONS = [
    {
        "id": "old_nail",
        "name": "Old Nail",
        "name_ru": "Старый Гвоздь",
        "rarity": "common",
        "base_damage": 10,
        "sell_value": 10,
        "dream_sell_value": 30,
        "order_index": 1,
    },
    {
        "id": "sharpened_nail",
        "name": "Sharpened Nail",
        "name_ru": "Заточенный Гвоздь",
        "rarity": "uncommon",
        "base_damage": 15,
        "sell_value": 25,
        "dream_sell_value": 60,
        "order_index": 2,
    },
    {
        "id": "channelled_nail",
        "name": "Channelled Nail",
        "name_ru": "Направленный Гвоздь",
        "rarity": "rare",
        "base_damage": 20,
        "sell_value": 45,
        "dream_sell_value": 110,
        "order_index": 3,
    },
    {
        "id": "mantis_blade",
        "name": "Mantis Blade",
        "name_ru": "Клинок Богомола",
        "rarity": "rare",
        "base_damage": 24,
        "sell_value": 70,
        "dream_sell_value": 160,
        "order_index": 4,
    },
    {
        "id": "coiled_nail",
        "name": "Coiled Nail",
        "name_ru": "Витой Гвоздь",
        "rarity": "epic",
        "base_damage": 28,
        "sell_value": 110,
        "dream_sell_value": 250,
        "order_index": 5,
    },
    {
        "id": "kingsmould_nail",
        "name": "Kingsmould Nail",
        "name_ru": "Гвоздь Королевской Формы",
        "rarity": "epic",
        "base_damage": 32,
        "sell_value": 160,
        "dream_sell_value": 360,
        "order_index": 6,
    },
    {
        "id": "pure_nail",
        "name": "Pure Nail",
        "name_ru": "Чистый Гвоздь",
        "rarity": "legendary",
        "base_damage": 40,
        "sell_value": 250,
        "dream_sell_value": 600,
        "order_index": 7,
    },
]
