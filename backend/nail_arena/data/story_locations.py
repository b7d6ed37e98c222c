"""Story graph: locations, their narrative text and outgoing choices."""

STORY_LOCATIONS = [
    {
        "id": "awakening",
        "title_en": "Awakening",
        "title_ru": "Пробуждение",
        "description_en": (
            "You wake in a cave where stones whisper. Your body trembles, and in your "
            "hand is a nail, covered in dust. Every echo in the darkness calls you deeper."
        ),
        "choices": [
            {"icon": "⚔️", "text_en": "Enter Forgotten Crossroads", "action": "navigate", "target": "crossroads"},
        ],
    },
    {
        "id": "crossroads",
        "title_en": "Forgotten Crossroads",
        "title_ru": "Забытые Перекрестки",
        "description_en": (
            "Stone arches, full of echoing footsteps. Somewhere far away you hear strikes, "
            "like someone is training. The nail wants blood."
        ),
        "choices": [
            {
                "icon": "🌿",
                "text_en": "Go to the green light",
                "action": "combat",
                "target": "greenpath",
                "combat_difficulty": 2,
                "soul_reward": 10,
            },
            {
                "icon": "🕳",
                "text_en": "Descend deeper",
                "action": "combat",
                "target": "crossroads",
                "combat_difficulty": 3,
                "soul_reward": 15,
            },
            {
                "icon": "⚒",
                "text_en": "Pass through broken gates",
                "action": "boss",
                "target": "arena_false",
                "boss_id": "false_knight",
                "combat_difficulty": 3,
            },
        ],
    },
    {
        "id": "arena_false",
        "title_en": "Arena of the False",
        "title_ru": "Арена Ложного",
        "description_en": (
            "Under a dome of stone you hear footsteps. The armor comes to life, as if the "
            "rumble of the earth itself lives inside it."
        ),
        "choices": [
            {"icon": "⬅", "text_en": "Return to Crossroads", "action": "navigate", "target": "crossroads"},
            {"icon": "🌿", "text_en": "To Greenpath", "action": "navigate", "target": "greenpath"},
        ],
    },
    {
        "id": "greenpath",
        "title_en": "Greenpath",
        "title_ru": "Зеленый Путь",
        "description_en": (
            "Everything around is alive. Vines move from your breath, and in the distance "
            "someone sings a melody of leaves and wind."
        ),
        "choices": [
            {
                "icon": "🌸",
                "text_en": "Descend to the station",
                "action": "combat",
                "target": "queens_station",
                "combat_difficulty": 2,
                "soul_reward": 12,
            },
            {
                "icon": "🕸",
                "text_en": "Make your way through the thickets",
                "action": "boss",
                "target": "trial_hornet",
                "boss_id": "hornet",
                "combat_difficulty": 3,
            },
        ],
    },
    {
        "id": "trial_hornet",
        "title_en": "Trial of Hornet",
        "title_ru": "Испытание Хорнет",
        "description_en": (
            "You enter an arena of vines and thorns. She is already waiting. "
            "\"Battle is a conversation without words,\" she whispers."
        ),
        "choices": [
            {"icon": "⬆", "text_en": "Return to Greenpath", "action": "navigate", "target": "greenpath"},
            {"icon": "🌸", "text_en": "To Queen's Station", "action": "navigate", "target": "queens_station"},
        ],
    },
    {
        "id": "queens_station",
        "title_en": "Queen's Station",
        "title_ru": "Станция Королевы",
        "description_en": (
            "There is nobody here. Only drops and the rustle of spores. You feel peace, "
            "but the air is too thick."
        ),
        "choices": [
            {
                "icon": "🍄",
                "text_en": "Go to the fungal wastes",
                "action": "combat",
                "target": "fungal_wastes",
                "combat_difficulty": 3,
                "soul_reward": 18,
            },
            {
                "icon": "🕳",
                "text_en": "Descend into the depths",
                "action": "combat",
                "target": "deepnest",
                "combat_difficulty": 4,
                "soul_reward": 20,
                "requires_boss": "hornet",
            },
        ],
    },
    {
        "id": "fungal_wastes",
        "title_en": "Fungal Wastes",
        "title_ru": "Грибные Пустоши",
        "description_en": "The air is sweet, like a dream. You walk on soft soil, hearing the pops of spores.",
        "choices": [
            {
                "icon": "⚒",
                "text_en": "Enter the spore temple",
                "action": "boss",
                "target": "mantis_arena",
                "boss_id": "mantis_lords",
                "combat_difficulty": 4,
                "requires_boss": "hornet",
            },
            {
                "icon": "💧",
                "text_en": "Open the lift to City of Tears",
                "action": "combat",
                "target": "city_tears",
                "combat_difficulty": 4,
                "soul_reward": 15,
            },
        ],
    },
    {
        "id": "mantis_arena",
        "title_en": "Mantis Arena",
        "title_ru": "Арена Богомолов",
        "description_en": "You stand among spore columns. Three silhouettes bow in unison and attack.",
        "choices": [
            {"icon": "⬆", "text_en": "Return to Queen's Station", "action": "navigate", "target": "queens_station"},
            {"icon": "💧", "text_en": "Descend to City of Tears", "action": "navigate", "target": "city_tears"},
        ],
    },
    {
        "id": "city_tears",
        "title_en": "City of Tears",
        "title_ru": "Город Слёз",
        "description_en": (
            "The sky cries. You walk across bridges where every drop sounds like the step "
            "of someone invisible."
        ),
        "choices": [
            {
                "icon": "⚒",
                "text_en": "Enter the mage tower",
                "action": "boss",
                "target": "soul_sanctum",
                "boss_id": "soul_master",
                "combat_difficulty": 4,
            },
            {
                "icon": "⬇",
                "text_en": "Descend into the channel",
                "action": "combat",
                "target": "ancient_basin",
                "combat_difficulty": 4,
                "soul_reward": 25,
            },
        ],
    },
    {
        "id": "soul_sanctum",
        "title_en": "Soul Sanctum",
        "title_ru": "Святилище Душ",
        "description_en": "The hall is full of whispers. Sparks dance. Mages strike quickly, but chaotically.",
        "choices": [
            {"icon": "⬇", "text_en": "Descend to Ancient Basin", "action": "navigate", "target": "ancient_basin"},
        ],
    },
    {
        "id": "ancient_basin",
        "title_en": "Ancient Basin",
        "title_ru": "Древний Бассейн",
        "description_en": "You stand on the edge of a mirror. The air is cold, but inside everything boils.",
        "choices": [
            {
                "icon": "⚒",
                "text_en": "Enter the hall of the dead vessel",
                "action": "boss",
                "target": "broken_vessel",
                "boss_id": "broken_vessel",
                "combat_difficulty": 5,
            },
            {
                "icon": "⚫",
                "text_en": "Descend into the abyss",
                "action": "navigate",
                "target": "abyss",
                "requires_boss": "broken_vessel",
            },
        ],
    },
    {
        "id": "broken_vessel",
        "title_en": "Broken Vessel",
        "title_ru": "Разбитый Сосуд",
        "description_en": "Before you is a reflection, empty but alive. It attacks as if it wants to die.",
        "choices": [
            {"icon": "⚫", "text_en": "Descend to Abyss", "action": "navigate", "target": "abyss"},
            {"icon": "⬆", "text_en": "Return to City of Tears", "action": "navigate", "target": "city_tears"},
        ],
    },
    {
        "id": "abyss",
        "title_en": "The Abyss",
        "title_ru": "Бездна",
        "description_en": "Darkness is dense, like water. You see many of yourself, and all of them want to kill you.",
        "choices": [
            {"icon": "⬆", "text_en": "Return to Basin", "action": "navigate", "target": "ancient_basin"},
            {"icon": "⚒", "text_en": "Go to The Black Egg Temple", "action": "navigate", "target": "black_egg"},
        ],
    },
    {
        "id": "black_egg",
        "title_en": "The Black Egg Temple",
        "title_ru": "Храм Чёрного Яйца",
        "description_en": (
            "You enter a hall where the air rings like metal. The vessel stands in the "
            "middle, motionless, but alive."
        ),
        "choices": [
            {
                "icon": "⚔️",
                "text_en": "Fight the Hollow Knight",
                "action": "boss",
                "target": "black_egg",
                "boss_id": "hollow_knight",
                "combat_difficulty": 5,
            },
        ],
    },
    {
        "id": "deepnest",
        "title_en": "Deepnest",
        "title_ru": "Глубокое Гнездо",
        "description_en": "Web and darkness. Something crawls nearby.",
        "choices": [
            {"icon": "⬆", "text_en": "Return to Queen's Station", "action": "navigate", "target": "queens_station"},
        ],
    },
]

BOSS_NAMES = {
    "false_knight": "False Knight",
    "hornet": "Hornet",
    "mantis_lords": "Mantis Lords",
    "soul_master": "Soul Master",
    "broken_vessel": "Broken Vessel",
    "hollow_knight": "Hollow Knight",
}
