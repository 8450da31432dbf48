# tests/sample_menus.py
"""Menu payloads in the layouts the app has stored over time."""

OMELETTE_ID = "7b3f0c2a-1d4e-4f6a-9b8c-0a1b2c3d4e5f"
SOUP_ID = "c0ffee00-aaaa-4bbb-8ccc-123456789abc"
UNKNOWN_ID = "00000000-0000-4000-8000-000000000000"

# Menus saved by the menu editor: slot -> dish id, with a dish snapshot.
EDITOR_MENU = {
    "id": "menu-1",
    "title": "Spring reset",
    "goal": "fat_loss",
    "daysCount": 2,
    "days": [
        {"index": 1, "label": "Tuesday", "meals": {"breakfast": OMELETTE_ID, "lunch": SOUP_ID, "dinner": None}},
        {"index": 0, "label": "Monday", "meals": {"breakfast": OMELETTE_ID, "lunch": "", "snack": "Apple"}},
    ],
}

SNAPSHOT_MENU = {
    **EDITOR_MENU,
    "dishIndex": {
        OMELETTE_ID: {"title": "Omelette", "ingredients": [{"name": "eggs", "amount": "2 pcs"}], "macros": {"calories": 250}},
        SOUP_ID: {"title": "Lentil soup", "instructions": "Rinse lentils\nSimmer 20 min"},
    },
}

# Generated plans: a list of days with meal lists and inline dishes.
GENERATED_PLAN = {
    "plan": [
        {
            "day": "Day one",
            "meals": [
                {
                    "type": "breakfast",
                    "dishes": [
                        {"name": "Porridge", "grams": "200g", "kcal": 350, "products": "oats; milk; oats"},
                        {"name": "Tea"},
                    ],
                },
                {"title": "Lunch", "recipes": {"title": "Buckwheat", "steps": ["Boil water", "Add buckwheat"]}},
            ],
        }
    ]
}
