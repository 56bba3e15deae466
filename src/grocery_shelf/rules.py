from __future__ import annotations
import re
from grocery_shelf.models import Confidence, FoodCategory

# Receipt lines that never describe an item.
NOISE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(sub)?total\b",
        r"\btax\b",
        r"\bbalance\b",
        r"^[$€£]\s?\d[\d,]*(\.\d+)?$",
        r"^\d+\.\d{2}$",
        r"\bthank\s*you\b",
        r"\bvisit us\b",
        r"\bstore\s*#",
        r"\breceipt\b",
        r"\bchange\b",
        r"\bcash\b",
        r"\b(debit|credit)?\s*card\b",
        r"\bvisa\b",
        r"\bmastercard\b",
        r"\bamex\b",
    )
)

DATE_PATTERN = re.compile(r"(\d{1,2}[/-]\d{1,2}[/-]\d{2,4}|\d{4}[/-]\d{1,2}[/-]\d{1,2})")
CURRENCY_AMOUNT = re.compile(r"[$€£]\s?\d[\d,]*(?:\.\d+)?")
LEADING_QUANTITY = re.compile(r"^(\d+)(?:\s*x\b)?\s+(.+)$", re.IGNORECASE)

# Checked in order; the first table with a keyword anywhere in the name wins.
# Non-food comes first so "foil" and "toilet" never reach the "oil" condiment.
CATEGORY_RULES: tuple[tuple[FoodCategory, tuple[str, ...]], ...] = (
    (FoodCategory.NON_FOOD, (
        "paper towel", "toilet", "tissue", "napkin", "detergent", "soap", "shampoo",
        "conditioner", "toothpaste", "toothbrush", "deodorant", "bleach", "sponge",
        "battery", "batteries", "trash bag", "garbage bag", "aluminum foil", "foil",
        "plastic wrap", "light bulb", "diaper", "razor", "lotion", "cleaner",
    )),
    (FoodCategory.PRODUCE, (
        "apple", "banana", "orange", "lettuce", "tomato", "potato", "onion", "carrot",
        "spinach", "broccoli", "cucumber", "bell pepper", "green pepper", "red pepper",
        "jalapeno", "avocado", "strawberr", "raspberr", "blueberr", "berry", "berries",
        "grape", "watermelon", "melon", "pear", "peach", "plum", "fruit", "vegetable",
        "veggie", "salad", "lemon", "lime", "mango", "pineapple", "celery", "garlic",
        "ginger", "eggplant", "zucchini", "mushroom", "kale", "cabbage", "corn",
    )),
    (FoodCategory.PROTEIN, (
        "chicken", "beef", "pork", "turkey", "steak", "ground", "sausage", "bacon",
        "ham", "lamb", "meat", "fish", "salmon", "tuna", "shrimp", "crab", "lobster",
        "cod", "tilapia", "seafood", "egg", "tofu", "bean", "lentil",
    )),
    (FoodCategory.GRAINS, (
        "bread", "bagel", "muffin", "croissant", "donut", "cake", "pastry", "bun",
        "roll", "pasta", "spaghetti", "noodle", "rice", "cereal", "oat", "quinoa",
        "flour", "wheat", "barley", "tortilla",
    )),
    (FoodCategory.DAIRY, (
        "milk", "cheese", "yogurt", "yoghurt", "butter", "cream", "cottage", "cheddar",
        "mozzarella", "parmesan", "ice cream",
    )),
    (FoodCategory.SNACKS, (
        "chip", "cracker", "cookie", "candy", "chocolate", "popcorn", "pretzel",
        "nut", "granola",
    )),
    (FoodCategory.CONDIMENTS, (
        "sauce", "dressing", "ketchup", "mustard", "mayo", "oil", "vinegar", "salt",
        "pepper", "spice", "seasoning", "soy", "worcestershire", "honey", "jam", "syrup",
    )),
    (FoodCategory.BEVERAGES, (
        "water", "juice", "soda", "cola", "coffee", "tea", "beer", "wine", "drink",
        "beverage", "energy", "kombucha", "lemonade",
    )),
    (FoodCategory.PREPARED, (
        "deli", "sandwich", "soup", "ready", "prepared", "takeout", "meal", "pizza",
        "sushi", "burrito",
    )),
)

CATCH_ALL_CATEGORY = FoodCategory.OTHER

SHELF_LIFE_DEFAULTS: dict[FoodCategory, tuple[int, Confidence]] = {
    FoodCategory.PRODUCE: (7, Confidence.MEDIUM),
    FoodCategory.PROTEIN: (3, Confidence.HIGH),
    FoodCategory.GRAINS: (5, Confidence.MEDIUM),
    FoodCategory.DAIRY: (14, Confidence.HIGH),
    FoodCategory.SNACKS: (60, Confidence.MEDIUM),
    FoodCategory.CONDIMENTS: (365, Confidence.MEDIUM),
    FoodCategory.BEVERAGES: (30, Confidence.MEDIUM),
    FoodCategory.PREPARED: (3, Confidence.MEDIUM),
    FoodCategory.OTHER: (7, Confidence.LOW),
    FoodCategory.NON_FOOD: (365, Confidence.LOW),
    FoodCategory.UNKNOWN: (7, Confidence.LOW),
}

# Within a category the first matching pattern replaces the default.
SHELF_LIFE_OVERRIDES: dict[FoodCategory, tuple[tuple[re.Pattern[str], int, Confidence], ...]] = {
    category: tuple((re.compile(pattern), days, confidence) for pattern, days, confidence in rules)
    for category, rules in {
        FoodCategory.PRODUCE: (
            (r"berr|lettuce|spinach|salad|herb", 3, Confidence.HIGH),
            (r"tomato|cucumber|pepper|avocado|mushroom", 5, Confidence.HIGH),
            (r"banana", 5, Confidence.HIGH),
            (r"potato|onion|carrot|\bapple|garlic|squash", 14, Confidence.HIGH),
        ),
        FoodCategory.DAIRY: (
            (r"ice cream", 60, Confidence.MEDIUM),
            (r"milk", 7, Confidence.HIGH),
            (r"yogh?urt", 14, Confidence.HIGH),
            (r"cheese|cheddar|mozzarella|parmesan", 21, Confidence.HIGH),
            (r"butter", 30, Confidence.HIGH),
        ),
        FoodCategory.PROTEIN: (
            (r"ground|mince", 2, Confidence.HIGH),
            (r"chicken|fish|salmon|shrimp|seafood", 2, Confidence.HIGH),
            (r"bacon|sausage", 7, Confidence.HIGH),
            (r"egg", 21, Confidence.HIGH),
            (r"tofu", 7, Confidence.MEDIUM),
            (r"canned|dried bean|lentil", 365, Confidence.MEDIUM),
        ),
        FoodCategory.GRAINS: (
            (r"bread", 7, Confidence.HIGH),
            (r"bagel", 5, Confidence.HIGH),
            (r"cake", 3, Confidence.MEDIUM),
            (r"rice|pasta|flour|cereal|oat|quinoa", 365, Confidence.MEDIUM),
        ),
        FoodCategory.BEVERAGES: (
            (r"juice", 7, Confidence.HIGH),
            (r"water", 365, Confidence.HIGH),
        ),
    }.items()
}


def keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile("|".join(re.escape(k) for k in keywords))


CATEGORY_MATCHERS: tuple[tuple[FoodCategory, re.Pattern[str]], ...] = tuple(
    (category, keyword_pattern(keywords)) for category, keywords in CATEGORY_RULES
)
