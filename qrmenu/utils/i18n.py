# qrmenu/utils/i18n.py
from typing import Optional

from qrmenu.models.menu import Category

SUPPORTED_LANGUAGES = ["tr", "en"]

# Titles for the category keys the menu ships with
CATEGORY_LABELS = {
    "tr": {
        "salatalar": "Salatalar",
        "kebaplar": "Kebaplar",
        "pide cesitleri": "Pide Çeşitleri",
        "soguk icecekler": "Soğuk İçecekler",
        "ara sicaklar": "Ara Sıcaklar",
        "sicak icecekler": "Sıcak İçecekler",
        "tatlilar": "Tatlılar",
        "izgaralar": "Izgaralar",
        "tava cesitleri": "Tava Çeşitleri",
        "corbalar": "Çorbalar",
        "meze": "Mezeler",
        "kahvalti": "Kahvaltı",
        "ozel": "Özel Menü",
        "cocuk": "Çocuk Menüsü",
        "vegan": "Vegan Menü",
    },
    "en": {
        "salatalar": "Salads",
        "kebaplar": "Kebabs",
        "pide cesitleri": "Pide Varieties",
        "soguk icecekler": "Cold Drinks",
        "ara sicaklar": "Appetizers",
        "sicak icecekler": "Hot Drinks",
        "tatlilar": "Desserts",
        "izgaralar": "Grills",
        "tava cesitleri": "Pan Dishes",
        "corbalar": "Soups",
        "meze": "Mezes",
        "kahvalti": "Breakfast",
        "ozel": "Special Menu",
        "cocuk": "Kids Menu",
        "vegan": "Vegan Menu",
    },
}


def normalize_language(language: Optional[str], default: str = "tr") -> str:
    """Map a requested language onto a supported one"""
    if not language:
        return default
    code = language.strip().lower().split("-")[0]
    return code if code in SUPPORTED_LANGUAGES else default


def category_title(key: str, category: Category, language: str) -> str:
    """Display title: stored display name, then the built-in label, then the key"""
    names = category.display_names or {}
    if names.get(language):
        return names[language]
    return CATEGORY_LABELS.get(language, {}).get(key, key)
