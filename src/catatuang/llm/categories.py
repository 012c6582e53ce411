"""Category definitions shared by the classifiers."""
import json
from pathlib import Path
from typing import Dict, List, Optional

from .models import TransactionType
from catatuang.utils.exceptions import ConfigError

DEFAULT_CATEGORIES_PATH = Path(__file__).resolve().parent.parent / "resources" / "categories.json"
DEFAULT_CATEGORY = "Lainnya"


def load_categories(categories_path: Optional[Path] = None) -> Dict[str, List[Dict]]:
    """Load categories from JSON file, keyed by transaction type value."""
    path = categories_path or DEFAULT_CATEGORIES_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to load categories from {path}: {e}")


def category_names(categories: Dict[str, List[Dict]], transaction_type: TransactionType) -> List[str]:
    """Flat list of category names for one transaction type."""
    names = [category["name"] for category in categories.get(transaction_type.value, [])]
    if DEFAULT_CATEGORY not in names:
        names.append(DEFAULT_CATEGORY)
    return names
