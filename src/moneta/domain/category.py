"""Category domain service."""

import unicodedata
from typing import Optional
from moneta.database.base import Database
from moneta.domain.entities import Category as CategoryEntity, TransactionType
from moneta.domain.errors import ConflictError, ValidationError

DEFAULT_CATEGORY_NAME = "Outros"
MAX_CATEGORY_NAME_LENGTH = 200


def normalize_category_name(name: str) -> str:
    """Return the comparison key for a category name.

    Trims, lower-cases and strips diacritics, so "Alimentação " and
    "alimentacao" share a key.
    """
    decomposed = unicodedata.normalize("NFD", name.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def clean_category_name(name: Optional[str]) -> str:
    """Trim and cap a display name, defaulting to the catch-all category."""
    cleaned = (name or "").strip()[:MAX_CATEGORY_NAME_LENGTH].strip()
    return cleaned or DEFAULT_CATEGORY_NAME


def validate_category_type(category_type: str) -> str:
    try:
        return TransactionType(category_type.strip().lower()).value
    except ValueError:
        allowed = ", ".join(t.value for t in TransactionType)
        raise ValidationError(f"Invalid category type '{category_type}'. Use one of: {allowed}")


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_or_create_category(
        self, user_id: str, name: Optional[str], category_type: str
    ) -> CategoryEntity:
        """Return the category matching name and type, creating it if absent.

        Matching ignores case, surrounding whitespace and diacritics. The
        stored name is the first spelling seen.

        Args:
            user_id: Owning user
            name: Category display name (empty or None means "Outros")
            category_type: income, expense or transfer

        Returns:
            Existing or newly created category
        """
        category_type = validate_category_type(category_type)
        display_name = clean_category_name(name)
        return self.db.get_or_create_category(
            user_id=user_id,
            name=display_name,
            normalized_name=normalize_category_name(display_name),
            category_type=category_type,
        )

    def create_category(self, user_id: str, name: str, category_type: str) -> int:
        """Create a category.

        Raises:
            ValidationError: If name is empty or type is unknown
            ConflictError: If an equivalent category already exists
        """
        category_type = validate_category_type(category_type)
        display_name = (name or "").strip()[:MAX_CATEGORY_NAME_LENGTH].strip()
        if not display_name:
            raise ValidationError("Category name cannot be empty")

        normalized = normalize_category_name(display_name)
        if self.db.find_category(user_id, normalized, category_type) is not None:
            raise ConflictError(f"Category '{display_name}' ({category_type}) already exists")

        return self.db.create_category(
            user_id=user_id,
            name=display_name,
            normalized_name=normalized,
            category_type=category_type,
        )

    def get_category(self, user_id: str, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID."""
        return self.db.get_category(user_id, category_id)

    def list_categories(
        self, user_id: str, category_type: Optional[str] = None
    ) -> list[CategoryEntity]:
        """List categories, one per normalized name and type.

        Rows created before names were normalized can collide; the first
        occurrence wins.

        Args:
            user_id: Owning user
            category_type: Optional type filter

        Returns:
            List of category entities
        """
        if category_type is not None:
            category_type = validate_category_type(category_type)

        seen: set[tuple[str, str]] = set()
        unique: list[CategoryEntity] = []
        for category in self.db.list_categories(user_id, category_type=category_type):
            key = (normalize_category_name(category.name), category.category_type)
            if key in seen:
                continue
            seen.add(key)
            unique.append(category)
        return unique
