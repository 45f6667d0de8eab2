"""
Canonical Records

Source-agnostic recipe and nutrition representations. Everything past
the normalizer works on these types only.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from constants import NUTRIENT_FIELDS, PREVIEW_TEXT_MAX_LENGTH, DEFAULT_SERVING_GRAMS
from .errors import ValidationError
from .parsing import (
    to_int_or_none, to_decimal_or_none, to_float, parse_bool,
    split_instruction_text, unique_preserving_order,
)


def _non_negative(value):
    number = to_float(value, 0.0)
    return number if number > 0 else 0.0


@dataclass
class NutritionRecord:
    """Nutrient values per serving_size x serving_unit."""
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    potassium: float = 0.0
    serving_size: float = DEFAULT_SERVING_GRAMS
    serving_unit: str = 'g'
    source: str = ''
    name: str = ''
    category: str = 'Food'

    def __post_init__(self):
        for nutrient in NUTRIENT_FIELDS:
            setattr(self, nutrient, _non_negative(getattr(self, nutrient)))
        self.serving_size = to_float(self.serving_size, DEFAULT_SERVING_GRAMS)
        self.serving_unit = (self.serving_unit or 'g').strip()

    def to_dict(self):
        data = {nutrient: getattr(self, nutrient) for nutrient in NUTRIENT_FIELDS}
        data.update({
            'servingSize': self.serving_size,
            'servingUnit': self.serving_unit,
            'source': self.source,
            'name': self.name,
            'category': self.category,
        })
        return data

    @classmethod
    def from_dict(cls, data):
        if not data:
            return None
        values = {nutrient: data.get(nutrient, 0) for nutrient in NUTRIENT_FIELDS}
        return cls(
            serving_size=data.get('servingSize', data.get('serving_size', DEFAULT_SERVING_GRAMS)),
            serving_unit=data.get('servingUnit', data.get('serving_unit', 'g')),
            source=data.get('source', ''),
            name=data.get('name', ''),
            category=data.get('category', 'Food'),
            **values,
        )

    def copy(self, **changes):
        return replace(self, **changes)


@dataclass
class IngredientLine:
    name: str
    amount: Optional[str] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    optional: bool = False

    def to_dict(self):
        return {
            'name': self.name,
            'amount': self.amount,
            'unit': self.unit,
            'notes': self.notes,
            'optional': self.optional,
        }

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, str):
            return cls(name=data.strip()) if data.strip() else None
        name = (data.get('name') or '').strip()
        if not name:
            return None
        amount = data.get('amount', data.get('measure'))
        return cls(
            name=name,
            amount=str(amount).strip() if amount not in (None, '') else None,
            unit=(data.get('unit') or '').strip() or None,
            notes=(data.get('notes') or '').strip() or None,
            optional=parse_bool(data.get('optional')),
        )


@dataclass
class Moderation:
    status: str = 'published'
    approval_status: str = 'pending'
    is_public: bool = False

    def to_dict(self):
        return {
            'status': self.status,
            'approvalStatus': self.approval_status,
            'isPublic': self.is_public,
        }


@dataclass
class Monetization:
    """Premium pricing. Price is never negative; preview text is capped at 250 characters."""
    is_premium: bool = False
    price: Optional[Decimal] = None
    preview_text: Optional[str] = None

    def __post_init__(self):
        if self.price is not None:
            self.price = Decimal(self.price)
            if self.price < 0:
                raise ValidationError('Price must be zero or greater')
        if self.preview_text:
            self.preview_text = self.preview_text[:PREVIEW_TEXT_MAX_LENGTH]
        else:
            self.preview_text = None

    def to_dict(self):
        return {
            'isPremium': self.is_premium,
            'price': float(self.price) if self.price is not None else None,
            'previewText': self.preview_text,
        }


@dataclass
class Creator:
    id: Optional[int] = None
    name: str = 'Anonymous'

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


@dataclass
class CanonicalRecipe:
    """Unified recipe. (id, source_key) identifies it globally."""
    id: str
    source_key: str
    title: str
    description: str = ''
    instructions: List[str] = field(default_factory=list)
    ingredients: List[IngredientLine] = field(default_factory=list)
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    # True when prep/cook times are heuristic defaults, not source data
    times_estimated: bool = False
    servings: Optional[int] = None
    category: Optional[str] = None
    cuisine: Optional[str] = None
    image: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    nutrition: Optional[NutritionRecord] = None
    moderation: Optional[Moderation] = None
    monetization: Optional[Monetization] = None
    creator: Optional[Creator] = None
    external_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.id = str(self.id)
        self.tags = unique_preserving_order(self.tags)
        for attr in ('prep_time', 'cook_time', 'servings'):
            value = getattr(self, attr)
            if value is not None and value < 0:
                setattr(self, attr, None)

    @property
    def identity(self):
        """Dedup key: source + id + lowercased title."""
        return f"{self.source_key}-{self.id}-{(self.title or '').lower()}"

    @property
    def ready_in_minutes(self):
        total = (self.prep_time or 0) + (self.cook_time or 0)
        return total or None

    def to_dict(self):
        return {
            'id': self.id,
            'sourceKey': self.source_key,
            'title': self.title,
            'description': self.description,
            'instructions': list(self.instructions),
            'ingredients': [ingredient.to_dict() for ingredient in self.ingredients],
            'prepTime': self.prep_time,
            'cookTime': self.cook_time,
            'timesEstimated': self.times_estimated,
            'readyInMinutes': self.ready_in_minutes,
            'servings': self.servings,
            'category': self.category,
            'cuisine': self.cuisine,
            'image': self.image,
            'tags': list(self.tags),
            'nutrition': self.nutrition.to_dict() if self.nutrition else None,
            'moderation': self.moderation.to_dict() if self.moderation else None,
            'monetization': self.monetization.to_dict() if self.monetization else None,
            'creator': self.creator.to_dict() if self.creator else None,
            'externalUrl': self.external_url,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data, default_source_key):
        """Build from a JSON import payload (camelCase keys)."""
        title = (data.get('title') or '').strip()
        if not title:
            raise ValidationError('Title is required')

        raw_instructions = data.get('instructions') or []
        if isinstance(raw_instructions, str):
            instructions = split_instruction_text(raw_instructions)
        else:
            instructions = []
            for step in raw_instructions:
                text = step.get('instruction', '') if isinstance(step, dict) else step
                text = str(text or '').strip()
                if text:
                    instructions.append(text)

        ingredients = []
        for item in data.get('ingredients') or []:
            line = IngredientLine.from_dict(item)
            if line is not None:
                ingredients.append(line)

        external_id = data.get('externalId') or data.get('id')
        if external_id is None:
            raise ValidationError('externalId is required')

        return cls(
            id=external_id,
            source_key=data.get('sourceKey') or default_source_key,
            title=title,
            description=(data.get('description') or '').strip(),
            instructions=instructions,
            ingredients=ingredients,
            prep_time=to_int_or_none(data.get('prepTime'), non_negative=True),
            cook_time=to_int_or_none(data.get('cookTime'), non_negative=True),
            times_estimated=parse_bool(data.get('timesEstimated')),
            servings=to_int_or_none(data.get('servings'), non_negative=True),
            category=data.get('category') or None,
            cuisine=data.get('cuisine') or None,
            image=data.get('image') or data.get('imageUrl') or None,
            tags=[str(tag).strip() for tag in data.get('tags') or [] if str(tag).strip()],
            nutrition=NutritionRecord.from_dict(data.get('nutrition')),
            external_url=data.get('externalUrl') or None,
        )


def monetization_from_input(price, preview_text):
    """Build Monetization from raw form values; None when neither is set."""
    price = to_decimal_or_none(price)
    preview_text = (preview_text or '').strip() or None
    if price is None and preview_text is None:
        return None
    return Monetization(
        is_premium=price is not None and price > 0,
        price=price,
        preview_text=preview_text,
    )
