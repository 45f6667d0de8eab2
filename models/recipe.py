"""
Recipe Models

Contains the Recipe model and its dependent rows: ingredients,
instructions, tag links and nutrition.
"""

from .base import db, utcnow


class Recipe(db.Model):
    """Persisted recipe, either a community submission or an imported external recipe."""
    __table_args__ = (
        # At most one persisted copy of any external recipe
        db.UniqueConstraint('source_key', 'external_id', name='uq_recipe_source_external'),
    )

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(220), unique=True, nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    prep_time = db.Column(db.Integer, nullable=True)  # minutes
    cook_time = db.Column(db.Integer, nullable=True)  # minutes
    times_estimated = db.Column(db.Boolean, default=False, nullable=False)
    servings = db.Column(db.Integer, nullable=True)
    difficulty = db.Column(db.String(20), default='medium')
    category = db.Column(db.String(100), nullable=True, index=True)
    cuisine = db.Column(db.String(100), nullable=True, index=True)
    image = db.Column(db.String(500), nullable=True)

    # Origin: 'community' or 'external:<provider>'
    source_key = db.Column(db.String(50), default='community', nullable=False, index=True)
    external_id = db.Column(db.String(100), nullable=True)
    external_url = db.Column(db.String(500), nullable=True)

    # Moderation
    status = db.Column(db.String(20), default='published', nullable=False)
    approval_status = db.Column(db.String(20), default='pending', nullable=False, index=True)
    is_public = db.Column(db.Boolean, default=False, nullable=False)

    # Monetization
    is_premium = db.Column(db.Boolean, default=False, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=True)
    preview_text = db.Column(db.String(250), nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True, index=True)
    creator = db.relationship('User')

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    submitted_at = db.Column(db.DateTime, nullable=True)

    ingredients = db.relationship(
        'RecipeIngredient', backref='recipe', lazy=True,
        cascade='all, delete-orphan', passive_deletes=True,
        order_by='RecipeIngredient.position')
    instructions = db.relationship(
        'RecipeInstruction', backref='recipe', lazy=True,
        cascade='all, delete-orphan', passive_deletes=True,
        order_by='RecipeInstruction.step_number')
    tag_links = db.relationship(
        'RecipeTag', backref='recipe', lazy=True,
        cascade='all, delete-orphan', passive_deletes=True)
    nutrition = db.relationship(
        'RecipeNutrition', backref='recipe', uselist=False,
        cascade='all, delete-orphan', passive_deletes=True)
    status_history = db.relationship(
        'RecipeStatusHistory', backref='recipe', lazy=True,
        cascade='all, delete-orphan', passive_deletes=True,
        order_by='RecipeStatusHistory.id')

    @property
    def tags(self):
        return [link.tag.name for link in self.tag_links]


class RecipeIngredient(db.Model):
    """One ingredient line of a recipe, kept in its original order."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    amount = db.Column(db.String(50), nullable=True)  # free text: '1/2', '200g', 'to taste'
    unit = db.Column(db.String(50), nullable=True)
    notes = db.Column(db.String(255), nullable=True)
    position = db.Column(db.Integer, nullable=False)
    is_optional = db.Column(db.Boolean, default=False, nullable=False)


class RecipeInstruction(db.Model):
    """Numbered preparation step."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    step_number = db.Column(db.Integer, nullable=False)
    instruction = db.Column(db.Text, nullable=False)


class Tag(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)


class RecipeTag(db.Model):
    """Join table linking recipes to tags."""
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), primary_key=True)
    tag_id = db.Column(db.Integer, db.ForeignKey('tag.id', ondelete='CASCADE'), primary_key=True)
    tag = db.relationship('Tag')


class RecipeNutrition(db.Model):
    """Nutrition attached to a recipe, per serving_size x serving_unit."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), unique=True, nullable=False)
    calories = db.Column(db.Float, default=0.0)
    protein = db.Column(db.Float, default=0.0)
    carbs = db.Column(db.Float, default=0.0)
    fat = db.Column(db.Float, default=0.0)
    fiber = db.Column(db.Float, default=0.0)
    sugar = db.Column(db.Float, default=0.0)
    sodium = db.Column(db.Float, default=0.0)
    potassium = db.Column(db.Float, default=0.0)
    serving_size = db.Column(db.Float, nullable=True)
    serving_unit = db.Column(db.String(20), nullable=True)
    source = db.Column(db.String(50), nullable=True)
