"""
Modelos de base de datos (ORM).
"""
from sqlalchemy import Column, String, Integer, DateTime, Text, JSON
from sqlalchemy.sql import func

from app.infrastructure.database.session import Base


class MonsterModel(Base):
    """
    Modelo de base de datos para el bestiario.

    external_id vincula el monstruo con su pagina en Notion. Los monstruos
    creados a mano no tienen external_id y nunca participan del sync.
    ai_generated es propio del lado local (imagen generada) y el sync
    nunca lo escribe.
    """

    __tablename__ = "monsters"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(64), nullable=True, unique=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    armor_class = Column(Integer, nullable=True)
    hit_points = Column(Integer, nullable=True)
    speed = Column(String(255), nullable=True)

    # Caracteristicas
    strength = Column(Integer, nullable=True)
    dexterity = Column(Integer, nullable=True)
    constitution = Column(Integer, nullable=True)
    intelligence = Column(Integer, nullable=True)
    wisdom = Column(Integer, nullable=True)
    charisma = Column(Integer, nullable=True)

    # Modificadores (calculados en Notion como formulas)
    strength_mod = Column(Integer, nullable=True)
    dexterity_mod = Column(Integer, nullable=True)
    constitution_mod = Column(Integer, nullable=True)
    intelligence_mod = Column(Integer, nullable=True)
    wisdom_mod = Column(Integer, nullable=True)
    charisma_mod = Column(Integer, nullable=True)

    creature_type = Column(String(100), nullable=True)
    size = Column(String(50), nullable=True)
    challenge_rating_xp = Column(Integer, nullable=True)

    # Datos estructurados en JSON
    actions = Column(JSON, nullable=True)            # [{name, description}]
    legendary_actions = Column(JSON, nullable=True)  # [{name, description, cost}]
    traits = Column(JSON, nullable=True)             # skills, senses, languages, ...

    image_url = Column(Text, nullable=True)
    ai_generated = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Monster(id={self.id}, name={self.name}, external_id={self.external_id})>"


class CatalogItemModel(Base):
    """
    Modelo de base de datos para el catalogo de objetos.

    Se alimenta de cuatro bases de Notion (armes, objets, plantes, poisons).
    """

    __tablename__ = "item_catalog"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(50), nullable=False, default="misc")
    subcategory = Column(String(50), nullable=True)
    source_database = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    rarity = Column(String(100), nullable=True)
    properties = Column(JSON, nullable=True)
    image_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<CatalogItem(id={self.id}, name={self.name}, external_id={self.external_id})>"


class CharacterModel(Base):
    """
    Modelo de base de datos para personajes.

    El inventario guarda copias de name/description/rarity de los objetos
    del catalogo (clave catalog_external_id en cada entrada).
    """

    __tablename__ = "characters"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    inventory = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Character(id={self.id}, name={self.name})>"
