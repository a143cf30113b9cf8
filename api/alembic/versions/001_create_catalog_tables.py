"""create_catalog_tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:12:41.203118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('monsters'):
        op.create_table('monsters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_id', sa.String(length=64), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('armor_class', sa.Integer(), nullable=True),
        sa.Column('hit_points', sa.Integer(), nullable=True),
        sa.Column('speed', sa.String(length=255), nullable=True),
        sa.Column('strength', sa.Integer(), nullable=True),
        sa.Column('dexterity', sa.Integer(), nullable=True),
        sa.Column('constitution', sa.Integer(), nullable=True),
        sa.Column('intelligence', sa.Integer(), nullable=True),
        sa.Column('wisdom', sa.Integer(), nullable=True),
        sa.Column('charisma', sa.Integer(), nullable=True),
        sa.Column('strength_mod', sa.Integer(), nullable=True),
        sa.Column('dexterity_mod', sa.Integer(), nullable=True),
        sa.Column('constitution_mod', sa.Integer(), nullable=True),
        sa.Column('intelligence_mod', sa.Integer(), nullable=True),
        sa.Column('wisdom_mod', sa.Integer(), nullable=True),
        sa.Column('charisma_mod', sa.Integer(), nullable=True),
        sa.Column('creature_type', sa.String(length=100), nullable=True),
        sa.Column('size', sa.String(length=50), nullable=True),
        sa.Column('challenge_rating_xp', sa.Integer(), nullable=True),
        sa.Column('actions', sa.JSON(), nullable=True),
        sa.Column('legendary_actions', sa.JSON(), nullable=True),
        sa.Column('traits', sa.JSON(), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('ai_generated', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_monsters_id'), 'monsters', ['id'], unique=False)
        op.create_index(op.f('ix_monsters_external_id'), 'monsters', ['external_id'], unique=True)
        op.create_index(op.f('ix_monsters_name'), 'monsters', ['name'], unique=False)

    if not inspector.has_table('item_catalog'):
        op.create_table('item_catalog',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False, server_default='misc'),
        sa.Column('subcategory', sa.String(length=50), nullable=True),
        sa.Column('source_database', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('rarity', sa.String(length=100), nullable=True),
        sa.Column('properties', sa.JSON(), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_item_catalog_id'), 'item_catalog', ['id'], unique=False)
        op.create_index(op.f('ix_item_catalog_external_id'), 'item_catalog', ['external_id'], unique=True)
        op.create_index(op.f('ix_item_catalog_name'), 'item_catalog', ['name'], unique=False)

    if not inspector.has_table('characters'):
        op.create_table('characters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('inventory', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_characters_id'), 'characters', ['id'], unique=False)
        op.create_index(op.f('ix_characters_name'), 'characters', ['name'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in ('characters', 'item_catalog', 'monsters'):
        if inspector.has_table(table):
            op.drop_table(table)
