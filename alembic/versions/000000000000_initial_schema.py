"""initial_schema

Revision ID: 000000000000
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '000000000000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create portfolios table
    op.create_table(
        'portfolios',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Display name (corporate, owner or individual entity)'),
        sa.Column('slug', sa.String(length=100), nullable=False, comment='Name slug with building-count suffix, e.g. 84th-st-llc-3b'),
        sa.Column('total_buildings', sa.Integer(), nullable=False, comment='Member building count'),
        sa.Column('total_units', sa.Integer(), nullable=False, comment='Sum of residential units'),
        sa.Column('total_value', sa.Numeric(precision=16, scale=2), nullable=False, comment='Sum of assessed values'),
        sa.Column('avg_distress', sa.Float(), nullable=False, comment='Reserved for distress scoring'),
        sa.Column('borough', sa.String(length=50), nullable=True, comment='Borough of the first member building'),
        sa.Column('entity_names', postgresql.JSONB(astext_type=sa.Text()), nullable=False, comment='Distinct entity names found in the cluster'),
        sa.Column('head_officers', postgresql.JSONB(astext_type=sa.Text()), nullable=False, comment='Distinct head officer / individual owner names'),
        sa.Column('addresses', postgresql.JSONB(astext_type=sa.Text()), nullable=False, comment='Up to 5 distinct business addresses'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
        sa.CheckConstraint('total_buildings >= 2', name='check_portfolio_min_buildings')
    )
    op.create_index('idx_portfolios_total_units', 'portfolios', ['total_units'], unique=False)
    op.create_index('idx_portfolios_total_value', 'portfolios', ['total_value'], unique=False)

    # Create portfolio_buildings table
    op.create_table(
        'portfolio_buildings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('portfolio_id', sa.Integer(), nullable=False, comment='References portfolios table'),
        sa.Column('bbl', sa.String(length=20), nullable=False, comment='Borough-block-lot parcel id'),
        sa.Column('boro_code', sa.String(length=2), nullable=True),
        sa.Column('block', sa.String(length=10), nullable=True),
        sa.Column('lot', sa.String(length=10), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('borough', sa.String(length=50), nullable=True),
        sa.Column('units', sa.Integer(), nullable=False),
        sa.Column('floors', sa.Integer(), nullable=False),
        sa.Column('year_built', sa.Integer(), nullable=False),
        sa.Column('assessed_value', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('owner_name', sa.String(length=255), nullable=True),
        sa.Column('building_class', sa.String(length=10), nullable=True),
        sa.Column('zoning', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['portfolio_id'], ['portfolios.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('portfolio_id', 'bbl', name='uq_portfolio_buildings_portfolio_bbl')
    )
    op.create_index('idx_portfolio_buildings_bbl', 'portfolio_buildings', ['bbl'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_portfolio_buildings_bbl', table_name='portfolio_buildings')
    op.drop_table('portfolio_buildings')
    op.drop_index('idx_portfolios_total_value', table_name='portfolios')
    op.drop_index('idx_portfolios_total_units', table_name='portfolios')
    op.drop_table('portfolios')
