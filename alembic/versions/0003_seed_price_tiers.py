"""seed default price tiers

Revision ID: 0003_seed_price_tiers
Revises: 0002_order_indexes
Create Date: 2026-10-01 00:20:00.000000

"""

from __future__ import annotations

from alembic import op


revision = "0003_seed_price_tiers"
down_revision = "0002_order_indexes"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        INSERT INTO app.price_tiers (position, min_liter, max_liter, price_per_liter)
        VALUES
          (0, 0, 50, 7000),
          (1, 51, 100, 7500),
          (2, 101, NULL, 8000)
        ON CONFLICT (position) DO NOTHING;
        """
    )


def downgrade() -> None:
    op.execute("DELETE FROM app.price_tiers WHERE position IN (0, 1, 2);")
