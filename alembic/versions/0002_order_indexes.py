"""add order list indexes

Revision ID: 0002_order_indexes
Revises: 0001_baseline_schema
Create Date: 2026-10-01 00:10:00.000000

"""

from __future__ import annotations

from alembic import op


revision = "0002_order_indexes"
down_revision = "0001_baseline_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE INDEX IF NOT EXISTS ix_orders_status_created ON app.orders (status, created_at DESC);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_orders_courier ON app.orders (courier_id) WHERE courier_id IS NOT NULL;")
    op.execute("CREATE INDEX IF NOT EXISTS ix_orders_customer ON app.orders (customer_id);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_order_events_order ON app.order_events (order_id, created_at);")
    op.execute("CREATE INDEX IF NOT EXISTS ix_customers_referred_by ON app.customers (referred_by);")


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS app.ix_customers_referred_by;")
    op.execute("DROP INDEX IF EXISTS app.ix_order_events_order;")
    op.execute("DROP INDEX IF EXISTS app.ix_orders_customer;")
    op.execute("DROP INDEX IF EXISTS app.ix_orders_courier;")
    op.execute("DROP INDEX IF EXISTS app.ix_orders_status_created;")
