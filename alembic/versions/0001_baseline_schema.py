"""baseline schema

Revision ID: 0001_baseline_schema
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""

from __future__ import annotations

from alembic import op


revision = "0001_baseline_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS app;")
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS app.customers (
            id text PRIMARY KEY,
            name text NOT NULL,
            phone text NOT NULL UNIQUE,
            address text NOT NULL,
            district text NOT NULL,
            city text NOT NULL,
            bank_account text NOT NULL,
            share_location text NOT NULL DEFAULT '',
            total_liters integer NOT NULL DEFAULT 0 CHECK (total_liters >= 0),
            referred_by text REFERENCES app.customers(id),
            created_at timestamptz NOT NULL DEFAULT now(),
            updated_at timestamptz NOT NULL DEFAULT now(),
            CHECK (referred_by IS NULL OR referred_by <> id)
        );
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS app.orders (
            id text PRIMARY KEY,
            customer_id text NOT NULL REFERENCES app.customers(id),
            customer_name text NOT NULL,
            customer_phone text NOT NULL,
            customer_district text NOT NULL,
            customer_city text NOT NULL,
            estimated_liters integer NOT NULL CHECK (estimated_liters > 0),
            status text NOT NULL CHECK (
                status IN ('PENDING', 'ASSIGNED', 'IN_PROGRESS', 'COMPLETED', 'VERIFIED', 'PAID')
            ),
            created_at timestamptz NOT NULL DEFAULT now(),
            updated_at timestamptz NOT NULL DEFAULT now(),
            actual_liters integer CHECK (actual_liters IS NULL OR actual_liters > 0),
            courier_id text,
            pickup_evidence_ref text,
            payment_evidence_ref text,
            CHECK (status = 'PENDING' OR courier_id IS NOT NULL),
            CHECK (status NOT IN ('COMPLETED', 'VERIFIED', 'PAID') OR actual_liters IS NOT NULL),
            CHECK (status <> 'PAID' OR payment_evidence_ref IS NOT NULL)
        );
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS app.order_events (
            id bigserial PRIMARY KEY,
            order_id text NOT NULL REFERENCES app.orders(id),
            transition text NOT NULL,
            from_status text NOT NULL,
            to_status text NOT NULL,
            actor_id text NOT NULL,
            actor_role text NOT NULL,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS app.price_tiers (
            position integer PRIMARY KEY,
            min_liter integer NOT NULL CHECK (min_liter >= 0),
            max_liter integer CHECK (max_liter IS NULL OR max_liter >= min_liter),
            price_per_liter integer NOT NULL CHECK (price_per_liter >= 0)
        );
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS app.price_tiers;")
    op.execute("DROP TABLE IF EXISTS app.order_events;")
    op.execute("DROP TABLE IF EXISTS app.orders;")
    op.execute("DROP TABLE IF EXISTS app.customers;")
