from __future__ import annotations

from typing import Iterable

from app.billing.pricing import PriceTier


def get_price_tiers(conn) -> list[PriceTier]:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT min_liter, max_liter, price_per_liter
            FROM app.price_tiers
            ORDER BY position ASC
            """
        )
        rows = cur.fetchall()
    return [
        PriceTier(
            min_liter=int(r[0]),
            max_liter=(int(r[1]) if r[1] is not None else None),
            price_per_liter=int(r[2]),
        )
        for r in rows
    ]


def replace_price_tiers(conn, tiers: Iterable[PriceTier]) -> None:
    with conn.cursor() as cur:
        cur.execute("DELETE FROM app.price_tiers")
        for position, tier in enumerate(tiers):
            cur.execute(
                """
                INSERT INTO app.price_tiers (position, min_liter, max_liter, price_per_liter)
                VALUES (%s, %s, %s, %s)
                """,
                (position, tier.min_liter, tier.max_liter, tier.price_per_liter),
            )
