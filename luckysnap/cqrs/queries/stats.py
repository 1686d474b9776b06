from __future__ import annotations

from decimal import Decimal

from luckysnap.db.connection import fetch_one


def dashboard_stats() -> dict:
    row = fetch_one(
        """
        SELECT
            (SELECT COALESCE(SUM(total_amount), 0) FROM orders
              WHERE status IN ('PAID', 'COMPLETED')
                AND created_at >= date_trunc('day', now())) AS today_sales,
            (SELECT COUNT(*) FROM orders
              WHERE status = 'PENDING' AND expires_at > now()) AS pending_orders,
            (SELECT COUNT(*) FROM raffles WHERE status = 'active') AS active_raffles,
            (SELECT COUNT(*) FROM raffles) AS total_raffles,
            (SELECT COUNT(*) FROM orders) AS total_orders,
            (SELECT COALESCE(SUM(total_amount), 0) FROM orders
              WHERE status IN ('PAID', 'COMPLETED')) AS total_revenue,
            (SELECT COUNT(*) FROM winners) AS total_winners
        """
    )
    return {
        "today_sales": row["today_sales"] or Decimal("0"),
        "pending_orders": row["pending_orders"],
        "active_raffles": row["active_raffles"],
        "total_raffles": row["total_raffles"],
        "total_orders": row["total_orders"],
        "total_revenue": row["total_revenue"] or Decimal("0"),
        "total_winners": row["total_winners"],
    }
