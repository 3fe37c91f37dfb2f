"""Warehouse query templates and the functions that run them.

Templates use ``:name`` placeholders (see ``connection.bind_named_params``).
All of them are read-only.
"""

from __future__ import annotations

from app.db.connection import WarehouseClient

# Latest money-laundering analysis per user that ended as suspicious/low,
# flagged as high value when approved TPV crosses 500k in 90 days or 1.5M overall.
PENDING_CASES_QUERY = """
WITH selected_users AS (
    SELECT DISTINCT
        an.user_id,
        an.created_at,
        INITCAP(REPLACE(REPLACE(SPLIT_PART(u.email, '@', 1), '_', ' '), '.', ' ')) AS analyst,
        (CURRENT_DATE - an.created_at::date) AS days_since_creation,
        u.status
    FROM maindb.offense_analyses an
    JOIN maindb.users u ON u.id = an.analyst_id
    JOIN maindb.offenses o ON o.id = an.offense_id
    WHERE
        o.name = 'money_laundering'
        AND an.tenant_id <> 2
        AND an.conclusion = 'suspicious'
        AND an.priority = 'low'
        AND (
            an.automatic_pipeline = FALSE
            OR (an.automatic_pipeline = TRUE AND an.analyst_id IN (38445329, 38608296))
        )
        AND NOT EXISTS (
            SELECT 1
            FROM maindb.offense_analyses an2
            JOIN maindb.offenses o2 ON o2.id = an2.offense_id
            WHERE
                an2.user_id = an.user_id
                AND o2.name = 'money_laundering'
                AND an2.created_at > an.created_at
        )
),
transaction_sums AS (
    SELECT t.merchant_id AS user_id, SUM(t.amount) AS total_amount
    FROM maindb.transactions t
    WHERE t.status = 'approved'
    GROUP BY t.merchant_id
),
transaction_sums_90 AS (
    SELECT t.merchant_id AS user_id, SUM(t.amount) AS total_amount_90
    FROM maindb.transactions t
    WHERE t.status = 'approved' AND t.created_at >= NOW() - INTERVAL '90 days'
    GROUP BY t.merchant_id
)
SELECT
    su.user_id,
    su.created_at,
    su.analyst,
    su.days_since_creation,
    su.status,
    CASE
        WHEN COALESCE(ts90.total_amount_90, 0) >= 500000
          OR COALESCE(ts.total_amount, 0) >= 1500000
        THEN 'yes'
        ELSE 'no'
    END AS high_value
FROM selected_users su
LEFT JOIN transaction_sums ts ON ts.user_id = su.user_id
LEFT JOIN transaction_sums_90 ts90 ON ts90.user_id = su.user_id
ORDER BY su.created_at DESC
"""

CASE_BY_USER_ID_QUERY = """
WITH user_case AS (
    SELECT
        an.user_id,
        an.created_at,
        INITCAP(REPLACE(REPLACE(SPLIT_PART(u.email, '@', 1), '_', ' '), '.', ' ')) AS analyst,
        (CURRENT_DATE - an.created_at::date) AS days_since_creation,
        u.status
    FROM maindb.offense_analyses an
    JOIN maindb.users u ON u.id = an.analyst_id
    JOIN maindb.offenses o ON o.id = an.offense_id
    WHERE
        an.user_id = :user_id
        AND o.name = 'money_laundering'
        AND an.tenant_id <> 2
        AND an.conclusion = 'suspicious'
        AND an.priority = 'low'
    ORDER BY an.created_at DESC
    LIMIT 1
),
transaction_sums AS (
    SELECT t.merchant_id AS user_id, SUM(t.amount) AS total_amount
    FROM maindb.transactions t
    WHERE t.merchant_id = :user_id AND t.status = 'approved'
    GROUP BY t.merchant_id
),
transaction_sums_90 AS (
    SELECT t.merchant_id AS user_id, SUM(t.amount) AS total_amount_90
    FROM maindb.transactions t
    WHERE
        t.merchant_id = :user_id
        AND t.status = 'approved'
        AND t.created_at >= NOW() - INTERVAL '90 days'
    GROUP BY t.merchant_id
)
SELECT
    uc.user_id,
    uc.created_at,
    uc.analyst,
    uc.days_since_creation,
    uc.status,
    CASE
        WHEN COALESCE(ts90.total_amount_90, 0) >= 500000
          OR COALESCE(ts.total_amount, 0) >= 1500000
        THEN 'yes'
        ELSE 'no'
    END AS high_value
FROM user_case uc
LEFT JOIN transaction_sums ts ON ts.user_id = uc.user_id
LEFT JOIN transaction_sums_90 ts90 ON ts90.user_id = uc.user_id
"""

USER_INFO_QUERY = """
SELECT
    u.id AS user_id,
    u.name,
    m.name AS merchant_name,
    u.email,
    DATE_PART('year', AGE(CURRENT_DATE, u.birth_date))::int AS age,
    u.status,
    u.status_reason,
    u.role_type,
    m.business_category,
    u.document_number,
    ch.created_at AS cardholder_created_at,
    m.created_at AS merchant_created_at,
    CONCAT_WS(', ', a.street, a.number, a.neighborhood) AS address,
    a.city,
    a.state
FROM maindb.users u
LEFT JOIN maindb.merchants m ON m.user_id = u.id
LEFT JOIN maindb.cardholders ch ON ch.user_id = u.id
LEFT JOIN maindb.addresses a ON a.user_id = u.id
WHERE u.id = :user_id
LIMIT 1
"""

# Source dates arrive as DD-MM-YYYY, DD/MM/YYYY [time] or YYYY-MM-DD [time];
# they are normalized to YYYY-MM-DD so the newest analysis sorts first.
OFFENSE_HISTORY_QUERY = """
WITH normalized AS (
    SELECT
        CASE
            WHEN date ~ '^\\d{2}-\\d{2}-\\d{4}' THEN TO_DATE(SUBSTRING(date FROM 1 FOR 10), 'DD-MM-YYYY')
            WHEN date ~ '^\\d{2}/\\d{2}/\\d{4}' THEN TO_DATE(SUBSTRING(date FROM 1 FOR 10), 'DD/MM/YYYY')
            WHEN date ~ '^\\d{4}-\\d{2}-\\d{2}' THEN TO_DATE(SUBSTRING(date FROM 1 FOR 10), 'YYYY-MM-DD')
        END AS parsed_date,
        date,
        conclusion,
        priority,
        description,
        analyst,
        name
    FROM metrics_amlft.offense_analysis_data
    WHERE user_id = :user_id
      AND analysis_type IN ('manual', 'automatic')
)
SELECT
    COALESCE(TO_CHAR(parsed_date, 'YYYY-MM-DD'), date) AS offense_date,
    date AS offense_date_original,
    conclusion,
    priority,
    description,
    analyst,
    name AS offense_name
FROM normalized
ORDER BY COALESCE(parsed_date, CURRENT_DATE) DESC
"""


async def fetch_pending_cases(warehouse: WarehouseClient) -> list[dict]:
    return await warehouse.run_query(PENDING_CASES_QUERY)


async def fetch_case_by_user_id(warehouse: WarehouseClient, user_id: int) -> dict | None:
    rows = await warehouse.run_query(CASE_BY_USER_ID_QUERY, {"user_id": user_id})
    return rows[0] if rows else None


async def fetch_user_info(warehouse: WarehouseClient, user_id: int) -> dict | None:
    rows = await warehouse.run_query(USER_INFO_QUERY, {"user_id": user_id})
    return rows[0] if rows else None


async def fetch_offense_history(warehouse: WarehouseClient, user_id: int) -> list[dict]:
    return await warehouse.run_query(OFFENSE_HISTORY_QUERY, {"user_id": user_id})
