"""001 – Leave engine schema: employees, policies, periods, overrides, leaves.

Revision ID: 001_leave_engine_schema
Revises:
Create Date: 2026-10-18 10:00:00.000000+03:00
"""

from alembic import op

# Revision identifiers
revision = "001_leave_engine_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("accrual_method", ["daily", "monthly", "at_year_start", "pro_rata"]),
    ("rounding_method", ["floor", "ceil", "round"]),
    (
        "leave_status",
        ["pending", "approved", "completed", "rejected", "cancelled"],
    ),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id                      UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name                    VARCHAR(200) NOT NULL,
            hired_at                DATE NOT NULL,
            manual_carry_over_days  NUMERIC(5,1),
            is_active               BOOLEAN DEFAULT TRUE,
            created_at              TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 2. leave_policies ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_policies (
            id                      UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name                    VARCHAR(200) NOT NULL,
            is_company_default      BOOLEAN NOT NULL DEFAULT FALSE,
            active                  BOOLEAN NOT NULL DEFAULT TRUE,
            base_annual_days        INTEGER NOT NULL,
            seniority_step_years    INTEGER NOT NULL DEFAULT 5,
            bonus_per_step          INTEGER NOT NULL DEFAULT 1,
            accrual_method          accrual_method NOT NULL DEFAULT 'pro_rata',
            rounding_method         rounding_method NOT NULL DEFAULT 'floor',
            allow_carryover         BOOLEAN NOT NULL DEFAULT TRUE,
            max_carryover_days      INTEGER,
            carryover_expiry_month  INTEGER CHECK (carryover_expiry_month BETWEEN 1 AND 12),
            carryover_expiry_day    INTEGER CHECK (carryover_expiry_day BETWEEN 1 AND 31),
            max_negative_balance    INTEGER NOT NULL DEFAULT 0,
            max_consecutive_days    INTEGER,
            min_notice_days         INTEGER,
            created_at              TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    # At most one active company default
    op.execute("""
        CREATE UNIQUE INDEX uq_leave_policy_company_default
            ON leave_policies (is_company_default)
            WHERE is_company_default AND active
    """)

    # ── 3. leave_blackout_periods ─────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_blackout_periods (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            policy_id         UUID NOT NULL REFERENCES leave_policies(id) ON DELETE CASCADE,
            start_date        DATE NOT NULL,
            end_date          DATE NOT NULL,
            reason            TEXT NOT NULL,
            allow_exceptions  BOOLEAN NOT NULL DEFAULT FALSE,
            CHECK (start_date <= end_date)
        )
    """)

    # ── 4. leave_company_shutdowns ────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_company_shutdowns (
            id                     UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            policy_id              UUID NOT NULL REFERENCES leave_policies(id) ON DELETE CASCADE,
            start_date             DATE NOT NULL,
            end_date               DATE NOT NULL,
            days                   NUMERIC(5,1) NOT NULL,
            reason                 TEXT NOT NULL,
            deduct_from_allowance  BOOLEAN NOT NULL DEFAULT TRUE,
            CHECK (start_date <= end_date)
        )
    """)

    # ── 5. employee_policy_overrides ──────────────────────────────────────
    op.execute("""
        CREATE TABLE employee_policy_overrides (
            id                    UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id           UUID NOT NULL UNIQUE REFERENCES employees(id) ON DELETE CASCADE,
            base_annual_days      INTEGER,
            seniority_step_years  INTEGER,
            bonus_per_step        INTEGER,
            accrual_method        accrual_method,
            rounding_method       rounding_method,
            allow_carryover       BOOLEAN,
            max_carryover_days    INTEGER,
            max_negative_balance  INTEGER,
            max_consecutive_days  INTEGER,
            notes                 TEXT,
            created_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at            TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 6. leaves ─────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leaves (
            id                   UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id          UUID NOT NULL REFERENCES employees(id),
            start_date           DATE NOT NULL,
            end_date             DATE,
            days                 NUMERIC(5,1) NOT NULL CHECK (days > 0),
            status               leave_status NOT NULL DEFAULT 'pending',
            is_company_shutdown  BOOLEAN NOT NULL DEFAULT FALSE,
            note                 TEXT,
            created_at           TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at           TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX ix_leaves_employee_start ON leaves (employee_id, start_date)"
    )
    op.execute("CREATE INDEX ix_leaves_status ON leaves (status)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "leaves",
        "employee_policy_overrides",
        "leave_company_shutdowns",
        "leave_blackout_periods",
        "leave_policies",
        "employees",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    # Drop enum types
    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
