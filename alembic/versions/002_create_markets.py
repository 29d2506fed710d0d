"""002: create markets table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_U64_MAX = "18446744073709551615"


def upgrade() -> None:
    op.execute(f"""
        CREATE TABLE markets (
            id                  VARCHAR(64)     PRIMARY KEY,
            authority           VARCHAR(128)    NOT NULL,
            project_name        VARCHAR(64)     NOT NULL,
            fundraising_goal    NUMERIC(20, 0)  NOT NULL,
            deadline            NUMERIC(20, 0)  NOT NULL,
            yes_mint            VARCHAR(64)     NOT NULL,
            no_mint             VARCHAR(64)     NOT NULL,
            currency_mint       VARCHAR(64)     NOT NULL,
            yes_reserve         NUMERIC(20, 0)  NOT NULL DEFAULT 0,
            no_reserve          NUMERIC(20, 0)  NOT NULL DEFAULT 0,
            currency_reserve    NUMERIC(20, 0)  NOT NULL DEFAULT 0,
            is_settled          BOOLEAN         NOT NULL DEFAULT FALSE,
            winning_outcome     VARCHAR(3),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_markets_authority_name UNIQUE (authority, project_name),
            CONSTRAINT ck_markets_goal_u64 CHECK (
                fundraising_goal >= 0 AND fundraising_goal <= {_U64_MAX}
            ),
            CONSTRAINT ck_markets_deadline_u64 CHECK (
                deadline >= 0 AND deadline <= {_U64_MAX}
            ),
            CONSTRAINT ck_markets_yes_reserve_u64 CHECK (
                yes_reserve >= 0 AND yes_reserve <= {_U64_MAX}
            ),
            CONSTRAINT ck_markets_no_reserve_u64 CHECK (
                no_reserve >= 0 AND no_reserve <= {_U64_MAX}
            ),
            CONSTRAINT ck_markets_currency_reserve_u64 CHECK (
                currency_reserve >= 0 AND currency_reserve <= {_U64_MAX}
            ),
            CONSTRAINT ck_markets_winning_outcome CHECK (
                winning_outcome IS NULL OR winning_outcome IN ('YES', 'NO')
            ),
            CONSTRAINT ck_markets_settled_consistency CHECK (
                is_settled = (winning_outcome IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_authority ON markets (authority);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE markets IS "
        "'Binary prediction markets — AMM reserves and settlement latch, u64 base units';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
