"""003: create token_accounts table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE token_accounts (
            mint        VARCHAR(64)     NOT NULL,
            owner       VARCHAR(128)    NOT NULL,
            balance     NUMERIC(20, 0)  NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_token_accounts PRIMARY KEY (mint, owner),
            CONSTRAINT ck_token_accounts_balance_u64 CHECK (
                balance >= 0 AND balance <= 18446744073709551615
            )
        );
    """)
    op.execute("CREATE INDEX idx_token_accounts_owner ON token_accounts (owner);")
    op.execute("""
        CREATE TRIGGER trg_token_accounts_updated_at
            BEFORE UPDATE ON token_accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE token_accounts IS "
        "'Token balances per (mint, owner); owner liquidity:<market_id> is pool custody';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS token_accounts CASCADE;")
