"""004: create ledger_entries table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            mint            VARCHAR(64)     NOT NULL,
            owner           VARCHAR(128)    NOT NULL,
            entry_type      VARCHAR(20)     NOT NULL,
            amount          NUMERIC(21, 0)  NOT NULL,
            balance_after   NUMERIC(20, 0)  NOT NULL,
            reference_id    VARCHAR(80),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN ('MINT', 'BURN', 'TRANSFER_OUT', 'TRANSFER_IN')
            ),
            CONSTRAINT ck_ledger_balance_gte_0 CHECK (balance_after >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_ledger_owner_time ON ledger_entries (owner, created_at DESC);"
    )
    op.execute("""
        CREATE INDEX idx_ledger_reference
        ON ledger_entries (reference_id)
        WHERE reference_id IS NOT NULL;
    """)
    op.execute(
        "COMMENT ON TABLE ledger_entries IS "
        "'Token movements — append-only; amount is signed (debits negative)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
