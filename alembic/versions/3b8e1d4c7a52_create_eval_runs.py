"""create eval runs

Revision ID: 3b8e1d4c7a52
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3b8e1d4c7a52"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "eval_runs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("source_file", sa.String(length=512), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("provider", sa.String(length=50), nullable=False),
        sa.Column("model", sa.String(length=200), nullable=False),
        sa.Column("doc_type_pred", sa.String(length=20), nullable=True),
        sa.Column("ground_truth_doc_type", sa.String(length=20), nullable=True),
        sa.Column("json_output", sa.Text(), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("parse_error", sa.Text(), nullable=True),
        sa.Column("latency_ms", sa.Integer(), nullable=False),
        sa.Column("ocr_used", sa.Boolean(), nullable=False),
        sa.Column("input_type", sa.String(length=20), nullable=False),
        sa.Column("input_chars", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_eval_runs_source_file", "eval_runs", ["source_file"])
    op.create_index("ix_eval_runs_timestamp", "eval_runs", ["timestamp"])
    op.create_index("ix_eval_runs_success", "eval_runs", ["success"])


def downgrade() -> None:
    op.drop_index("ix_eval_runs_success", table_name="eval_runs")
    op.drop_index("ix_eval_runs_timestamp", table_name="eval_runs")
    op.drop_index("ix_eval_runs_source_file", table_name="eval_runs")
    op.drop_table("eval_runs")
