"""create video api tables

Revision ID: 3f1a9c7d2e10
Revises:
Create Date: 2025-11-02 10:15:00.000000

Creates the videos / download_links aggregate tables, the append-only
requests log, the bans list and the single-row stats table.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "3f1a9c7d2e10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "videos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_id", sa.Text(), nullable=False, comment="Status identifier resolved from the source URL."),
        sa.Column("author", sa.Text(), nullable=False, server_default=""),
        sa.Column("text", sa.Text(), nullable=False, server_default=""),
        sa.Column("published_label", sa.Text(), nullable=False, server_default=""),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("total_fetches", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("first_seen", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_seen", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("external_id", name="uq_videos_external_id"),
    )
    op.create_index("idx_videos_total_fetches", "videos", ["total_fetches"])

    op.create_table(
        "download_links",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_id", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("quality", sa.Text(), nullable=False),
        sa.Column("resolution", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False, server_default="mp4"),
        sa.Column("source", sa.Text(), nullable=False, server_default="twitsave"),
        sa.Column("fetch_count", sa.Integer(), nullable=False, server_default="1"),
        sa.UniqueConstraint("external_id", "url", name="uq_download_links_external_id_url"),
    )

    op.create_table(
        "requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("origin_address", sa.Text(), nullable=False),
        sa.Column("client_agent_string", sa.Text(), nullable=False),
        sa.Column("device_class", sa.Text(), nullable=False),
        sa.Column("browser_class", sa.Text(), nullable=False),
        sa.Column("platform_class", sa.Text(), nullable=False),
        sa.Column("target_url", sa.Text(), nullable=False),
        sa.Column("endpoint_name", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_requests_timestamp", "requests", ["timestamp"])
    op.create_index("idx_requests_device_class", "requests", ["device_class"])

    op.create_table(
        "bans",
        sa.Column("address", sa.Text(), primary_key=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "stats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("total_requests", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_videos", sa.Integer(), nullable=False, server_default="0"),
    )
    op.execute("INSERT INTO stats (id, total_requests, total_videos) VALUES (1, 0, 0)")


def downgrade() -> None:
    op.drop_table("stats")
    op.drop_table("bans")
    op.drop_index("idx_requests_device_class", table_name="requests")
    op.drop_index("idx_requests_timestamp", table_name="requests")
    op.drop_table("requests")
    op.drop_table("download_links")
    op.drop_index("idx_videos_total_fetches", table_name="videos")
    op.drop_table("videos")
