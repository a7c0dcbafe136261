"""initial schema: auth tables, profile fields, goals, card history, auth events

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _user_fk() -> sa.Column:
    return sa.Column("user_id", sa.String(length=36), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("email_verified", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("zodiac_sign", sa.String(length=50), nullable=True),
        sa.Column("selected_element", sa.String(length=50), nullable=True),
        sa.Column("personal_goals", sa.String(length=200), nullable=True),
        sa.Column("additional_details", sa.Text(), nullable=True),
        sa.Column("focus_area", sa.String(length=100), nullable=True),
        sa.Column("gender", sa.String(length=50), nullable=True),
        sa.Column("age_range", sa.String(length=50), nullable=True),
        sa.Column("birth_date_time", sa.String(length=64), nullable=True),
        sa.Column("include_time", sa.Boolean(), nullable=True),
        sa.Column("birthday", sa.DateTime(timezone=True), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "session",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _user_fk(),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_session_token", "session", ["token"], unique=True)
    op.create_index("ix_session_user_id", "session", ["user_id"])

    op.create_table(
        "account",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("account_id", sa.String(length=255), nullable=False),
        sa.Column("provider_id", sa.String(length=50), nullable=False),
        _user_fk(),
        sa.Column("access_token", sa.Text(), nullable=True),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("id_token", sa.Text(), nullable=True),
        sa.Column("access_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refresh_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("password", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("provider_id", "account_id", name="uq_account_provider_account"),
    )
    op.create_index("ix_account_user_id", "account", ["user_id"])

    op.create_table(
        "verification",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_verification_identifier", "verification", ["identifier"])

    op.create_table(
        "user_goal",
        sa.Column("id", sa.Integer(), primary_key=True),
        _user_fk(),
        sa.Column("goal_text", sa.Text(), nullable=False),
        sa.Column("is_achieved", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_user_goal_user_id", "user_goal", ["user_id"])

    op.create_table(
        "drawn_card_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        _user_fk(),
        sa.Column("card_name", sa.String(length=100), nullable=False),
        sa.Column("card_upright", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("reading_context", sa.Text(), nullable=True),
        sa.Column("drawn_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_drawn_card_history_user_id", "drawn_card_history", ["user_id"])

    op.create_table(
        "auth_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        _user_fk(),
        sa.Column("event_type", sa.String(length=50), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("event_timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_auth_events_user_id", "auth_events", ["user_id"])


def downgrade() -> None:
    op.drop_table("auth_events")
    op.drop_table("drawn_card_history")
    op.drop_table("user_goal")
    op.drop_table("verification")
    op.drop_table("account")
    op.drop_table("session")
    op.drop_table("user")
