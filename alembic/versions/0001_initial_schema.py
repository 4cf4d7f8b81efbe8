"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _account_fk():
    return sa.Column(
        "account_id",
        sa.Integer,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade():
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("plan", sa.String(50), nullable=False, server_default="free"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("auth_provider", sa.String(50), nullable=False, server_default="local"),
        sa.Column("role", sa.String(50), nullable=False, server_default="surveyor"),
        sa.Column("avatar_url", sa.String(500)),
        sa.Column("phone", sa.String(50)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), index=True),
        sa.Column("phone", sa.String(50)),
        sa.Column("alt_phone", sa.String(50)),
        sa.Column("address_line1", sa.String(255)),
        sa.Column("address_line2", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("postcode", sa.String(20), nullable=False, index=True),
        sa.Column("country", sa.String(100), nullable=False, server_default="UK"),
        sa.Column("property_type", sa.String(50)),
        sa.Column("construction_year", sa.Integer),
        sa.Column("notes", sa.Text),
        sa.Column("tags", sa.JSON),
        *_timestamps(),
    )

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("source", sa.String(100)),
        sa.Column("campaign", sa.String(100)),
        sa.Column("status", sa.String(50), nullable=False, server_default="new", index=True),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("estimated_value", sa.Numeric(10, 2)),
        sa.Column("lost_reason", sa.Text),
        sa.Column("notes", sa.Text),
        sa.Column("next_follow_up", sa.DateTime(timezone=True)),
        sa.Column("assigned_to", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), index=True),
        *_timestamps(),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("sku", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("manufacturer", sa.String(100)),
        sa.Column("category", sa.String(100), index=True),
        sa.Column("subcategory", sa.String(100)),
        sa.Column("description", sa.Text),
        sa.Column("specifications", sa.JSON),
        sa.Column("cost_price", sa.Numeric(10, 2)),
        sa.Column("sell_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("labor_hours", sa.Numeric(5, 2)),
        sa.Column("warranty_years", sa.Integer),
        sa.Column("stock_level", sa.Integer, nullable=False, server_default="0"),
        sa.Column("min_stock_level", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("image_urls", sa.JSON),
        sa.Column("datasheet_url", sa.String(500)),
        *_timestamps(),
        sa.UniqueConstraint("account_id", "sku", name="uq_products_account_sku"),
    )

    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("lead_id", sa.Integer, sa.ForeignKey("leads.id", ondelete="SET NULL")),
        sa.Column("quote_number", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="draft", index=True),
        sa.Column("valid_until", sa.Date),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False, server_default="20"),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("deposit_amount", sa.Numeric(10, 2)),
        sa.Column("notes", sa.Text),
        sa.Column("terms_and_conditions", sa.Text),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
        sa.Column("viewed_at", sa.DateTime(timezone=True)),
        sa.Column("accepted_at", sa.DateTime(timezone=True)),
        sa.Column("rejected_at", sa.DateTime(timezone=True)),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(),
        sa.UniqueConstraint("account_id", "quote_number", name="uq_quotes_account_number"),
    )

    op.create_table(
        "quote_lines",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("quote_id", sa.Integer, sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="SET NULL")),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("discount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("line_total", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text),
    )

    op.create_table(
        "quote_sequences",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("last_value", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint("account_id", "year", name="uq_quote_sequences_account_year"),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("quote_id", sa.Integer, sa.ForeignKey("quotes.id", ondelete="SET NULL")),
        sa.Column("appointment_type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="scheduled"),
        sa.Column("scheduled_start", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("scheduled_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actual_start", sa.DateTime(timezone=True)),
        sa.Column("actual_end", sa.DateTime(timezone=True)),
        sa.Column("assigned_to", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), index=True),
        sa.Column("location", sa.Text),
        sa.Column("notes", sa.Text),
        sa.Column("cancelled_reason", sa.Text),
        sa.Column("reminder_sent_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    op.create_table(
        "visit_sessions",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("appointment_id", sa.Integer, sa.ForeignKey("appointments.id", ondelete="SET NULL")),
        sa.Column("survey_type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="in_progress"),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("surveyor_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), index=True),
        sa.Column("weather_conditions", sa.String(100)),
        sa.Column("notes", sa.Text),
        sa.Column("share_id", sa.String(36), unique=True, index=True),
        *_timestamps(),
    )

    op.create_table(
        "survey_modules",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("visit_session_id", sa.Integer, sa.ForeignKey("visit_sessions.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("module_type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("data", sa.JSON),
        sa.Column("started_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    op.create_table(
        "transcriptions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("visit_session_id", sa.Integer, sa.ForeignKey("visit_sessions.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("module_id", sa.Integer, sa.ForeignKey("survey_modules.id", ondelete="SET NULL")),
        sa.Column("audio_url", sa.String(500)),
        sa.Column("transcript_text", sa.Text, nullable=False),
        sa.Column("confidence", sa.Numeric(5, 4)),
        sa.Column("language", sa.String(10), nullable=False, server_default="en-GB"),
        sa.Column("duration_seconds", sa.Integer),
        sa.Column("recorded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "visit_observations",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("visit_session_id", sa.Integer, sa.ForeignKey("visit_sessions.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("transcription_id", sa.Integer, sa.ForeignKey("transcriptions.id", ondelete="SET NULL")),
        sa.Column("observation_type", sa.String(50), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text, nullable=False),
        sa.Column("confidence", sa.String(20), nullable=False, server_default="high"),
        sa.Column("context", sa.Text),
        *_timestamps(),
    )

    op.create_table(
        "media_attachments",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("visit_session_id", sa.Integer, sa.ForeignKey("visit_sessions.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("module_id", sa.Integer, sa.ForeignKey("survey_modules.id", ondelete="SET NULL")),
        sa.Column("file_type", sa.String(50), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column("file_size", sa.Integer, nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("caption", sa.Text),
        sa.Column("metadata", sa.JSON),
        sa.Column("thumbnail_path", sa.String(500)),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "boiler_specifications",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("manufacturer", sa.String(100), nullable=False, index=True),
        sa.Column("model", sa.String(255), nullable=False),
        sa.Column("fuel_type", sa.String(50), nullable=False),
        sa.Column("boiler_type", sa.String(50), nullable=False),
        sa.Column("output_kw", sa.Numeric(5, 2)),
        sa.Column("flow_rate_lpm", sa.Numeric(5, 2)),
        sa.Column("dimensions", sa.JSON),
        sa.Column("weight", sa.Numeric(6, 2)),
        sa.Column("efficiency", sa.Numeric(5, 2)),
        sa.Column("erp_rating", sa.String(10)),
        sa.Column("flue_type", sa.String(50)),
        sa.Column("min_gas_pressure", sa.Numeric(5, 2)),
        sa.Column("max_gas_pressure", sa.Numeric(5, 2)),
        sa.Column("warranty", sa.Integer),
        sa.Column("install_date", sa.Date),
        sa.Column("discontinued_date", sa.Date),
        sa.Column("replacement_model", sa.String(255)),
        sa.Column("datasheet_url", sa.String(500)),
        sa.Column("image_url", sa.String(500)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer, primary_key=True),
        _account_fk(),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Integer),
        sa.Column("changes", sa.JSON),
        sa.Column("ip_address", sa.String(50)),
        sa.Column("user_agent", sa.String(500)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade():
    for table in (
        "audit_log",
        "boiler_specifications",
        "media_attachments",
        "visit_observations",
        "transcriptions",
        "survey_modules",
        "visit_sessions",
        "appointments",
        "quote_sequences",
        "quote_lines",
        "quotes",
        "products",
        "leads",
        "customers",
        "users",
        "accounts",
    ):
        op.drop_table(table)
