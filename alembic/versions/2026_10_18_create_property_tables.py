from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision = "2026_10_18_create_property_tables"
down_revision = None
branch_labels = None
depends_on = None

TABLES = ("properties", "pending_properties")

def _property_columns():
    return [
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(255)),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120)),
        sa.Column("neighborhood", sa.String(120)),
        sa.Column("zip_code", sa.String(20)),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("price", sa.BigInteger, nullable=False),
        sa.Column("bedrooms", sa.Integer, nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Float, nullable=False, server_default="0"),
        sa.Column("area", sa.Float, nullable=False, server_default="0"),
        sa.Column("parking_spaces", sa.Integer, nullable=False, server_default="0"),
        sa.Column("year_built", sa.Integer, nullable=False, server_default="0"),
        sa.Column("lat", sa.Float),
        sa.Column("lng", sa.Float),
        sa.Column("tags", JSONB),
        sa.Column("amenities", JSONB),
        sa.Column("images", JSONB),
        sa.Column("is_featured", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("property_code", sa.String(40)),
        sa.Column("view_type", sa.String(60)),
        sa.Column("agent", JSONB),
        sa.Column("owner_id", sa.String(128)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]

def upgrade():
    for table in TABLES:
        op.create_table(table, *_property_columns())
    op.create_index("properties_city_idx", "properties", ["city"])
    op.create_index("properties_featured_idx", "properties", ["is_featured"])

def downgrade():
    op.drop_index("properties_featured_idx", "properties")
    op.drop_index("properties_city_idx", "properties")
    for table in reversed(TABLES):
        op.drop_table(table)
