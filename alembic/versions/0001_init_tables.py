from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_init_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create tables via SQLAlchemy model definitions
    from db.base import Base
    from db.registry import import_models

    import_models()
    bind = op.get_bind()
    Base.metadata.create_all(bind=bind)


def downgrade() -> None:
    from db.base import Base
    from db.registry import import_models

    import_models()
    bind = op.get_bind()
    Base.metadata.drop_all(bind=bind)
