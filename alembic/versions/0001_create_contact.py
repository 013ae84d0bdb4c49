"""create contact table

Revision ID: 0001_create_contact
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_create_contact'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'contact',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('phonenumber', sa.String(length=20), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('linkedid', sa.Integer(), sa.ForeignKey('contact.id'), nullable=True),
        sa.Column('linkprecedence', sa.String(length=20), nullable=False, server_default='primary'),
        sa.Column('createdat', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updatedat', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deletedat', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "linkprecedence IN ('primary', 'secondary')",
            name='ck_contact_link_precedence',
        ),
        sa.CheckConstraint(
            "(linkprecedence = 'primary' AND linkedid IS NULL) OR "
            "(linkprecedence = 'secondary' AND linkedid IS NOT NULL)",
            name='ck_contact_secondary_linked',
        ),
    )
    op.create_index('ix_contact_email', 'contact', ['email'])
    op.create_index('ix_contact_phonenumber', 'contact', ['phonenumber'])
    op.create_index('ix_contact_linkedid', 'contact', ['linkedid'])

    # One active row per (email, phone) pair
    op.execute("""
        CREATE UNIQUE INDEX uq_contact_active_pair
        ON contact (COALESCE(email, ''), COALESCE(phonenumber, ''))
        WHERE deletedat IS NULL
    """)


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS uq_contact_active_pair")
    op.drop_index('ix_contact_linkedid', table_name='contact')
    op.drop_index('ix_contact_phonenumber', table_name='contact')
    op.drop_index('ix_contact_email', table_name='contact')
    op.drop_table('contact')
