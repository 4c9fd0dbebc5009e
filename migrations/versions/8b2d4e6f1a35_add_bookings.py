"""add bookings with active slot uniqueness

Revision ID: 8b2d4e6f1a35
Revises: 3f9a1c7e2b10
Create Date: 2025-02-12 10:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8b2d4e6f1a35'
down_revision = '3f9a1c7e2b10'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('capster_id', sa.Integer(), nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=False),
        sa.Column('service_ids', sa.JSON(), nullable=False),
        sa.Column('schedule', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_price', sa.Integer(), nullable=False),
        sa.Column('total_duration', sa.Integer(), nullable=False),
        sa.Column('booking_group', sa.String(length=36), nullable=False),
        sa.Column('booking_type', sa.String(length=10), nullable=False),
        sa.Column('slot_sequence', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['capster_id'], ['capsters.id'], ),
        sa.ForeignKeyConstraint(['branch_id'], ['branch.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_bookings_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_capster_id'), ['capster_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_branch_id'), ['branch_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_schedule'), ['schedule'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_booking_group'), ['booking_group'], unique=False)

    # Only one non-cancelled booking per capster slot
    op.create_index(
        'uq_bookings_capster_schedule_active',
        'bookings',
        ['capster_id', 'schedule'],
        unique=True,
        sqlite_where=sa.text("status <> 'cancelled'"),
        postgresql_where=sa.text("status <> 'cancelled'"),
    )


def downgrade():
    op.drop_index('uq_bookings_capster_schedule_active', table_name='bookings')
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_bookings_booking_group'))
        batch_op.drop_index(batch_op.f('ix_bookings_schedule'))
        batch_op.drop_index(batch_op.f('ix_bookings_branch_id'))
        batch_op.drop_index(batch_op.f('ix_bookings_capster_id'))
        batch_op.drop_index(batch_op.f('ix_bookings_user_id'))

    op.drop_table('bookings')
