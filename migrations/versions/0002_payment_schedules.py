"""contract payment schedules

Revision ID: 0002_payment_schedules
Revises: 0001_init
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_payment_schedules"
down_revision = "0001_init"
branch_labels = None
depends_on = None

MONEY = sa.Numeric(precision=12, scale=2)


def upgrade():
    with op.batch_alter_table('contracts') as batch_op:
        batch_op.add_column(sa.Column('reservation_id', sa.String(length=36), nullable=True))
        batch_op.add_column(sa.Column('property_price', MONEY, nullable=True))
        batch_op.add_column(sa.Column('downpayment_total', MONEY, nullable=True))
        batch_op.add_column(sa.Column('reservation_fee_paid', MONEY, nullable=True))
        batch_op.add_column(sa.Column('remaining_downpayment', MONEY, nullable=True))
        batch_op.add_column(sa.Column('payment_plan_months', sa.Integer(), nullable=True))
        batch_op.add_column(sa.Column('monthly_installment', MONEY, nullable=True))
        batch_op.add_column(sa.Column('bank_financing_amount', MONEY, nullable=True))
        batch_op.add_column(sa.Column('downpayment_status', sa.String(length=20), nullable=True))
        batch_op.add_column(sa.Column('total_paid_amount', MONEY, nullable=True))
        batch_op.add_column(sa.Column('remaining_balance', MONEY, nullable=True))
        batch_op.add_column(sa.Column('contract_signed_date', sa.Date(), nullable=True))
        batch_op.add_column(sa.Column('first_installment_date', sa.Date(), nullable=True))
        batch_op.add_column(sa.Column('final_installment_date', sa.Date(), nullable=True))
        batch_op.create_unique_constraint('uq_contracts_reservation_id', ['reservation_id'])
        batch_op.create_foreign_key('fk_contracts_reservation_id', 'property_reservations',
                                    ['reservation_id'], ['reservation_id'])

    op.create_table('contract_payment_schedules',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('contract_id', sa.Integer(), nullable=False),
        sa.Column('installment_number', sa.Integer(), nullable=False),
        sa.Column('installment_description', sa.String(length=120), nullable=True),
        sa.Column('scheduled_amount', MONEY, nullable=False),
        sa.Column('paid_amount', MONEY, nullable=False),
        sa.Column('remaining_amount', MONEY, nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('grace_period_end_date', sa.Date(), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('paid_date', sa.DateTime(), nullable=True),
        sa.Column('penalty_amount', MONEY, nullable=False),
        sa.Column('penalty_rate', sa.Numeric(precision=6, scale=4), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_contract_payment_schedules_contract_id', 'contract_payment_schedules',
                    ['contract_id'], unique=False)
    op.create_index('ix_contract_payment_schedules_due_date', 'contract_payment_schedules',
                    ['due_date'], unique=False)

    with op.batch_alter_table('payment_transactions') as batch_op:
        batch_op.add_column(sa.Column('schedule_id', sa.Integer(), nullable=True))
        batch_op.add_column(sa.Column('penalty_paid', MONEY, nullable=False, server_default='0'))
        batch_op.create_index('ix_payment_transactions_schedule_id', ['schedule_id'], unique=False)
        batch_op.create_foreign_key('fk_payment_transactions_schedule_id', 'contract_payment_schedules',
                                    ['schedule_id'], ['id'])


def downgrade():
    with op.batch_alter_table('payment_transactions') as batch_op:
        batch_op.drop_constraint('fk_payment_transactions_schedule_id', type_='foreignkey')
        batch_op.drop_index('ix_payment_transactions_schedule_id')
        batch_op.drop_column('penalty_paid')
        batch_op.drop_column('schedule_id')

    op.drop_index('ix_contract_payment_schedules_due_date', table_name='contract_payment_schedules')
    op.drop_index('ix_contract_payment_schedules_contract_id', table_name='contract_payment_schedules')
    op.drop_table('contract_payment_schedules')

    with op.batch_alter_table('contracts') as batch_op:
        batch_op.drop_constraint('fk_contracts_reservation_id', type_='foreignkey')
        batch_op.drop_constraint('uq_contracts_reservation_id', type_='unique')
        for column in ('final_installment_date', 'first_installment_date', 'contract_signed_date',
                       'remaining_balance', 'total_paid_amount', 'downpayment_status',
                       'bank_financing_amount', 'monthly_installment', 'payment_plan_months',
                       'remaining_downpayment', 'reservation_fee_paid', 'downpayment_total',
                       'property_price', 'reservation_id'):
            batch_op.drop_column(column)
