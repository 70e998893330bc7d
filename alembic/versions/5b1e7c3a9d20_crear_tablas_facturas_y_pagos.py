"""Crear tablas facturas y pagos

Revision ID: 5b1e7c3a9d20
Revises: 
Create Date: 2026-10-19 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e7c3a9d20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('facturas',
        sa.Column('factura_id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('cliente_nombre', sa.String(length=255), nullable=False),
        sa.Column('nit', sa.String(length=50), nullable=False),
        sa.Column('descripcion', sa.String(length=500), nullable=True),
        sa.Column('fecha', sa.Date(), nullable=False),
        sa.Column('fecha_vencimiento', sa.Date(), nullable=False),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('iva', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total_sin_iva', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('abonado', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('saldo_pendiente', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint('factura_id')
    )
    op.create_index(op.f('ix_facturas_client_id'), 'facturas', ['client_id'], unique=False)
    op.create_index(op.f('ix_facturas_nit'), 'facturas', ['nit'], unique=False)

    op.create_table('pagos',
        sa.Column('pago_id', sa.Uuid(), nullable=False),
        sa.Column('factura_id', sa.Uuid(), nullable=False),
        sa.Column('fecha', sa.Date(), nullable=False),
        sa.Column('monto', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('monto_retenido', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('boleta_pago', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['factura_id'], ['facturas.factura_id'], ),
        sa.PrimaryKeyConstraint('pago_id')
    )
    op.create_index(op.f('ix_pagos_factura_id'), 'pagos', ['factura_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_pagos_factura_id'), table_name='pagos')
    op.drop_table('pagos')
    op.drop_index(op.f('ix_facturas_nit'), table_name='facturas')
    op.drop_index(op.f('ix_facturas_client_id'), table_name='facturas')
    op.drop_table('facturas')
