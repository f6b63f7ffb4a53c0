"""create library, training, plan, ledger and audit tables

Revision ID: 0001_training_plans
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_training_plans'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


PLAN_STATUS = ('DRAFT', 'SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')
DAY_STATUS = ('PENDING', 'IN_PROGRESS', 'COMPLETED')
KNOWLEDGE_LEVEL = ('NONE', 'BASIC', 'INTERMEDIATE', 'ADVANCED')


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        postgresql.ENUM(*PLAN_STATUS, name='training_plan_status_enum').create(bind, checkfirst=True)
        postgresql.ENUM(*DAY_STATUS, name='training_plan_day_status_enum').create(bind, checkfirst=True)
        postgresql.ENUM(*KNOWLEDGE_LEVEL, name='knowledge_level_enum').create(bind, checkfirst=True)

    plan_status = postgresql.ENUM(*PLAN_STATUS, name='training_plan_status_enum', create_type=False) \
        if bind.dialect.name == 'postgresql' else sa.Enum(*PLAN_STATUS, name='training_plan_status_enum')
    day_status = postgresql.ENUM(*DAY_STATUS, name='training_plan_day_status_enum', create_type=False) \
        if bind.dialect.name == 'postgresql' else sa.Enum(*DAY_STATUS, name='training_plan_day_status_enum')
    knowledge_level = postgresql.ENUM(*KNOWLEDGE_LEVEL, name='knowledge_level_enum', create_type=False) \
        if bind.dialect.name == 'postgresql' else sa.Enum(*KNOWLEDGE_LEVEL, name='knowledge_level_enum')

    op.create_table('departments',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('name')
    )
    op.create_table('roles',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('name')
    )
    op.create_table('facility_topics',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('code', sa.String(length=32), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('overview', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('code')
    )
    op.create_table('tasks',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('department_id', sa.String(length=36), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['department_id'], ['departments.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tasks_department_id'), 'tasks', ['department_id'], unique=False)
    op.create_table('role_tasks',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('role_id', sa.String(length=36), nullable=False),
    sa.Column('task_id', sa.String(length=36), nullable=False),
    sa.Column('sort_order', sa.Integer(), nullable=False),
    sa.Column('required', sa.Boolean(), nullable=False),
    sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('role_id', 'task_id', name='uq_role_tasks_role_task')
    )
    op.create_index('idx_role_tasks_role_order', 'role_tasks', ['role_id', 'sort_order'], unique=False)
    op.create_table('trainees',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('role_id', sa.String(length=36), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_trainees_role_id'), 'trainees', ['role_id'], unique=False)
    op.create_table('training_plans',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('trainee_id', sa.String(length=36), nullable=False),
    sa.Column('trainer_name', sa.String(length=255), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('status', plan_status, nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['trainee_id'], ['trainees.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_training_plans_trainee_id'), 'training_plans', ['trainee_id'], unique=False)
    op.create_index(op.f('ix_training_plans_status'), 'training_plans', ['status'], unique=False)
    op.create_index('idx_training_plans_trainee_status', 'training_plans', ['trainee_id', 'status'], unique=False)
    op.create_index('idx_training_plans_created', 'training_plans', ['created_at'], unique=False)
    op.create_table('training_plan_days',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('plan_id', sa.String(length=36), nullable=False),
    sa.Column('day_number', sa.Integer(), nullable=False),
    sa.Column('step_focus', sa.String(length=255), nullable=False),
    sa.Column('objectives', sa.Text(), nullable=True),
    sa.Column('status', day_status, nullable=False),
    sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['plan_id'], ['training_plans.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('plan_id', 'day_number', name='uq_training_plan_days_plan_day')
    )
    op.create_index(op.f('ix_training_plan_days_plan_id'), 'training_plan_days', ['plan_id'], unique=False)
    op.create_table('training_plan_day_tasks',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('plan_day_id', sa.String(length=36), nullable=False),
    sa.Column('task_id', sa.String(length=36), nullable=False),
    sa.Column('sort_order', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['plan_day_id'], ['training_plan_days.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_training_plan_day_tasks_task_id'), 'training_plan_day_tasks', ['task_id'], unique=False)
    op.create_index('idx_training_plan_day_tasks_day_order', 'training_plan_day_tasks', ['plan_day_id', 'sort_order'], unique=False)
    op.create_table('training_plan_day_topics',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('plan_day_id', sa.String(length=36), nullable=False),
    sa.Column('facility_topic_id', sa.String(length=36), nullable=False),
    sa.Column('sort_order', sa.Integer(), nullable=False),
    sa.Column('baseline_level', knowledge_level, nullable=False),
    sa.Column('target_level', knowledge_level, nullable=False),
    sa.Column('emphasis_notes', sa.Text(), nullable=True),
    sa.ForeignKeyConstraint(['facility_topic_id'], ['facility_topics.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['plan_day_id'], ['training_plan_days.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_training_plan_day_topics_facility_topic_id'), 'training_plan_day_topics', ['facility_topic_id'], unique=False)
    op.create_index('idx_training_plan_day_topics_day_order', 'training_plan_day_topics', ['plan_day_id', 'sort_order'], unique=False)
    op.create_table('trainee_topic_knowledge',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('trainee_id', sa.String(length=36), nullable=False),
    sa.Column('topic_id', sa.String(length=36), nullable=False),
    sa.Column('current_level', knowledge_level, nullable=False),
    sa.Column('assessed_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('source_plan_day_id', sa.String(length=36), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['source_plan_day_id'], ['training_plan_days.id'], ondelete='SET NULL'),
    sa.ForeignKeyConstraint(['topic_id'], ['facility_topics.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['trainee_id'], ['trainees.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('trainee_id', 'topic_id', name='uq_trainee_topic_knowledge_pair')
    )
    op.create_index(op.f('ix_trainee_topic_knowledge_trainee_id'), 'trainee_topic_knowledge', ['trainee_id'], unique=False)
    op.create_index(op.f('ix_trainee_topic_knowledge_topic_id'), 'trainee_topic_knowledge', ['topic_id'], unique=False)
    op.create_table('daily_sessions',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('trainee_id', sa.String(length=36), nullable=False),
    sa.Column('trainer_name', sa.String(length=255), nullable=False),
    sa.Column('session_date', sa.DateTime(timezone=True), nullable=False),
    sa.Column('facility_topic_id', sa.String(length=36), nullable=True),
    sa.Column('plan_day_id', sa.String(length=36), nullable=True),
    sa.Column('trainee_signature', sa.Text(), nullable=True),
    sa.Column('trainer_signature', sa.Text(), nullable=True),
    sa.Column('signed_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('competency_attested', sa.Boolean(), nullable=False),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['facility_topic_id'], ['facility_topics.id'], ondelete='SET NULL'),
    sa.ForeignKeyConstraint(['plan_day_id'], ['training_plan_days.id'], ondelete='SET NULL'),
    sa.ForeignKeyConstraint(['trainee_id'], ['trainees.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('plan_day_id', name='uq_daily_sessions_plan_day')
    )
    op.create_index(op.f('ix_daily_sessions_trainee_id'), 'daily_sessions', ['trainee_id'], unique=False)
    op.create_index('idx_daily_sessions_trainee_date', 'daily_sessions', ['trainee_id', 'session_date'], unique=False)
    op.create_table('daily_task_blocks',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('session_id', sa.String(length=36), nullable=False),
    sa.Column('task_id', sa.String(length=36), nullable=False),
    sa.Column('sort_order', sa.Integer(), nullable=False),
    sa.Column('step1', sa.Boolean(), nullable=False),
    sa.Column('step2', sa.Boolean(), nullable=False),
    sa.Column('step3', sa.Boolean(), nullable=False),
    sa.Column('step4', sa.Boolean(), nullable=False),
    sa.Column('strength', sa.Text(), nullable=True),
    sa.Column('opportunity', sa.Text(), nullable=True),
    sa.Column('action', sa.Text(), nullable=True),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['session_id'], ['daily_sessions.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_daily_task_blocks_task_id'), 'daily_task_blocks', ['task_id'], unique=False)
    op.create_index('idx_daily_task_blocks_session_order', 'daily_task_blocks', ['session_id', 'sort_order'], unique=False)
    op.create_table('audit_events',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('entity_type', sa.String(length=64), nullable=False),
    sa.Column('entity_id', sa.String(length=64), nullable=False),
    sa.Column('action', sa.String(length=64), nullable=False),
    sa.Column('actor_name', sa.String(length=255), nullable=True),
    sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('before', sa.JSON(), nullable=True),
    sa.Column('after', sa.JSON(), nullable=True),
    sa.Column('correlation_id', sa.String(length=64), nullable=True),
    sa.Column('metadata', sa.JSON(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_audit_events_id'), 'audit_events', ['id'], unique=False)
    op.create_index(op.f('ix_audit_events_entity_type'), 'audit_events', ['entity_type'], unique=False)
    op.create_index(op.f('ix_audit_events_entity_id'), 'audit_events', ['entity_id'], unique=False)
    op.create_index(op.f('ix_audit_events_action'), 'audit_events', ['action'], unique=False)
    op.create_index(op.f('ix_audit_events_occurred_at'), 'audit_events', ['occurred_at'], unique=False)
    op.create_index(op.f('ix_audit_events_correlation_id'), 'audit_events', ['correlation_id'], unique=False)
    op.create_index('ix_audit_events_entity', 'audit_events', ['entity_type', 'entity_id'], unique=False)
    op.create_index('ix_audit_events_action_by_type', 'audit_events', ['entity_type', 'action'], unique=False)
    op.create_index('ix_audit_events_time_desc', 'audit_events', [sa.text('occurred_at DESC')], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('audit_events')
    op.drop_table('daily_task_blocks')
    op.drop_table('daily_sessions')
    op.drop_table('trainee_topic_knowledge')
    op.drop_table('training_plan_day_topics')
    op.drop_table('training_plan_day_tasks')
    op.drop_table('training_plan_days')
    op.drop_table('training_plans')
    op.drop_table('trainees')
    op.drop_table('role_tasks')
    op.drop_table('tasks')
    op.drop_table('facility_topics')
    op.drop_table('roles')
    op.drop_table('departments')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        postgresql.ENUM(name='knowledge_level_enum').drop(bind, checkfirst=True)
        postgresql.ENUM(name='training_plan_day_status_enum').drop(bind, checkfirst=True)
        postgresql.ENUM(name='training_plan_status_enum').drop(bind, checkfirst=True)
