"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates the seven tables of the companion backend:
- users, robots: accounts and provisioned robots
- alarms, heartbeat_readings, chat_messages, tasks: per-device data
- device_settings: versioned settings documents, one per (device, kind)

Per-device tables reference robots.robot_id by value only (no foreign keys);
robots.owner_uid holds users.id the same way.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('firebase_uid', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('photo_url', sa.String(length=1024), nullable=True),
        sa.Column('models', sa.JSON(), nullable=True),
        sa.Column('active_model', sa.String(length=10), nullable=True),
        sa.Column('dashboard_lock_enabled', sa.Boolean(), nullable=True),
        sa.Column('dashboard_pin_hash', sa.String(length=255), nullable=True),
        sa.Column('has_robot', sa.Boolean(), nullable=True),
        sa.Column('robot_id', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_firebase_uid'), 'users', ['firebase_uid'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'robots',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('robot_id', sa.String(length=100), nullable=False),
        sa.Column('owner_uid', sa.String(length=64), nullable=True),
        sa.Column('model', sa.String(length=10), nullable=False),
        sa.Column('local_ip', sa.String(length=64), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('network_mode', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('battery_level', sa.Integer(), nullable=True),
        sa.Column('firmware_version', sa.String(length=50), nullable=True),
        sa.Column('firmware_target', sa.String(length=50), nullable=True),
        sa.Column('current_mode', sa.String(length=20), nullable=False),
        sa.Column('last_seen', sa.DateTime(timezone=True), nullable=True),
        sa.Column('wifi_ssid', sa.String(length=64), nullable=True),
        sa.Column('wifi_connected', sa.Boolean(), nullable=True),
        sa.Column('wifi_signal_strength', sa.Integer(), nullable=True),
        sa.Column('gem_status_config', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_robots_robot_id'), 'robots', ['robot_id'], unique=True)
    op.create_index(op.f('ix_robots_owner_uid'), 'robots', ['owner_uid'], unique=False)

    op.create_table(
        'alarms',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('device_id', sa.String(length=100), nullable=False),
        sa.Column('label', sa.String(length=100), nullable=True),
        sa.Column('hour', sa.Integer(), nullable=False),
        sa.Column('minute', sa.Integer(), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=True),
        sa.Column('repeat', sa.JSON(), nullable=True),
        sa.Column('snooze_enabled', sa.Boolean(), nullable=True),
        sa.Column('snooze_duration', sa.Integer(), nullable=True),
        sa.Column('sound_enabled', sa.Boolean(), nullable=True),
        sa.Column('vibration_enabled', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_alarms_device_id'), 'alarms', ['device_id'], unique=False)

    op.create_table(
        'heartbeat_readings',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('device_id', sa.String(length=100), nullable=False),
        sa.Column('bpm', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('quality', sa.String(length=10), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_heartbeat_readings_device_id'), 'heartbeat_readings', ['device_id'], unique=False)
    op.create_index(op.f('ix_heartbeat_readings_session_id'), 'heartbeat_readings', ['session_id'], unique=False)
    op.create_index(op.f('ix_heartbeat_readings_timestamp'), 'heartbeat_readings', ['timestamp'], unique=False)

    op.create_table(
        'chat_messages',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('device_id', sa.String(length=100), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('message_type', sa.String(length=10), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('tokens_used', sa.Integer(), nullable=True),
        sa.Column('response_time', sa.Integer(), nullable=True),
        sa.Column('model_name', sa.String(length=50), nullable=True),
        sa.Column('temperature', sa.Float(), nullable=True),
        sa.Column('max_tokens', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_chat_messages_device_id'), 'chat_messages', ['device_id'], unique=False)
    op.create_index(op.f('ix_chat_messages_session_id'), 'chat_messages', ['session_id'], unique=False)
    op.create_index(op.f('ix_chat_messages_timestamp'), 'chat_messages', ['timestamp'], unique=False)

    op.create_table(
        'device_settings',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('device_id', sa.String(length=100), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('schema_version', sa.Integer(), nullable=False),
        sa.Column('values', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('device_id', 'kind', name='uq_device_settings_device_kind'),
    )
    op.create_index(op.f('ix_device_settings_device_id'), 'device_settings', ['device_id'], unique=False)

    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('device_id', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('completed', sa.Boolean(), nullable=True),
        sa.Column('priority', sa.String(length=10), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tasks_device_id'), 'tasks', ['device_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_tasks_device_id'), table_name='tasks')
    op.drop_table('tasks')
    op.drop_index(op.f('ix_device_settings_device_id'), table_name='device_settings')
    op.drop_table('device_settings')
    op.drop_index(op.f('ix_chat_messages_timestamp'), table_name='chat_messages')
    op.drop_index(op.f('ix_chat_messages_session_id'), table_name='chat_messages')
    op.drop_index(op.f('ix_chat_messages_device_id'), table_name='chat_messages')
    op.drop_table('chat_messages')
    op.drop_index(op.f('ix_heartbeat_readings_timestamp'), table_name='heartbeat_readings')
    op.drop_index(op.f('ix_heartbeat_readings_session_id'), table_name='heartbeat_readings')
    op.drop_index(op.f('ix_heartbeat_readings_device_id'), table_name='heartbeat_readings')
    op.drop_table('heartbeat_readings')
    op.drop_index(op.f('ix_alarms_device_id'), table_name='alarms')
    op.drop_table('alarms')
    op.drop_index(op.f('ix_robots_owner_uid'), table_name='robots')
    op.drop_index(op.f('ix_robots_robot_id'), table_name='robots')
    op.drop_table('robots')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_firebase_uid'), table_name='users')
    op.drop_table('users')
