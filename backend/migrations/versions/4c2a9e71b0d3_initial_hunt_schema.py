"""initial hunt schema: teams, puzzles, submissions, hints, presence

Revision ID: 4c2a9e71b0d3
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e71b0d3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'game_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('is_started', sa.Boolean(), nullable=False),
        sa.Column('registration_open', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'puzzle',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=256), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('hint', sa.Text(), nullable=True),
        sa.Column('answer', sa.Text(), nullable=True),
        sa.Column('path_id', sa.Integer(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_puzzle_path_order', 'puzzle', ['path_id', 'order'])

    op.create_table(
        'team',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('house', sa.String(length=32), nullable=False),
        sa.Column('members', sa.Text(), nullable=False),
        sa.Column('path_id', sa.Integer(), nullable=False),
        sa.Column('current_puzzle_index', sa.Integer(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('riddles_solved', sa.Integer(), nullable=False),
        sa.Column('game_start_time', sa.Float(), nullable=True),
        sa.Column('armed_by', sa.String(length=64), nullable=True),
        sa.Column('current_puzzle_start_time', sa.Float(), nullable=True),
        sa.Column('current_submission_id', sa.Integer(), nullable=True),
        sa.Column('paused_at', sa.Float(), nullable=True),
        sa.Column('last_score_change_at', sa.Float(), nullable=True),
        sa.Column('revision', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'submission',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.String(length=64), nullable=False),
        sa.Column('puzzle_id', sa.Integer(), nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=False),
        sa.Column('image_ref', sa.String(length=512), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('submitted_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.Column('resolved_at', sa.Float(), nullable=True),
        sa.Column('resolved_by', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['team_id'], ['team.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['puzzle_id'], ['puzzle.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_submission_team_id', 'submission', ['team_id'])
    op.create_index('ix_submission_status', 'submission', ['status'])

    with op.batch_alter_table('team') as batch_op:
        batch_op.create_foreign_key('fk_team_current_submission_id', 'submission', ['current_submission_id'], ['id'])

    op.create_table(
        'revealed_hint',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.String(length=64), nullable=False),
        sa.Column('puzzle_id', sa.Integer(), nullable=False),
        sa.Column('immediate', sa.Boolean(), nullable=False),
        sa.Column('charged', sa.Integer(), nullable=False),
        sa.Column('revealed_at', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['team.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['puzzle_id'], ['puzzle.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'puzzle_id', name='uq_revealed_hint_team_puzzle'),
    )

    op.create_table(
        'presence_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.String(length=64), nullable=False),
        sa.Column('member_name', sa.String(length=64), nullable=False),
        sa.Column('last_heartbeat', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['team.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'member_name', name='uq_presence_team_member'),
    )


def downgrade():
    op.drop_table('presence_entry')
    op.drop_table('revealed_hint')
    with op.batch_alter_table('team') as batch_op:
        batch_op.drop_constraint('fk_team_current_submission_id', type_='foreignkey')
    op.drop_index('ix_submission_status', table_name='submission')
    op.drop_index('ix_submission_team_id', table_name='submission')
    op.drop_table('submission')
    op.drop_table('team')
    op.drop_index('ix_puzzle_path_order', table_name='puzzle')
    op.drop_table('puzzle')
    op.drop_table('game_settings')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
