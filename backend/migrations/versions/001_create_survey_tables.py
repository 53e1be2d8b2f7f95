"""Create survey tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Tables: survey_template, question, survey, survey_email, survey_response
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'survey_template',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'question',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('template_id', sa.String(36), nullable=False),
        sa.Column('code', sa.Text(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False, server_default=''),
        sa.Column('category', sa.Text(), nullable=True),
        sa.Column('type', sa.Text(), nullable=False, server_default='RATING'),
        sa.Column('min_value', sa.Integer(), nullable=True),
        sa.Column('max_value', sa.Integer(), nullable=True),
        sa.Column('required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['template_id'], ['survey_template.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('template_id', 'code', name='uq_question_template_code'),
        sa.CheckConstraint("type IN ('RATING', 'YESNO', 'TEXT', 'LONGTEXT')", name='ck_question_type'),
    )
    op.create_index('ix_question_template_id', 'question', ['template_id'])

    op.create_table(
        'survey',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('template_id', sa.String(36), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='DRAFT'),
        sa.Column('accepts_replies', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['template_id'], ['survey_template.id'], ondelete='RESTRICT'),
        sa.CheckConstraint(
            "status IN ('DRAFT', 'SENT', 'PARTIAL', 'COMPLETED', 'CLOSED')",
            name='ck_survey_status'
        ),
    )
    op.create_index('ix_survey_template_id', 'survey', ['template_id'])
    op.create_index('idx_survey_status', 'survey', ['status'])

    op.create_table(
        'survey_email',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('survey_id', sa.String(36), nullable=False),
        sa.Column('recipient_email', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='PENDING'),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('has_reply', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reply_received_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reply_content', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['survey_id'], ['survey.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "status IN ('PENDING', 'SENT', 'FAILED', 'REPLIED')",
            name='ck_survey_email_status'
        ),
    )
    op.create_index(
        'idx_survey_email_survey_recipient',
        'survey_email',
        ['survey_id', 'recipient_email']
    )

    # One response per question per survey; upserts conflict on this key
    op.create_table(
        'survey_response',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('survey_id', sa.String(36), nullable=False),
        sa.Column('question_id', sa.String(36), nullable=False),
        sa.Column('rating_value', sa.Integer(), nullable=True),
        sa.Column('text_value', sa.Text(), nullable=True),
        sa.Column('bool_value', sa.Boolean(), nullable=True),
        sa.Column('na_value', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('respondent_email', sa.Text(), nullable=True),
        sa.Column('source', sa.Text(), nullable=False, server_default='EMAIL'),
        sa.Column('raw_email_content', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['survey_id'], ['survey.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['question.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('survey_id', 'question_id', name='uq_survey_response_survey_question'),
    )
    op.create_index('ix_survey_response_survey_id', 'survey_response', ['survey_id'])


def downgrade():
    op.drop_index('ix_survey_response_survey_id', table_name='survey_response')
    op.drop_table('survey_response')

    op.drop_index('idx_survey_email_survey_recipient', table_name='survey_email')
    op.drop_table('survey_email')

    op.drop_index('idx_survey_status', table_name='survey')
    op.drop_index('ix_survey_template_id', table_name='survey')
    op.drop_table('survey')

    op.drop_index('ix_question_template_id', table_name='question')
    op.drop_table('question')

    op.drop_table('survey_template')
