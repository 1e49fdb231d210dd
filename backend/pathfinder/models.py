from pathfinder import db, bcrypt
from flask_login import UserMixin
import json
import time

HOUSES = ('Halwa', 'Chamcham', 'Jalebi', 'Ladoo')

SUBMISSION_PENDING = 'pending'
SUBMISSION_APPROVED = 'approved'
SUBMISSION_REJECTED = 'rejected'


class User(UserMixin, db.Model):
    """Organizer account allowed to grade submissions and run the hunt."""
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class GameSettings(db.Model):
    __tablename__ = 'game_settings'
    id = db.Column(db.Integer, primary_key=True)
    is_started = db.Column(db.Boolean, default=False, nullable=False)
    registration_open = db.Column(db.Boolean, default=True, nullable=False)

    @classmethod
    def current(cls):
        """Return the single settings row, creating it on first use."""
        settings = db.session.get(cls, 1)
        if settings is None:
            settings = cls(id=1, is_started=False, registration_open=True)
            db.session.add(settings)
            db.session.commit()
        return settings

    def to_dict(self):
        return {
            'is_started': self.is_started,
            'registration_open': self.registration_open,
        }


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.String(64), primary_key=True)  # doubles as the secret code
    name = db.Column(db.String(128), nullable=False)
    house = db.Column(db.String(32), nullable=False)
    members = db.Column(db.Text, nullable=False, default='[]')  # JSON-encoded list of names
    path_id = db.Column(db.Integer, nullable=False)
    current_puzzle_index = db.Column(db.Integer, nullable=False, default=0)
    score = db.Column(db.Integer, nullable=False, default=0)
    riddles_solved = db.Column(db.Integer, nullable=False, default=0)
    # Server epoch seconds
    game_start_time = db.Column(db.Float, nullable=True)
    armed_by = db.Column(db.String(64), nullable=True)
    current_puzzle_start_time = db.Column(db.Float, nullable=True)
    current_submission_id = db.Column(db.Integer, db.ForeignKey('submission.id', name='fk_team_current_submission_id', use_alter=True), nullable=True)
    paused_at = db.Column(db.Float, nullable=True)
    last_score_change_at = db.Column(db.Float, nullable=True)
    revision = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.Float, nullable=False, default=time.time)

    revealed_hints = db.relationship('RevealedHint', backref='team', lazy='dynamic', cascade='all, delete-orphan')
    presence = db.relationship('PresenceEntry', backref='team', lazy='dynamic', cascade='all, delete-orphan')

    @property
    def member_names(self):
        return json.loads(self.members) if self.members else []

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'house': self.house,
            'members': self.member_names,
            'path_id': self.path_id,
            'current_puzzle_index': self.current_puzzle_index,
            'score': self.score,
            'riddles_solved': self.riddles_solved,
            'game_start_time': self.game_start_time,
            'armed_by': self.armed_by,
            'current_puzzle_start_time': self.current_puzzle_start_time,
            'current_submission_id': self.current_submission_id,
            'paused_at': self.paused_at,
            'revealed_hints': sorted(h.puzzle_id for h in self.revealed_hints),
            'online_members': {p.member_name: p.last_heartbeat for p in self.presence},
            'revision': self.revision,
        }


class Puzzle(db.Model):
    __tablename__ = 'puzzle'
    __table_args__ = (db.Index('ix_puzzle_path_order', 'path_id', 'order'),)
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(256), nullable=False)
    body = db.Column(db.Text, nullable=False)
    hint = db.Column(db.Text, nullable=True)
    answer = db.Column(db.Text, nullable=True)
    path_id = db.Column(db.Integer, nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self, include_hint=False):
        data = {
            'id': self.id,
            'title': self.title,
            'body': self.body,
            'has_hint': bool(self.hint),
            'path_id': self.path_id,
            'order': self.order,
        }
        if include_hint:
            data['hint'] = self.hint
        return data


class Submission(db.Model):
    __tablename__ = 'submission'
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.String(64), db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False, index=True)
    puzzle_id = db.Column(db.Integer, db.ForeignKey('puzzle.id'), nullable=False)
    answer_text = db.Column(db.Text, nullable=False)
    image_ref = db.Column(db.String(512), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=SUBMISSION_PENDING, index=True)
    submitted_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.Float, nullable=False)
    resolved_at = db.Column(db.Float, nullable=True)
    resolved_by = db.Column(db.String(64), nullable=True)

    puzzle = db.relationship('Puzzle')

    def to_dict(self):
        return {
            'id': self.id,
            'team_id': self.team_id,
            'puzzle_id': self.puzzle_id,
            'puzzle_title': self.puzzle.title if self.puzzle else None,
            'answer_text': self.answer_text,
            'image_ref': self.image_ref,
            'status': self.status,
            'submitted_by': self.submitted_by,
            'created_at': self.created_at,
            'resolved_at': self.resolved_at,
            'resolved_by': self.resolved_by,
        }


class RevealedHint(db.Model):
    __tablename__ = 'revealed_hint'
    __table_args__ = (db.UniqueConstraint('team_id', 'puzzle_id', name='uq_revealed_hint_team_puzzle'),)
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.String(64), db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False)
    puzzle_id = db.Column(db.Integer, db.ForeignKey('puzzle.id'), nullable=False)
    immediate = db.Column(db.Boolean, nullable=False, default=False)
    charged = db.Column(db.Integer, nullable=False)
    revealed_at = db.Column(db.Float, nullable=False)


class PresenceEntry(db.Model):
    __tablename__ = 'presence_entry'
    __table_args__ = (db.UniqueConstraint('team_id', 'member_name', name='uq_presence_team_member'),)
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.String(64), db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False)
    member_name = db.Column(db.String(64), nullable=False)
    last_heartbeat = db.Column(db.Float, nullable=False)
