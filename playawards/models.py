from __future__ import annotations

from datetime import datetime

from . import db
from .entities import HistoryEntry, Item
from .statuses import DEFAULT_STATUS, normalize_status_value, status_label


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_STATUS)
    genre = db.Column(db.String(64), nullable=True)
    price_amount = db.Column(db.Float, nullable=False, default=0.0)
    rating = db.Column(db.Float, nullable=False, default=0.0)
    acquired_free = db.Column(db.Boolean, nullable=False, default=False)
    base_hours = db.Column(db.Float, nullable=False, default=0.0)
    start_date = db.Column(db.Date, nullable=True)
    finish_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    play_logs = db.relationship(
        "PlayLog",
        backref="game",
        order_by="PlayLog.id",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "status_label": status_label(self.status),
            "genre": self.genre,
            "price_amount": self.price_amount,
            "rating": self.rating,
            "acquired_free": self.acquired_free,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "finish_date": self.finish_date.isoformat() if self.finish_date else None,
            "created_at": self.created_at.isoformat(),
        }

    def to_item(self) -> Item:
        """Snapshot this game and its play logs for the award engine."""

        return Item(
            id=self.id,
            name=self.title,
            genre=(self.genre or "").strip() or None,
            price=max(0.0, float(self.price_amount or 0.0)),
            rating=max(0.0, float(self.rating or 0.0)),
            status=normalize_status_value(self.status),
            acquired_free=bool(self.acquired_free),
            base_hours=max(0.0, float(self.base_hours or 0.0)),
            start_date=self.start_date,
            end_date=self.finish_date,
            history=tuple(
                HistoryEntry(day=log.session_date, hours=max(0.0, float(log.hours or 0.0)))
                for log in self.play_logs
                if log.session_date is not None
            ),
        )


class PlayLog(db.Model):
    __tablename__ = "play_logs"

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)
    session_date = db.Column(db.Date, nullable=False)
    hours = db.Column(db.Float, nullable=False, default=0.0)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "game_id": self.game_id,
            "session_date": self.session_date.isoformat(),
            "hours": self.hours,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }


class GameAward(db.Model):
    """A recorded winner: one game per category and period."""

    __tablename__ = "game_awards"
    __table_args__ = (
        db.UniqueConstraint("category", "period_key", name="uq_award_category_period"),
    )

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)
    category = db.Column(db.String(64), nullable=False)
    label = db.Column(db.String(128), nullable=False)
    icon = db.Column(db.String(16), nullable=False, default="")
    period_type = db.Column(db.String(16), nullable=False)
    period_key = db.Column(db.String(16), nullable=False)
    period_start = db.Column(db.Date, nullable=False)
    awarded_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    game = db.relationship("Game")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "game_id": self.game_id,
            "game_title": self.game.title if self.game else None,
            "category": self.category,
            "label": self.label,
            "icon": self.icon,
            "period_type": self.period_type,
            "period_key": self.period_key,
            "period_start": self.period_start.isoformat(),
            "awarded_at": self.awarded_at.isoformat(),
        }
