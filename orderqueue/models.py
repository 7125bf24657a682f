from flask_sqlalchemy import SQLAlchemy
from datetime import datetime
from enum import Enum

db = SQLAlchemy()


class OrderStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"


# Orders in these states share the production line
ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.IN_PROGRESS)


class User(db.Model):
    """Application user, authenticated through a session cookie."""
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    full_name = db.Column(db.String(128), nullable=True)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.username}>"


class ProductionSettings(db.Model):
    '''Process-wide defaults copied onto new orders'''
    __tablename__ = "production_settings"

    id = db.Column(db.Integer, primary_key=True)
    product_a_name = db.Column(db.String(128), nullable=False)
    product_b_name = db.Column(db.String(128), nullable=False)
    product_a_time = db.Column(db.Integer, nullable=False)  # minutes per unit
    product_b_time = db.Column(db.Integer, nullable=False)  # minutes per unit
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def get_current(cls):
        '''Get the current settings row, if one has been saved'''
        return cls.query.order_by(cls.id.asc()).first()

    def to_dict(self):
        return {
            'product_a_name': self.product_a_name,
            'product_b_name': self.product_b_name,
            'product_a_time': self.product_a_time,
            'product_b_time': self.product_b_time,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class Order(db.Model):
    """A production order queued on the shared production line."""
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # FIFO sort key for the production queue
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Demand
    product_a_quantity = db.Column(db.Integer, nullable=False, default=0)
    product_b_quantity = db.Column(db.Integer, nullable=False, default=0)

    # Snapshot of production parameters at creation time
    product_a_name = db.Column(db.String(128), nullable=True)
    product_b_name = db.Column(db.String(128), nullable=True)
    production_time_a = db.Column(db.Integer, nullable=False)  # minutes per unit
    production_time_b = db.Column(db.Integer, nullable=False)  # minutes per unit
    daily_capacity = db.Column(db.Integer, nullable=False)  # minutes per day

    # Derived schedule, rewritten by queue recalculation
    total_days = db.Column(db.Integer, nullable=True)
    estimated_completion_date = db.Column(db.Date, nullable=True)

    status = db.Column(db.Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    completed_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    __table_args__ = (
        db.Index('idx_orders_status_created_at', 'status', 'created_at'),
    )

    def to_schedule_input(self):
        """Plain dict consumed by the production calculator."""
        return {
            'id': self.id,
            'product_a_quantity': self.product_a_quantity,
            'product_b_quantity': self.product_b_quantity,
            'production_time_a': self.production_time_a,
            'production_time_b': self.production_time_b,
            'daily_capacity': self.daily_capacity,
            'total_days': self.total_days,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'product_a_quantity': self.product_a_quantity,
            'product_b_quantity': self.product_b_quantity,
            'product_a_name': self.product_a_name,
            'product_b_name': self.product_b_name,
            'production_time_a': self.production_time_a,
            'production_time_b': self.production_time_b,
            'daily_capacity': self.daily_capacity,
            'total_days': self.total_days,
            'estimated_completion_date': (
                self.estimated_completion_date.isoformat() if self.estimated_completion_date else None
            ),
            'status': self.status.value,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'notes': self.notes,
        }

    def __repr__(self):
        return f"<Order {self.id} - {self.status.value if self.status else None}>"
