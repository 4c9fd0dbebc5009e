from .db import db
from .user import User
from .session import Session
from .audit_log import AuditLog
from .branch import Branch
from .capster import Capster
from .service import Service
from .booking import Booking, BookingStatus
