from .health import health_bp
from .auth import auth_bp
from .catalog import catalog_bp
from .booking import booking_bp
