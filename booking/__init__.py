from booking.errors import (
    BookingError,
    Conflict,
    ErrorKind,
    InvalidArgument,
    LimitExceeded,
    NotFound,
    PastSchedule,
    PersistenceError,
    Result,
)
from booking.service import (
    cancel_booking,
    create_booking,
    get_booking,
    get_user_bookings,
    update_booking,
)
from booking.catalog import (
    get_available_schedules,
    get_branch_details,
    list_branches,
    list_capsters,
    list_services,
)
