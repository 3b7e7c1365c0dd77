from reservations.models.user import User  # noqa: F401
from reservations.models.facility import Facility  # noqa: F401
from reservations.models.booking import Booking  # noqa: F401
from reservations.models.location import State  # noqa: F401
from reservations.models.audit_log import AuditLog  # noqa: F401
