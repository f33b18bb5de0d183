from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Export endpoints carry their own per-route limit (EXPORT_RATE_LIMIT); see routes/templates.py
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "300 per hour"],
    storage_uri="memory://"
)
