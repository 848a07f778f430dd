from flask import Blueprint

api_bp = Blueprint("api", __name__, url_prefix="/api")

# Import route modules to register their endpoints
from . import tasks      # noqa: E402,F401
from . import files      # noqa: E402,F401
from . import resources  # noqa: E402,F401
from . import notes      # noqa: E402,F401
from . import topics     # noqa: E402,F401
