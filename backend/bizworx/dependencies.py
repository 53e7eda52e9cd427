# Re-export database dependency
from .db import get_db

# Re-export authentication dependencies
from .auth import get_current_tenant, get_api_key_tenant, require_admin, require_team_member
