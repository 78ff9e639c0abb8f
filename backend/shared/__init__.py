"""
Shared module for code used across the REST API.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Statuses, transition tables, limits

- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy engine and sessions, safe_commit()
  - retry.py: Bounded retry with backoff
  - correlation.py: Request correlation ids

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input validation
  - schemas.py: Pydantic request/response schemas
  - health.py: Health checks

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, TicketStatus
    from shared.utils.exceptions import NotFoundError, InsufficientStockError
"""
