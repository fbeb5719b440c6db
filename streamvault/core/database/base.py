# File: streamvault/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. VideoModel and NotificationModel inherit from this.
Base = declarative_base()
