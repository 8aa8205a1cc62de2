"""Admin module: stats, user and course moderation, instructor approval."""
