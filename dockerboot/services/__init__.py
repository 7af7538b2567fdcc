"""Service layer for dockerboot."""
