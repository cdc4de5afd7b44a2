# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - security: Password hashing and access tokens
# - uploads: Local image storage
# - storage: Pluggable storage backends (MongoDB, in-memory fallback)
