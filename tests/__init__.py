import os

# Keep the suite off the on-disk database and off Redis
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("USE_REDIS", "false")
