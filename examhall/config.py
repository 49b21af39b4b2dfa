import os

DATABASE_URL = os.environ.get("EXAMHALL_DATABASE_URL", "sqlite:///./examhall.db")
EXPORT_DIR = os.environ.get("EXAMHALL_EXPORT_DIR", "exports")
LOG_LEVEL = os.environ.get("EXAMHALL_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("EXAMHALL_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

HOST = os.environ.get("EXAMHALL_HOST", "0.0.0.0")
PORT = int(os.environ.get("EXAMHALL_PORT", "5000"))
