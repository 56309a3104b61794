"""ASGI entry point for deployment."""

import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from dotacompanion.api import AppContext, create_app
from dotacompanion.core.config import configure_logging, load_config

config = load_config()
configure_logging(config.logging)

app = create_app(AppContext.from_config(config))

# For gunicorn with uvicorn workers
# Run with: gunicorn wsgi:app -k uvicorn.workers.UvicornWorker
