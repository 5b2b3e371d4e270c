"""
Serverless entry for the search proxy.
"""
import sys
from pathlib import Path

# the serverless builder does not install the project, so expose backend/ directly
backend_path = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_path))

from mangum import Mangum

from repo_search.main import app

# Mangum turns the platform's (event, context) calls into ASGI requests
mangum_handler = Mangum(app, lifespan="off")


def handler(event, context=None):
    """Serverless function handler"""
    return mangum_handler(event, context)
