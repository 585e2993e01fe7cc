"""
ASGI entry point for the uptime monitor.
Run with: uvicorn asgi:application
"""

from main import app

# Export the app for ASGI servers
application = app
