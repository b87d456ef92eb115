"""Serverless entrypoint."""

from mbsdesk.main import create_app

# The Python runtime routes HTTP requests to a module-level ASGI `app`.
app = create_app()
handler = app
