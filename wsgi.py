# wsgi.py (at repo root), e.g. ``gunicorn wsgi:app``
from dotenv import load_dotenv

load_dotenv()

from wellness_portal import create_app  # noqa: E402

app = create_app()
