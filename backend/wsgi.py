# backend/wsgi.py
from phoneledger import create_app

app = create_app()
