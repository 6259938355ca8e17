"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask_wtf.csrf import CSRFProtect

from utils.mailer import Mailer

# Initialize CSRF Protection
csrf = CSRFProtect()

# Outgoing mail (queued, delivered by a background thread)
mailer = Mailer()
