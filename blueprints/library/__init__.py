"""
Library blueprint initialization.
Assembles the resource catalog and reservation JSON routes under /api.

Route logic lives in:
- routes/resources.py - Catalog, availability, slots, calendars
- routes/reservations.py - Reservation lifecycle for requesters and admins
"""

from flask import Blueprint

library_bp = Blueprint('library', __name__)

from blueprints.library.routes import resources
from blueprints.library.routes import reservations

resources.register_routes(library_bp)
reservations.register_routes(library_bp)
