"""Static landing page."""

from __future__ import annotations

from flask import Blueprint, current_app, send_from_directory

root_bp = Blueprint('root_bp', __name__)


@root_bp.route('/')
def landing_page():
    return send_from_directory(current_app.static_folder, 'index.html')
