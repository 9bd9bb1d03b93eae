from kcms.blueprints.admin.registration_routes import registration_admin_bp
from kcms.blueprints.admin.routes import admin_bp

__all__ = ['admin_bp', 'registration_admin_bp']
