from kcms.blueprints.coach.routes import coach_bp

__all__ = ['coach_bp']
