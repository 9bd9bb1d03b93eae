from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from flask import g

from kcms import create_app
from kcms.config import Config
from kcms.extensions import db
from kcms.models import (
    Belt,
    ExamPeriod,
    Organization,
    OrganizationType,
    Player,
    Profile,
    ProfileRole,
)
from kcms.services.session import SessionContext

PASSWORD = 'karate-pass-123'


class UnitTestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    ORGANIZATION_TITLE = 'منطقة الإسكندرية للكاراتيه'


@pytest.fixture()
def app():
    app = create_app(UnitTestConfig)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


def make_profile(email, role, organization_id=None, full_name=None, password=PASSWORD):
    profile = Profile(
        email=email,
        full_name=full_name or email.split('@')[0],
        role=role.value if isinstance(role, ProfileRole) else role,
        organization_id=organization_id,
    )
    profile.set_password(password)
    db.session.add(profile)
    return profile


def make_player(coach, full_name, belt=Belt.WHITE, **kwargs):
    player = Player(
        full_name=full_name,
        belt=belt,
        coach_id=coach.id,
        organization_id=coach.organization_id,
        **kwargs,
    )
    db.session.add(player)
    return player


@pytest.fixture()
def seed(app):
    """Two clubs, an admin, two coaches with players, and an unknown-role profile."""
    with app.app_context():
        club = Organization(name='نادي سموحة', type=OrganizationType.CLUB)
        center = Organization(name='مركز شباب الشاطبي', type=OrganizationType.YOUTH_CENTER)
        db.session.add_all([club, center])
        db.session.flush()

        admin = make_profile('admin@karate-club.org', ProfileRole.ADMIN, full_name='مدير المنطقة')
        coach_a = make_profile('coach.a@karate-club.org', ProfileRole.COACH, club.id, full_name='كابتن أحمد')
        coach_b = make_profile('coach.b@karate-club.org', ProfileRole.COACH, center.id, full_name='كابتن سارة')
        stranger = make_profile('referee@karate-club.org', 'referee', full_name='حكم')
        db.session.flush()

        player_a1 = make_player(coach_a, 'يوسف علي', Belt.YELLOW, birth_date=date(2012, 5, 1), file_number=101)
        player_a2 = make_player(coach_a, 'مريم حسن', Belt.BLACK, birth_date=date(2008, 1, 15), file_number=102)
        player_b1 = make_player(coach_b, 'عمر خالد', Belt.GREEN, file_number=201)
        db.session.commit()

        return SimpleNamespace(
            club_id=club.id,
            center_id=center.id,
            admin_id=admin.id,
            coach_a_id=coach_a.id,
            coach_b_id=coach_b.id,
            stranger_id=stranger.id,
            player_a1_id=player_a1.id,
            player_a2_id=player_a2.id,
            player_b1_id=player_b1.id,
            admin_email=admin.email,
            coach_a_email=coach_a.email,
            coach_b_email=coach_b.email,
            stranger_email=stranger.email,
        )


@pytest.fixture()
def active_exam(app):
    """An exam period that contains today."""
    with app.app_context():
        today = date.today()
        period = ExamPeriod(
            name='اختبار الحزام',
            start_date=today - timedelta(days=3),
            end_date=today + timedelta(days=3),
        )
        db.session.add(period)
        db.session.commit()
        return period.id


def login(client, email, password=PASSWORD):
    return client.post('/auth/login', json={'email': email, 'password': password})


def open_context(profile_id):
    """Attach a session context for ``profile_id`` to the current request."""
    profile = db.session.get(Profile, profile_id) if profile_id else None
    g.session_ctx = SessionContext.open(profile)
    return g.session_ctx
