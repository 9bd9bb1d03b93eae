from datetime import date, timedelta

from conftest import login, open_context
from kcms.extensions import db
from kcms.labels import message
from kcms.models import AuditLog, Belt, ExamPeriod, ExamRegistration, PeriodKind, Player, TournamentRegistration
from kcms.services.registrations import register_player, unregister_player


def _exam_rows(app):
    with app.app_context():
        return ExamRegistration.query.count()


class TestRegistrationService:
    def test_register_snapshots_player(self, app, seed, active_exam):
        with app.test_request_context('/'):
            ctx = open_context(seed.coach_a_id)
            registration, error = register_player(ctx, PeriodKind.EXAM, seed.player_a2_id)
            assert error is None
            assert registration.period_id == active_exam
            assert registration.coach_id == seed.coach_a_id
            assert registration.player_name == 'مريم حسن'
            assert registration.birth_date == date(2008, 1, 15)
            assert registration.last_belt is Belt.BLACK

    def test_register_then_unregister_leaves_no_residue(self, app, seed, active_exam):
        before = _exam_rows(app)
        with app.test_request_context('/'):
            ctx = open_context(seed.coach_a_id)
            _, error = register_player(ctx, PeriodKind.EXAM, seed.player_a1_id)
            assert error is None
            count, error = unregister_player(ctx, PeriodKind.EXAM, seed.player_a1_id)
            assert (count, error) == (1, None)
        assert _exam_rows(app) == before

    def test_snapshot_survives_player_edit(self, app, seed, active_exam):
        with app.test_request_context('/'):
            ctx = open_context(seed.coach_a_id)
            registration, _ = register_player(ctx, PeriodKind.EXAM, seed.player_a1_id)
            registration_id = registration.id

        with app.app_context():
            player = db.session.get(Player, seed.player_a1_id)
            player.belt = Belt.ORANGE
            player.full_name = 'يوسف علي محمود'
            db.session.commit()
            stored = db.session.get(ExamRegistration, registration_id)
            assert stored.last_belt is Belt.YELLOW
            assert stored.player_name == 'يوسف علي'

    def test_no_active_period(self, app, seed):
        with app.test_request_context('/'):
            ctx = open_context(seed.coach_a_id)
            assert register_player(ctx, PeriodKind.EXAM, seed.player_a1_id) == (None, 'no_active_period')
            assert unregister_player(ctx, PeriodKind.EXAM, seed.player_a1_id) == (0, 'no_active_period')

    def test_registration_targets_period_of_the_given_day(self, app, seed):
        with app.app_context():
            db.session.add(ExamPeriod(name='قديمة', start_date=date(2026, 1, 1), end_date=date(2026, 1, 31)))
            db.session.commit()

        with app.test_request_context('/'):
            ctx = open_context(seed.coach_a_id)
            registration, error = register_player(ctx, PeriodKind.EXAM, seed.player_a1_id, today='2026-01-31')
            assert error is None
            assert registration.period.name == 'قديمة'
            _, error = register_player(ctx, PeriodKind.EXAM, seed.player_a2_id, today='2026-02-01')
            assert error == 'no_active_period'

    def test_registration_is_audited(self, app, seed, active_exam):
        with app.test_request_context('/'):
            ctx = open_context(seed.coach_a_id)
            registration, _ = register_player(ctx, PeriodKind.EXAM, seed.player_a1_id)
            entry = AuditLog.query.filter_by(entity_id=registration.id).one()
            assert entry.actor_id == seed.coach_a_id
            assert entry.action == 'exam_registrations_created'


class TestCoachRegistrationScreens:
    def test_register_and_unregister_round_trip(self, client, app, seed, active_exam):
        login(client, seed.coach_a_email)

        response = client.post('/coach/registrations/exam', json={'player_id': seed.player_a1_id})
        assert response.status_code == 201
        body = response.get_json()
        assert body['message'] == message('registered')
        assert body['registered_player_ids'] == [seed.player_a1_id]
        assert body['period']['id'] == active_exam
        assert _exam_rows(app) == 1

        response = client.delete(f'/coach/registrations/exam/{seed.player_a1_id}')
        assert response.status_code == 200
        body = response.get_json()
        assert body['message'] == message('unregistered')
        assert body['items'] == []
        assert _exam_rows(app) == 0

    def test_duplicate_registration_is_rejected(self, client, app, seed, active_exam):
        login(client, seed.coach_a_email)
        client.post('/coach/registrations/exam', json={'player_id': seed.player_a1_id})
        response = client.post('/coach/registrations/exam', json={'player_id': seed.player_a1_id})
        assert response.status_code == 409
        assert response.get_json()['error'] == message('already_registered')
        assert _exam_rows(app) == 1

    def test_cannot_register_another_coach_player(self, client, app, seed, active_exam):
        login(client, seed.coach_a_email)
        response = client.post('/coach/registrations/exam', json={'player_id': seed.player_b1_id})
        assert response.status_code == 404
        assert _exam_rows(app) == 0

    def test_register_without_active_period(self, client, seed):
        login(client, seed.coach_a_email)
        response = client.post('/coach/registrations/tournament', json={'player_id': seed.player_a1_id})
        assert response.status_code == 409
        assert response.get_json()['error'] == message('no_active_period')

    def test_register_with_ambiguous_period(self, client, app, seed, active_exam):
        with app.app_context():
            today = date.today()
            db.session.add(ExamPeriod(name='مكررة', start_date=today, end_date=today + timedelta(days=1)))
            db.session.commit()

        login(client, seed.coach_a_email)
        response = client.post('/coach/registrations/exam', json={'player_id': seed.player_a1_id})
        assert response.status_code == 409
        assert response.get_json()['error'] == message('ambiguous_active_period')
        assert _exam_rows(app) == 0

    def test_unregister_when_not_registered(self, client, seed, active_exam):
        login(client, seed.coach_a_email)
        response = client.delete(f'/coach/registrations/exam/{seed.player_a1_id}')
        assert response.status_code == 404
        assert response.get_json()['error'] == message('not_registered')

    def test_missing_player_id(self, client, seed, active_exam):
        login(client, seed.coach_a_email)
        response = client.post('/coach/registrations/exam', json={})
        assert response.status_code == 400

    def test_non_object_json_body(self, client, seed, active_exam):
        login(client, seed.coach_a_email)
        for body in ([seed.player_a1_id], 'player'):
            response = client.post('/coach/registrations/exam', json=body)
            assert response.status_code == 400
            assert response.get_json()['error'] == message('missing_fields')

    def test_unknown_kind(self, client, seed):
        login(client, seed.coach_a_email)
        response = client.post('/coach/registrations/belts', json={'player_id': seed.player_a1_id})
        assert response.status_code == 404

    def test_dashboard_flags_registered_players(self, client, seed, active_exam):
        login(client, seed.coach_a_email)
        client.post('/coach/registrations/exam', json={'player_id': seed.player_a2_id})

        body = client.get('/coach/').get_json()
        flags = {p['id']: p['registered'] for p in body['players']}
        assert flags[seed.player_a2_id] == {'exam': True}
        assert flags[seed.player_a1_id] == {'exam': False}
        assert body['active_periods']['exam']['id'] == active_exam
        assert body['active_periods']['tournament'] is None
        assert len(body['registrations']['exam']) == 1

    def test_dashboard_search_by_name_and_belt(self, client, seed):
        login(client, seed.coach_a_email)
        by_name = client.get('/coach/', query_string={'q': 'مريم'}).get_json()
        assert [p['id'] for p in by_name['players']] == [seed.player_a2_id]

        by_belt = client.get('/coach/', query_string={'q': 'أصفر'}).get_json()
        assert [p['id'] for p in by_belt['players']] == [seed.player_a1_id]
        assert by_belt['player_count'] == 2


class TestAdminRegistrationScreens:
    def _register_both(self, client, seed):
        login(client, seed.coach_a_email)
        client.post('/coach/registrations/exam', json={'player_id': seed.player_a1_id})
        client.post('/auth/logout')
        login(client, seed.coach_b_email)
        client.post('/coach/registrations/exam', json={'player_id': seed.player_b1_id})
        client.post('/auth/logout')

    def test_admin_lists_and_filters(self, client, seed, active_exam):
        self._register_both(client, seed)
        login(client, seed.admin_email)

        body = client.get('/admin/registrations/exam').get_json()
        assert body['stats']['total'] == 2
        assert body['stats']['coaches'] == 2
        assert body['stats']['by_period'] == {active_exam: 2}
        assert len(body['periods']) == 1

        filtered = client.get('/admin/registrations/exam', query_string={'coach_id': seed.coach_b_id}).get_json()
        assert [r['player_id'] for r in filtered['items']] == [seed.player_b1_id]
        assert filtered['items'][0]['coach_name'] == 'كابتن سارة'

        other_period = client.get('/admin/registrations/exam', query_string={'period_id': 'missing'}).get_json()
        assert other_period['items'] == []

    def test_kinds_are_separate_tables(self, client, app, seed, active_exam):
        self._register_both(client, seed)
        with app.app_context():
            assert TournamentRegistration.query.count() == 0
        login(client, seed.admin_email)
        assert client.get('/admin/registrations/tournament').get_json()['items'] == []
