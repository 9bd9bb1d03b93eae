from datetime import datetime, timedelta, timezone

from conftest import PASSWORD, login
from kcms.extensions import db
from kcms.labels import message
from kcms.models import ExamRegistration, Organization, OrganizationType, Player, Profile


def _orgs_with_times(app, names):
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    with app.app_context():
        for offset, name in enumerate(names):
            db.session.add(Organization(
                name=name,
                type=OrganizationType.CLUB,
                created_at=base + timedelta(minutes=offset),
            ))
        db.session.commit()


class TestOrganizations:
    def test_list_is_newest_first(self, client, app, seed):
        _orgs_with_times(app, ['الأول', 'الثاني', 'الثالث'])
        login(client, seed.admin_email)
        names = [o['name'] for o in client.get('/admin/organizations').get_json()['items']]
        assert names.index('الثالث') < names.index('الثاني') < names.index('الأول')

    def test_create_returns_fresh_list(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/organizations', json={'name': 'نادي الأوليمبي', 'type': 'club'})
        assert response.status_code == 201
        body = response.get_json()
        assert body['item']['type_label'] == 'نادي'
        assert 'نادي الأوليمبي' in [o['name'] for o in body['items']]
        assert len(body['items']) == 3

    def test_create_rejects_unknown_type(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/organizations', json={'name': 'نادي', 'type': 'school'})
        assert response.status_code == 400
        assert 'type' in response.get_json()['errors']

    def test_non_object_json_body_is_a_validation_error(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/organizations', json=['نادي', 'club'])
        assert response.status_code == 400
        assert response.get_json()['error'] == message('missing_fields')

        response = client.delete(f'/admin/organizations/{seed.club_id}', json=[1])
        assert response.status_code == 400
        assert response.get_json()['confirm_required'] is True

    def test_update(self, client, app, seed):
        login(client, seed.admin_email)
        response = client.put(f'/admin/organizations/{seed.center_id}', json={
            'name': 'مركز شباب الشاطبي الجديد',
            'type': 'youth_center',
        })
        assert response.status_code == 200
        with app.app_context():
            assert db.session.get(Organization, seed.center_id).name == 'مركز شباب الشاطبي الجديد'

    def test_update_missing_row(self, client, seed):
        login(client, seed.admin_email)
        response = client.put('/admin/organizations/missing', json={'name': 'لا شيء', 'type': 'club'})
        assert response.status_code == 404

    def test_delete_requires_confirmation(self, client, app, seed):
        login(client, seed.admin_email)
        response = client.delete(f'/admin/organizations/{seed.club_id}')
        assert response.status_code == 400
        body = response.get_json()
        assert body['confirm_required'] is True
        assert body['error'] == message('confirm_delete')
        with app.app_context():
            assert db.session.get(Organization, seed.club_id) is not None

    def test_delete_leaves_references_dangling(self, client, app, seed):
        login(client, seed.admin_email)
        response = client.delete(f'/admin/organizations/{seed.club_id}', query_string={'confirm': '1'})
        assert response.status_code == 200
        assert seed.club_id not in [o['id'] for o in response.get_json()['items']]

        with app.app_context():
            assert db.session.get(Organization, seed.club_id) is None
            coach = db.session.get(Profile, seed.coach_a_id)
            assert coach.organization_id == seed.club_id
            assert coach.organization is None
            assert db.session.get(Player, seed.player_a1_id).organization_id == seed.club_id


class TestCoaches:
    def test_list_contains_only_coaches_with_organization(self, client, seed):
        login(client, seed.admin_email)
        items = client.get('/admin/coaches').get_json()['items']
        assert {c['id'] for c in items} == {seed.coach_a_id, seed.coach_b_id}
        by_id = {c['id']: c for c in items}
        assert by_id[seed.coach_a_id]['organization']['name'] == 'نادي سموحة'

    def test_create_provisions_login(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/coaches', json={
            'full_name': 'كابتن محمود',
            'email': 'Mahmoud@Karate-Club.org',
            'password': 'dojo-pass-1',
            'organization_id': seed.club_id,
        })
        assert response.status_code == 201
        assert response.get_json()['item']['email'] == 'mahmoud@karate-club.org'
        client.post('/auth/logout')

        assert login(client, 'mahmoud@karate-club.org', 'dojo-pass-1').get_json()['view'] == 'coach'

    def test_create_requires_credentials(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/coaches', json={
            'full_name': 'كابتن بلا بريد',
            'organization_id': seed.club_id,
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == message('missing_fields')

    def test_create_rejects_duplicate_email(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/coaches', json={
            'full_name': 'نسخة',
            'email': seed.coach_a_email,
            'password': PASSWORD,
            'organization_id': seed.club_id,
        })
        assert response.status_code == 409
        assert response.get_json()['error'] == message('email_taken')

    def test_update_only_touches_name_and_organization(self, client, app, seed):
        login(client, seed.admin_email)
        response = client.put(f'/admin/coaches/{seed.coach_a_id}', json={
            'full_name': 'كابتن أحمد سالم',
            'organization_id': seed.center_id,
            'email': 'changed@karate-club.org',
        })
        assert response.status_code == 200
        with app.app_context():
            coach = db.session.get(Profile, seed.coach_a_id)
            assert coach.full_name == 'كابتن أحمد سالم'
            assert coach.organization_id == seed.center_id
            assert coach.email == seed.coach_a_email

    def test_admin_profile_is_not_editable_as_coach(self, client, seed):
        login(client, seed.admin_email)
        response = client.put(f'/admin/coaches/{seed.admin_id}', json={
            'full_name': 'x y',
            'organization_id': seed.club_id,
        })
        assert response.status_code == 404

    def test_delete_keeps_players(self, client, app, seed):
        login(client, seed.admin_email)
        response = client.delete(f'/admin/coaches/{seed.coach_b_id}?confirm=1')
        assert response.status_code == 200
        assert [c['id'] for c in response.get_json()['items']] == [seed.coach_a_id]
        with app.app_context():
            player = db.session.get(Player, seed.player_b1_id)
            assert player.coach_id == seed.coach_b_id
            assert player.coach is None


class TestPlayers:
    def test_filters(self, client, seed):
        login(client, seed.admin_email)
        by_coach = client.get('/admin/players', query_string={'coach_id': seed.coach_a_id}).get_json()['items']
        assert {p['id'] for p in by_coach} == {seed.player_a1_id, seed.player_a2_id}

        by_org = client.get('/admin/players', query_string={'organization_id': seed.center_id}).get_json()['items']
        assert [p['id'] for p in by_org] == [seed.player_b1_id]
        assert by_org[0]['coach']['full_name'] == 'كابتن سارة'
        assert by_org[0]['organization']['name'] == 'مركز شباب الشاطبي'

    def test_search_by_belt_label(self, client, seed):
        login(client, seed.admin_email)
        items = client.get('/admin/players', query_string={'q': 'أسود'}).get_json()['items']
        assert [p['id'] for p in items] == [seed.player_a2_id]
        assert items[0]['belt_label'] == 'أسود'

    def test_create_defaults_to_white_belt(self, client, app, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/players', json={
            'full_name': 'لاعب جديد',
            'coach_id': seed.coach_a_id,
            'organization_id': seed.club_id,
            'birth_date': '2015-09-01',
            'file_number': 150,
        })
        assert response.status_code == 201
        item = response.get_json()['item']
        assert item['belt'] == 'white'
        assert item['birth_date'] == '2015-09-01'
        assert len(response.get_json()['items']) == 4

    def test_create_requires_name_and_coach(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/players', json={'belt': 'green'})
        assert response.status_code == 400
        errors = response.get_json()['errors']
        assert 'full_name' in errors
        assert 'coach_id' in errors

    def test_file_number_must_fit_small_integer(self, client, seed):
        login(client, seed.admin_email)
        response = client.post('/admin/players', json={
            'full_name': 'رقم كبير',
            'coach_id': seed.coach_a_id,
            'file_number': 70000,
        })
        assert response.status_code == 400
        assert 'file_number' in response.get_json()['errors']

    def test_update_belt(self, client, app, seed):
        login(client, seed.admin_email)
        response = client.put(f'/admin/players/{seed.player_b1_id}', json={
            'full_name': 'عمر خالد',
            'coach_id': seed.coach_b_id,
            'belt': 'blue',
        })
        assert response.status_code == 200
        with app.app_context():
            assert db.session.get(Player, seed.player_b1_id).belt.value == 'blue'

    def test_delete_keeps_registrations(self, client, app, seed, active_exam):
        login(client, seed.coach_a_email)
        client.post('/coach/registrations/exam', json={'player_id': seed.player_a1_id})
        client.post('/auth/logout')

        login(client, seed.admin_email)
        response = client.delete(f'/admin/players/{seed.player_a1_id}', json={'confirm': True})
        assert response.status_code == 200
        assert seed.player_a1_id not in [p['id'] for p in response.get_json()['items']]
        with app.app_context():
            registration = ExamRegistration.query.filter_by(player_id=seed.player_a1_id).one()
            assert registration.player is None
            assert registration.player_name == 'يوسف علي'

    def test_delete_period_keeps_registrations(self, client, app, seed, active_exam):
        login(client, seed.coach_a_email)
        client.post('/coach/registrations/exam', json={'player_id': seed.player_a2_id})
        client.post('/auth/logout')

        login(client, seed.admin_email)
        assert client.delete(f'/admin/periods/exam/{active_exam}').status_code == 400
        response = client.delete(f'/admin/periods/exam/{active_exam}?confirm=1')
        assert response.status_code == 200
        assert response.get_json()['items'] == []
        with app.app_context():
            registration = ExamRegistration.query.one()
            assert registration.period_id == active_exam
            assert registration.period is None
