import threading

from conftest import FORM_DATA, STUDENT_ID

from app.models import ClearanceCaseModel
from app.workflow.types import FormType

CASE_URL = f'/api/clearance-case/{STUDENT_ID}'


def submit_new_clearance(client):
    return client.post(f'{CASE_URL}/forms/newClearance/submit', json=FORM_DATA[FormType.NEW_CLEARANCE])


def approve_new_clearance(login):
    student = login('ada@uni.edu')
    submit_new_clearance(student)
    login('registrar@uni.edu').post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'approved'})
    login('officer@uni.edu').post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'approved'})
    return student


def test_login_and_current_user(login):
    client = login('ada@uni.edu')
    body = client.get('/api/auth/current-user').get_json()
    assert body['ok'] is True
    assert body['data']['type'] == 'student'
    assert body['data']['data']['student_id'] == STUDENT_ID


def test_staff_login_redirects_to_department_dashboard(app):
    response = app.test_client().post('/api/auth/login', json={'email': 'finance@uni.edu', 'password': 'password123'})
    assert response.get_json()['data']['redirect'] == '/Finance_Dashboard.html'


def test_bad_password_and_unapproved_staff(app):
    client = app.test_client()
    response = client.post('/api/auth/login', json={'email': 'ada@uni.edu', 'password': 'wrong-password'})
    assert response.status_code == 401
    response = client.post('/api/auth/login', json={'email': 'newbie@uni.edu', 'password': 'password123'})
    assert response.status_code == 401
    assert 'not approved' in response.get_json()['message']


def test_logout_clears_session(login):
    client = login('ada@uni.edu')
    client.post('/api/auth/logout')
    assert client.get(CASE_URL).status_code == 401


def test_case_requires_login(app):
    response = app.test_client().get(CASE_URL)
    assert response.status_code == 401
    assert response.get_json()['ok'] is False


def test_case_is_created_on_first_view(login):
    body = login('ada@uni.edu').get(CASE_URL).get_json()
    assert body['ok'] is True
    assert body['data']['student_department'] == 'Computer Science'
    assert body['data']['forms']['newClearance']['status'] == 'unlocked'
    assert body['data']['forms']['affidavit']['status'] == 'locked'


def test_unknown_student_is_not_found(login):
    response = login('registrar@uni.edu').get('/api/clearance-case/NOBODY')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'NotFound'


def test_students_cannot_view_other_cases(login):
    response = login('bola@uni.edu').get(CASE_URL)
    assert response.status_code == 403
    assert response.get_json() == {
        'ok': False, 'message': response.get_json()['message'],
        'error': 'Unauthorized', 'refetch': False,
    }


def test_submit_and_resubmit(login):
    client = login('ada@uni.edu')
    response = submit_new_clearance(client)
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['case']['forms']['newClearance']['status'] == 'submitted'
    assert data['events'][0]['kind'] == 'submitted'

    response = submit_new_clearance(client)
    assert response.status_code == 409
    assert response.get_json()['error'] == 'AlreadySubmitted'
    assert response.get_json()['refetch'] is True


def test_submit_locked_form(login):
    response = login('ada@uni.edu').post(f'{CASE_URL}/forms/affidavit/submit', json=FORM_DATA[FormType.AFFIDAVIT])
    assert response.status_code == 409
    assert response.get_json()['error'] == 'NotUnlocked'


def test_submit_invalid_payload(login):
    response = login('ada@uni.edu').post(f'{CASE_URL}/forms/newClearance/submit', json={'studentName': 'Ada'})
    assert response.status_code == 400
    assert 'JAMB registration number is required' in response.get_json()['message']


def test_unknown_form_type(login):
    response = login('ada@uni.edu').post(f'{CASE_URL}/forms/transfer/submit', json={'a': 1})
    assert response.status_code == 404


def test_only_owner_submits(login):
    response = submit_new_clearance(login('registrar@uni.edu'))
    assert response.status_code == 403


def test_two_step_new_clearance_over_http(login):
    submit_new_clearance(login('ada@uni.edu'))

    officer = login('officer@uni.edu')
    response = officer.post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'approved'})
    assert response.status_code == 403

    registrar = login('registrar@uni.edu')
    response = registrar.post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'approved'})
    assert response.status_code == 200

    response = registrar.post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'approved'})
    assert response.status_code == 409
    assert response.get_json()['error'] == 'DuplicateVote'

    response = officer.post(f'{CASE_URL}/forms/newClearance/decide',
                            json={'decision': 'approved', 'role': 'schoolOfficer'})
    assert response.status_code == 200
    case = response.get_json()['data']['case']
    assert case['forms']['newClearance']['status'] == 'approved'
    assert case['forms']['affidavit']['status'] == 'unlocked'


def test_rejection_without_comments(login):
    submit_new_clearance(login('ada@uni.edu'))
    response = login('registrar@uni.edu').post(f'{CASE_URL}/forms/newClearance/decide',
                                               json={'decision': 'rejected', 'comments': ''})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'CommentRequired'
    assert response.get_json()['refetch'] is False


def test_invalid_decision(login):
    submit_new_clearance(login('ada@uni.edu'))
    response = login('registrar@uni.edu').post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'yes'})
    assert response.status_code == 400


def test_decision_on_unopened_case_is_not_found(app, login):
    registrar = login('registrar@uni.edu')
    response = registrar.post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'approved'})
    assert response.status_code == 404
    assert response.get_json()['error'] == 'NotFound'

    response = login('health@uni.edu').post(f'{CASE_URL}/documents/Medical%20Report/decide',
                                             json={'decision': 'approved'})
    assert response.status_code == 404

    with app.app_context():
        assert ClearanceCaseModel.query.count() == 0


def test_racing_decisions_for_one_role_record_a_single_vote(login):
    submit_new_clearance(login('ada@uni.edu'))
    clients = [login('registrar@uni.edu') for _ in range(4)]
    barrier = threading.Barrier(len(clients))
    results = []

    def decide(client):
        barrier.wait()
        response = client.post(f'{CASE_URL}/forms/newClearance/decide', json={'decision': 'approved'})
        results.append((response.status_code, response.get_json().get('error')))

    threads = [threading.Thread(target=decide, args=(client,)) for client in clients]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(results, key=lambda r: r[0]) == [(200, None)] + [(409, 'DuplicateVote')] * 3
    case = clients[0].get(CASE_URL).get_json()['data']
    votes = [v for v in case['forms']['newClearance']['approvals'] if v['decision'] == 'approved']
    assert len(votes) == 1


def test_document_upload_and_review(login):
    student = approve_new_clearance(login)

    response = student.post(f'{CASE_URL}/documents/Medical%20Report/upload',
                            json={'title': 'Medical', 'file_name': 'report.pdf'})
    assert response.status_code == 200

    response = login('finance@uni.edu').post(f'{CASE_URL}/documents/Medical%20Report/decide',
                                             json={'decision': 'approved'})
    assert response.status_code == 403

    response = login('health@uni.edu').post(f'{CASE_URL}/documents/Medical%20Report/decide',
                                            json={'decision': 'approved'})
    assert response.status_code == 200
    assert response.get_json()['data']['case']['documents']['Medical Report']['status'] == 'approved'


def test_document_file_type_is_checked(login):
    student = approve_new_clearance(login)
    response = student.post(f'{CASE_URL}/documents/Passport/upload', json={'file_name': 'passport.exe'})
    assert response.status_code == 400


def test_document_locked_before_new_clearance(login):
    response = login('ada@uni.edu').post(f'{CASE_URL}/documents/Passport/upload', json={'file_name': 'p.png'})
    assert response.status_code == 409
    assert response.get_json()['error'] == 'NotUnlocked'


def test_summary(login):
    student = approve_new_clearance(login)
    body = student.get(f'{CASE_URL}/summary').get_json()
    assert body['data']['completion_percentage'] == 10
    assert body['data']['stats']['forms']['approved'] == 1


def test_summary_before_case_exists(login):
    body = login('ada@uni.edu').get(f'{CASE_URL}/summary').get_json()
    assert body['data']['completion_percentage'] == 0


def test_staff_pending_queue(login):
    submit_new_clearance(login('ada@uni.edu'))
    registrar = login('registrar@uni.edu')
    items = registrar.get('/api/staff/pending').get_json()['data']
    assert [(i['student_id'], i['item_type'], i['role']) for i in items] == [
        (STUDENT_ID, 'newClearance', 'deputyRegistrar')
    ]
    assert login('officer@uni.edu').get('/api/staff/pending').get_json()['data'] == []


def test_students_have_no_pending_queue(login):
    response = login('ada@uni.edu').get('/api/staff/pending')
    assert response.status_code == 403
