"""
Integration tests for the HTTP API
"""
import io
import pytest
from unittest.mock import Mock

from ai_service import AIService, AIServiceError


def create_invoice(client, job_id, user_id=None, **fields):
    headers = {'X-User-Id': user_id} if user_id else {}
    body = {'vendorName': 'Ferguson', 'totalAmount': 100.0}
    body.update(fields)
    return client.post(f'/api/jobs/{job_id}/invoices', json=body, headers=headers)


@pytest.mark.integration
class TestJobsApi:
    """Tests for /api/jobs"""

    def test_list_empty(self, client):
        """Test listing jobs on an empty database"""
        response = client.get('/api/jobs')
        assert response.status_code == 200
        assert response.get_json() == []

    def test_create_job(self, client):
        """Test creating a job returns 201 with a job number"""
        response = client.post('/api/jobs', json={'name': 'Garage Build', 'budgetTotal': 5000})
        assert response.status_code == 201
        job = response.get_json()
        assert job['jobNumber'].startswith('KC-')
        assert job['budgetTotal'] == 5000
        assert job['status'] == 'PLANNING'

    def test_create_requires_name(self, client):
        """Test a job without a name is rejected"""
        response = client.post('/api/jobs', json={'budgetTotal': 5000})
        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'error': 'Job name is required', 'field': None}

    def test_malformed_json(self, client):
        """Test a malformed JSON body returns 400"""
        response = client.post('/api/jobs', data='{"name": ', content_type='application/json')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Request body must be valid JSON'

    def test_negative_budget_rejected(self, client):
        """Test a negative budget is rejected"""
        response = client.post('/api/jobs', json={'name': 'X', 'budgetTotal': -1})
        assert response.status_code == 400

    def test_get_update_delete(self, client, seeded_api):
        """Test fetching, updating and deleting a job"""
        job_id = seeded_api['job_id']

        response = client.get(f'/api/jobs/{job_id}')
        assert response.status_code == 200
        assert response.get_json()['materials'] == []

        response = client.patch(f'/api/jobs/{job_id}', json={'status': 'on_hold'})
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ON_HOLD'

        response = client.patch(f'/api/jobs/{job_id}', json={'status': 'ARCHIVED'})
        assert response.status_code == 400

        assert client.delete(f'/api/jobs/{job_id}').get_json() == {'success': True}
        assert client.get(f'/api/jobs/{job_id}').status_code == 404

    def test_missing_job(self, client):
        """Test an unknown job returns 404"""
        response = client.get('/api/jobs/does-not-exist')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Job not found'}

    def test_list_search(self, client, seeded_api):
        """Test the job list search filter"""
        client.post('/api/jobs', json={'name': 'Warehouse'})
        response = client.get('/api/jobs?search=smith')
        assert [j['jobNumber'] for j in response.get_json()] == ['KC-25-0001']

    def test_budget_over_budget(self, client, seeded_api):
        """Test the budget endpoint reports a negative remainder"""
        job_id = seeded_api['job_id']
        create_invoice(client, job_id, totalAmount=12000.0, status='APPROVED')
        create_invoice(client, job_id, vendorName=None, totalAmount=500.0)

        response = client.get(f'/api/jobs/{job_id}/budget')
        assert response.status_code == 200
        budget = response.get_json()
        assert budget['budgetTotal'] == 10000
        assert budget['totalInvoiced'] == pytest.approx(12500)
        assert budget['approvedInvoiced'] == pytest.approx(12000)
        assert budget['remaining'] == pytest.approx(-2000)
        assert budget['percentUsed'] == pytest.approx(120.0)
        assert budget['vendorSpending'] == {'Ferguson': 12000, 'Unknown': 500}
        assert budget['invoiceCount'] == 2

    def test_budget_missing_job(self, client):
        """Test the budget of an unknown job returns 404"""
        assert client.get('/api/jobs/nope/budget').status_code == 404


@pytest.mark.integration
class TestMaterialsApi:
    """Tests for /api/jobs/<id>/materials"""

    def test_create_bulk_and_single(self, client, seeded_api):
        """Test creating one material or a list of materials"""
        url = f"/api/jobs/{seeded_api['job_id']}/materials"
        response = client.post(url, json=[
            {'customName': 'Pipe', 'quantityNeeded': 10, 'unitCost': 2.5, 'trade': 'PLUMBING'},
            {'customName': 'Wire', 'quantityNeeded': 3},
        ])
        assert response.status_code == 201
        assert len(response.get_json()) == 2

        response = client.post(url, json={'customName': 'Flux'})
        assert response.status_code == 201
        assert response.get_json()[0]['unit'] == 'each'

        assert len(client.get(url).get_json()) == 3
        assert [m['customName'] for m in client.get(f'{url}?trade=plumbing').get_json()] == ['Pipe']

    def test_invalid_material_rejected(self, client, seeded_api):
        """Test an invalid material body is rejected"""
        url = f"/api/jobs/{seeded_api['job_id']}/materials"
        response = client.post(url, json=[{'customName': 'Ok'}, {'quantityNeeded': -5}])
        assert response.status_code == 400
        assert client.get(url).get_json() == []

    def test_update_and_delete(self, client, seeded_api):
        """Test updating and deleting a material"""
        url = f"/api/jobs/{seeded_api['job_id']}/materials"
        material = client.post(url, json={'customName': 'Pipe'}).get_json()[0]

        response = client.patch(f"{url}/{material['id']}", json={'status': 'DELIVERED', 'quantityOnSite': 4})
        assert response.status_code == 200
        assert response.get_json()['status'] == 'DELIVERED'

        assert client.delete(f"{url}/{material['id']}").status_code == 200
        assert client.delete(f"{url}/{material['id']}").status_code == 404

    def test_import_csv(self, client, seeded_api, sample_csv):
        """Test importing a CSV upload"""
        url = f"/api/jobs/{seeded_api['job_id']}/materials"
        response = client.post(
            f'{url}/import',
            data={'file': (io.BytesIO(sample_csv), 'takeoff.csv')},
            content_type='multipart/form-data',
        )
        assert response.status_code == 201
        result = response.get_json()
        assert result['imported'] == 3
        assert {m['trade'] for m in result['materials']} == {'PLUMBING', 'ELECTRICAL', 'GENERAL'}
        assert len(client.get(url).get_json()) == 3

    def test_import_plain_text(self, client, seeded_api):
        """Test importing a plain text upload"""
        response = client.post(
            f"/api/jobs/{seeded_api['job_id']}/materials/import",
            data={'file': (io.BytesIO(b"2x4 Stud\nDrywall\n"), 'list.txt')},
            content_type='multipart/form-data',
        )
        assert response.status_code == 201
        assert [m['quantityNeeded'] for m in response.get_json()['materials']] == [1, 1]

    def test_import_requires_file(self, client, seeded_api):
        """Test an import without a file is rejected"""
        response = client.post(f"/api/jobs/{seeded_api['job_id']}/materials/import",
                               data={}, content_type='multipart/form-data')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'No file uploaded'}

    def test_import_rejects_other_file_types(self, client, seeded_api):
        """Test an import of an unsupported file type is rejected"""
        response = client.post(
            f"/api/jobs/{seeded_api['job_id']}/materials/import",
            data={'file': (io.BytesIO(b"PK"), 'takeoff.xlsx')},
            content_type='multipart/form-data',
        )
        assert response.status_code == 400

    def test_empty_import_creates_nothing(self, client, seeded_api):
        """Test an empty upload returns 400 and creates no rows"""
        url = f"/api/jobs/{seeded_api['job_id']}/materials"
        response = client.post(
            f'{url}/import',
            data={'file': (io.BytesIO(b"\n  \n"), 'list.txt')},
            content_type='multipart/form-data',
        )
        assert response.status_code == 400
        assert response.get_json() == {'error': 'No materials found in file'}
        assert client.get(url).get_json() == []

    def test_import_into_missing_job(self, client, sample_csv):
        """Test importing into an unknown job returns 404"""
        response = client.post(
            '/api/jobs/nope/materials/import',
            data={'file': (io.BytesIO(sample_csv), 'takeoff.csv')},
            content_type='multipart/form-data',
        )
        assert response.status_code == 404


@pytest.mark.integration
class TestInvoicesApi:
    """Tests for /api/jobs/<id>/invoices"""

    def test_create_notifies_manager(self, client, seeded_api):
        """Test a new invoice notifies the project manager"""
        response = create_invoice(client, seeded_api['job_id'], seeded_api['admin_id'], items=[
            {'description': 'Copper pipe', 'quantity': 4, 'unitPrice': 25, 'totalPrice': 100},
        ])
        assert response.status_code == 201
        invoice = response.get_json()
        assert invoice['uploadedBy']['name'] == 'Admin User'
        assert invoice['items'][0]['totalPrice'] == 100

        response = client.get('/api/notifications', headers={'X-User-Id': seeded_api['pm_id']})
        data = response.get_json()
        assert data['unreadCount'] == 1
        assert data['notifications'][0]['type'] == 'invoice'

    def test_unknown_uploader(self, client, seeded_api):
        """Test an unknown uploader returns 404"""
        response = create_invoice(client, seeded_api['job_id'], 'ghost')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'User not found'}

    def test_invalid_item(self, client, seeded_api):
        """Test an invalid line item is rejected with its index"""
        response = create_invoice(client, seeded_api['job_id'], items=['not an object'])
        assert response.status_code == 400

    def test_list_update_delete(self, client, seeded_api):
        """Test listing, updating and deleting invoices"""
        url = f"/api/jobs/{seeded_api['job_id']}/invoices"
        invoice = create_invoice(client, seeded_api['job_id']).get_json()

        assert len(client.get(url).get_json()) == 1

        response = client.patch(f"{url}/{invoice['id']}", json={'status': 'PAID'})
        assert response.get_json()['status'] == 'PAID'

        assert client.delete(f"{url}/{invoice['id']}").get_json() == {'success': True}
        assert client.get(url).get_json() == []

    def test_extract_requires_text(self, client, seeded_api):
        """Test extraction without text is rejected"""
        response = client.post(f"/api/jobs/{seeded_api['job_id']}/invoices/extract", json={'text': ''})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'No text to extract from'}

    def test_extract_without_api_key(self, client, seeded_api):
        """Test extraction without an API key returns 503"""
        response = client.post(f"/api/jobs/{seeded_api['job_id']}/invoices/extract",
                               json={'text': 'Ferguson invoice #1'})
        assert response.status_code == 503

    def test_extract_with_claude(self, app, client, seeded_api, mock_anthropic_client):
        """Test extraction returns Claude's parsed reply"""
        app.ai_service = AIService(app.config, client=mock_anthropic_client)

        response = client.post(f"/api/jobs/{seeded_api['job_id']}/invoices/extract",
                               json={'text': 'Ferguson invoice total 120.50', 'fileName': 'inv.txt'})

        assert response.status_code == 200
        assert response.get_json() == {
            'extracted': {'vendorName': 'Ferguson', 'totalAmount': 120.5, 'items': []}
        }
        params = mock_anthropic_client.messages.create.call_args.kwargs
        assert params['model'] == app.config['AI_MODELS']['claude']['model']
        assert 'inv.txt' in params['messages'][0]['content']

    def test_extract_unparseable_reply(self, app, client, seeded_api, mock_ai_response):
        """Test an unparseable reply extracts as null"""
        claude = Mock()
        claude.messages.create.return_value = mock_ai_response('Sorry, I cannot read this.')
        app.ai_service = AIService(app.config, client=claude)

        response = client.post(f"/api/jobs/{seeded_api['job_id']}/invoices/extract", json={'text': 'smudged'})
        assert response.status_code == 200
        assert response.get_json() == {'extracted': None}

    def test_extract_failure(self, app, client, seeded_api):
        """Test an AI failure returns 500"""
        app.ai_service = Mock()
        app.ai_service.call_claude.side_effect = AIServiceError('boom')

        response = client.post(f"/api/jobs/{seeded_api['job_id']}/invoices/extract", json={'text': 'x'})
        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to extract invoice data'}


@pytest.mark.integration
class TestReportsApi:
    """Tests for /api/reports"""

    def test_summary(self, client, seeded_api):
        """Test the fleet summary report"""
        job_id = seeded_api['job_id']
        client.post(f'/api/jobs/{job_id}/materials', json={'customName': 'Pipe', 'quantityNeeded': 4, 'unitCost': 5})
        create_invoice(client, job_id, totalAmount=40.0, status='DISPUTED')

        rows = client.get('/api/reports?type=summary').get_json()
        assert len(rows) == 1
        assert rows[0]['estimatedCost'] == pytest.approx(20)
        assert rows[0]['totalInvoiced'] == pytest.approx(40)

    def test_totals(self, client, seeded_api):
        """Test the fleet totals report"""
        create_invoice(client, seeded_api['job_id'], totalAmount=10500.0)
        totals = client.get('/api/reports?type=totals').get_json()
        assert totals['totalBudget'] == 10000
        assert totals['remaining'] == pytest.approx(-500)
        assert totals['overBudgetJobs'] == ['KC-25-0001']

    def test_default_type_is_summary(self, client, seeded_api):
        """Test the report type defaults to summary"""
        assert client.get('/api/reports').get_json()[0]['jobNumber'] == 'KC-25-0001'

    def test_materials_report(self, client, seeded_api):
        """Test the materials report for a job"""
        job_id = seeded_api['job_id']
        client.post(f'/api/jobs/{job_id}/materials', json=[
            {'customName': 'Wire', 'trade': 'ELECTRICAL'},
            {'customName': 'Pipe', 'trade': 'PLUMBING'},
        ])
        rows = client.get(f'/api/reports?type=materials&jobId={job_id}').get_json()
        assert [m['customName'] for m in rows] == ['Wire', 'Pipe']

    def test_materials_report_needs_job(self, client):
        """Test the materials report requires a job id"""
        response = client.get('/api/reports?type=materials')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Invalid report type'}

    def test_vendor_report(self, client, seeded_api):
        """Test the vendor report"""
        job_id = seeded_api['job_id']
        create_invoice(client, job_id, totalAmount=100.0)
        create_invoice(client, job_id, totalAmount=50.0)
        rows = client.get('/api/reports?type=vendors').get_json()
        assert rows == [{'vendorName': 'Ferguson', 'totalSpent': 150.0, 'invoiceCount': 2, 'jobCount': 1}]

    def test_unknown_type(self, client):
        """Test an unknown report type is rejected"""
        assert client.get('/api/reports?type=weather').status_code == 400

    def test_csv_export(self, client, seeded_api):
        """Test the CSV export download"""
        response = client.get('/api/reports/export')
        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert 'kenyoncore-report-' in response.headers['Content-Disposition']
        lines = response.get_data(as_text=True).strip().splitlines()
        assert len(lines) == 2
        assert lines[1].startswith('KC-25-0001,Smith Residence Renovation,IN_PROGRESS,10000.00')


@pytest.mark.integration
class TestNotificationsApi:
    """Tests for /api/notifications"""

    def test_requires_user(self, client):
        """Test notifications require a user"""
        response = client.get('/api/notifications')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'User not specified'}

    def test_mark_read(self, client, seeded_api):
        """Test marking a notification read"""
        pm = {'X-User-Id': seeded_api['pm_id']}
        create_invoice(client, seeded_api['job_id'], seeded_api['admin_id'])
        create_invoice(client, seeded_api['job_id'], seeded_api['admin_id'])

        notes = client.get('/api/notifications', headers=pm).get_json()['notifications']
        assert client.patch('/api/notifications', json={'id': notes[0]['id']}).status_code == 200
        assert client.get(f"/api/notifications?userId={seeded_api['pm_id']}").get_json()['unreadCount'] == 1

        assert client.patch('/api/notifications', json={'markAllRead': True}, headers=pm).status_code == 200
        assert client.get('/api/notifications', headers=pm).get_json()['unreadCount'] == 0

    def test_invalid_patch(self, client):
        """Test an invalid notification patch is rejected"""
        assert client.patch('/api/notifications', json={}).status_code == 400
        assert client.patch('/api/notifications', json={'id': 'missing'}).status_code == 404


@pytest.mark.integration
class TestCatalogAndUsersApi:
    """Tests for /api/catalog and /api/users"""

    def test_catalog_create_and_filter(self, client):
        """Test creating catalog entries and filtering items"""
        category = client.post('/api/catalog', json={'type': 'category', 'name': 'Trim', 'trade': 'CARPENTRY'})
        assert category.status_code == 201
        sub = client.post('/api/catalog', json={
            'type': 'subcategory', 'name': 'Baseboard', 'categoryId': category.get_json()['id'],
        }).get_json()
        client.post('/api/catalog', json={'type': 'item', 'name': 'MDF Base 3-1/4"', 'subcategoryId': sub['id']})

        tree = client.get('/api/catalog?trade=CARPENTRY').get_json()
        assert tree[0]['subcategories'][0]['items'][0]['name'] == 'MDF Base 3-1/4"'
        assert client.get('/api/catalog?trade=PLUMBING').get_json() == []

    def test_catalog_invalid_type(self, client):
        """Test an unknown catalog entry type is rejected"""
        response = client.post('/api/catalog', json={'type': 'aisle', 'name': 'x'})
        assert response.status_code == 400
        assert response.get_json()['field'] == 'type'

    def test_catalog_missing_parent(self, client):
        """Test a catalog entry with an unknown parent returns 404"""
        response = client.post('/api/catalog', json={'type': 'item', 'name': 'x', 'subcategoryId': 'nope'})
        assert response.status_code == 404

    def test_users_by_role(self, client, seeded_api):
        """Test listing users filtered by role"""
        users = client.get('/api/users?role=project_manager').get_json()
        assert [u['id'] for u in users] == [seeded_api['pm_id']]
        assert len(client.get('/api/users').get_json()) == 2


@pytest.mark.integration
class TestHttpBehaviour:
    """Tests for headers and generic error responses"""

    def test_security_headers(self, client):
        """Test security headers are set on responses"""
        response = client.get('/api/jobs')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'SAMEORIGIN'

    def test_unknown_route_is_json(self, client):
        """Test unknown routes return a JSON 404"""
        response = client.get('/api/nowhere')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Not Found'

    def test_wrong_method_is_json(self, client):
        """Test a wrong method returns a JSON 405"""
        response = client.put('/api/jobs')
        assert response.status_code == 405
        assert response.get_json()['error'] == 'Method Not Allowed'
