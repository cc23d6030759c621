"""HTTP surface: records endpoint, page, preview and print jobs."""
import json

from conftest import FakeResponse, FakeSession, miso_payload

E2E_PAYLOAD = {
    "data": {
        "outputs": {
            "결과": '```json\n{"outputs":{"결과":[{"회사명":"A","최종금액":None}]}}\n```',
        }
    }
}

ROWS = [
    {"회사명": "나회사", "최종금액": 300, "담당자": "박", "담당자 이메일": "b@example.com"},
    {"회사명": "가회사", "최종금액": 100, "담당자": "김", "담당자 이메일": "a@example.com"},
]

RECORD_BODY = {
    "records": [
        {
            "id": "1",
            "company": "가나상사",
            "amount": 1200000,
            "contactName": "김철수",
            "contactEmail": "kim@example.com",
            "issueDate": "2025.03.31",
            "description": "",
        },
        {"id": "2", "company": "다라물산", "amount": 40000},
    ]
}


def test_records_endpoint_end_to_end(make_client):
    client = make_client(FakeSession(FakeResponse(body=E2E_PAYLOAD)))

    response = client.get("/api/records")

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": "1",
            "company": "A",
            "amount": 0,
            "contactName": "",
            "contactEmail": "",
            "issueDate": "",
            "description": "",
        }
    ]


def test_records_endpoint_sorts(make_client):
    client = make_client(FakeSession(FakeResponse(body=miso_payload(ROWS))))

    by_company = client.get("/api/records").json()
    by_amount_desc = client.get("/api/records", params={"sort": "amount", "order": "desc"}).json()

    assert [r["company"] for r in by_company] == ["가회사", "나회사"]
    assert [r["amount"] for r in by_amount_desc] == [300, 100]
    # id 는 원본 위치를 따른다
    assert [r["id"] for r in by_company] == ["2", "1"]


def test_records_endpoint_echoes_upstream_status(make_client):
    client = make_client(FakeSession(FakeResponse(status_code=401, body={})))

    response = client.get("/api/records")

    assert response.status_code == 401
    assert response.json() == {"error": "인증에 실패했습니다. API 키를 확인해주세요.", "status": 401, "detail": {}}


def test_records_endpoint_reports_missing_credentials(make_client, monkeypatch):
    client = make_client()
    monkeypatch.delenv("MISO_KEY")

    response = client.get("/api/records")

    assert response.status_code == 500
    assert "MISO 인증 정보" in response.json()["error"]


def test_records_endpoint_reports_connection_failure(make_client, connection_error):
    client = make_client(FakeSession(error=connection_error))

    response = client.get("/api/records")

    assert response.status_code == 500
    assert response.json()["error"].startswith("MISO API 연결에 실패했습니다.")


def test_main_page_lists_records(make_client):
    client = make_client(FakeSession(FakeResponse(body=miso_payload(ROWS))))

    response = client.get("/", params={"sort": "amount", "order": "asc"})

    assert response.status_code == 200
    html = response.text
    assert html.index("가회사") < html.index("나회사")
    assert "총 2개 계약" in html
    assert "삼백원" in html
    assert "/?sort=amount&amp;order=desc" in html


def test_main_page_survives_fetch_failure(make_client, connection_error):
    client = make_client(FakeSession(error=connection_error))

    response = client.get("/")

    assert response.status_code == 200
    assert "등록된 계약이 없습니다." in response.text
    assert "데이터를 불러오는데 실패했습니다." in response.text


def test_preview_renders_pages_in_order(make_client):
    client = make_client()

    response = client.post("/api/invoices/preview", json=RECORD_BODY)

    assert response.status_code == 200
    assert response.text.count('class="invoice-page"') == 2
    assert response.text.index("가나상사") < response.text.index("다라물산")


def test_preview_requires_selection(make_client):
    response = make_client().post("/api/invoices/preview", json={"records": []})

    assert response.status_code == 400
    assert response.json()["detail"] == "미리보기할 계약을 선택해주세요."


def test_negative_amount_is_rejected(make_client):
    body = {"records": [{"id": "1", "amount": -1}]}

    response = make_client().post("/api/invoices/preview", json=body)

    assert response.status_code == 422


def test_export_print_and_complete_flow(make_client):
    client = make_client()

    job = client.post("/api/invoices/export", json=RECORD_BODY).json()
    page = client.get(job["print_url"])

    assert page.status_code == 200
    assert page.text.count('class="invoice-page"') == 2
    assert f"<title>{job['title']}</title>" in page.text

    first = client.post(f"/api/print/{job['job_id']}/complete").json()
    second = client.post(f"/api/print/{job['job_id']}/complete").json()

    assert first["released"] is True
    assert second["released"] is False
    assert client.get(job["print_url"]).status_code == 404


def test_export_requires_selection(make_client):
    response = make_client().post("/api/invoices/export", json={"records": []})

    assert response.status_code == 400
    assert response.json()["detail"] == "인보이스를 생성할 계약을 선택해주세요."


def _records_data(html):
    script = html.split('id="records-data"', 1)[1]
    return json.loads(script.split(">", 1)[1].split("</script>", 1)[0])


def test_main_page_keeps_fetch_order_for_selection(make_client):
    client = make_client(FakeSession(FakeResponse(body=miso_payload(ROWS))))

    html = client.get("/", params={"sort": "company", "order": "asc"}).text

    assert html.index('data-id="2"') < html.index('data-id="1"')
    assert [record["id"] for record in _records_data(html)] == ["1", "2"]


def test_main_page_survives_amount_beyond_float_range(make_client):
    rows = [{"회사명": "가회사", "최종금액": 10 ** 400}]
    client = make_client(FakeSession(FakeResponse(body=miso_payload(rows))))

    response = client.get("/")

    assert response.status_code == 200
    assert "0원" in response.text


def test_preview_falls_back_when_due_date_cannot_be_represented(make_client):
    body = {"records": [{"id": "1", "company": "가나상사", "issueDate": "9999.12.15"}]}

    response = make_client().post("/api/invoices/preview", json=body)

    assert response.status_code == 200
    assert "9999년" not in response.text


def test_export_script_opens_print_window_inside_click(make_client):
    script = make_client().get("/scripts/app.js").text

    assert 'window.open("", "_blank")' in script
    assert "printWindow.location.href = job.print_url" in script
    assert "팝업이 차단되어" in script
